"""Vault configuration model for the GM Vault sidebar.

This package provides the recursive category/page tree, URL classification,
and the parser that validates and migrates persisted vault JSON.
"""

from .config_parser import ConfigParser, ParseResult, ValidationResult
from .errors import InvalidCategoryError, InvalidPageError, VaultError
from .models import Category, Config, IconKind, Page, PageIcon
from .url_utils import ContentType, detect_content_type, extract_notion_page_id

__all__ = [
    'Page',
    'PageIcon',
    'IconKind',
    'Category',
    'Config',
    'ConfigParser',
    'ParseResult',
    'ValidationResult',
    'ContentType',
    'detect_content_type',
    'extract_notion_page_id',
    'VaultError',
    'InvalidPageError',
    'InvalidCategoryError',
]
