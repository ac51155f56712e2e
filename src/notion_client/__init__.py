"""Remote content proxy client for the GM Vault sidebar.

This package talks to the proxy in front of the Notion API, retries
rate-limited calls, and orchestrates when cached content must be refreshed.
"""

from .api_wrapper import NotionProxyClient
from .auth import ProxySettings, resolve_debug_mode
from .content_fetcher import ContentFetcher, filter_blocks, is_stale
from .errors import (
    NotionProxyError,
    MissingSettingError,
    InvalidPageIdError,
    NotANotionPageError,
    InvalidTokenError,
    PageNotFoundError,
    RateLimitedError,
    ProxyUnreachableError,
    ProxyAccessError,
)

__all__ = [
    "NotionProxyClient",
    "ProxySettings",
    "resolve_debug_mode",
    "ContentFetcher",
    "filter_blocks",
    "is_stale",
    "NotionProxyError",
    "MissingSettingError",
    "InvalidPageIdError",
    "NotANotionPageError",
    "InvalidTokenError",
    "PageNotFoundError",
    "RateLimitedError",
    "ProxyUnreachableError",
    "ProxyAccessError",
]
