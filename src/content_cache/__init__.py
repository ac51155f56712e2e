"""Caching of remote page content for the GM Vault sidebar.

This package keeps fetched blocks, page metadata and rendered HTML so pages
can be shown offline and the rate-limited remote service is hit less often.
"""

from .cache_service import CacheService
from .models import CachedPageInfo, PageInfo

__all__ = [
    'CacheService',
    'CachedPageInfo',
    'PageInfo',
]
