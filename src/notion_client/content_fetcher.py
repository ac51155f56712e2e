"""Fetch orchestration between the proxy and the content cache.

The cache stores timestamps but never decides staleness; this module does.
For a Notion page it compares the remote last_edited_time with the cached
one and only re-downloads blocks when the page changed, when the cache is
empty, or when a refresh is forced. If the proxy cannot be reached the
cached blocks are served instead (offline mode).
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from src.content_cache.cache_service import CacheService
from src.content_cache.models import CachedPageInfo, PageInfo
from src.vault.models import Page

from .api_wrapper import NotionProxyClient
from .errors import NotANotionPageError, ProxyAccessError, ProxyUnreachableError

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp such as ``2024-01-01T12:00:00.000Z``.

    Naive timestamps are taken as UTC.

    Raises:
        ValueError: If value is not ISO 8601
    """
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'
    stamp = datetime.fromisoformat(value)
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp


def is_stale(cached: Optional[CachedPageInfo], remote_last_edited: str) -> bool:
    """True when the remote edit postdates the cached one.

    Missing or unparseable cached timestamps count as stale.
    """
    if cached is None:
        return True
    try:
        return parse_timestamp(remote_last_edited) > parse_timestamp(cached.last_edited_time)
    except ValueError:
        logger.warning(
            f"Unparseable last_edited_time ({cached.last_edited_time!r} / "
            f"{remote_last_edited!r}), treating as stale"
        )
        return True


def filter_blocks(
    blocks: List[Dict[str, Any]],
    block_types: Optional[Sequence[str]]
) -> List[Dict[str, Any]]:
    """Keep only blocks whose type is listed; no filter when empty."""
    if not block_types:
        return blocks
    wanted = set(block_types)
    return [block for block in blocks if block.get('type') in wanted]


class ContentFetcher:
    """Gets page blocks, going to the proxy only when the cache is stale.

    Example:
        >>> fetcher = ContentFetcher(client, cache)
        >>> blocks = fetcher.get_blocks(page)
    """

    def __init__(self, client: NotionProxyClient, cache: CacheService):
        self._client = client
        self._cache = cache

    def get_blocks(self, page: Page, force_refresh: bool = False) -> List[Dict[str, Any]]:
        """Return the page's blocks, filtered by its block_types.

        Args:
            page: A Notion page from the vault
            force_refresh: Re-download even if the cache is fresh

        Raises:
            NotANotionPageError: If the page URL has no Notion page id
            NotionProxyError: If the proxy fails and nothing is cached
        """
        page_id = page.notion_page_id
        if not page_id:
            raise NotANotionPageError(page.url)

        cached_blocks = self._cache.get_cached_blocks(page_id)

        try:
            remote_info = self._client.get_page_info(page_id)
        except (ProxyUnreachableError, ProxyAccessError) as e:
            if cached_blocks is not None:
                logger.warning(f"Proxy unavailable ({e}), serving cached blocks for page {page_id}")
                return filter_blocks(cached_blocks, page.block_types)
            raise

        cached_info = self._cache.get_cached_page_info(page_id)
        if (
            not force_refresh
            and cached_blocks is not None
            and not is_stale(cached_info, remote_info.last_edited_time)
        ):
            logger.debug(f"Page {page_id} unchanged since {remote_info.last_edited_time}, using cache")
            return filter_blocks(cached_blocks, page.block_types)

        blocks = self._refresh(page_id, remote_info, cached_blocks)
        return filter_blocks(blocks, page.block_types)

    def _refresh(
        self,
        page_id: str,
        remote_info: PageInfo,
        cached_blocks: Optional[List[Dict[str, Any]]]
    ) -> List[Dict[str, Any]]:
        try:
            blocks = self._client.get_blocks(page_id)
        except (ProxyUnreachableError, ProxyAccessError) as e:
            if cached_blocks is not None:
                logger.warning(f"Block refresh failed ({e}), serving cached blocks for page {page_id}")
                return cached_blocks
            raise

        self._cache.set_cached_blocks(page_id, blocks, force_refresh=True)
        self._cache.set_cached_page_info(page_id, remote_info)
        self._cache.remove_html_from_local_cache(page_id)
        return blocks

    def refresh_all(self) -> None:
        """Drop rendered HTML so every page re-renders on next view."""
        self._cache.clear_local_cache()
