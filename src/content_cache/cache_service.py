"""Multi-tier cache for remote page content.

This module provides the CacheService class that reduces fetches against the
rate-limited remote content service. It keeps three independent tiers keyed
by page id:

- blocks: the page's content blocks, persisted in a KeyValueStore
- page info: last_edited_time and icon, persisted, stamped with cachedAt
- rendered HTML: held in process memory only, bounded FIFO

Clearing one tier never touches another. The persisted tiers are bounded per
tier by an insertion-ordered index (oldest page evicted first) and by a
maximum entry age checked on read.

Stored layout:
    notion-blocks-<page_id>      {"blocks": [...], "cachedAt": "..."}
    notion-page-info-<page_id>   {"lastEditedTime": "...", "icon": {...}, "cachedAt": "..."}
    notion-cache-index:blocks    ["<page_id>", ...]
    notion-cache-index:page-info ["<page_id>", ...]
"""

import json
import logging
from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from src.storage.errors import StorageError
from src.storage.key_value_store import KeyValueStore

from .models import CachedPageInfo, PageInfo

logger = logging.getLogger(__name__)


BLOCKS_PREFIX = 'notion-blocks-'
PAGE_INFO_PREFIX = 'notion-page-info-'
BLOCKS_INDEX_KEY = 'notion-cache-index:blocks'
PAGE_INFO_INDEX_KEY = 'notion-cache-index:page-info'

DEFAULT_HTML_CACHE_SIZE = 20
DEFAULT_MAX_AGE_DAYS = 30
DEFAULT_MAX_ENTRIES = 200


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CacheService:
    """Caches blocks, page info and rendered HTML per page id.

    Example:
        >>> cache = CacheService(FileStore(".gm-vault/cache"))
        >>> blocks = cache.get_cached_blocks(page_id)
        >>> if blocks is None:
        ...     # Cache miss - fetch from the proxy
        ...     cache.set_cached_blocks(page_id, fetched, force_refresh=True)
    """

    def __init__(
        self,
        store: KeyValueStore,
        html_cache_size: int = DEFAULT_HTML_CACHE_SIZE,
        max_age_days: Optional[int] = DEFAULT_MAX_AGE_DAYS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        """Initialize the cache.

        Args:
            store: Store for the persisted tiers
            html_cache_size: Capacity of the in-memory HTML tier
            max_age_days: Persisted entries older than this are misses
                          (None keeps entries until evicted)
            max_entries: Max pages kept per persisted tier
        """
        if html_cache_size < 1:
            raise ValueError(f"html_cache_size must be at least 1, got {html_cache_size}")
        if max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries}")

        self._store = store
        self.html_cache_size = html_cache_size
        self.max_age_days = max_age_days
        self.max_entries = max_entries
        self.local_html_cache: 'OrderedDict[str, str]' = OrderedDict()

    # ----------------------------------------------------------- blocks tier

    def get_cached_blocks(self, page_id: str) -> Optional[List[Dict[str, Any]]]:
        """Return cached blocks for a page, or None on a miss."""
        entry = self._read_entry(BLOCKS_PREFIX, BLOCKS_INDEX_KEY, page_id)
        if entry is None:
            return None

        blocks = entry.get('blocks')
        if not isinstance(blocks, list):
            logger.warning(f"Cached blocks for page {page_id} are malformed, discarding")
            self._delete_entry(BLOCKS_PREFIX, BLOCKS_INDEX_KEY, page_id)
            return None

        logger.debug(f"Blocks cache hit: page {page_id} ({len(blocks)} blocks)")
        return blocks

    def set_cached_blocks(
        self,
        page_id: str,
        blocks: List[Dict[str, Any]],
        force_refresh: bool = False
    ) -> None:
        """Store blocks for a page, replacing any previous entry.

        Whether to write only into empty slots is decided by the caller;
        force_refresh is recorded in the log only.

        Raises:
            StorageError: If the store cannot write the entry
        """
        entry = {'blocks': blocks, 'cachedAt': _now().isoformat()}
        self._write_entry(BLOCKS_PREFIX, BLOCKS_INDEX_KEY, page_id, entry)
        mode = "forced refresh" if force_refresh else "lazy fill"
        logger.info(f"Cached {len(blocks)} blocks for page {page_id} ({mode})")

    def remove_cached_blocks(self, page_id: str) -> None:
        """Delete the blocks entry for a page; absence is not an error."""
        self._delete_entry(BLOCKS_PREFIX, BLOCKS_INDEX_KEY, page_id)

    # -------------------------------------------------------- page info tier

    def get_cached_page_info(self, page_id: str) -> Optional[CachedPageInfo]:
        """Return cached page info, or None on a miss."""
        entry = self._read_entry(PAGE_INFO_PREFIX, PAGE_INFO_INDEX_KEY, page_id)
        if entry is None:
            return None

        try:
            return CachedPageInfo.from_json(entry)
        except (KeyError, TypeError) as e:
            logger.warning(f"Cached page info for page {page_id} is malformed ({e}), discarding")
            self._delete_entry(PAGE_INFO_PREFIX, PAGE_INFO_INDEX_KEY, page_id)
            return None

    def set_cached_page_info(self, page_id: str, info: PageInfo) -> CachedPageInfo:
        """Store page info stamped with the current time.

        Returns:
            The stored entry, including cached_at

        Raises:
            StorageError: If the store cannot write the entry
        """
        cached = CachedPageInfo(
            last_edited_time=info.last_edited_time,
            icon=info.icon,
            cached_at=_now().isoformat(),
        )
        self._write_entry(PAGE_INFO_PREFIX, PAGE_INFO_INDEX_KEY, page_id, cached.to_json())
        logger.debug(f"Cached page info for page {page_id} (last edited {info.last_edited_time})")
        return cached

    def remove_cached_page_info(self, page_id: str) -> None:
        self._delete_entry(PAGE_INFO_PREFIX, PAGE_INFO_INDEX_KEY, page_id)

    # ------------------------------------------------------- HTML tier (RAM)

    def save_html_to_local_cache(self, page_id: str, html: str) -> None:
        """Keep rendered HTML in memory, evicting the oldest insert when full.

        Overwriting an existing page keeps its original position; reads never
        refresh position (FIFO, not LRU).
        """
        if page_id not in self.local_html_cache:
            while len(self.local_html_cache) >= self.html_cache_size:
                evicted, _ = self.local_html_cache.popitem(last=False)
                logger.debug(f"HTML cache full, evicted page {evicted}")
        self.local_html_cache[page_id] = html

    def get_html_from_local_cache(self, page_id: str) -> Optional[str]:
        return self.local_html_cache.get(page_id)

    def remove_html_from_local_cache(self, page_id: str) -> None:
        self.local_html_cache.pop(page_id, None)

    def clear_local_cache(self) -> None:
        """Empty the in-memory HTML tier; persisted tiers are untouched."""
        count = len(self.local_html_cache)
        self.local_html_cache.clear()
        logger.info(f"Cleared HTML cache ({count} entries)")

    # ------------------------------------------------------ persisted tiers

    def clear_persisted_cache(self) -> int:
        """Delete every blocks and page-info entry known to the indexes.

        The in-memory HTML tier is untouched.

        Returns:
            Number of entries deleted
        """
        deleted = 0
        for prefix, index_key in (
            (BLOCKS_PREFIX, BLOCKS_INDEX_KEY),
            (PAGE_INFO_PREFIX, PAGE_INFO_INDEX_KEY),
        ):
            for page_id in self._load_index(index_key):
                self._store.delete(prefix + page_id)
                deleted += 1
            self._store.delete(index_key)

        logger.info(f"Cleared persisted cache: deleted {deleted} entries")
        return deleted

    def _read_entry(
        self,
        prefix: str,
        index_key: str,
        page_id: str
    ) -> Optional[Dict[str, Any]]:
        try:
            raw = self._store.get(prefix + page_id)
        except StorageError as e:
            logger.warning(f"Cache read failed for page {page_id}: {e}")
            return None

        if raw is None:
            logger.debug(f"Cache miss: no {prefix}entry for page {page_id}")
            return None

        try:
            entry = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupt cache entry {prefix}{page_id} ({e}), discarding")
            self._delete_entry(prefix, index_key, page_id)
            return None

        if not isinstance(entry, dict):
            logger.warning(f"Corrupt cache entry {prefix}{page_id}, discarding")
            self._delete_entry(prefix, index_key, page_id)
            return None

        if self._is_expired(entry.get('cachedAt')):
            logger.debug(f"Cache miss: {prefix}entry for page {page_id} expired")
            self._delete_entry(prefix, index_key, page_id)
            return None

        return entry

    def _is_expired(self, cached_at: Any) -> bool:
        if self.max_age_days is None:
            return False
        try:
            stamp = datetime.fromisoformat(cached_at)
        except (TypeError, ValueError):
            # Unstamped entries cannot be aged
            return True
        if stamp.tzinfo is None:
            stamp = stamp.replace(tzinfo=timezone.utc)
        return _now() - stamp > timedelta(days=self.max_age_days)

    def _write_entry(
        self,
        prefix: str,
        index_key: str,
        page_id: str,
        entry: Dict[str, Any]
    ) -> None:
        self._store.set(prefix + page_id, json.dumps(entry, ensure_ascii=False))

        index = self._load_index(index_key)
        if page_id in index:
            return

        index.append(page_id)
        while len(index) > self.max_entries:
            evicted = index.pop(0)
            self._store.delete(prefix + evicted)
            logger.info(f"Cache tier {prefix.rstrip('-')} full, evicted page {evicted}")
        self._save_index(index_key, index)

    def _delete_entry(self, prefix: str, index_key: str, page_id: str) -> None:
        self._store.delete(prefix + page_id)
        index = self._load_index(index_key)
        if page_id in index:
            index.remove(page_id)
            self._save_index(index_key, index)

    def _load_index(self, index_key: str) -> List[str]:
        raw = self._store.get(index_key)
        if raw is None:
            return []
        try:
            index = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Cache index {index_key} is corrupt, rebuilding empty")
            return []
        if not isinstance(index, list):
            return []
        return [str(page_id) for page_id in index]

    def _save_index(self, index_key: str, index: List[str]) -> None:
        self._store.set(index_key, json.dumps(index))
