"""Data models for cached remote page content."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class PageInfo:
    """Remote page metadata used for staleness checks.

    Attributes:
        last_edited_time: ISO 8601 timestamp of the last remote edit
        icon: Remote icon object as returned by the service (opaque)
    """
    last_edited_time: str
    icon: Optional[Dict[str, Any]] = None


@dataclass
class CachedPageInfo(PageInfo):
    """PageInfo as stored in the cache, stamped at write time.

    Attributes:
        cached_at: ISO 8601 UTC timestamp of the cache write
    """
    cached_at: str = ""

    def to_json(self) -> Dict[str, Any]:
        return {
            'lastEditedTime': self.last_edited_time,
            'icon': self.icon,
            'cachedAt': self.cached_at,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'CachedPageInfo':
        """Rebuild from the stored JSON shape.

        Raises:
            KeyError: If lastEditedTime or cachedAt is missing
        """
        return cls(
            last_edited_time=data['lastEditedTime'],
            icon=data.get('icon'),
            cached_at=data['cachedAt'],
        )
