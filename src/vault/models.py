"""Data models for the vault.

This module defines the recursive category/page tree that makes up a GM's
vault. All models use dataclasses; required fields are checked on
construction so a Page without a URL or a Category without a name can never
exist in memory.
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .errors import InvalidCategoryError, InvalidPageError
from .url_utils import ContentType, detect_content_type, extract_notion_page_id


class IconKind(str, Enum):
    """Kind of page icon, matching the remote service's icon types."""
    EMOJI = "emoji"
    EXTERNAL = "external"


@dataclass
class PageIcon:
    """Icon shown next to a page.

    Attributes:
        kind: Emoji or external image
        value: The emoji itself, or the image URL
    """
    kind: IconKind
    value: str

    @classmethod
    def from_json(cls, data: Any) -> Optional['PageIcon']:
        """Build an icon from its JSON shape, or None if unrecognised.

        Accepted shapes:
            {"type": "emoji", "emoji": "📄"}
            {"type": "external", "external": {"url": "https://..."}}
        """
        if not isinstance(data, dict):
            return None

        icon_type = data.get('type')
        if icon_type == IconKind.EMOJI.value:
            emoji = data.get('emoji')
            if isinstance(emoji, str) and emoji:
                return cls(IconKind.EMOJI, emoji)
        elif icon_type == IconKind.EXTERNAL.value:
            external = data.get('external')
            if isinstance(external, dict):
                url = external.get('url')
                if isinstance(url, str) and url:
                    return cls(IconKind.EXTERNAL, url)
        return None

    def to_json(self) -> Dict[str, Any]:
        if self.kind is IconKind.EMOJI:
            return {'type': 'emoji', 'emoji': self.value}
        return {'type': 'external', 'external': {'url': self.value}}


@dataclass
class Page:
    """A single reference to remote content.

    Attributes:
        name: Display name
        url: Content URL (never empty)
        visible_to_players: Whether players can see the page
        block_types: Optional filter of content-block kinds to show
        icon: Optional page icon
        linked_token_id: Optional id of a scene token linked to the page
    """
    name: str
    url: str
    visible_to_players: bool = False
    block_types: Optional[List[str]] = None
    icon: Optional[PageIcon] = None
    linked_token_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise InvalidPageError('name', self.name)
        if not isinstance(self.url, str) or not self.url:
            raise InvalidPageError('url', self.url)

    @property
    def content_type(self) -> ContentType:
        return detect_content_type(self.url)

    @property
    def notion_page_id(self) -> Optional[str]:
        return extract_notion_page_id(self.url)

    def is_notion_page(self) -> bool:
        return self.content_type is ContentType.NOTION

    def clone(self) -> 'Page':
        return copy.deepcopy(self)

    def to_json(self) -> Dict[str, Any]:
        """Serialize to the persisted JSON shape, omitting unset optionals."""
        data: Dict[str, Any] = {
            'name': self.name,
            'url': self.url,
        }
        if self.visible_to_players:
            data['visibleToPlayers'] = True
        if self.block_types:
            data['blockTypes'] = list(self.block_types)
        if self.icon:
            data['icon'] = self.icon.to_json()
        if self.linked_token_id:
            data['linkedTokenId'] = self.linked_token_id
        return data


@dataclass
class Category:
    """A named, collapsible grouping of pages and nested categories.

    Attributes:
        name: Display name (never empty)
        pages: Ordered pages directly under this category
        categories: Ordered child categories (arbitrary depth)
        collapsed: Collapsed flag as persisted in the vault JSON
    """
    name: str
    pages: List[Page] = field(default_factory=list)
    categories: List['Category'] = field(default_factory=list)
    collapsed: bool = False

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise InvalidCategoryError(self.name)

    def has_visible_content_for_players(self) -> bool:
        """True if any page in this subtree is visible to players."""
        if any(page.visible_to_players for page in self.pages):
            return True
        return any(sub.has_visible_content_for_players() for sub in self.categories)

    def iter_pages(self) -> Iterator[Page]:
        """Yield every page in the subtree, pages before child categories."""
        yield from self.pages
        for sub in self.categories:
            yield from sub.iter_pages()

    def add_page(self, page: Page) -> None:
        self.pages.append(page)

    def remove_page(self, index: int) -> Page:
        return self.pages.pop(index)

    def move_page(self, from_index: int, to_index: int) -> None:
        _move(self.pages, from_index, to_index)

    def add_category(self, category: 'Category') -> None:
        self.categories.append(category)

    def remove_category(self, index: int) -> 'Category':
        return self.categories.pop(index)

    def move_category(self, from_index: int, to_index: int) -> None:
        _move(self.categories, from_index, to_index)

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'name': self.name,
            'pages': [page.to_json() for page in self.pages],
            'categories': [sub.to_json() for sub in self.categories],
        }
        if self.collapsed:
            data['collapsed'] = True
        return data


@dataclass
class Config:
    """Root aggregate of a vault: an ordered forest of categories.

    A default Config has no categories and is always renderable.
    """
    categories: List[Category] = field(default_factory=list)

    def iter_pages(self) -> Iterator[Page]:
        for category in self.categories:
            yield from category.iter_pages()

    def find_category(self, path: Sequence[str]) -> Optional[Category]:
        """Find a category by its name path from the root.

        Args:
            path: Category names, outermost first (e.g. ["Characters", "NPCs"])

        Returns:
            The first matching category, or None
        """
        if not path:
            return None

        candidates = self.categories
        found: Optional[Category] = None
        for name in path:
            found = next((c for c in candidates if c.name == name), None)
            if found is None:
                return None
            candidates = found.categories
        return found

    def add_category(self, category: Category) -> None:
        self.categories.append(category)

    def remove_category(self, index: int) -> Category:
        return self.categories.pop(index)

    def move_category(self, from_index: int, to_index: int) -> None:
        _move(self.categories, from_index, to_index)

    @staticmethod
    def set_page_visibility(page: Page, visible: bool) -> None:
        page.visible_to_players = bool(visible)

    def to_json(self) -> Dict[str, Any]:
        return {'categories': [category.to_json() for category in self.categories]}


def _move(items: list, from_index: int, to_index: int) -> None:
    """Move an item within a list, list.pop/insert semantics."""
    item = items.pop(from_index)
    items.insert(to_index, item)
