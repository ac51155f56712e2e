"""Player-facing tree view and per-category collapse state.

Players only see pages the GM marked visible; categories whose whole
subtree is hidden are pruned from the player's view (never from the GM's).
Collapse state is kept per UI session in a key-value store, separate from the
vault JSON.
"""

import logging
from typing import Optional

from src.storage.key_value_store import KeyValueStore

from .models import Category, Config

logger = logging.getLogger(__name__)


def has_visible_content_for_players(category: Category) -> bool:
    """True if the category or any descendant has a visible page."""
    return category.has_visible_content_for_players()


def _prune_category(category: Category) -> Optional[Category]:
    if not category.has_visible_content_for_players():
        return None

    subcategories = []
    for sub in category.categories:
        pruned = _prune_category(sub)
        if pruned is not None:
            subcategories.append(pruned)

    return Category(
        name=category.name,
        pages=[page.clone() for page in category.pages if page.visible_to_players],
        categories=subcategories,
        collapsed=category.collapsed,
    )


def build_player_view(config: Config) -> Config:
    """Build the tree a player sees.

    Returns a new Config holding copies of visible pages only; the GM's
    config is not modified.
    """
    categories = []
    for category in config.categories:
        pruned = _prune_category(category)
        if pruned is not None:
            categories.append(pruned)
    return Config(categories=categories)


class CollapseStateStore:
    """Persists whether a category is collapsed in the sidebar.

    Keys have the form ``category-collapsed-<name>-level-<depth>`` and values
    are the strings ``"true"`` / ``"false"``.

    Example:
        >>> state = CollapseStateStore(MemoryStore())
        >>> state.toggle("NPCs", 0)
        True
        >>> state.is_collapsed("NPCs", 0)
        True
    """

    def __init__(self, store: KeyValueStore):
        self._store = store

    @staticmethod
    def key_for(name: str, level: int) -> str:
        return f"category-collapsed-{name}-level-{level}"

    def is_collapsed(self, name: str, level: int) -> bool:
        return self._store.get(self.key_for(name, level)) == 'true'

    def set_collapsed(self, name: str, level: int, collapsed: bool) -> None:
        self._store.set(self.key_for(name, level), 'true' if collapsed else 'false')

    def toggle(self, name: str, level: int) -> bool:
        """Flip the collapsed state and return the new value."""
        collapsed = not self.is_collapsed(name, level)
        self.set_collapsed(name, level, collapsed)
        logger.debug(f"Category '{name}' level {level} collapsed={collapsed}")
        return collapsed
