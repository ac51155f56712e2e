"""Unit tests for vault.models module."""

import pytest

from src.vault.errors import InvalidCategoryError, InvalidPageError, VaultError
from src.vault.models import Category, Config, IconKind, Page, PageIcon
from src.vault.url_utils import ContentType


NOTION_URL = "https://www.notion.so/workspace/Goblin-Camp-2ccd4856c90e80febdfcd5fdfc08d0fd"


class TestPage:
    """Test cases for Page dataclass."""

    def test_page_defaults(self):
        """Page defaults to hidden with no optional fields."""
        page = Page(name="Goblin Camp", url=NOTION_URL)

        assert page.visible_to_players is False
        assert page.block_types is None
        assert page.icon is None
        assert page.linked_token_id is None

    def test_empty_name_raises(self):
        """Page with empty name raises InvalidPageError."""
        with pytest.raises(InvalidPageError) as exc_info:
            Page(name="", url=NOTION_URL)

        assert exc_info.value.field_name == "name"

    def test_empty_url_raises(self):
        """Page with empty URL raises InvalidPageError."""
        with pytest.raises(InvalidPageError) as exc_info:
            Page(name="Goblin Camp", url="")

        assert exc_info.value.field_name == "url"
        assert isinstance(exc_info.value, VaultError)

    def test_content_type_and_page_id(self):
        """Notion pages expose their content type and dashed page id."""
        page = Page(name="Goblin Camp", url=NOTION_URL)

        assert page.content_type is ContentType.NOTION
        assert page.is_notion_page() is True
        assert page.notion_page_id == "2ccd4856-c90e-80fe-bdfc-d5fdfc08d0fd"

    def test_non_notion_page_has_no_page_id(self):
        """Non-Notion pages have no page id."""
        page = Page(name="Map", url="https://example.com/map.png")

        assert page.content_type is ContentType.IMAGE
        assert page.is_notion_page() is False
        assert page.notion_page_id is None

    def test_clone_is_independent(self):
        """clone() returns a deep copy."""
        page = Page(name="Goblin Camp", url=NOTION_URL, block_types=["paragraph"])

        copy = page.clone()
        copy.block_types.append("heading_1")
        copy.visible_to_players = True

        assert page.block_types == ["paragraph"]
        assert page.visible_to_players is False

    def test_to_json_omits_unset_optionals(self):
        """to_json() only writes optional keys that are set."""
        page = Page(name="Goblin Camp", url=NOTION_URL)

        assert page.to_json() == {"name": "Goblin Camp", "url": NOTION_URL}

    def test_to_json_full(self):
        """to_json() writes every set field with its persisted key."""
        page = Page(
            name="Goblin Camp",
            url=NOTION_URL,
            visible_to_players=True,
            block_types=["paragraph"],
            icon=PageIcon(IconKind.EMOJI, "🏕"),
            linked_token_id="token-1",
        )

        assert page.to_json() == {
            "name": "Goblin Camp",
            "url": NOTION_URL,
            "visibleToPlayers": True,
            "blockTypes": ["paragraph"],
            "icon": {"type": "emoji", "emoji": "🏕"},
            "linkedTokenId": "token-1",
        }


class TestPageIcon:
    """Test cases for PageIcon JSON conversion."""

    def test_from_json_emoji(self):
        """Emoji icons are recognised."""
        icon = PageIcon.from_json({"type": "emoji", "emoji": "📄"})

        assert icon == PageIcon(IconKind.EMOJI, "📄")

    def test_from_json_external(self):
        """External icons keep their URL."""
        icon = PageIcon.from_json({"type": "external", "external": {"url": "https://x/i.png"}})

        assert icon.kind is IconKind.EXTERNAL
        assert icon.to_json() == {"type": "external", "external": {"url": "https://x/i.png"}}

    @pytest.mark.parametrize("data", [
        None,
        "📄",
        {"type": "file", "file": {"url": "https://x"}},
        {"type": "emoji", "emoji": ""},
        {"type": "external", "external": "https://x"},
    ])
    def test_from_json_unrecognised_returns_none(self, data):
        """Unknown or malformed icons give None."""
        assert PageIcon.from_json(data) is None


class TestCategory:
    """Test cases for Category dataclass."""

    def test_empty_name_raises(self):
        """Category with empty name raises InvalidCategoryError."""
        with pytest.raises(InvalidCategoryError):
            Category(name="")

    def test_visible_content_direct_page(self):
        """A visible page directly in the category counts."""
        category = Category(
            name="NPCs",
            pages=[Page(name="Bob", url=NOTION_URL, visible_to_players=True)],
        )

        assert category.has_visible_content_for_players() is True

    def test_visible_content_nested(self):
        """A visible page deep in the subtree counts."""
        leaf = Category(
            name="Leaf",
            pages=[Page(name="Bob", url=NOTION_URL, visible_to_players=True)],
        )
        root = Category(name="Root", categories=[Category(name="Mid", categories=[leaf])])

        assert root.has_visible_content_for_players() is True

    def test_no_visible_content(self):
        """A subtree of hidden pages has no player content."""
        root = Category(
            name="Root",
            pages=[Page(name="Secret", url=NOTION_URL)],
            categories=[Category(name="Empty")],
        )

        assert root.has_visible_content_for_players() is False

    def test_iter_pages_order(self):
        """iter_pages() yields own pages before child categories."""
        a = Page(name="A", url="https://a")
        b = Page(name="B", url="https://b")
        c = Page(name="C", url="https://c")
        root = Category(name="Root", pages=[a, b], categories=[Category(name="Sub", pages=[c])])

        assert [p.name for p in root.iter_pages()] == ["A", "B", "C"]

    def test_move_page(self):
        """move_page() reorders pages with pop/insert semantics."""
        pages = [Page(name=n, url=f"https://{n}") for n in "ABC"]
        category = Category(name="Root", pages=pages)

        category.move_page(0, 2)

        assert [p.name for p in category.pages] == ["B", "C", "A"]

    def test_add_and_remove(self):
        """add/remove page and category round out the mutation API."""
        category = Category(name="Root")
        page = Page(name="A", url="https://a")
        sub = Category(name="Sub")

        category.add_page(page)
        category.add_category(sub)

        assert category.remove_page(0) is page
        assert category.remove_category(0) is sub
        assert category.pages == [] and category.categories == []

    def test_to_json_collapsed_only_when_set(self):
        """collapsed is written only when true."""
        assert "collapsed" not in Category(name="Open").to_json()
        assert Category(name="Shut", collapsed=True).to_json()["collapsed"] is True


class TestConfig:
    """Test cases for Config aggregate."""

    def _config(self):
        npcs = Category(name="NPCs", pages=[Page(name="Bob", url="https://bob")])
        characters = Category(name="Characters", categories=[npcs])
        return Config(categories=[characters, Category(name="Places")])

    def test_default_is_empty(self):
        """A default Config has no categories."""
        assert Config().categories == []
        assert Config().to_json() == {"categories": []}

    def test_find_category_by_path(self):
        """find_category() walks names from the root."""
        config = self._config()

        assert config.find_category(["Characters", "NPCs"]).name == "NPCs"
        assert config.find_category(["Places"]).name == "Places"

    def test_find_category_missing(self):
        """find_category() returns None for unknown or empty paths."""
        config = self._config()

        assert config.find_category(["Characters", "Monsters"]) is None
        assert config.find_category([]) is None

    def test_iter_pages(self):
        """iter_pages() covers the whole forest."""
        assert [p.name for p in self._config().iter_pages()] == ["Bob"]

    def test_move_category(self):
        """move_category() reorders root categories."""
        config = self._config()

        config.move_category(1, 0)

        assert [c.name for c in config.categories] == ["Places", "Characters"]

    def test_set_page_visibility(self):
        """set_page_visibility() flips only the visibility flag."""
        config = self._config()
        page = next(config.iter_pages())

        Config.set_page_visibility(page, True)

        assert page.visible_to_players is True
        assert page.name == "Bob"
