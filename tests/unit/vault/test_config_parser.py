"""Unit tests for vault.config_parser module."""

import copy

import pytest

from src.vault.config_parser import (
    DEFAULT_CATEGORY_NAME,
    DEFAULT_PAGE_NAME,
    ConfigParser,
    ParseResult,
)
from src.vault.models import Config, IconKind


NOTION_URL = "https://www.notion.so/Goblin-Camp-2ccd4856c90e80febdfcd5fdfc08d0fd"


def _sample_vault():
    return {
        "categories": [
            {
                "name": "Characters",
                "pages": [
                    {"name": "Bob", "url": NOTION_URL, "visibleToPlayers": True},
                    {"name": "Secret", "url": "https://example.com/secret"},
                ],
                "categories": [
                    {
                        "name": "NPCs",
                        "collapsed": True,
                        "pages": [
                            {
                                "name": "Innkeeper",
                                "url": "https://docs.google.com/document/d/abc",
                                "blockTypes": ["paragraph", "heading_1"],
                                "icon": {"type": "emoji", "emoji": "🍺"},
                                "linkedTokenId": "tok-42",
                            }
                        ],
                    }
                ],
            },
            {"name": "Places", "pages": [], "categories": []},
        ]
    }


class TestParse:
    """Test cases for ConfigParser.parse()."""

    @pytest.mark.parametrize("data", [None, {}, []])
    def test_empty_input_gives_empty_config(self, data):
        """parse() of missing or empty JSON yields an empty Config."""
        config = ConfigParser().parse(data)

        assert isinstance(config, Config)
        assert config.categories == []

    def test_parses_full_tree(self):
        """parse() builds the full category/page tree with optional fields."""
        config = ConfigParser().parse(_sample_vault())

        assert [c.name for c in config.categories] == ["Characters", "Places"]
        characters = config.categories[0]
        assert [p.name for p in characters.pages] == ["Bob", "Secret"]
        assert characters.pages[0].visible_to_players is True
        assert characters.pages[1].visible_to_players is False

        npcs = characters.categories[0]
        assert npcs.collapsed is True
        innkeeper = npcs.pages[0]
        assert innkeeper.block_types == ["paragraph", "heading_1"]
        assert innkeeper.icon.kind is IconKind.EMOJI
        assert innkeeper.linked_token_id == "tok-42"

    def test_drops_nameless_categories_and_incomplete_pages(self):
        """Nameless categories and pages without name or url are dropped."""
        data = {
            "categories": [
                {"name": "Keep", "pages": [
                    {"name": "Good", "url": "https://a"},
                    {"name": "No URL"},
                    {"url": "https://no-name"},
                    None,
                ]},
                {"pages": [{"name": "Orphan", "url": "https://b"}]},
                None,
                {"name": ""},
            ]
        }

        config = ConfigParser().parse(data)

        assert [c.name for c in config.categories] == ["Keep"]
        assert [p.name for p in config.categories[0].pages] == ["Good"]

    def test_ignores_unknown_fields(self):
        """Unknown fields are ignored."""
        data = {"version": 3, "categories": [{"name": "A", "color": "red", "pages": [
            {"name": "P", "url": "https://p", "extra": {"x": 1}}
        ]}]}

        config = ConfigParser().parse(data)

        assert config.categories[0].pages[0].name == "P"

    def test_non_object_input_is_empty_config(self):
        """A non-object JSON value fails open to an empty Config."""
        result = ConfigParser().parse_with_diagnostics(["not", "an", "object"])

        assert result.config.categories == []
        assert any("internal error" in e for e in result.errors)

    def test_diagnostics_report_dropped_nodes(self):
        """parse_with_diagnostics() reports each dropped node by path."""
        data = {"categories": [{"name": "A", "pages": [{"name": "x"}]}, {"name": None}]}

        result = ConfigParser().parse_with_diagnostics(data)

        assert result.ok is False
        assert result.errors == [
            "categories[0].pages[0]: page without name or url dropped",
            "categories[1]: category without name dropped",
        ]

    def test_clean_parse_is_ok(self):
        """A well-formed vault parses with no diagnostics."""
        result = ConfigParser().parse_with_diagnostics(_sample_vault())

        assert isinstance(result, ParseResult)
        assert result.ok is True

    def test_reparse_of_serialized_config_is_stable(self):
        """Parsing a serialized Config gives an equal Config."""
        parser = ConfigParser()
        config = parser.parse(_sample_vault())

        assert parser.parse(config.to_json()) == config


class TestValidate:
    """Test cases for ConfigParser.validate()."""

    def test_valid_vault(self):
        """A well-formed vault is valid."""
        result = ConfigParser().validate(_sample_vault())

        assert result.valid is True
        assert result.errors == []

    def test_empty_categories_is_valid(self):
        """An empty categories array is valid."""
        assert ConfigParser().validate({"categories": []}).valid is True

    @pytest.mark.parametrize("data,message", [
        (None, "Configuración vacía"),
        ("", "Configuración vacía"),
        ({}, 'Falta el campo "categories"'),
        ({"other": 1}, 'Falta el campo "categories"'),
        ({"categories": None}, 'Falta el campo "categories"'),
        ({"categories": {"name": "A"}}, '"categories" debe ser un array'),
        ({"categories": {}}, '"categories" debe ser un array'),
    ])
    def test_top_level_errors(self, data, message):
        """Top-level structural problems produce a single error."""
        result = ConfigParser().validate(data)

        assert result.valid is False
        assert result.errors == [message]

    def test_page_missing_name(self):
        """A page without name is reported with its path."""
        data = {"categories": [{"name": "A", "pages": [
            {"name": "ok", "url": "https://ok"},
            {"url": "https://no-name"},
        ]}]}

        result = ConfigParser().validate(data)

        assert result.valid is False
        assert result.errors == ["categories[0].pages[1]: falta nombre o no es string"]
        assert "falta nombre" in result.errors[0]

    def test_reports_every_error(self):
        """validate() collects every problem rather than the first only."""
        data = {"categories": [
            {"pages": "nope"},
            {"name": "B", "categories": [
                {"name": 5},
                None,
            ], "pages": [
                {"name": "p"},
                {"name": "q", "url": "https://q", "blockTypes": "paragraph"},
                0,
            ]},
        ]}

        result = ConfigParser().validate(data)

        assert result.errors == [
            "categories[0]: falta nombre o no es string",
            "categories[0].pages: debe ser un array",
            "categories[1].pages[0]: falta URL o no es string",
            "categories[1].pages[1].blockTypes: debe ser un array",
            "categories[1].pages[2]: página vacía",
            "categories[1].categories[0]: falta nombre o no es string",
            "categories[1].categories[1]: categoría vacía",
        ]

    def test_empty_objects_are_not_blank(self):
        """An empty page object lacks name and URL; empty containers must be arrays."""
        data = {"categories": [
            {"name": "A", "pages": [{}]},
            {"name": "B", "pages": {}, "categories": {}},
            {},
        ]}

        result = ConfigParser().validate(data)

        assert result.errors == [
            "categories[0].pages[0]: falta nombre o no es string",
            "categories[0].pages[0]: falta URL o no es string",
            "categories[1].pages: debe ser un array",
            "categories[1].categories: debe ser un array",
            "categories[2]: falta nombre o no es string",
        ]

    @pytest.mark.parametrize("blank", [None, False, 0, ""])
    def test_blank_nodes(self, blank):
        """null, false, 0 and empty string are reported as empty nodes."""
        data = {"categories": [{"name": "A", "pages": [blank]}, blank]}

        result = ConfigParser().validate(data)

        assert result.errors == [
            "categories[0].pages[0]: página vacía",
            "categories[1]: categoría vacía",
        ]

    def test_does_not_mutate_input(self):
        """validate() leaves its input untouched."""
        data = _sample_vault()
        before = copy.deepcopy(data)

        ConfigParser().validate(data)

        assert data == before


class TestMigrate:
    """Test cases for ConfigParser.migrate()."""

    @pytest.mark.parametrize("data", [None, {}, [], "text"])
    def test_missing_input_gets_categories(self, data):
        """Empty or non-object input migrates to an empty vault."""
        assert ConfigParser().migrate(data) == {"categories": []}

    def test_renames_legacy_visible(self):
        """Legacy 'visible' becomes 'visibleToPlayers' when the latter is absent."""
        data = {"categories": [{"name": "A", "pages": [
            {"name": "P", "url": "https://p", "visible": True},
        ]}]}

        migrated = ConfigParser().migrate(data)

        page = migrated["categories"][0]["pages"][0]
        assert page["visibleToPlayers"] is True
        assert "visible" not in page

    def test_existing_visible_to_players_wins(self):
        """visibleToPlayers is kept when both fields exist."""
        data = {"categories": [{"name": "A", "pages": [
            {"name": "P", "url": "https://p", "visible": True, "visibleToPlayers": False},
        ]}]}

        page = ConfigParser().migrate(data)["categories"][0]["pages"][0]

        assert page["visibleToPlayers"] is False

    def test_drops_pages_without_url(self):
        """Pages lacking a URL are dropped."""
        data = {"categories": [{"name": "A", "pages": [
            {"name": "No URL"},
            {"name": "Empty URL", "url": ""},
            {"name": "Keep", "url": "https://k"},
        ]}]}

        pages = ConfigParser().migrate(data)["categories"][0]["pages"]

        assert [p["name"] for p in pages] == ["Keep"]

    def test_placeholder_names(self):
        """Missing names get placeholder values."""
        data = {"categories": [{"pages": [{"url": "https://p"}]}]}

        category = ConfigParser().migrate(data)["categories"][0]

        assert category["name"] == DEFAULT_CATEGORY_NAME
        assert category["pages"][0]["name"] == DEFAULT_PAGE_NAME

    def test_empty_category_gets_placeholder(self):
        """An empty category object is kept under the placeholder name."""
        data = {"categories": [{}, {"name": "B", "categories": [{}], "pages": [{}]}]}

        migrated = ConfigParser().migrate(data)

        assert migrated == {"categories": [
            {"name": DEFAULT_CATEGORY_NAME, "pages": [], "categories": []},
            {"name": "B", "pages": [], "categories": [
                {"name": DEFAULT_CATEGORY_NAME, "pages": [], "categories": []},
            ]},
        ]}
        assert ConfigParser().migrate(migrated) == migrated
        assert ConfigParser().validate(migrated).valid is True

    def test_optional_fields_only_when_present(self):
        """Empty optional fields are not introduced."""
        data = {"categories": [{"name": "A", "pages": [
            {"name": "P", "url": "https://p", "blockTypes": [], "icon": None, "linkedTokenId": ""},
            {"name": "Q", "url": "https://q", "blockTypes": ["paragraph"], "linkedTokenId": "t1"},
        ]}]}

        pages = ConfigParser().migrate(data)["categories"][0]["pages"]

        assert pages[0] == {"name": "P", "url": "https://p", "visibleToPlayers": False}
        assert pages[1]["blockTypes"] == ["paragraph"]
        assert pages[1]["linkedTokenId"] == "t1"
        assert "icon" not in pages[1]

    def test_does_not_mutate_input(self):
        """migrate() works on a copy."""
        data = {"categories": [{"name": "A", "pages": [{"name": "P", "url": "https://p", "visible": True}]}]}
        before = copy.deepcopy(data)

        ConfigParser().migrate(data)

        assert data == before

    @pytest.mark.parametrize("data", [
        None,
        {"categories": "broken"},
        {"categories": [None, {"name": "A", "collapsed": True, "pages": [
            {"name": "P", "url": "https://p", "visible": 1},
            {"url": "https://q"},
            {"name": "no url"},
        ], "categories": [{"pages": []}]}]},
        _sample_vault(),
    ])
    def test_idempotent_and_valid(self, data):
        """migrate(migrate(x)) == migrate(x), and the result validates."""
        parser = ConfigParser()
        once = parser.migrate(data)

        assert parser.migrate(once) == once
        assert parser.validate(once).valid is True


class TestLoad:
    """Test cases for the validate -> migrate -> parse pipeline."""

    def test_load_legacy_vault(self):
        """load() upgrades legacy fields and keeps validation errors."""
        data = {"categories": [{"name": "A", "pages": [
            {"name": "P", "url": "https://p", "visible": True},
            {"name": "No URL"},
        ]}]}

        result = ConfigParser().load(data)

        pages = result.config.categories[0].pages
        assert [p.name for p in pages] == ["P"]
        assert pages[0].visible_to_players is True
        assert result.errors == ["categories[0].pages[1]: falta URL o no es string"]

    def test_load_garbage_is_empty(self):
        """load() of garbage still yields a usable Config."""
        result = ConfigParser().load("garbage")

        assert result.config.categories == []
        assert result.errors == ['Falta el campo "categories"']
