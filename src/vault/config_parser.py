"""Vault configuration parsing, validation and migration.

This module turns untrusted, possibly legacy-shaped vault JSON into the
Config/Category/Page model. Loading persisted data goes through three
independent steps:

    validate  ->  migrate  ->  parse

Validation is advisory (it only reports), migration normalizes old shapes,
and parsing never raises: a corrupt vault degrades to an empty Config so the
GM is never locked out.
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .models import Category, Config, Page, PageIcon

logger = logging.getLogger(__name__)


DEFAULT_CATEGORY_NAME = 'Unnamed Category'
DEFAULT_PAGE_NAME = 'Unnamed Page'


@dataclass
class ValidationResult:
    """Outcome of a structural validation.

    Attributes:
        valid: True when no errors were found
        errors: Path-qualified error messages, in document order
    """
    valid: bool
    errors: List[str] = field(default_factory=list)


@dataclass
class ParseResult:
    """A parsed Config plus diagnostics about what was dropped.

    The config is always usable, even when errors is non-empty.

    Attributes:
        config: Parsed configuration (empty on internal fault)
        errors: Messages for dropped nodes and internal faults
    """
    config: Config
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _is_non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _is_blank(value: Any) -> bool:
    """True for null, false, 0 and "". Empty objects and arrays are not blank."""
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    return value == ''


class ConfigParser:
    """Parses, validates and migrates vault configuration JSON.

    Example:
        >>> parser = ConfigParser()
        >>> result = parser.load(raw_json)
        >>> for category in result.config.categories:
        ...     print(category.name)
    """

    # ------------------------------------------------------------------ parse

    def parse(self, json_data: Optional[Dict[str, Any]] = None) -> Config:
        """Parse vault JSON into a Config.

        Never raises; malformed nodes are dropped and internal faults yield
        an empty Config.
        """
        return self.parse_with_diagnostics(json_data).config

    def parse_with_diagnostics(
        self,
        json_data: Optional[Dict[str, Any]] = None
    ) -> ParseResult:
        """Parse vault JSON, collecting a diagnostic for each dropped node.

        Args:
            json_data: Decoded vault JSON (may be None or malformed)

        Returns:
            ParseResult whose config is always a valid, renderable Config
        """
        if not json_data:
            logger.debug("ConfigParser: empty JSON, returning empty config")
            return ParseResult(Config())

        errors: List[str] = []
        try:
            if not isinstance(json_data, dict):
                raise TypeError(
                    f"vault JSON must be an object, got {type(json_data).__name__}"
                )
            categories = self._parse_categories(
                json_data.get('categories') or [], 'categories', errors
            )
            return ParseResult(Config(categories=categories), errors)
        except Exception as e:
            logger.error(f"Error parsing vault configuration: {e}")
            errors.append(f"internal error: {e}")
            return ParseResult(Config(), errors)

    def _parse_categories(
        self,
        categories_json: Any,
        path: str,
        errors: List[str]
    ) -> List[Category]:
        if not isinstance(categories_json, list):
            errors.append(f"{path}: not an array, ignored")
            return []

        categories = []
        for index, cat in enumerate(categories_json):
            item_path = f"{path}[{index}]"
            if not isinstance(cat, dict) or not _is_non_empty_str(cat.get('name')):
                logger.debug(f"Dropping category without name at {item_path}")
                errors.append(f"{item_path}: category without name dropped")
                continue
            categories.append(self._parse_category(cat, item_path, errors))
        return categories

    def _parse_category(
        self,
        category_json: Dict[str, Any],
        path: str,
        errors: List[str]
    ) -> Category:
        pages = self._parse_pages(
            category_json.get('pages') or [], f"{path}.pages", errors
        )
        subcategories = self._parse_categories(
            category_json.get('categories') or [], f"{path}.categories", errors
        )
        return Category(
            name=category_json['name'],
            pages=pages,
            categories=subcategories,
            collapsed=bool(category_json.get('collapsed', False)),
        )

    def _parse_pages(
        self,
        pages_json: Any,
        path: str,
        errors: List[str]
    ) -> List[Page]:
        if not isinstance(pages_json, list):
            errors.append(f"{path}: not an array, ignored")
            return []

        pages = []
        for index, page in enumerate(pages_json):
            item_path = f"{path}[{index}]"
            if (
                not isinstance(page, dict)
                or not _is_non_empty_str(page.get('name'))
                or not _is_non_empty_str(page.get('url'))
            ):
                logger.debug(f"Dropping page without name or url at {item_path}")
                errors.append(f"{item_path}: page without name or url dropped")
                continue
            pages.append(self._parse_page(page))
        return pages

    def _parse_page(self, page_json: Dict[str, Any]) -> Page:
        block_types = page_json.get('blockTypes')
        if isinstance(block_types, list):
            block_types = [str(t) for t in block_types] or None
        else:
            block_types = None

        linked_token_id = page_json.get('linkedTokenId')

        return Page(
            name=page_json['name'],
            url=page_json['url'],
            visible_to_players=bool(page_json.get('visibleToPlayers', False)),
            block_types=block_types,
            icon=PageIcon.from_json(page_json.get('icon')),
            linked_token_id=str(linked_token_id) if linked_token_id else None,
        )

    # --------------------------------------------------------------- validate

    def validate(self, json_data: Any) -> ValidationResult:
        """Check vault JSON structure without modifying it.

        Every problem is reported, each with the path of the offending node
        (e.g. ``categories[0].pages[1]: falta nombre o no es string``).
        """
        errors: List[str] = []

        if _is_blank(json_data):
            errors.append('Configuración vacía')
            return ValidationResult(False, errors)

        categories = json_data.get('categories') if isinstance(json_data, dict) else None
        if categories is None:
            errors.append('Falta el campo "categories"')
            return ValidationResult(False, errors)

        if not isinstance(categories, list):
            errors.append('"categories" debe ser un array')
            return ValidationResult(False, errors)

        for index, cat in enumerate(categories):
            errors.extend(self._validate_category(cat, f"categories[{index}]"))

        return ValidationResult(not errors, errors)

    def _validate_category(self, category: Any, path: str) -> List[str]:
        errors: List[str] = []

        if _is_blank(category):
            errors.append(f"{path}: categoría vacía")
            return errors

        if not isinstance(category, dict):
            errors.append(f"{path}: falta nombre o no es string")
            return errors

        if not _is_non_empty_str(category.get('name')):
            errors.append(f"{path}: falta nombre o no es string")

        pages = category.get('pages')
        if not _is_blank(pages) and not isinstance(pages, list):
            errors.append(f"{path}.pages: debe ser un array")
        elif pages:
            for index, page in enumerate(pages):
                errors.extend(self._validate_page(page, f"{path}.pages[{index}]"))

        subcategories = category.get('categories')
        if not _is_blank(subcategories) and not isinstance(subcategories, list):
            errors.append(f"{path}.categories: debe ser un array")
        elif subcategories:
            for index, sub in enumerate(subcategories):
                errors.extend(self._validate_category(sub, f"{path}.categories[{index}]"))

        return errors

    def _validate_page(self, page: Any, path: str) -> List[str]:
        errors: List[str] = []

        if _is_blank(page):
            errors.append(f"{path}: página vacía")
            return errors

        if not isinstance(page, dict):
            errors.append(f"{path}: falta nombre o no es string")
            errors.append(f"{path}: falta URL o no es string")
            return errors

        if not _is_non_empty_str(page.get('name')):
            errors.append(f"{path}: falta nombre o no es string")

        if not _is_non_empty_str(page.get('url')):
            errors.append(f"{path}: falta URL o no es string")

        block_types = page.get('blockTypes')
        if not _is_blank(block_types) and not isinstance(block_types, list):
            errors.append(f"{path}.blockTypes: debe ser un array")

        return errors

    # ---------------------------------------------------------------- migrate

    def migrate(self, json_data: Any) -> Dict[str, Any]:
        """Bring legacy vault JSON up to the current shape.

        Works on a deep copy; the input is never modified. The result always
        passes validate() and migrating it again returns an equal value.
        """
        if not json_data or not isinstance(json_data, dict):
            return {'categories': []}

        migrated = copy.deepcopy(json_data)

        categories = migrated.get('categories')
        if not isinstance(categories, list):
            categories = []

        migrated['categories'] = [
            m for m in (self._migrate_category(c) for c in categories) if m
        ]
        return migrated

    def _migrate_category(self, category: Any) -> Optional[Dict[str, Any]]:
        if not isinstance(category, dict):
            return None

        pages = category.get('pages')
        subcategories = category.get('categories')

        migrated: Dict[str, Any] = {
            'name': category['name'] if _is_non_empty_str(category.get('name'))
                    else DEFAULT_CATEGORY_NAME,
            'pages': [
                p for p in (self._migrate_page(p) for p in (pages if isinstance(pages, list) else []))
                if p
            ],
            'categories': [
                c for c in (self._migrate_category(c) for c in (subcategories if isinstance(subcategories, list) else []))
                if c
            ],
        }

        if 'collapsed' in category:
            migrated['collapsed'] = category['collapsed']

        return migrated

    def _migrate_page(self, page: Any) -> Optional[Dict[str, Any]]:
        # A page cannot be migrated without a URL: there is no safe default
        if not isinstance(page, dict) or not _is_non_empty_str(page.get('url')):
            return None

        if 'visibleToPlayers' in page:
            visible = bool(page['visibleToPlayers'])
        else:
            visible = bool(page.get('visible', False))

        migrated: Dict[str, Any] = {
            'name': page['name'] if _is_non_empty_str(page.get('name'))
                    else DEFAULT_PAGE_NAME,
            'url': page['url'],
            'visibleToPlayers': visible,
        }

        block_types = page.get('blockTypes')
        if block_types and isinstance(block_types, list):
            migrated['blockTypes'] = block_types
        if page.get('icon'):
            migrated['icon'] = page['icon']
        if page.get('linkedTokenId'):
            migrated['linkedTokenId'] = page['linkedTokenId']

        return migrated

    # --------------------------------------------------------------- pipeline

    def load(self, json_data: Any) -> ParseResult:
        """Run the full validate -> migrate -> parse pipeline.

        Validation errors are logged as warnings and included in the result's
        errors; they never stop migration or parsing.
        """
        validation = self.validate(json_data)
        if not validation.valid:
            for error in validation.errors:
                logger.warning(f"Vault validation: {error}")

        migrated = self.migrate(json_data)
        result = self.parse_with_diagnostics(migrated)
        result.errors = validation.errors + result.errors
        return result
