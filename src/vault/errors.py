"""Typed exception hierarchy for vault model errors.

This module defines the base exception for the whole project and the errors
raised by the vault model. All exceptions carry their context as attributes
to help with debugging.
"""

from typing import Optional


class VaultError(Exception):
    """Base exception for all gm-vault errors.

    Use this to catch any application-level error from the vault tooling.
    """
    pass


class InvalidPageError(VaultError):
    """Raised when a Page would be constructed without a usable name or URL."""

    def __init__(self, field_name: str, value: Optional[object] = None):
        super().__init__(
            f"Page field '{field_name}' must be a non-empty string, got {value!r}"
        )
        self.field_name = field_name
        self.value = value


class InvalidCategoryError(VaultError):
    """Raised when a Category would be constructed without a name."""

    def __init__(self, value: Optional[object] = None):
        super().__init__(
            f"Category name must be a non-empty string, got {value!r}"
        )
        self.value = value
