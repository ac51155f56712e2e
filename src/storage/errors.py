"""Typed exceptions for key-value storage errors."""

from src.vault.errors import VaultError


class StorageError(VaultError):
    """Raised when a key-value store cannot read or write an entry.

    Attributes:
        key: Store key involved in the failed operation
        operation: Operation name (get, set, delete, init)
        reason: Underlying error description
    """

    def __init__(self, key: str, operation: str, reason: str = ""):
        message = f"Storage operation '{operation}' failed for key '{key}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.key = key
        self.operation = operation
        self.reason = reason
