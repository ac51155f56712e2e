"""Typed exception hierarchy for CLI-related errors.

All exceptions inherit from CLIError, which itself inherits from the
project-wide VaultError base.
"""

from typing import Optional

from src.vault.errors import VaultError


class CLIError(VaultError):
    """Base exception for all CLI-related errors."""
    pass


class SettingsError(CLIError):
    """Raised when the settings file is malformed or has invalid values."""

    def __init__(self, message: str, settings_field: Optional[str] = None):
        if settings_field:
            full_message = f"Settings error in field '{settings_field}': {message}"
        else:
            full_message = f"Settings error: {message}"
        super().__init__(full_message)
        self.settings_field = settings_field
        self.original_message = message


class SettingsFilesystemError(CLIError):
    """Raised when the settings file cannot be read or written."""

    def __init__(self, file_path: str, operation: str, reason: Optional[str] = None):
        message = f"Settings file operation '{operation}' failed for {file_path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
        self.file_path = file_path
        self.operation = operation
        self.reason = reason


class VaultFileError(CLIError):
    """Raised when a vault JSON file cannot be read or decoded."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(f"Cannot load vault file {file_path}: {reason}")
        self.file_path = file_path
        self.reason = reason
