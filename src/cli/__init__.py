"""Command-line interface for GM Vault maintenance.

This package provides the `gm-vault` CLI tool for validating, migrating and
displaying vault files and for managing the page content cache.
"""

from .models import ExitCode, VaultSettings
from .settings import SettingsLoader
from .errors import (
    CLIError,
    SettingsError,
    SettingsFilesystemError,
    VaultFileError,
)

__all__ = [
    'ExitCode',
    'VaultSettings',
    'SettingsLoader',
    'CLIError',
    'SettingsError',
    'SettingsFilesystemError',
    'VaultFileError',
]
