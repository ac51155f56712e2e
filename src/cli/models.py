"""Data models for CLI operations.

All models use dataclasses, following the patterns of src/vault/models.py.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): General error (settings issues, unreadable files)
    - INVALID_CONFIG (2): Vault JSON failed validation
    - AUTH_ERROR (3): Proxy rejected the Notion token
    - NETWORK_ERROR (4): Proxy unreachable or failing

    Example:
        >>> raise typer.Exit(ExitCode.INVALID_CONFIG)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_CONFIG = 2
    AUTH_ERROR = 3
    NETWORK_ERROR = 4


@dataclass
class VaultSettings:
    """Local settings for the gm-vault CLI, kept in .gm-vault/settings.yaml.

    Attributes:
        cache_dir: Directory of the file-backed cache store
        html_cache_size: Capacity of the in-memory rendered-HTML tier
        cache_max_age_days: Age after which persisted entries are misses
                            (None keeps them until evicted)
        cache_max_entries: Max pages kept per persisted cache tier
    """
    cache_dir: str = ".gm-vault/cache"
    html_cache_size: int = 20
    cache_max_age_days: Optional[int] = 30
    cache_max_entries: int = 200
