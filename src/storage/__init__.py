"""Key-value storage for persisted extension state.

This package provides the store abstraction injected into the content cache
and the collapse-state collaborator, with in-memory and file-backed
implementations.
"""

from .errors import StorageError
from .key_value_store import FileStore, KeyValueStore, MemoryStore

__all__ = [
    'KeyValueStore',
    'MemoryStore',
    'FileStore',
    'StorageError',
]
