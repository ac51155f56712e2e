"""Key-value store abstraction for persisted extension state.

The cache and the collapse-state collaborator receive a store instance
instead of reaching for ambient global storage. Two implementations are
provided:

- MemoryStore: dict-backed, for tests and single-session use
- FileStore: one file per key in a directory, surviving restarts

File structure of a FileStore:
    .gm-vault/cache/
      notion-blocks-2ccd4856-c90e-80fe-bdfc-d5fdfc08d0fd
      notion-page-info-2ccd4856-c90e-80fe-bdfc-d5fdfc08d0fd
      notion-cache-index%3Ablocks
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Dict, Optional
from urllib.parse import quote

from .errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """String-to-string store with get/set/delete."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Deleting an absent key is not an error."""


class MemoryStore(KeyValueStore):
    """In-process store backed by a dict."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class FileStore(KeyValueStore):
    """Directory-backed store, one UTF-8 file per key.

    Keys are URL-quoted into file names so arbitrary category names and page
    ids map to safe, distinct files.

    Example:
        >>> store = FileStore(".gm-vault/cache")
        >>> store.set("category-collapsed-NPCs-level-0", "true")
        >>> store.get("category-collapsed-NPCs-level-0")
        'true'
    """

    def __init__(self, directory: str):
        """Initialize the store, creating its directory if needed.

        Args:
            directory: Directory holding one file per key

        Raises:
            StorageError: If the directory cannot be created
        """
        self.directory = os.path.abspath(directory)
        try:
            os.makedirs(self.directory, exist_ok=True)
            logger.debug(f"Store directory ready: {self.directory}")
        except OSError as e:
            raise StorageError(self.directory, 'init', str(e))

    def _path_for(self, key: str) -> str:
        return os.path.join(self.directory, quote(key, safe=''))

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(key, 'get', str(e))

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        tmp_path = None
        try:
            # mkstemp creates the file exclusively, never reusing a key's file
            fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix='.', suffix='.tmp')
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError as e:
            if tmp_path is not None:
                self._discard(tmp_path)
            raise StorageError(key, 'set', str(e))

    @staticmethod
    def _discard(tmp_path: str) -> None:
        try:
            os.remove(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove temporary file {tmp_path}: {e}")

    def delete(self, key: str) -> None:
        try:
            os.remove(self._path_for(key))
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(key, 'delete', str(e))
