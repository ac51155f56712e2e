"""Loading and saving the vault through a key-value store.

The vault is persisted as a single JSON document. Loading runs the full
validate -> migrate -> parse pipeline so old or damaged data still yields a
usable Config; saving serializes the whole tree after every mutation.
"""

import json
import logging
from typing import Optional

from src.storage.key_value_store import KeyValueStore

from .config_parser import ConfigParser, ParseResult
from .models import Config

logger = logging.getLogger(__name__)


class VaultStore:
    """Reads and writes a vault Config under one store key.

    Example:
        >>> vault = VaultStore(FileStore(".gm-vault/data"))
        >>> config = vault.load().config
        >>> config.categories[0].pages[0].visible_to_players = True
        >>> vault.save(config)
    """

    DEFAULT_KEY = 'gm-vault-config'

    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_KEY,
        parser: Optional[ConfigParser] = None
    ):
        self._store = store
        self.key = key
        self._parser = parser or ConfigParser()

    def load(self) -> ParseResult:
        """Load the persisted vault.

        Returns:
            ParseResult; an absent key gives an empty Config with no errors,
            undecodable JSON gives an empty Config with one error
        """
        raw = self._store.get(self.key)
        if raw is None:
            logger.debug(f"No vault stored under '{self.key}', starting empty")
            return ParseResult(Config())
        return self.load_json(raw)

    def load_json(self, raw: str) -> ParseResult:
        """Decode and load a vault JSON string."""
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"Stored vault '{self.key}' is not valid JSON: {e}")
            return ParseResult(Config(), [f"invalid JSON: {e}"])
        return self._parser.load(data)

    def save(self, config: Config) -> None:
        """Serialize and store the whole vault.

        Raises:
            StorageError: If the store cannot write the entry
        """
        self._store.set(self.key, json.dumps(config.to_json(), ensure_ascii=False))
        logger.info(f"Saved vault '{self.key}' ({len(config.categories)} root categories)")
