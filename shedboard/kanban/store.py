"""
Board persistence on top of the key/value store.

The whole card list lives under one key as JSON; a second key holds the
last-seen shared snapshot version as a decimal string.
"""
import json
import logging
from typing import List, Optional

from ..errors import CorruptStorageError, SchemaError
from ..storage import KeyValueStore
from .schema import Card, cards_from_list, cards_to_list

logger = logging.getLogger(__name__)

STORAGE_KEY = "shed-project-board"
VERSION_KEY = "shed-project-board-version"


class BoardStore:
    """Loads and saves the card collection wholesale."""

    def __init__(self, kv: KeyValueStore, key: str = STORAGE_KEY, version_key: str = VERSION_KEY):
        self.kv = kv
        self.key = key
        self.version_key = version_key

    def load_local(self) -> Optional[List[Card]]:
        """Return stored cards, or None when nothing has been stored yet."""
        raw = self.kv.get(self.key)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStorageError(self.key, f"invalid JSON ({e})")
        try:
            return cards_from_list(data)
        except SchemaError as e:
            raise CorruptStorageError(self.key, str(e))

    def save(self, cards: List[Card]) -> None:
        self.kv.set(self.key, json.dumps(cards_to_list(cards)))
        logger.debug(f"Saved {len(cards)} cards under {self.key}")

    def clear(self) -> None:
        """Forget both the cards and the stashed version."""
        self.kv.delete(self.key)
        self.kv.delete(self.version_key)

    def stashed_version(self) -> int:
        """Last-seen snapshot version, 0 when absent or unreadable."""
        raw = self.kv.get(self.version_key)
        if raw is None:
            return 0
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Ignoring non-integer version marker {raw!r}")
            return 0

    def stash_version(self, version: int) -> None:
        self.kv.set(self.version_key, str(int(version)))
