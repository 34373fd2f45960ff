"""Decision map persistence on top of the key/value store."""
import json
import logging
from typing import List

from ..errors import CorruptStorageError, SchemaError
from ..storage import KeyValueStore
from .schema import Decision, decisions_from_list, default_decisions

logger = logging.getLogger(__name__)

STORAGE_KEY = "shed-decision-map"


class DecisionStore:
    """Loads and saves the decision list wholesale."""

    def __init__(self, kv: KeyValueStore, key: str = STORAGE_KEY):
        self.kv = kv
        self.key = key

    def load(self) -> List[Decision]:
        """Stored decisions, or the seed map (persisted) on first run."""
        raw = self.kv.get(self.key)
        if raw is None:
            decisions = default_decisions()
            self.save(decisions)
            logger.info("No stored decision map, seeded default decisions")
            return decisions
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStorageError(self.key, f"invalid JSON ({e})")
        try:
            return decisions_from_list(data)
        except SchemaError as e:
            raise CorruptStorageError(self.key, str(e))

    def save(self, decisions: List[Decision]) -> None:
        self.kv.set(self.key, json.dumps([d.to_dict() for d in decisions]))
