"""
Kanban card schema.

Columns (render order):
  Ideas → Backlog → In Progress → Done

Status has no transition graph: any card can be dropped on any column.
A card whose status is not a known column stays in storage but is not
rendered.
"""
from enum import Enum
from dataclasses import dataclass, field
from typing import List, Dict, Any

from ..errors import SchemaError
from ..utils import utc_now, to_iso


class CardStatus(Enum):
    """Board columns, in display order."""
    IDEAS = "ideas"
    BACKLOG = "backlog"
    IN_PROGRESS = "in-progress"
    DONE = "done"

    @property
    def title(self) -> str:
        return COLUMN_TITLES[self]

    @classmethod
    def is_known(cls, value: str) -> bool:
        return isinstance(value, str) and value in {s.value for s in cls}


COLUMN_TITLES = {
    CardStatus.IDEAS: "Ideas",
    CardStatus.BACKLOG: "Backlog",
    CardStatus.IN_PROGRESS: "In Progress",
    CardStatus.DONE: "Done",
}


class CardPriority(Enum):
    """Card priority. Drives styling only."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return list(CardPriority).index(self)

    @classmethod
    def is_known(cls, value: str) -> bool:
        return isinstance(value, str) and value in {p.value for p in cls}


@dataclass
class Card:
    """A single card on the board."""

    id: str                         # Epoch-ms string, immutable
    title: str
    description: str = ""
    status: str = CardStatus.IDEAS.value
    priority: str = CardPriority.MEDIUM.value
    created_at: str = field(default_factory=lambda: to_iso(utc_now()))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the wire (camelCase) field names."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        """Deserialize and validate. Raises SchemaError on a malformed record."""
        if not isinstance(data, dict):
            raise SchemaError(f"card must be an object, got {type(data).__name__}")

        card_id = data.get("id")
        if isinstance(card_id, int) and not isinstance(card_id, bool):
            card_id = str(card_id)
        if not isinstance(card_id, str) or not card_id:
            raise SchemaError("card id must be a non-empty string")

        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise SchemaError(f"card {card_id}: title must be a non-empty string")

        for name in ("description", "status", "priority", "createdAt"):
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                raise SchemaError(f"card {card_id}: {name} must be a string")

        return cls(
            id=card_id,
            title=title,
            description=data.get("description") or "",
            status=data.get("status") or CardStatus.IDEAS.value,
            priority=data.get("priority") or CardPriority.MEDIUM.value,
            created_at=data.get("createdAt") or to_iso(utc_now()),
        )


def cards_from_list(items: Any) -> List[Card]:
    if not isinstance(items, list):
        raise SchemaError(f"cards must be a list, got {type(items).__name__}")
    return [Card.from_dict(item) for item in items]


def cards_to_list(cards: List[Card]) -> List[Dict[str, Any]]:
    return [c.to_dict() for c in cards]


@dataclass
class Snapshot:
    """Shared board document: {version, lastUpdated, updatedBy, cards}."""

    version: int
    cards: List[Card] = field(default_factory=list)
    last_updated: str = ""
    updated_by: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "lastUpdated": self.last_updated,
            "updatedBy": self.updated_by,
            "cards": cards_to_list(self.cards),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Snapshot":
        if not isinstance(data, dict):
            raise SchemaError("snapshot must be an object")
        version = data.get("version")
        if not isinstance(version, int) or isinstance(version, bool):
            raise SchemaError(f"snapshot version must be an integer, got {version!r}")
        return cls(
            version=version,
            cards=cards_from_list(data.get("cards")),
            last_updated=str(data.get("lastUpdated") or ""),
            updated_by=str(data.get("updatedBy") or ""),
        )


def _sample(card_id: str, title: str, description: str, status: CardStatus,
            priority: CardPriority) -> Card:
    return Card(
        id=card_id,
        title=title,
        description=description,
        status=status.value,
        priority=priority.value,
    )


def default_cards() -> List[Card]:
    """Built-in sample board used when nothing is stored yet."""
    return [
        _sample("1", "Dimension constraints implemented",
                "Max 8m x 4m in either orientation. Validation working.",
                CardStatus.DONE, CardPriority.HIGH),
        _sample("2", "Pent roof positioning for attachments",
                "Fixed rotation and positioning for all 4 attachment directions "
                "(left, right, front, back).",
                CardStatus.DONE, CardPriority.HIGH),
        _sample("3", "Roof height constraints",
                "Add min/max validation for eave and crest heights.",
                CardStatus.BACKLOG, CardPriority.MEDIUM),
        _sample("4", "Door/window size validation",
                "Prevent unrealistic opening sizes.",
                CardStatus.BACKLOG, CardPriority.MEDIUM),
        _sample("5", "Marketing landing page",
                "Create a landing page to showcase the configurator.",
                CardStatus.IDEAS, CardPriority.LOW),
        _sample("6", "README documentation",
                "Write comprehensive README for the GitHub repo.",
                CardStatus.BACKLOG, CardPriority.MEDIUM),
    ]
