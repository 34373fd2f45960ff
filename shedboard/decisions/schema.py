"""
Decision map schema.

A Decision owns an ordered list of Options. An Option may point at another
decision (linksTo); that is a weak reference, cleared when the target is
deleted rather than cascading.

Status lifecycle is manual except for one automatic step:
  open → leaning   when any option becomes selected
"""
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

from ..errors import SchemaError


class DecisionStatus(Enum):
    OPEN = "open"
    LEANING = "leaning"
    DECIDED = "decided"
    BLOCKED = "blocked"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def is_known(cls, value: str) -> bool:
        return isinstance(value, str) and value in {s.value for s in cls}


def format_status(status: str) -> str:
    """Human label for a status; unknown values are shown as-is."""
    if DecisionStatus.is_known(status):
        return DecisionStatus(status).label
    return status


@dataclass
class Option:
    id: str                         # Unique within its decision only
    text: str
    selected: bool = False
    links_to: Optional[str] = None  # Target decision id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "selected": self.selected,
            "linksTo": self.links_to,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Option":
        if not isinstance(data, dict):
            raise SchemaError("option must be an object")
        opt_id = data.get("id")
        if not isinstance(opt_id, str) or not opt_id:
            raise SchemaError("option id must be a non-empty string")
        text = data.get("text")
        if not isinstance(text, str) or not text:
            raise SchemaError(f"option {opt_id}: text must be a non-empty string")
        links_to = data.get("linksTo")
        if links_to is not None and not isinstance(links_to, str):
            raise SchemaError(f"option {opt_id}: linksTo must be a string or null")
        selected = data.get("selected", False)
        if not isinstance(selected, bool):
            raise SchemaError(f"option {opt_id}: selected must be a boolean")
        return cls(
            id=opt_id,
            text=text,
            selected=selected,
            links_to=links_to or None,
        )


@dataclass
class Decision:
    """One node on the decision map."""

    id: str
    question: str
    context: str = ""
    evaluation: str = ""            # Long-form rationale, light markdown
    status: str = DecisionStatus.OPEN.value
    x: int = 0
    y: int = 0
    options: List[Option] = field(default_factory=list)

    def find_option(self, option_id: str) -> Optional[Option]:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None

    def selected_option(self) -> Optional[Option]:
        for opt in self.options:
            if opt.selected:
                return opt
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "context": self.context,
            "evaluation": self.evaluation,
            "options": [o.to_dict() for o in self.options],
            "status": self.status,
            "x": self.x,
            "y": self.y,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Decision":
        if not isinstance(data, dict):
            raise SchemaError("decision must be an object")
        dec_id = data.get("id")
        if isinstance(dec_id, int) and not isinstance(dec_id, bool):
            dec_id = str(dec_id)
        if not isinstance(dec_id, str) or not dec_id:
            raise SchemaError("decision id must be a non-empty string")
        question = data.get("question")
        if not isinstance(question, str) or not question.strip():
            raise SchemaError(f"decision {dec_id}: question must be a non-empty string")
        options = data.get("options", [])
        if not isinstance(options, list):
            raise SchemaError(f"decision {dec_id}: options must be a list")
        try:
            x = int(data.get("x", 0))
            y = int(data.get("y", 0))
        except (TypeError, ValueError):
            raise SchemaError(f"decision {dec_id}: x/y must be numbers")
        return cls(
            id=dec_id,
            question=question,
            context=data.get("context") or "",
            evaluation=data.get("evaluation") or "",
            status=data.get("status") or DecisionStatus.OPEN.value,
            x=x,
            y=y,
            options=[Option.from_dict(o) for o in options],
        )


def decisions_from_list(items: Any) -> List[Decision]:
    if not isinstance(items, list):
        raise SchemaError(f"decisions must be a list, got {type(items).__name__}")
    return [Decision.from_dict(item) for item in items]


def default_decisions() -> List[Decision]:
    """Seed map shown on first load."""
    return [
        Decision(
            id="1",
            question="Open Source License",
            context="What license to use for the parametric shed repo?",
            options=[
                Option(id="opt1", text="MIT License"),
                Option(id="opt2", text="GPL"),
                Option(id="opt3", text="Apache 2.0"),
            ],
            status=DecisionStatus.OPEN.value,
            x=100,
            y=100,
        )
    ]
