"""Board projection: cards grouped into columns, ready for a template or JSON."""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import List, Dict, Any, Optional

from markupsafe import escape

from ..utils import parse_iso, utc_now
from .schema import Card, CardStatus

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass
class CardView:
    id: str
    title: str              # HTML-escaped
    description: str        # HTML-escaped, "" when absent
    priority: str
    css_class: str
    date_label: str
    draggable: bool = True


@dataclass
class ColumnView:
    status: str
    title: str
    count: int
    cards: List[CardView] = field(default_factory=list)


@dataclass
class BoardView:
    columns: List[ColumnView]
    dragging_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def column(self, status: str) -> Optional[ColumnView]:
        for col in self.columns:
            if col.status == status:
                return col
        return None


def format_date(iso_string: str, now: Optional[datetime] = None) -> str:
    """Relative label: Today / Yesterday / N days ago / '17 Oct'."""
    dt = parse_iso(iso_string)
    if dt is None:
        return ""
    now = now or utc_now()
    diff_days = (now - dt).days
    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday"
    if 1 < diff_days < 7:
        return f"{diff_days} days ago"
    return f"{dt.day} {MONTHS[dt.month - 1]}"


def card_view(card: Card, now: Optional[datetime] = None) -> CardView:
    return CardView(
        id=card.id,
        title=str(escape(card.title)),
        description=str(escape(card.description)) if card.description else "",
        priority=card.priority,
        css_class=f"card priority-{card.priority}",
        date_label=format_date(card.created_at, now),
    )


def render_board(cards: List[Card], now: Optional[datetime] = None,
                 dragging_id: Optional[str] = None) -> BoardView:
    """Full re-render. Cards with an unknown status are left out."""
    columns = {s.value: ColumnView(status=s.value, title=s.title, count=0) for s in CardStatus}
    for card in cards:
        col = columns.get(card.status)
        if col is None:
            continue
        col.cards.append(card_view(card, now))
        col.count += 1
    return BoardView(columns=list(columns.values()), dragging_id=dragging_id)
