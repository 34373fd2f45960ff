"""
Board controller: owns the card list and drag state.

Every mutation runs mutate → persist → re-render inside one call. Render
subscribers receive a fresh BoardView after each committed change.
"""
import logging
from enum import Enum
from datetime import datetime
from typing import Callable, Dict, List, Optional

from ..utils import clean_text, make_record_id, to_iso, utc_now
from . import sync
from .render import BoardView, render_board
from .schema import Card, CardPriority, CardStatus
from .store import BoardStore

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]

DELETE_PROMPT = "Delete this card?"
RELOAD_PROMPT = "Discard local changes and reload from the shared file?"


class DragState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"


def _check_column(status: str) -> None:
    if not CardStatus.is_known(status):
        raise ValueError(f"Invalid status: {status}")


def _check_priority(priority: str) -> None:
    if not CardPriority.is_known(priority):
        raise ValueError(f"Invalid priority: {priority}")


class KanbanBoard:
    """In-memory board mirrored to a BoardStore."""

    def __init__(self, store: BoardStore, client: Optional[sync.SnapshotClient] = None,
                 clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.client = client
        self.clock = clock or utc_now
        self.cards: List[Card] = []
        self.drag_state = DragState.IDLE
        self.dragging_id: Optional[str] = None
        self.subscribers: List[Callable[[BoardView], None]] = []

    # ── rendering ───────────────────────────────────────────────────

    def subscribe(self, callback: Callable[[BoardView], None]) -> None:
        """Register a render callback."""
        self.subscribers.append(callback)

    def render(self) -> BoardView:
        return render_board(self.cards, now=self.clock(), dragging_id=self.dragging_id)

    def _emit(self) -> None:
        view = self.render()
        for callback in self.subscribers:
            callback(view)

    def _commit(self) -> None:
        self.store.save(self.cards)
        self._emit()

    # ── loading ─────────────────────────────────────────────────────

    def load(self) -> List[Card]:
        """Replace the collection from the shared snapshot or local storage."""
        self.cards = sync.reconcile(self.store, self.client)
        self._emit()
        return self.cards

    def find(self, card_id: str) -> Optional[Card]:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None

    def counts(self) -> Dict[str, int]:
        return {col.status: col.count for col in self.render().columns}

    # ── mutations ───────────────────────────────────────────────────

    def create_card(self, title: str, description: str = "", status: str = CardStatus.IDEAS.value,
                    priority: str = CardPriority.MEDIUM.value) -> Optional[Card]:
        """Append a new card. Blank title is a no-op (returns None)."""
        title = clean_text(title, "title")
        description = clean_text(description, "description")
        if not title:
            return None
        _check_column(status)
        _check_priority(priority)
        card = Card(
            id=make_record_id(c.id for c in self.cards),
            title=title,
            description=description,
            status=status,
            priority=priority,
            created_at=to_iso(self.clock()),
        )
        self.cards.append(card)
        self._commit()
        logger.info(f"Created card {card.id}: {card.title}")
        return card

    def update_card(self, card_id: str, title: str, description: str, status: str,
                    priority: str) -> Optional[Card]:
        """Overwrite a card's mutable fields. Blank title or unknown id is a no-op."""
        title = clean_text(title, "title")
        description = clean_text(description, "description")
        if not title:
            return None
        _check_column(status)
        _check_priority(priority)
        card = self.find(card_id)
        if card is None:
            return None
        card.title = title
        card.description = description
        card.status = status
        card.priority = priority
        self._commit()
        return card

    def delete_card(self, card_id: str, confirm: Optional[Confirm] = None) -> bool:
        """Remove a card after confirmation. Declining leaves everything untouched."""
        if self.find(card_id) is None:
            return False
        if confirm is None or not confirm(DELETE_PROMPT):
            return False
        self.cards = [c for c in self.cards if c.id != card_id]
        self._commit()
        logger.info(f"Deleted card {card_id}")
        return True

    def move_card(self, card_id: str, status: str) -> bool:
        """Reassign a card's column. Same column is a no-op."""
        _check_column(status)
        card = self.find(card_id)
        if card is None or card.status == status:
            return False
        card.status = status
        self._commit()
        return True

    # ── drag and drop ───────────────────────────────────────────────

    def start_drag(self, card_id: str) -> bool:
        if self.find(card_id) is None:
            return False
        self.drag_state = DragState.DRAGGING
        self.dragging_id = card_id
        return True

    def drop(self, status: str) -> bool:
        """Drop the dragged card on a column. Returns True if it moved."""
        if self.drag_state is not DragState.DRAGGING or self.dragging_id is None:
            return False
        if not CardStatus.is_known(status):
            return False
        card_id = self.dragging_id
        self.end_drag()
        return self.move_card(card_id, status)

    def end_drag(self) -> None:
        self.drag_state = DragState.IDLE
        self.dragging_id = None

    # ── import / export / shared file ───────────────────────────────

    def export_snapshot(self) -> dict:
        return sync.build_export(self.cards, self.store.stashed_version(), now=self.clock())

    def export_json(self) -> str:
        return sync.dump_export(self.export_snapshot())

    def import_json(self, text: str) -> List[Card]:
        """
        Replace the whole board from an exported file.

        Raises:
            InvalidImportError: nothing is changed
        """
        cards, version = sync.parse_import(text)
        self.cards = cards
        if version is not None:
            self.store.stash_version(version)
        self._commit()
        logger.info(f"Imported {len(cards)} cards" + (f" (v{version})" if version is not None else ""))
        return self.cards

    def reload_from_remote(self, confirm: Optional[Confirm] = None) -> bool:
        """Throw away local state and take the shared snapshot as-is."""
        if confirm is None or not confirm(RELOAD_PROMPT):
            return False
        self.cards = sync.reload_from_remote(self.store, self.client)
        self._emit()
        return True
