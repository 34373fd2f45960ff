"""
Decision map controller: owns the decision list, drag session and layout.

Mutations follow the same mutate → persist → re-render shape as the board.
During a node drag the layout (not the data) is authoritative; the node's
x/y is written back and persisted only on pointer-up.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from ..utils import clean_text, make_option_id, make_record_id
from .connectors import Connector, resolve_connectors
from .geometry import Layout, Point
from .render import MapView, render_map
from .schema import Decision, DecisionStatus, Option
from .store import DecisionStore

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]
OptionInput = Union[str, Tuple[Optional[str], str]]

DELETE_PROMPT = "Delete this decision?"
NEW_NODE_SPACING = 350
NEW_NODE_Y = 100
FIT_MARGIN = 40


@dataclass
class DragSession:
    """A node being dragged. offset is pointer minus node top-left."""
    decision_id: str
    offset_x: float
    offset_y: float
    x: int
    y: int


def _check_status(status) -> None:
    if not DecisionStatus.is_known(status):
        raise ValueError(f"Invalid status: {status}")


def _normalize_options(options: Optional[Iterable[OptionInput]]) -> List[Tuple[Optional[str], str]]:
    """Rows of (option id or None, stripped text). Malformed rows raise ValueError."""
    rows = []
    for item in options or []:
        if isinstance(item, str):
            opt_id, text = None, item
        elif isinstance(item, (tuple, list)) and len(item) == 2:
            opt_id, text = item
        else:
            raise ValueError(f"option must be text or an (id, text) pair, got {item!r}")
        if opt_id is not None and not isinstance(opt_id, str):
            raise ValueError(f"option id must be a string, got {opt_id!r}")
        rows.append((opt_id or None, clean_text(text, "option text")))
    return rows


class DecisionMap:
    """In-memory decision map mirrored to a DecisionStore."""

    def __init__(self, store: DecisionStore, layout: Optional[Layout] = None):
        self.store = store
        self.layout = layout
        self.decisions: List[Decision] = []
        self.drag: Optional[DragSession] = None
        self.subscribers: List[Callable[[MapView], None]] = []

    # ── rendering ───────────────────────────────────────────────────

    def subscribe(self, callback: Callable[[MapView], None]) -> None:
        self.subscribers.append(callback)

    def render(self) -> MapView:
        return render_map(self.decisions)

    def connectors(self) -> List[Connector]:
        """Connector curves for the attached layout (none without one)."""
        if self.layout is None:
            return []
        return resolve_connectors(self.decisions, self.layout)

    def attach_layout(self, layout: Layout) -> List[Connector]:
        """Swap in fresh measurements (e.g. after a resize) and recompute."""
        self.layout = layout
        return self.connectors()

    def _emit(self) -> None:
        view = self.render()
        for callback in self.subscribers:
            callback(view)

    def _commit(self) -> None:
        self.store.save(self.decisions)
        self._emit()

    # ── loading / lookup ────────────────────────────────────────────

    def load(self) -> List[Decision]:
        self.decisions = self.store.load()
        self._emit()
        return self.decisions

    def find(self, decision_id: str) -> Optional[Decision]:
        for decision in self.decisions:
            if decision.id == decision_id:
                return decision
        return None

    # ── create / update / delete ────────────────────────────────────

    def _build_options(self, rows: Sequence[Tuple[Optional[str], str]],
                       previous: Optional[Decision]) -> List[Option]:
        """Keep selected/linksTo for option ids that survive an edit."""
        options: List[Option] = []
        for opt_id, text in rows:
            if not text:
                continue
            existing = previous.find_option(opt_id) if (previous and opt_id) else None
            options.append(Option(
                id=opt_id or make_option_id(),
                text=text,
                selected=existing.selected if existing else False,
                links_to=existing.links_to if existing else None,
            ))
        if not options:
            options.append(Option(id=make_option_id(), text="Option 1"))
        return options

    def create_decision(self, question: str, context: str = "", evaluation: str = "",
                        status: str = DecisionStatus.OPEN.value,
                        options: Optional[Iterable[OptionInput]] = None) -> Optional[Decision]:
        """Add a node to the right of the existing ones. Blank question is a no-op."""
        question = clean_text(question, "question")
        context = clean_text(context, "context")
        evaluation = clean_text(evaluation, "evaluation")
        rows = _normalize_options(options)
        if not question:
            return None
        _check_status(status)
        max_x = max((d.x for d in self.decisions), default=0)
        decision = Decision(
            id=make_record_id(d.id for d in self.decisions),
            question=question,
            context=context,
            evaluation=evaluation,
            status=status,
            x=max(max_x, 0) + NEW_NODE_SPACING,
            y=NEW_NODE_Y,
            options=self._build_options(rows, None),
        )
        self.decisions.append(decision)
        self._commit()
        logger.info(f"Created decision {decision.id}: {decision.question}")
        return decision

    def update_decision(self, decision_id: str, question: str, context: Optional[str] = None,
                        evaluation: Optional[str] = None, status: Optional[str] = None,
                        options: Optional[Iterable[OptionInput]] = None) -> Optional[Decision]:
        """
        Overwrite fields of an existing decision.

        Fields passed as None keep their current value. A given option list
        replaces the options wholesale; surviving ids keep selected/linksTo.
        """
        question = clean_text(question, "question")
        if not question:
            return None
        decision = self.find(decision_id)
        if decision is None:
            return None
        if context is not None:
            context = clean_text(context, "context")
        if evaluation is not None:
            evaluation = clean_text(evaluation, "evaluation")
        if status is not None:
            _check_status(status)
        rows = _normalize_options(options) if options is not None else None

        decision.question = question
        if context is not None:
            decision.context = context
        if evaluation is not None:
            decision.evaluation = evaluation
        if status is not None:
            decision.status = status
        if rows is not None:
            decision.options = self._build_options(rows, decision)
        self._commit()
        return decision

    def delete_decision(self, decision_id: str, confirm: Optional[Confirm] = None) -> bool:
        """Remove a decision, first clearing every link that points at it."""
        if self.find(decision_id) is None:
            return False
        if confirm is None or not confirm(DELETE_PROMPT):
            return False
        for decision in self.decisions:
            for opt in decision.options:
                if opt.links_to == decision_id:
                    opt.links_to = None
        self.decisions = [d for d in self.decisions if d.id != decision_id]
        self._commit()
        logger.info(f"Deleted decision {decision_id}")
        return True

    # ── options and links ───────────────────────────────────────────

    def toggle_option(self, decision_id: str, option_id: str) -> Optional[Decision]:
        """Flip one option and clear its siblings; open advances to leaning."""
        decision = self.find(decision_id)
        if decision is None or decision.find_option(option_id) is None:
            return None
        for opt in decision.options:
            opt.selected = (not opt.selected) if opt.id == option_id else False
        if decision.status == DecisionStatus.OPEN.value and decision.selected_option():
            decision.status = DecisionStatus.LEANING.value
        self._commit()
        return decision

    def connect_targets(self, decision_id: str) -> List[Decision]:
        """Decisions an option of decision_id may link to."""
        return [d for d in self.decisions if d.id != decision_id]

    def link_option(self, decision_id: str, option_id: str, target_id: str) -> bool:
        decision = self.find(decision_id)
        if decision is None or self.find(target_id) is None:
            return False
        option = decision.find_option(option_id)
        if option is None:
            return False
        option.links_to = target_id
        self._commit()
        return True

    def unlink_option(self, decision_id: str, option_id: str) -> bool:
        decision = self.find(decision_id)
        option = decision.find_option(option_id) if decision else None
        if option is None:
            return False
        option.links_to = None
        self._commit()
        return True

    # ── free positioning ────────────────────────────────────────────

    def pointer_down(self, decision_id: str, pointer: Point, on_control: bool = False) -> bool:
        """Start dragging a node. Presses on buttons/option rows don't drag."""
        if on_control or self.layout is None:
            return False
        decision = self.find(decision_id)
        rect = self.layout.node_rect(decision_id)
        if decision is None or rect is None:
            return False
        self.drag = DragSession(
            decision_id=decision_id,
            offset_x=pointer.x - rect.left,
            offset_y=pointer.y - rect.top,
            x=decision.x,
            y=decision.y,
        )
        return True

    def pointer_move(self, pointer: Point) -> List[Connector]:
        """Move the dragged node to pointer - offset (clamped at 0) and redraw links."""
        if self.drag is None or self.layout is None:
            return []
        canvas = self.layout.canvas_rect()
        scroll = self.layout.scroll()
        x = pointer.x - canvas.left - self.drag.offset_x + scroll.x
        y = pointer.y - canvas.top - self.drag.offset_y + scroll.y
        self.drag.x = int(max(0, x))
        self.drag.y = int(max(0, y))
        self.layout.move_node(self.drag.decision_id, self.drag.x, self.drag.y)
        return self.connectors()

    def pointer_up(self) -> Optional[Decision]:
        """Write the final position back and persist."""
        if self.drag is None:
            return None
        session, self.drag = self.drag, None
        decision = self.find(session.decision_id)
        if decision is None:
            return None
        decision.x = session.x
        decision.y = session.y
        self.store.save(self.decisions)
        return decision

    def move_decision(self, decision_id: str, x: int, y: int) -> Optional[Decision]:
        """Set a node position directly (clamped at 0)."""
        decision = self.find(decision_id)
        if decision is None:
            return None
        decision.x = int(max(0, x))
        decision.y = int(max(0, y))
        if self.layout is not None:
            self.layout.move_node(decision_id, decision.x, decision.y)
        self.store.save(self.decisions)
        return decision

    def fit_view(self) -> Optional[Point]:
        """Scroll target that brings the top-left-most node into view."""
        if not self.decisions:
            return None
        min_x = min(d.x for d in self.decisions)
        min_y = min(d.y for d in self.decisions)
        return Point(max(0, min_x - FIT_MARGIN), max(0, min_y - FIT_MARGIN))
