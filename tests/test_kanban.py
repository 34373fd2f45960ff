"""
Tests for the kanban board: schema, store, controller mutations, drag, render.
"""
import json

import pytest

from shedboard.errors import CorruptStorageError, SchemaError
from shedboard.kanban.board import KanbanBoard, DragState, DELETE_PROMPT
from shedboard.kanban.render import format_date, render_board
from shedboard.kanban.schema import Card, CardPriority, CardStatus, default_cards
from shedboard.kanban.store import BoardStore, STORAGE_KEY, VERSION_KEY


def _board(kv, clock, cards=None):
    store = BoardStore(kv)
    if cards is not None:
        store.save(cards)
    board = KanbanBoard(store, clock=clock)
    board.load()
    return board


def yes(prompt):
    return True


def no(prompt):
    return False


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Schema Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_card_wire_format():
    """Card serializes with camelCase createdAt"""
    card = Card(id="42", title="Roof", created_at="2026-10-17T12:00:00.000Z")
    data = card.to_dict()
    assert data == {
        "id": "42",
        "title": "Roof",
        "description": "",
        "status": "ideas",
        "priority": "medium",
        "createdAt": "2026-10-17T12:00:00.000Z",
    }
    assert Card.from_dict(data) == card


def test_card_from_dict_coerces_integer_id():
    card = Card.from_dict({"id": 7, "title": "Seven"})
    assert card.id == "7"


def test_card_from_dict_rejects_blank_title():
    with pytest.raises(SchemaError):
        Card.from_dict({"id": "1", "title": "   "})


def test_card_from_dict_rejects_non_object():
    with pytest.raises(SchemaError):
        Card.from_dict(["not", "a", "card"])


def test_card_from_dict_keeps_unknown_status():
    """Unknown status survives loading; it is only hidden from rendering"""
    card = Card.from_dict({"id": "1", "title": "Old", "status": "archived"})
    assert card.status == "archived"


def test_priority_order():
    assert CardPriority.LOW.rank < CardPriority.MEDIUM.rank < CardPriority.HIGH.rank


def test_column_titles():
    assert [s.title for s in CardStatus] == ["Ideas", "Backlog", "In Progress", "Done"]


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Store Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_store_empty_returns_none(kv):
    assert BoardStore(kv).load_local() is None


def test_store_round_trip(kv):
    store = BoardStore(kv)
    cards = default_cards()
    store.save(cards)
    assert store.load_local() == cards


def test_store_corrupt_json(kv):
    kv.set(STORAGE_KEY, "{not json")
    with pytest.raises(CorruptStorageError) as exc:
        BoardStore(kv).load_local()
    assert exc.value.key == STORAGE_KEY


def test_store_corrupt_shape(kv):
    kv.set(STORAGE_KEY, json.dumps({"cards": "nope"}))
    with pytest.raises(CorruptStorageError):
        BoardStore(kv).load_local()


def test_store_version_marker(kv):
    store = BoardStore(kv)
    assert store.stashed_version() == 0
    store.stash_version(4)
    assert kv.get(VERSION_KEY) == "4"
    assert store.stashed_version() == 4


def test_store_ignores_garbage_version(kv):
    kv.set(VERSION_KEY, "abc")
    assert BoardStore(kv).stashed_version() == 0


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Board Controller Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_load_seeds_defaults_and_persists(kv, clock):
    board = _board(kv, clock)
    assert len(board.cards) == 6
    assert json.loads(kv.get(STORAGE_KEY))[0]["title"] == "Dimension constraints implemented"


def test_load_keeps_stored_cards(kv, clock):
    board = _board(kv, clock, cards=[Card(id="a", title="Mine")])
    assert [c.id for c in board.cards] == ["a"]


def test_create_card(kv, clock):
    board = _board(kv, clock, cards=[])
    card = board.create_card("  Gutter detail  ", description="Downpipe", status="backlog",
                             priority="high")
    assert card is not None
    assert card.title == "Gutter detail"
    assert card.created_at == "2026-10-17T12:00:00.000Z"
    assert board.store.load_local() == [card]


def test_create_card_blank_title_is_noop(kv, clock):
    board = _board(kv, clock, cards=[])
    before = kv.get(STORAGE_KEY)
    calls = []
    board.subscribe(calls.append)
    assert board.create_card("   ") is None
    assert board.cards == []
    assert kv.get(STORAGE_KEY) == before
    assert calls == []


def test_create_card_ids_are_unique(kv, clock):
    board = _board(kv, clock, cards=[])
    ids = {board.create_card(f"Card {i}").id for i in range(5)}
    assert len(ids) == 5


def test_create_card_rejects_unknown_status(kv, clock):
    board = _board(kv, clock, cards=[])
    with pytest.raises(ValueError):
        board.create_card("x", status="someday")


@pytest.mark.parametrize("kwargs", [
    {"title": 5},
    {"title": "x", "description": ["a"]},
    {"title": "x", "status": ["done"]},
    {"title": "x", "priority": {"p": 1}},
])
def test_create_card_rejects_non_text_fields(kv, clock, kwargs):
    board = _board(kv, clock, cards=[])
    with pytest.raises(ValueError):
        board.create_card(**kwargs)
    assert board.cards == []


def test_update_card(kv, clock):
    board = _board(kv, clock, cards=[Card(id="1", title="Old", created_at="2026-01-01T00:00:00.000Z")])
    card = board.update_card("1", "New", "desc", "done", "low")
    assert card.title == "New"
    assert card.status == "done"
    assert card.created_at == "2026-01-01T00:00:00.000Z"
    assert board.store.load_local()[0].title == "New"


def test_update_unknown_card_is_noop(kv, clock):
    board = _board(kv, clock, cards=[])
    assert board.update_card("missing", "t", "", "ideas", "low") is None


def test_delete_requires_confirmation(kv, clock):
    board = _board(kv, clock, cards=[Card(id="1", title="Keep me")])
    prompts = []

    def declined(prompt):
        prompts.append(prompt)
        return False

    assert not board.delete_card("1", confirm=declined)
    assert prompts == [DELETE_PROMPT]
    assert len(board.cards) == 1
    assert not board.delete_card("1")  # no confirm callback at all


def test_delete_card(kv, clock):
    board = _board(kv, clock, cards=[Card(id="1", title="A"), Card(id="2", title="B")])
    assert board.delete_card("1", confirm=yes)
    assert [c.id for c in board.store.load_local()] == ["2"]


def test_move_card(kv, clock):
    board = _board(kv, clock, cards=[Card(id="1", title="A", status="ideas")])
    assert board.move_card("1", "done")
    assert board.store.load_local()[0].status == "done"


def test_move_to_same_column_is_byte_identical(kv, clock):
    board = _board(kv, clock, cards=[Card(id="1", title="A", status="backlog")])
    before = kv.get(STORAGE_KEY)
    assert not board.move_card("1", "backlog")
    assert kv.get(STORAGE_KEY) == before


def test_mutation_notifies_subscribers(kv, clock):
    board = _board(kv, clock, cards=[])
    views = []
    board.subscribe(views.append)
    board.create_card("Rendered")
    assert len(views) == 1
    assert views[0].column("ideas").count == 1


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Drag and Drop Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_drag_and_drop_moves_card(kv, clock):
    board = _board(kv, clock, cards=[Card(id="1", title="A", status="ideas")])
    assert board.start_drag("1")
    assert board.drag_state == DragState.DRAGGING
    assert board.render().dragging_id == "1"
    assert board.drop("in-progress")
    assert board.drag_state == DragState.IDLE
    assert board.find("1").status == "in-progress"


def test_drop_without_drag_is_noop(kv, clock):
    board = _board(kv, clock, cards=[Card(id="1", title="A")])
    assert not board.drop("done")
    assert board.find("1").status == "ideas"


def test_drop_on_same_column(kv, clock):
    board = _board(kv, clock, cards=[Card(id="1", title="A", status="done")])
    board.start_drag("1")
    assert not board.drop("done")
    assert board.drag_state == DragState.IDLE


def test_end_drag_cancels(kv, clock):
    board = _board(kv, clock, cards=[Card(id="1", title="A")])
    board.start_drag("1")
    board.end_drag()
    assert not board.drop("done")
    assert board.find("1").status == "ideas"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Render Tests
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_render_groups_by_column_in_collection_order(clock):
    cards = [
        Card(id="1", title="First", status="backlog"),
        Card(id="2", title="Second", status="done"),
        Card(id="3", title="Third", status="backlog"),
    ]
    view = render_board(cards, now=clock())
    assert [c.status for c in view.columns] == ["ideas", "backlog", "in-progress", "done"]
    assert [c.id for c in view.column("backlog").cards] == ["1", "3"]
    assert view.column("done").count == 1
    assert view.column("ideas").count == 0


def test_render_drops_unknown_status(clock):
    cards = [Card(id="1", title="Ghost", status="archived"), Card(id="2", title="Real")]
    view = render_board(cards, now=clock())
    rendered = [c.id for col in view.columns for c in col.cards]
    assert rendered == ["2"]


def test_render_escapes_html(clock):
    view = render_board([Card(id="1", title="<b>x</b>", priority="high")], now=clock())
    card = view.column("ideas").cards[0]
    assert card.title == "&lt;b&gt;x&lt;/b&gt;"
    assert card.css_class == "card priority-high"


@pytest.mark.parametrize("created, label", [
    ("2026-10-17T08:00:00.000Z", "Today"),
    ("2026-10-16T08:00:00.000Z", "Yesterday"),
    ("2026-10-14T12:00:00.000Z", "3 days ago"),
    ("2026-10-01T12:00:00.000Z", "1 Oct"),
    ("garbage", ""),
])
def test_format_date(clock, created, label):
    assert format_date(created, now=clock()) == label
