#!/usr/bin/env python3
"""
Shed Board Server
-----------------
JSON API for the project kanban board and the decision map, backed by the
SQLite key/value store. The browser front end calls these routes and
re-renders from the returned view models.

Usage:
    python board_server.py --config shedboard.yaml
    python board_server.py --db ./board.db --port 3000

API (board):
    GET    /api/board                  → { cards, board, version }
    POST   /api/cards                  → create  { title, description, status, priority }
    PUT    /api/cards/<id>             → update
    DELETE /api/cards/<id>             → delete  { confirm: true }
    POST   /api/cards/<id>/move        → { status }
    GET    /api/export                 → snapshot JSON attachment
    POST   /api/import                 → raw file body (bare list or {version, cards})
    POST   /api/reload                 → { confirm: true }

API (decision map):
    GET    /api/decisions                                  → { decisions, map }
    POST   /api/decisions                                  → create
    PUT    /api/decisions/<id>                             → update
    DELETE /api/decisions/<id>                             → { confirm: true }
    POST   /api/decisions/<id>/options/<opt>/toggle
    POST   /api/decisions/<id>/options/<opt>/link          → { target }
    POST   /api/decisions/<id>/options/<opt>/unlink
    GET    /api/decisions/<id>/targets
    POST   /api/decisions/<id>/position                    → { x, y }
    POST   /api/decisions/connectors                       → measured layout
    GET    /api/decisions/fit
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import requests
from flask import Blueprint, Flask, Response, current_app, jsonify, request

from shedboard.config import Config
from shedboard.decisions.geometry import StaticLayout
from shedboard.decisions.map import DecisionMap
from shedboard.decisions.store import DecisionStore
from shedboard.errors import ConfigError, CorruptStorageError, InvalidImportError
from shedboard.kanban.board import KanbanBoard
from shedboard.kanban.store import BoardStore
from shedboard.kanban.sync import SnapshotClient
from shedboard.storage import KeyValueStore

logger = logging.getLogger("board_server")

api = Blueprint("api", __name__)


# ── Helpers ──────────────────────────────────────────────────────────────────

def _board() -> KanbanBoard:
    return current_app.extensions["shedboard"]["board"]


def _map() -> DecisionMap:
    return current_app.extensions["shedboard"]["map"]


def _body() -> dict:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def _confirmed(data: dict) -> bool:
    """Destructive routes need an explicit confirm flag (body or query)."""
    if data.get("confirm") is True:
        return True
    return request.args.get("confirm", "").lower() in ("1", "true", "yes")


def _not_found(kind: str):
    return jsonify({"error": f"{kind} not found"}), 404


def _confirm_required():
    return jsonify({"error": "confirmation required"}), 409


def _board_payload(board: KanbanBoard) -> dict:
    return {
        "cards": [c.to_dict() for c in board.cards],
        "board": board.render().to_dict(),
        "version": board.store.stashed_version(),
    }


def _map_payload(dmap: DecisionMap) -> dict:
    return {
        "decisions": [d.to_dict() for d in dmap.decisions],
        "map": dmap.render().to_dict(),
    }


# ── Error handlers ───────────────────────────────────────────────────────────

@api.errorhandler(ValueError)
def _bad_request(e):
    return jsonify({"error": str(e)}), 400


@api.errorhandler(InvalidImportError)
def _bad_import(e):
    return jsonify({"error": str(e)}), 422


@api.errorhandler(CorruptStorageError)
def _corrupt(e):
    logger.error(str(e))
    return jsonify({"error": str(e)}), 500


# ── Board routes ─────────────────────────────────────────────────────────────

@api.route("/api/board")
def api_board():
    return jsonify(_board_payload(_board()))


@api.route("/api/cards", methods=["POST"])
def api_create_card():
    data = _body()
    card = _board().create_card(
        title=data.get("title", ""),
        description=data.get("description", ""),
        status=data.get("status", "ideas"),
        priority=data.get("priority", "medium"),
    )
    if card is None:
        return jsonify({"error": "title is required"}), 400
    return jsonify({"card": card.to_dict()}), 201


@api.route("/api/cards/<card_id>", methods=["PUT"])
def api_update_card(card_id):
    board = _board()
    card = board.find(card_id)
    if card is None:
        return _not_found("Card")
    data = _body()
    updated = board.update_card(
        card_id,
        title=data.get("title", card.title),
        description=data.get("description", card.description),
        status=data.get("status", card.status),
        priority=data.get("priority", card.priority),
    )
    if updated is None:
        return jsonify({"error": "title is required"}), 400
    return jsonify({"card": updated.to_dict()})


@api.route("/api/cards/<card_id>", methods=["DELETE"])
def api_delete_card(card_id):
    board = _board()
    if board.find(card_id) is None:
        return _not_found("Card")
    confirmed = _confirmed(_body())
    if not board.delete_card(card_id, confirm=lambda prompt: confirmed):
        return _confirm_required()
    return jsonify({"deleted": card_id})


@api.route("/api/cards/<card_id>/move", methods=["POST"])
def api_move_card(card_id):
    board = _board()
    if board.find(card_id) is None:
        return _not_found("Card")
    status = _body().get("status", "")
    moved = board.move_card(card_id, status)
    return jsonify({"moved": moved, "card": board.find(card_id).to_dict()})


@api.route("/api/export")
def api_export():
    return Response(
        _board().export_json(),
        mimetype="application/json",
        headers={"Content-Disposition": "attachment; filename=board-data.json"},
    )


@api.route("/api/import", methods=["POST"])
def api_import():
    board = _board()
    board.import_json(request.get_data(as_text=True))
    return jsonify(_board_payload(board))


@api.route("/api/reload", methods=["POST"])
def api_reload():
    board = _board()
    confirmed = _confirmed(_body())
    if not board.reload_from_remote(confirm=lambda prompt: confirmed):
        return _confirm_required()
    return jsonify(_board_payload(board))


# ── Decision map routes ──────────────────────────────────────────────────────

def _option_rows(raw) -> list:
    """Request options (objects or bare strings) as (id, text) rows."""
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValueError("options must be a list")
    return [(item.get("id"), item.get("text")) if isinstance(item, dict) else item
            for item in raw]


@api.route("/api/decisions")
def api_decisions():
    return jsonify(_map_payload(_map()))


@api.route("/api/decisions", methods=["POST"])
def api_create_decision():
    data = _body()
    decision = _map().create_decision(
        question=data.get("question", ""),
        context=data.get("context", ""),
        evaluation=data.get("evaluation", ""),
        status=data.get("status", "open"),
        options=_option_rows(data.get("options")),
    )
    if decision is None:
        return jsonify({"error": "question is required"}), 400
    return jsonify({"decision": decision.to_dict()}), 201


@api.route("/api/decisions/<decision_id>", methods=["PUT"])
def api_update_decision(decision_id):
    dmap = _map()
    decision = dmap.find(decision_id)
    if decision is None:
        return _not_found("Decision")
    data = _body()
    options = data.get("options")
    updated = dmap.update_decision(
        decision_id,
        question=data.get("question", decision.question),
        context=data.get("context"),
        evaluation=data.get("evaluation"),
        status=data.get("status"),
        options=_option_rows(options) if options is not None else None,
    )
    if updated is None:
        return jsonify({"error": "question is required"}), 400
    return jsonify({"decision": updated.to_dict()})


@api.route("/api/decisions/<decision_id>", methods=["DELETE"])
def api_delete_decision(decision_id):
    dmap = _map()
    if dmap.find(decision_id) is None:
        return _not_found("Decision")
    confirmed = _confirmed(_body())
    if not dmap.delete_decision(decision_id, confirm=lambda prompt: confirmed):
        return _confirm_required()
    return jsonify({"deleted": decision_id})


@api.route("/api/decisions/<decision_id>/options/<option_id>/toggle", methods=["POST"])
def api_toggle_option(decision_id, option_id):
    decision = _map().toggle_option(decision_id, option_id)
    if decision is None:
        return _not_found("Option")
    return jsonify({"decision": decision.to_dict()})


@api.route("/api/decisions/<decision_id>/options/<option_id>/link", methods=["POST"])
def api_link_option(decision_id, option_id):
    target = _body().get("target", "")
    if not _map().link_option(decision_id, option_id, target):
        return _not_found("Option or target")
    return jsonify({"decision": _map().find(decision_id).to_dict()})


@api.route("/api/decisions/<decision_id>/options/<option_id>/unlink", methods=["POST"])
def api_unlink_option(decision_id, option_id):
    if not _map().unlink_option(decision_id, option_id):
        return _not_found("Option")
    return jsonify({"decision": _map().find(decision_id).to_dict()})


@api.route("/api/decisions/<decision_id>/targets")
def api_connect_targets(decision_id):
    dmap = _map()
    if dmap.find(decision_id) is None:
        return _not_found("Decision")
    targets = [
        {"id": d.id, "question": d.question, "options": " • ".join(o.text for o in d.options)}
        for d in dmap.connect_targets(decision_id)
    ]
    return jsonify({"targets": targets})


@api.route("/api/decisions/<decision_id>/position", methods=["POST"])
def api_move_decision(decision_id):
    data = _body()
    try:
        x, y = int(data["x"]), int(data["y"])
    except (KeyError, TypeError, ValueError):
        return jsonify({"error": "x and y must be integers"}), 400
    decision = _map().move_decision(decision_id, x, y)
    if decision is None:
        return _not_found("Decision")
    return jsonify({"decision": decision.to_dict()})


@api.route("/api/decisions/connectors", methods=["POST"])
def api_connectors():
    try:
        layout = StaticLayout.from_dict(_body())
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        return jsonify({"error": f"invalid layout: {e}"}), 400
    connectors = _map().attach_layout(layout)
    return jsonify({"connectors": [c.to_dict() for c in connectors]})


@api.route("/api/decisions/fit")
def api_fit_view():
    target = _map().fit_view()
    if target is None:
        return jsonify({"scroll": None})
    return jsonify({"scroll": {"left": target.x, "top": target.y}})


@api.route("/health")
def health():
    return jsonify({"status": "ok", "db": current_app.config["SHEDBOARD"].db_path})


# ── App factory ──────────────────────────────────────────────────────────────

def create_app(config: Optional[Config] = None, session: Optional[requests.Session] = None) -> Flask:
    """Build the app and load both collections (the board may fetch the shared file)."""
    config = config or Config.load()
    app = Flask(__name__)
    app.config["SHEDBOARD"] = config

    kv = KeyValueStore(config.db_path)
    client = None
    if config.snapshot_url:
        client = SnapshotClient(config.snapshot_url, timeout=config.fetch_timeout, session=session)

    board = KanbanBoard(BoardStore(kv), client=client)
    dmap = DecisionMap(DecisionStore(kv))
    board.load()
    dmap.load()

    app.extensions["shedboard"] = {"board": board, "map": dmap}
    app.register_blueprint(api)
    return app


# ── Main ─────────────────────────────────────────────────────────────────────

def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Command-line flags win over the config file and environment."""
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.db:
        config.db_path = str(Path(args.db).expanduser())
    if args.snapshot_url:
        config.snapshot_url = args.snapshot_url
    return config


def main(argv=None):
    parser = argparse.ArgumentParser(description="Shed Board Server")
    parser.add_argument("--config", help="Path to shedboard.yaml")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--db", help="Path to board.db (overrides SHEDBOARD_DB env var)")
    parser.add_argument("--snapshot-url", help="Shared board JSON to reconcile against")
    args = parser.parse_args(argv)

    try:
        config = Config.load(args.config)
    except ConfigError as e:
        print(f"Config error: {e}", file=sys.stderr)
        return 2
    apply_overrides(config, args)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [shedboard] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    app = create_app(config)
    url = f"http://{config.host}:{config.port}"
    print(f"""
╔═══════════════════════════════════════╗
║  Shed Board Server                    ║
╠═══════════════════════════════════════╣
║  URL:  {url:<31}║
║  DB:   {config.db_path:<31}║
║  Sync: {(config.snapshot_url or 'local only'):<31}║
╚═══════════════════════════════════════╝
""")
    app.run(host=config.host, port=config.port, debug=False, threaded=False)
    return 0


if __name__ == "__main__":
    sys.exit(main())
