"""
Shared-file synchronisation for the board.

The shared document is a versioned snapshot:
    {version: int, lastUpdated: ISO-8601, updatedBy: str, cards: Card[]}

On load the remote snapshot wins only when its version is strictly newer
than the version stashed on the previous load. Two tabs or two export
cycles can still produce different boards at the same version; nothing
here detects that.
"""
import json
import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple

import requests

from ..errors import InvalidImportError, InvalidSnapshotError, SchemaError
from ..utils import epoch_ms, to_iso, utc_now
from .schema import Card, Snapshot, cards_from_list, default_cards
from .store import BoardStore

logger = logging.getLogger(__name__)

EXPORT_UPDATED_BY = "shed-board"


class SnapshotClient:
    """Fetches the shared snapshot over HTTP."""

    def __init__(self, url: str, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self) -> Snapshot:
        """
        GET the snapshot with a cache-busting query parameter.

        Raises:
            requests.RequestException: network failure or non-2xx status
            InvalidSnapshotError: body is not a valid snapshot document
        """
        r = self.session.get(self.url, params={"t": epoch_ms()}, timeout=self.timeout)
        r.raise_for_status()
        try:
            data = r.json()
        except ValueError as e:
            raise InvalidSnapshotError(f"Snapshot is not JSON: {e}")
        try:
            return Snapshot.from_dict(data)
        except SchemaError as e:
            raise InvalidSnapshotError(f"Snapshot rejected: {e}")


def _try_fetch(client: Optional[SnapshotClient]) -> Optional[Snapshot]:
    if client is None:
        return None
    try:
        return client.fetch()
    except (requests.RequestException, InvalidSnapshotError) as e:
        logger.warning(f"Could not load shared snapshot from {client.url}: {e}")
        return None


def _local_or_default(store: BoardStore) -> List[Card]:
    cards = store.load_local()
    if cards is None:
        cards = default_cards()
        store.save(cards)
        logger.info("No stored board, seeded default cards")
    return cards


def reconcile(store: BoardStore, client: Optional[SnapshotClient]) -> List[Card]:
    """Pick between the shared snapshot and local storage."""
    remote = _try_fetch(client)
    stashed = store.stashed_version()
    if remote is not None and remote.version > stashed:
        logger.info(
            f"Adopting shared snapshot v{remote.version} "
            f"(local v{stashed}, updated by {remote.updated_by or 'unknown'})"
        )
        store.save(remote.cards)
        store.stash_version(remote.version)
        return remote.cards
    if remote is not None:
        logger.info(f"Keeping local board (local v{stashed} >= shared v{remote.version})")
    return _local_or_default(store)


def reload_from_remote(store: BoardStore, client: Optional[SnapshotClient]) -> List[Card]:
    """Discard local state and take the shared snapshot unconditionally."""
    store.clear()
    remote = _try_fetch(client)
    if remote is None:
        return _local_or_default(store)
    store.save(remote.cards)
    store.stash_version(remote.version)
    logger.info(f"Reloaded shared snapshot v{remote.version}")
    return remote.cards


def build_export(cards: List[Card], stashed_version: int, now: Optional[datetime] = None) -> dict:
    """Export document: next version after the last-seen one."""
    snapshot = Snapshot(
        version=stashed_version + 1,
        cards=cards,
        last_updated=to_iso(now or utc_now()),
        updated_by=EXPORT_UPDATED_BY,
    )
    return snapshot.to_dict()


def parse_import(text: str) -> Tuple[List[Card], Optional[int]]:
    """
    Parse an imported board file.

    Accepts a bare card list, or an object with a "cards" list and an
    optional integer "version".

    Returns:
        (cards, version or None)

    Raises:
        InvalidImportError: with a user-facing message
    """
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidImportError(f"Error importing file: {e}")

    version = None
    if isinstance(data, list):
        items = data
    elif isinstance(data, dict) and isinstance(data.get("cards"), list):
        items = data["cards"]
        raw_version = data.get("version")
        if raw_version is not None:
            if not isinstance(raw_version, int) or isinstance(raw_version, bool):
                raise InvalidImportError("Invalid file format: version must be an integer")
            version = raw_version
    else:
        raise InvalidImportError(
            "Invalid file format. Expected an array of cards or an object with a cards array."
        )

    try:
        cards = cards_from_list(items)
    except SchemaError as e:
        raise InvalidImportError(f"Invalid card in file: {e}")
    return cards, version


def dump_export(document: dict) -> str:
    return json.dumps(document, indent=2)

