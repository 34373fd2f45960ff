"""
Timestamp, id and input helpers shared by both applications.
"""
import random
import string
import time
from datetime import datetime, timezone
from typing import Iterable, Optional

_BASE36 = string.digits + string.ascii_lowercase


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(dt: datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a trailing Z."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (Z suffix allowed). Returns None if unparseable."""
    if not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def epoch_ms() -> int:
    return int(time.time() * 1000)


def make_record_id(existing: Iterable[str] = ()) -> str:
    """Millisecond timestamp id, bumped forward until it does not collide."""
    taken = set(existing)
    ts = epoch_ms()
    while str(ts) in taken:
        ts += 1
    return str(ts)


def make_option_id() -> str:
    """Option id: 'opt' + ms timestamp + 5 random base36 chars."""
    suffix = "".join(random.choice(_BASE36) for _ in range(5))
    return f"opt{epoch_ms()}{suffix}"


def clean_text(value, name: str) -> str:
    """Strip a user-supplied text field. None reads as empty; non-strings raise ValueError."""
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{name} must be a string, got {type(value).__name__}")
    return value.strip()
