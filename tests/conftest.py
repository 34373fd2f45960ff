"""Shared test fixtures for shed board tests."""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure board_server (repo root) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from shedboard.storage import KeyValueStore


FIXED_NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "board.db")


@pytest.fixture
def kv(db_path):
    return KeyValueStore(db_path)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW
