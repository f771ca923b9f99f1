"""Shared fixtures for the SplitLedger tests.

The default application data directory lives in the user's home; tests point
``SPLIT_LEDGER_DATA_DIR`` at a per-test temporary directory so nothing leaks
between runs.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from models import LedgerSnapshot

from tests.helpers import make_snapshot


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("SPLIT_LEDGER_DATA_DIR", os.fspath(data_dir))
    monkeypatch.delenv("SPLIT_LEDGER_MAX_WORKERS", raising=False)


@pytest.fixture
def trip_snapshot() -> LedgerSnapshot:
    # three-way split: X paid food, Y paid transport
    return make_snapshot(
        "trip",
        ["X", "Y", "Z"],
        expenses=[("X", 90.0, "food", "2024-03-01"), ("Y", 30.0, "transport", "2024-03-02")],
        name="Trip",
    )


@pytest.fixture
def groups_payload() -> dict:
    """Stored shape of two groups, as exported from the groups store."""
    return {
        "g1": {
            "id": "g1",
            "name": "Flat",
            "ownerId": "alice",
            "memberIds": {"alice": True, "bob": True, "carol": False},
            "expenses": {
                "e1": {"id": "e1", "payerId": "alice", "groupId": "g1", "value": 100,
                       "category": "rent", "description": "April", "date": 1712000000000},
                "e2": {"id": "e2", "payerId": "bob", "groupId": "g1", "value": 40,
                       "category": "food", "description": "Groceries", "date": "2024-04-03"},
            },
            "payments": {
                "p1": {"id": "p1", "payerId": "bob", "targetId": "alice", "groupId": "g1",
                       "value": 10, "date": "2024-04-04T09:30:00Z"},
            },
        },
        "g2": {
            "id": "g2",
            "name": "Ski",
            "ownerId": "bob",
            "memberIds": {"alice": True, "bob": True},
            "expenses": {
                "e3": {"id": "e3", "payerId": "bob", "groupId": "g2", "value": 60,
                       "category": "food", "date": "2024-02-10"},
            },
        },
    }
