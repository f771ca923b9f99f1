"""
Utility functions for SplitLedger
"""
from __future__ import annotations
import os
from datetime import date, datetime, timezone
from typing import Optional, Union


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string"""
    return datetime.strptime(s.strip(), "%Y-%m-%d").date()


def normalize_date(raw: Union[str, int, float, None]) -> str:
    """
    Normalize a stored timestamp to YYYY-MM-DD.
    Accepts epoch milliseconds (numbers or numeric strings), ISO dates and
    RFC 3339 timestamps. Returns "" for missing values.
    """
    if raw is None or raw == "":
        return ""
    if isinstance(raw, bool) or not isinstance(raw, (str, int, float)):
        raise ValueError(f"Not a timestamp: {raw!r}")
    if isinstance(raw, (int, float)):
        return datetime.fromtimestamp(raw / 1000.0, tz=timezone.utc).date().isoformat()
    s = raw.strip()
    try:
        return normalize_date(float(s))
    except ValueError:
        pass
    # fromisoformat on older interpreters rejects a trailing "Z"
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s).date().isoformat()


def optional_date(s: Optional[str]) -> Optional[date]:
    """Parse an optional YYYY-MM-DD string, treating blanks as None"""
    if s is None or not s.strip():
        return None
    return parse_date(s)


def app_dir() -> str:
    """
    Get application data directory.
    SPLIT_LEDGER_DATA_DIR overrides the default
    ~/Library/Application Support/SplitLedger.
    Creates directory if it doesn't exist.
    """
    path = os.getenv("SPLIT_LEDGER_DATA_DIR")
    if not path:
        base = os.path.expanduser("~/Library/Application Support")
        path = os.path.join(base, "SplitLedger")
    os.makedirs(path, exist_ok=True)
    return path
