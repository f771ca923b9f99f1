"""
Snapshot loading and JSON conversion for SplitLedger
"""
from __future__ import annotations
import json
import math
import os
from typing import Any, Dict, List, Mapping

from logging_setup import get_logger
from models import AggregateAnalysis, Debt, Expense, GroupAnalysis, LedgerSnapshot, Payment
from utils import app_dir, normalize_date

logger = get_logger(__name__)


class LedgerFormatError(ValueError):
    """Stored group data that cannot be decoded into a snapshot"""


def _records(raw: Any, group_id: str, kind: str) -> List[tuple]:
    """Return (key, record) pairs from a mapping keyed by id or a plain list"""
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        items = list(raw.items())
    elif isinstance(raw, list):
        items = [(None, r) for r in raw]
    else:
        raise LedgerFormatError(f"group {group_id}: {kind} must be an object or a list")
    for key, r in items:
        if not isinstance(r, Mapping):
            raise LedgerFormatError(f"group {group_id}: {kind} entry {key!r} is not an object")
    return items


def _value(r: Mapping, group_id: str, kind: str, rid: str) -> float:
    try:
        v = float(r.get("value", 0.0))
    except (TypeError, ValueError) as ex:
        raise LedgerFormatError(f"group {group_id}: {kind} {rid!r} has a non-numeric value") from ex
    if not math.isfinite(v):
        raise LedgerFormatError(f"group {group_id}: {kind} {rid!r} has a non-finite value")
    if v < 0:
        raise LedgerFormatError(f"group {group_id}: {kind} {rid!r} has a negative value")
    return v


def _required(r: Mapping, key: str, group_id: str, kind: str, rid: str) -> str:
    v = r.get(key)
    if not v:
        raise LedgerFormatError(f"group {group_id}: {kind} {rid!r} is missing {key}")
    return str(v)


def _date(r: Mapping, group_id: str, kind: str, rid: str) -> str:
    try:
        return normalize_date(r.get("date"))
    except (TypeError, ValueError, OverflowError, OSError) as ex:
        raise LedgerFormatError(f"group {group_id}: {kind} {rid!r} has an invalid date") from ex


def _members(raw: Any, group_id: str) -> frozenset:
    if raw is None:
        return frozenset()
    if isinstance(raw, Mapping):
        # {"uid": true}; false entries are former members
        return frozenset(str(k) for k, active in raw.items() if active)
    if isinstance(raw, list):
        return frozenset(str(m) for m in raw)
    raise LedgerFormatError(f"group {group_id}: memberIds must be an object or a list")


def dict_to_snapshot(d: Mapping, group_id: str = "") -> LedgerSnapshot:
    """Convert a stored group object into a LedgerSnapshot"""
    if not isinstance(d, Mapping):
        raise LedgerFormatError(f"group {group_id or '?'} is not an object")
    gid = str(d.get("id") or group_id)
    if not gid:
        raise LedgerFormatError("group is missing id")

    expenses = []
    for key, r in _records(d.get("expenses"), gid, "expense"):
        rid = str(r.get("id") or key or "")
        if not rid:
            raise LedgerFormatError(f"group {gid}: expense without id")
        expenses.append(Expense(
            id=rid,
            payer_id=_required(r, "payerId", gid, "expense", rid),
            value=_value(r, gid, "expense", rid),
            category=str(r.get("category") or ""),
            group_id=str(r.get("groupId") or gid),
            description=str(r.get("description") or ""),
            date=_date(r, gid, "expense", rid),
        ))

    payments = []
    for key, r in _records(d.get("payments"), gid, "payment"):
        rid = str(r.get("id") or key or "")
        if not rid:
            raise LedgerFormatError(f"group {gid}: payment without id")
        payments.append(Payment(
            id=rid,
            payer_id=_required(r, "payerId", gid, "payment", rid),
            target_id=_required(r, "targetId", gid, "payment", rid),
            value=_value(r, gid, "payment", rid),
            group_id=str(r.get("groupId") or gid),
            date=_date(r, gid, "payment", rid),
        ))

    return LedgerSnapshot(
        group_id=gid,
        name=str(d.get("name") or ""),
        members=_members(d.get("memberIds"), gid),
        expenses=tuple(expenses),
        payments=tuple(payments),
        description=str(d.get("description") or ""),
        owner_id=str(d.get("ownerId") or ""),
    )


def snapshot_to_dict(snapshot: LedgerSnapshot) -> dict:
    """Convert LedgerSnapshot to the stored group shape"""
    return {
        "id": snapshot.group_id,
        "name": snapshot.name,
        "description": snapshot.description,
        "ownerId": snapshot.owner_id,
        "memberIds": {m: True for m in sorted(snapshot.members)},
        "expenses": {
            e.id: {
                "id": e.id,
                "payerId": e.payer_id,
                "groupId": e.group_id,
                "value": e.value,
                "category": e.category,
                "description": e.description,
                "date": e.date,
            } for e in snapshot.expenses
        },
        "payments": {
            p.id: {
                "id": p.id,
                "payerId": p.payer_id,
                "targetId": p.target_id,
                "groupId": p.group_id,
                "value": p.value,
                "date": p.date,
            } for p in snapshot.payments
        },
    }


def _debts_to_list(debts: List[Debt]) -> List[dict]:
    return [{"userId": d.counterparty_id, "amount": d.amount} for d in debts]


def group_analysis_to_dict(a: GroupAnalysis) -> dict:
    """Response payload for one group report"""
    return {
        "groupId": a.group_id,
        "groupName": a.group_name,
        "myBalance": a.observer_balance,
        "totalSpent": a.total_spent,
        "myTotalSpent": a.observer_share,
        "owedBy": _debts_to_list(a.owed_by_others),
        "oweTo": _debts_to_list(a.owed_to_others),
        "categorySummary": dict(a.category_totals),
    }


def aggregate_to_dict(a: AggregateAnalysis) -> dict:
    """Response payload for the cross-group summary"""
    return {
        "totalBalance": a.total_balance,
        "totalOwedByMe": a.total_owed_by_observer,
        "totalOwedToMe": a.total_owed_to_observer,
        "categorySummary": dict(a.category_totals),
    }


def load_snapshots(path: str) -> List[LedgerSnapshot]:
    """
    Load groups from a JSON file holding either a list of group objects
    or an object keyed by group id. A missing file yields [].
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("No group file at %s", path)
        return []

    if isinstance(data, list):
        snapshots = [dict_to_snapshot(g) for g in data]
    elif isinstance(data, dict):
        snapshots = [dict_to_snapshot(g, group_id=str(k)) for k, g in data.items()]
    else:
        raise LedgerFormatError(f"{path}: expected a list or an object of groups")
    logger.debug("Loaded %d groups from %s", len(snapshots), path)
    return snapshots


def save_snapshots(snapshots: List[LedgerSnapshot], path: str) -> None:
    """Write groups as an object keyed by group id"""
    data: Dict[str, dict] = {s.group_id: snapshot_to_dict(s) for s in snapshots}
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)


def get_default_snapshots() -> List[LedgerSnapshot]:
    """Load groups.json from the application data directory"""
    return load_snapshots(os.path.join(app_dir(), "groups.json"))
