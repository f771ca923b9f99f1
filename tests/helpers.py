"""Builders for test snapshots."""

from __future__ import annotations

from models import Expense, LedgerSnapshot, Payment


def make_snapshot(group_id, members, expenses=(), payments=(), name=""):
    """Build a snapshot from (payer, value, category[, date]) and (payer, target, value[, date]) tuples."""
    exps = []
    for i, e in enumerate(expenses):
        payer, value, category = e[:3]
        exps.append(Expense(
            id=f"{group_id}-e{i}",
            payer_id=payer,
            value=value,
            category=category,
            group_id=group_id,
            date=e[3] if len(e) > 3 else "",
        ))
    pays = []
    for i, p in enumerate(payments):
        payer, target, value = p[:3]
        pays.append(Payment(
            id=f"{group_id}-p{i}",
            payer_id=payer,
            target_id=target,
            value=value,
            group_id=group_id,
            date=p[3] if len(p) > 3 else "",
        ))
    return LedgerSnapshot(
        group_id=group_id,
        name=name or group_id,
        members=frozenset(members),
        expenses=tuple(exps),
        payments=tuple(pays),
    )
