"""
Balance and settlement computations for SplitLedger
"""
from __future__ import annotations
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from logging_setup import get_logger
from models import AggregateAnalysis, Debt, Expense, GroupAnalysis, LedgerSnapshot, Payment
from utils import parse_date

logger = get_logger(__name__)

# Remaining amounts below one cent count as settled.
SETTLE_EPS = 0.01


def compute_balances(
    snapshot: LedgerSnapshot,
) -> Tuple[Dict[str, float], float, Dict[str, float]]:
    """
    Compute net balances and spend totals for one group.
    Returns (balances, total_spent, category_totals).
    Positive balance -> is owed; negative -> owes.
    """
    members = sorted(snapshot.members)
    if not members:
        return {}, 0.0, {}

    balances = {m: 0.0 for m in members}
    category_totals: Dict[str, float] = {}
    total_spent = 0.0
    n = len(members)

    for e in snapshot.expenses:
        value = float(e.value)
        total_spent += value
        category_totals[e.category] = category_totals.get(e.category, 0.0) + value
        share = value / n
        # payer is credited in full and still debited their own share
        balances[e.payer_id] = balances.get(e.payer_id, 0.0) + value
        for m in members:
            balances[m] -= share

    for p in snapshot.payments:
        value = float(p.value)
        balances[p.payer_id] = balances.get(p.payer_id, 0.0) + value
        balances[p.target_id] = balances.get(p.target_id, 0.0) - value

    stale = sorted(set(balances) - snapshot.members)
    if stale:
        logger.warning("Group %s has records for non-members: %s", snapshot.group_id, ", ".join(stale))

    return balances, total_spent, category_totals


def resolve_debts(
    balances: Dict[str, float],
    observer_id: str,
) -> Tuple[List[Debt], List[Debt]]:
    """
    Greedy settlement: the largest debtors pay the largest creditors first.
    Not a minimum-transfer solution; only transfers touching the observer
    are returned, as (owed_by_others, owed_to_others).
    """
    debtors = []
    creditors = []
    for p, v in balances.items():
        net = round(v, 2)
        if net < 0:
            debtors.append([p, -net])
        elif net > 0:
            creditors.append([p, net])
    # largest first, member id breaks ties
    debtors.sort(key=lambda x: (-x[1], x[0]))
    creditors.sort(key=lambda x: (-x[1], x[0]))

    owed_by_others: List[Debt] = []
    owed_to_others: List[Debt] = []
    i = j = 0
    while i < len(debtors) and j < len(creditors):
        debtor = debtors[i]
        creditor = creditors[j]
        amount = min(debtor[1], creditor[1])
        if debtor[0] == observer_id:
            owed_to_others.append(Debt(creditor[0], round(amount, 2)))
        if creditor[0] == observer_id:
            owed_by_others.append(Debt(debtor[0], round(amount, 2)))
        debtor[1] -= amount
        creditor[1] -= amount
        if debtor[1] < SETTLE_EPS:
            i += 1
        if creditor[1] < SETTLE_EPS:
            j += 1

    return owed_by_others, owed_to_others


def build_group_analysis(snapshot: LedgerSnapshot, observer_id: str) -> GroupAnalysis:
    """Compose balances and observer debts into one group report"""
    balances, total_spent, category_totals = compute_balances(snapshot)
    owed_by_others, owed_to_others = resolve_debts(balances, observer_id)
    n = len(snapshot.members)
    analysis = GroupAnalysis(
        group_id=snapshot.group_id,
        group_name=snapshot.name,
        observer_balance=balances.get(observer_id, 0.0),
        total_spent=total_spent,
        observer_share=total_spent / n if n else 0.0,
        owed_by_others=owed_by_others,
        owed_to_others=owed_to_others,
        category_totals=category_totals,
    )
    logger.debug(
        "Group %s: %d expenses, %d payments, balance for %s = %.2f",
        snapshot.group_id, len(snapshot.expenses), len(snapshot.payments),
        observer_id, analysis.observer_balance,
    )
    return analysis


def build_aggregate(analyses: Iterable[GroupAnalysis]) -> AggregateAnalysis:
    """Fold group reports into one cross-group summary (sums only)"""
    out = AggregateAnalysis()
    for g in analyses:
        out.total_balance += g.observer_balance
        out.total_owed_to_observer += sum(d.amount for d in g.owed_by_others)
        out.total_owed_by_observer += sum(d.amount for d in g.owed_to_others)
        for cat, v in g.category_totals.items():
            out.category_totals[cat] = out.category_totals.get(cat, 0.0) + v
    return out


def resolve_max_workers(n_groups: int, max_workers: Optional[int] = None) -> int:
    """
    Worker count for analyze_groups: explicit value, else
    SPLIT_LEDGER_MAX_WORKERS, else min(8, n_groups). Never below 1.
    """
    if max_workers is None:
        env = os.getenv("SPLIT_LEDGER_MAX_WORKERS")
        try:
            max_workers = int(env) if env else None
        except ValueError:
            logger.warning("Ignoring non-integer SPLIT_LEDGER_MAX_WORKERS=%r", env)
            max_workers = None
    if max_workers is not None and max_workers > 0:
        return max(1, min(max_workers, n_groups))
    return max(1, min(8, n_groups))


def analyze_groups(
    snapshots: Sequence[LedgerSnapshot],
    observer_id: str,
    max_workers: Optional[int] = None,
) -> Tuple[List[GroupAnalysis], AggregateAnalysis]:
    """
    Analyze every group the observer belongs to and fold the results.
    Groups run concurrently; output keeps input order.
    """
    own = []
    for s in snapshots:
        if observer_id in s.members:
            own.append(s)
        else:
            logger.debug("Skipping group %s: %s is not a member", s.group_id, observer_id)
    if not own:
        return [], AggregateAnalysis()

    workers = resolve_max_workers(len(own), max_workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        analyses = list(pool.map(lambda s: build_group_analysis(s, observer_id), own))
    return analyses, build_aggregate(analyses)


def _in_window(d: str, start: Optional[date], end: Optional[date]) -> bool:
    if not d:
        return True
    ed = parse_date(d)
    if start and ed < start:
        return False
    if end and ed > end:
        return False
    return True


def filter_snapshot_by_date(
    snapshot: LedgerSnapshot,
    start: Optional[date],
    end: Optional[date],
) -> LedgerSnapshot:
    """Return a copy keeping only records dated inside [start, end]; undated records stay"""
    if start is None and end is None:
        return snapshot
    expenses: Tuple[Expense, ...] = tuple(e for e in snapshot.expenses if _in_window(e.date, start, end))
    payments: Tuple[Payment, ...] = tuple(p for p in snapshot.payments if _in_window(p.date, start, end))
    return replace(snapshot, expenses=expenses, payments=payments)


def recent_expenses(snapshots: Iterable[LedgerSnapshot], limit: int = 10) -> List[Expense]:
    """Newest expenses across groups; undated ones sort last"""
    exps = [e for s in snapshots for e in s.expenses]
    exps.sort(key=lambda e: (e.group_id, e.id))
    # stable sort keeps (group_id, id) order among equal dates
    exps.sort(key=lambda e: e.date, reverse=True)
    return exps[:max(0, limit)]


def sorted_category_totals(category_totals: Dict[str, float]) -> List[Tuple[str, float]]:
    """Categories by spend, largest first, then by name"""
    return sorted(category_totals.items(), key=lambda kv: (-kv[1], kv[0]))
