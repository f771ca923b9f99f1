"""
Data models for SplitLedger analysis
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Tuple


@dataclass(frozen=True)
class Expense:
    """One member fronting `value`, split evenly across all current members"""
    id: str
    payer_id: str
    value: float
    category: str
    group_id: str
    description: str = ""
    date: str = ""  # YYYY-MM-DD, empty when unknown

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"Expense {self.id!r} has a negative value: {self.value}")


@dataclass(frozen=True)
class Payment:
    """Direct transfer from payer to target, outside the expense split"""
    id: str
    payer_id: str
    target_id: str
    value: float
    group_id: str
    date: str = ""  # YYYY-MM-DD, empty when unknown

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError(f"Payment {self.id!r} has a negative value: {self.value}")


@dataclass(frozen=True)
class LedgerSnapshot:
    """Read-only view of one group's members, expenses and payments"""
    group_id: str
    name: str
    members: FrozenSet[str] = frozenset()
    expenses: Tuple[Expense, ...] = ()
    payments: Tuple[Payment, ...] = ()
    description: str = ""
    owner_id: str = ""


@dataclass(frozen=True)
class Debt:
    """Amount owed between the observer and one counterparty"""
    counterparty_id: str
    amount: float


@dataclass
class GroupAnalysis:
    """Report for one group, relative to the observing member"""
    group_id: str
    group_name: str
    observer_balance: float
    total_spent: float
    observer_share: float
    owed_by_others: List[Debt] = field(default_factory=list)  # others -> observer
    owed_to_others: List[Debt] = field(default_factory=list)  # observer -> others
    category_totals: Dict[str, float] = field(default_factory=dict)


@dataclass
class AggregateAnalysis:
    """Cross-group fold of one observer's group reports"""
    total_balance: float = 0.0
    total_owed_to_observer: float = 0.0
    total_owed_by_observer: float = 0.0
    category_totals: Dict[str, float] = field(default_factory=dict)
