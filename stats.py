"""
stats.py
Dashboard aggregates and list filters, computed from the in-memory lists.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

import pandas as pd

from models import STATUS_PAID, Contribution, Database, Expense, Member, Notice, OtherIncome, Puja
from utils import date_key


@dataclass(frozen=True)
class DashboardStats:
    total_members: int
    total_income: float
    total_expenses: float
    balance: float
    total_contributions_expected: float
    total_contributions_received: float
    total_contributions_pending: float


@dataclass(frozen=True)
class ContributionSummary:
    member_id: str
    member_name: str
    total_expected: float
    total_paid: float
    total_pending: float


@dataclass(frozen=True)
class PujaExpenseSummary:
    puja_id: str
    puja_name: str
    budget: float
    total_expenses: float


@dataclass(frozen=True)
class Transaction:
    kind: str  # 'income' or 'expense'
    date: str
    label: str
    description: str
    amount: float


def dashboard_stats(db: Database) -> DashboardStats:
    total_income = sum(i.amount for i in db.income)
    total_expenses = sum(e.amount for e in db.expenses)
    expected = sum(c.amount for c in db.contributions)
    received = sum(c.paid_amount for c in db.contributions)
    return DashboardStats(
        total_members=len(db.members),
        total_income=total_income,
        total_expenses=total_expenses,
        balance=total_income + received - total_expenses,
        total_contributions_expected=expected,
        total_contributions_received=received,
        total_contributions_pending=expected - received,
    )


def sort_by_date_desc(records: list) -> list:
    return sorted(records, key=lambda r: date_key(r.date), reverse=True)


def upcoming_pujas(pujas: list[Puja], today: date | None = None, limit: int = 5) -> list[Puja]:
    """Pujas dated after today, soonest first. A puja on today's date is no longer upcoming."""
    today = today or date.today()
    upcoming = [p for p in pujas if date_key(p.date) > today]
    return sorted(upcoming, key=lambda p: date_key(p.date))[:limit]


def important_notices(notices: list[Notice], limit: int = 3) -> list[Notice]:
    return sort_by_date_desc([n for n in notices if n.is_important])[:limit]


def recent_transactions(income: list[OtherIncome], expenses: list[Expense], limit: int = 5) -> list[Transaction]:
    rows = [Transaction("income", i.date, i.type, i.source, i.amount) for i in income]
    rows += [Transaction("expense", e.date, e.category, e.description, e.amount) for e in expenses]
    return sort_by_date_desc(rows)[:limit]


def filter_members(members: list[Member], term: str) -> list[Member]:
    term = term.strip().lower()
    if not term:
        return list(members)
    return [
        m
        for m in members
        if term in m.name.lower() or term in m.designation.lower() or term in m.phone.lower()
    ]


def filter_contributions(
    contributions: list[Contribution],
    puja_id: str = "",
    member_id: str = "",
    status: str = "",
) -> list[Contribution]:
    return [
        c
        for c in contributions
        if (not puja_id or c.puja_id == puja_id)
        and (not member_id or c.member_id == member_id)
        and (not status or c.status == status)
    ]


def filter_expenses(expenses: list[Expense], puja_id: str = "") -> list[Expense]:
    if not puja_id:
        return list(expenses)
    return [e for e in expenses if e.puja_id == puja_id]


def pending_contributions(contributions: list[Contribution]) -> list[Contribution]:
    return [c for c in contributions if c.status != STATUS_PAID]


def contribution_summary(members: list[Member], contributions: list[Contribution]) -> list[ContributionSummary]:
    """Per-member totals, in order of first contribution. Unknown members are skipped."""
    names = {m.id: m.name for m in members}
    totals: dict[str, list[float]] = {}
    for c in contributions:
        if c.member_id not in names:
            continue
        t = totals.setdefault(c.member_id, [0.0, 0.0])
        t[0] += c.amount
        t[1] += c.paid_amount
    return [
        ContributionSummary(mid, names[mid], expected, paid, expected - paid)
        for mid, (expected, paid) in totals.items()
    ]


def puja_expense_summary(pujas: list[Puja], expenses: list[Expense]) -> list[PujaExpenseSummary]:
    return [
        PujaExpenseSummary(p.id, p.name, p.budget, sum(e.amount for e in expenses if e.puja_id == p.id))
        for p in pujas
    ]


def records_frame(records: list, columns: list[str] | None = None) -> pd.DataFrame:
    """DataFrame of records keyed by their file field names (for st.dataframe)."""
    if not records:
        return pd.DataFrame(columns=columns or [])
    df = pd.DataFrame([r.to_dict() for r in records])
    if columns:
        df = df.reindex(columns=columns)
    return df
