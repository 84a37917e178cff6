"""台帳の集計と一覧絞り込み。"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from .records import MONTH_NAMES, ExpenseItem, LedgerEntry, PaymentStatus, month_index


@dataclass
class LedgerSummary:
    collected: Decimal = Decimal("0")
    outstanding: Decimal = Decimal("0")
    overdue_count: int = 0
    counts: dict[str, int] = field(default_factory=lambda: {status: 0 for status in PaymentStatus.ALL})

    def to_dict(self) -> dict[str, object]:
        return {
            "collected": str(self.collected),
            "outstanding": str(self.outstanding),
            "overdue_count": self.overdue_count,
            "counts": dict(self.counts),
        }


def is_overdue(entry: LedgerEntry, today: date) -> bool:
    if entry.status == PaymentStatus.PAID or entry.date is None:
        return False
    return entry.date < today


def months_pending(entry: LedgerEntry, today: date) -> int:
    """家賃対象月から今日までの経過月数。"""
    return (today.year - entry.year) * 12 + (today.month - 1) - month_index(entry.month)


def outstanding_amount(entry: LedgerEntry) -> Decimal:
    if entry.status == PaymentStatus.UNPAID:
        return entry.amount
    if entry.status == PaymentStatus.PARTIAL:
        return entry.remaining_due
    return Decimal("0")


def summarize(entries: Iterable[LedgerEntry], today: date) -> LedgerSummary:
    summary = LedgerSummary()
    for entry in entries:
        summary.counts[entry.status] = summary.counts.get(entry.status, 0) + 1
        summary.collected += entry.amount_paid
        summary.outstanding += outstanding_amount(entry)
        if is_overdue(entry, today):
            summary.overdue_count += 1
    return summary


def filter_entries(
    entries: Sequence[LedgerEntry],
    today: date,
    status: Optional[str] = None,
    tenant_id: Optional[str] = None,
    property_id: Optional[str] = None,
    min_months_pending: Optional[int] = None,
) -> list[LedgerEntry]:
    result = []
    for entry in entries:
        if status and entry.status != status:
            continue
        if tenant_id and entry.tenant_id != tenant_id:
            continue
        if property_id and entry.property_id != property_id:
            continue
        if min_months_pending is not None and months_pending(entry, today) < min_months_pending:
            continue
        result.append(entry)
    return result


def sort_chronologically(entries: Iterable[LedgerEntry]) -> list[LedgerEntry]:
    return sorted(entries, key=lambda entry: (entry.key, entry.tenant_id, entry.lease_id))


@dataclass
class ExpenseTotals:
    total: Decimal = Decimal("0")
    this_month: Decimal = Decimal("0")
    count: int = 0
    by_category: dict[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "total": str(self.total),
            "this_month": str(self.this_month),
            "count": self.count,
            "by_category": {category: str(amount) for category, amount in self.by_category.items()},
        }


def expense_totals(expenses: Iterable[ExpenseItem], today: date) -> ExpenseTotals:
    """支出の合計と今月分の合計。"""
    totals = ExpenseTotals()
    for expense in expenses:
        totals.count += 1
        totals.total += expense.amount
        totals.by_category[expense.category] = totals.by_category.get(expense.category, Decimal("0")) + expense.amount
        if expense.date and (expense.date.year, expense.date.month) == (today.year, today.month):
            totals.this_month += expense.amount
    return totals


@dataclass
class MonthlyCashflow:
    year: int
    month: str
    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expenses

    def to_dict(self) -> dict[str, object]:
        return {
            "year": self.year,
            "month": self.month,
            "income": str(self.income),
            "expenses": str(self.expenses),
            "net": str(self.net),
        }


def monthly_cashflow(
    entries: Iterable[LedgerEntry],
    expenses: Iterable[ExpenseItem],
    today: date,
    months: int = 6,
) -> list[MonthlyCashflow]:
    """今月を含む直近 `months` か月の入金額と支出額を古い順に返す。

    入金は入金日（未設定なら期日）の月に、支出は支出日の月に計上する。
    一部入金も受け取った分だけ入金額に含める。
    """
    current = today.year * 12 + today.month - 1
    slots: dict[int, MonthlyCashflow] = {}
    for key in range(current - months + 1, current + 1):
        slots[key] = MonthlyCashflow(year=key // 12, month=MONTH_NAMES[key % 12])

    for entry in entries:
        received_on = entry.paid_date or entry.date
        paid = entry.amount_paid
        if received_on is None or not paid:
            continue
        row = slots.get(received_on.year * 12 + received_on.month - 1)
        if row is not None:
            row.income += paid

    for expense in expenses:
        if expense.date is None:
            continue
        row = slots.get(expense.date.year * 12 + expense.date.month - 1)
        if row is not None:
            row.expenses += expense.amount

    return list(slots.values())
