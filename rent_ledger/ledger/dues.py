"""有効契約を走査し、経過済みの月に対する未払い家賃レコードを補完する。"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from .records import (
    MONTH_NAMES,
    LeaseTerms,
    LedgerEntry,
    PaymentStatus,
    due_record_id,
    previous_month,
    to_cents,
)

logger = logging.getLogger(__name__)

DEFAULT_DUE_DAY = 5


@dataclass(frozen=True)
class GenerationResult:
    payments: list[LedgerEntry]
    new_count: int

    @property
    def created(self) -> list[LedgerEntry]:
        if not self.new_count:
            return []
        return self.payments[-self.new_count:]


def due_date_for(year: int, month0: int, due_day: int = DEFAULT_DUE_DAY) -> date:
    """対象月の家賃は翌月 `due_day` 日が期日。月末を超える日は月末に丸める。"""
    if month0 == 11:
        year, month = year + 1, 1
    else:
        month = month0 + 2
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(max(due_day, 1), last_day))


def _iter_months(start: int, end: int) -> Iterable[tuple[int, int]]:
    for key in range(start, end + 1):
        yield key // 12, key % 12


def generate_dues(
    leases: Iterable[LeaseTerms],
    payments: Sequence[LedgerEntry],
    today: date,
    due_day: int = DEFAULT_DUE_DAY,
) -> GenerationResult:
    """欠けている月次レコードを追加した台帳と、追加件数を返す。

    既存レコードは一切変更しない。同じ入力で何度実行しても 2 回目以降の追加は 0 件。
    """
    last_year, last_month0 = previous_month(today)
    last_completed = last_year * 12 + last_month0
    logger.debug("Last completed month: %s %s", MONTH_NAMES[last_month0], last_year)

    existing = {(p.tenant_id, p.lease_id, p.month, p.year) for p in payments}
    created: list[LedgerEntry] = []

    for lease in leases:
        if not lease.is_effectively_active(today):
            continue
        # is_effectively_active が end_date 有りを保証している。
        start_date = lease.start_date or today
        start = start_date.year * 12 + (start_date.month - 1)
        end = min(last_completed, lease.end_date.year * 12 + (lease.end_date.month - 1))
        if start > end:
            logger.debug("Lease %s has no completed months yet", lease.id)
            continue

        for year, month0 in _iter_months(start, end):
            month_name = MONTH_NAMES[month0]
            period = (lease.tenant_id, lease.id, month_name, year)
            if period in existing:
                continue
            entry = LedgerEntry(
                id=due_record_id(lease.tenant_id, lease.id, year, month_name),
                tenant_id=lease.tenant_id,
                lease_id=lease.id,
                property_id=lease.property_id or "",
                month=month_name,
                year=year,
                amount=to_cents(lease.monthly_rent),
                status=PaymentStatus.UNPAID,
                date=due_date_for(year, month0, due_day),
            )
            existing.add(period)
            created.append(entry)
            logger.debug("Created due %s for lease %s (%s)", entry.id, lease.id, entry.amount)

    if not created:
        return GenerationResult(list(payments), 0)
    return GenerationResult([*payments, *created], len(created))
