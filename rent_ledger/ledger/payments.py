"""家賃レコードの支払ステータス遷移（未払い / 一部入金 / 入金済み）。

遷移は Unpaid→Paid, Unpaid→Partial, Partial→Partial, Partial→Paid と、
任意の状態から Unpaid への取り消し。入金系の遷移では、同じ入居者の
より古い月に未精算（Unpaid / Partial）が残っていれば更新を拒否する。
入金済みレコードへの再指定は金額を変えず、支払方法と入金日だけを補正する。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence, Union

from .records import LedgerEntry, PaymentStatus, to_cents

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class SettlementScope:
    TENANT = "tenant"
    LEASE = "lease"

    ALL = (TENANT, LEASE)


class PaymentNotFoundError(LookupError):
    def __init__(self, payment_id: str) -> None:
        super().__init__(f"payment record {payment_id!r} not found")
        self.payment_id = payment_id


@dataclass(frozen=True)
class PaymentUpdate:
    """利用者の入金操作。`amount` は今回受け取った金額。"""

    amount: Optional[Decimal] = None
    payment_method: Optional[str] = None
    paid_date: Optional[date] = None


@dataclass(frozen=True)
class UpdateAccepted:
    ledger: list[LedgerEntry]
    entry: LedgerEntry

    accepted = True


@dataclass(frozen=True)
class UpdateRejected:
    reason: str
    blocking: LedgerEntry

    accepted = False


UpdateOutcome = Union[UpdateAccepted, UpdateRejected]


def find_entry(ledger: Sequence[LedgerEntry], payment_id: str) -> LedgerEntry:
    for entry in ledger:
        if entry.id == payment_id:
            return entry
    raise PaymentNotFoundError(payment_id)


def earliest_blocking_entry(
    target: LedgerEntry,
    ledger: Sequence[LedgerEntry],
    scope: str = SettlementScope.TENANT,
) -> Optional[LedgerEntry]:
    """対象より前の月で未精算のまま残っている最古のレコードを返す。"""
    candidates = []
    for other in ledger:
        if other.id == target.id or other.tenant_id != target.tenant_id:
            continue
        if not other.is_pending or other.key >= target.key:
            continue
        if scope == SettlementScope.LEASE:
            if target.lease_id and other.lease_id != target.lease_id:
                continue
            if target.property_id and other.property_id != target.property_id:
                continue
        candidates.append(other)
    if not candidates:
        return None
    return min(candidates, key=lambda entry: entry.key)


def rejection_reason(blocking: LedgerEntry) -> str:
    return (
        f"There is an earlier {blocking.status.lower()} payment for "
        f"{blocking.month} {blocking.year}. Please clear pending dues in chronological order first."
    )


def _reset(entry: LedgerEntry) -> LedgerEntry:
    return replace(
        entry,
        status=PaymentStatus.UNPAID,
        amount=entry.total_due,
        original_amount=None,
        remaining_due=ZERO,
        payment_method=None,
        paid_date=None,
    )


def settle(entry: LedgerEntry, update: PaymentUpdate, today: Optional[date] = None) -> LedgerEntry:
    """入金額を累積し、結果のステータスと金額を決める。

    金額はすべてセント単位に丸めてから計算する。
    """
    total_due = to_cents(entry.total_due)
    if entry.status == PaymentStatus.UNPAID:
        remaining_before = total_due
    else:
        remaining_before = to_cents(entry.remaining_due or ZERO)
    previously_paid = total_due - remaining_before

    incoming = to_cents(update.amount) if update.amount is not None else remaining_before
    total_paid = previously_paid + incoming
    remaining = max(ZERO, total_due - total_paid)
    paid_date = update.paid_date or today

    if total_paid >= total_due:
        return replace(
            entry,
            status=PaymentStatus.PAID,
            amount=total_due,
            original_amount=None,
            remaining_due=ZERO,
            payment_method=update.payment_method,
            paid_date=paid_date,
        )
    if total_paid > 0:
        return replace(
            entry,
            status=PaymentStatus.PARTIAL,
            amount=total_paid,
            original_amount=total_due,
            remaining_due=remaining,
            payment_method=update.payment_method,
            paid_date=paid_date,
        )
    return _reset(entry)


def _amend_paid(entry: LedgerEntry, update: PaymentUpdate) -> LedgerEntry:
    # 入金済みへの再指定では金額を動かさず、指定された項目だけ差し替える。
    return replace(
        entry,
        payment_method=update.payment_method or entry.payment_method,
        paid_date=update.paid_date or entry.paid_date,
    )


def _completes_partial(entry: LedgerEntry, requested_status: str, update: PaymentUpdate) -> bool:
    if entry.status != PaymentStatus.PARTIAL or requested_status != PaymentStatus.PAID:
        return False
    return settle(entry, update).remaining_due == ZERO


def apply_update(
    payment_id: str,
    requested_status: str,
    ledger: Sequence[LedgerEntry],
    update: Optional[PaymentUpdate] = None,
    scope: str = SettlementScope.TENANT,
    today: Optional[date] = None,
) -> UpdateOutcome:
    """1 件のステータス変更を適用した新しい台帳を返す。

    順序違反の場合は `UpdateRejected` を返し、台帳は変更しない。
    入金日が指定されなければ `today` を入金日とする。
    """
    if requested_status not in PaymentStatus.ALL:
        raise ValueError(f"unknown payment status: {requested_status!r}")
    update = update or PaymentUpdate()
    target = find_entry(ledger, payment_id)

    if requested_status == PaymentStatus.UNPAID:
        updated = _reset(target)
    elif target.status == PaymentStatus.PAID:
        updated = _amend_paid(target, update)
    else:
        if not _completes_partial(target, requested_status, update):
            blocking = earliest_blocking_entry(target, ledger, scope)
            if blocking is not None:
                logger.debug(
                    "Rejected %s for %s: %s %s is %s",
                    requested_status,
                    target.id,
                    blocking.month,
                    blocking.year,
                    blocking.status,
                )
                return UpdateRejected(rejection_reason(blocking), blocking)
        updated = settle(target, update, today)

    logger.debug("Payment %s: %s -> %s", target.id, target.status, updated.status)
    new_ledger = [updated if entry.id == payment_id else entry for entry in ledger]
    return UpdateAccepted(new_ledger, updated)
