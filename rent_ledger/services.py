"""台帳エンジンの呼び出しと保存を束ねるオーケストレーション層。"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from .ledger.dues import DEFAULT_DUE_DAY, GenerationResult, generate_dues
from .ledger.occupancy import available_units
from .ledger.payments import (
    PaymentUpdate,
    SettlementScope,
    UpdateRejected,
    apply_update,
)
from .ledger.records import LeaseStatus, LedgerEntry, PaymentStatus
from .repository import LedgerRepository

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    """台帳操作で利用者に返すべき失敗。"""

    status_code = 400


class SettlementOrderError(LedgerError):
    status_code = 409

    def __init__(self, reason: str, blocking: LedgerEntry) -> None:
        super().__init__(reason)
        self.reason = reason
        self.blocking = blocking


class LeaseNotFoundError(LedgerError):
    status_code = 404


class UnitsUnavailableError(LedgerError):
    status_code = 409

    def __init__(self, requested: int, available: int) -> None:
        super().__init__(f"Only {available} unit(s) available in this property.")
        self.requested = requested
        self.available = available


def sync_dues(
    repository: LedgerRepository,
    today: Optional[date] = None,
    due_day: int = DEFAULT_DUE_DAY,
) -> GenerationResult:
    """台帳を読み込み、欠けている月次家賃を補完して保存する。"""
    today = today or date.today()
    result = generate_dues(repository.load_leases(), repository.load_ledger(), today, due_day)
    if result.new_count:
        repository.save_ledger(result.payments)
        logger.info("Created %d new rent due record(s)", result.new_count)
    else:
        logger.debug("No missing rent due records found")
    return result


def update_payment_status(
    repository: LedgerRepository,
    payment_id: str,
    status: str,
    update: Optional[PaymentUpdate] = None,
    scope: str = SettlementScope.TENANT,
    today: Optional[date] = None,
) -> LedgerEntry:
    ledger = repository.load_ledger()
    outcome = apply_update(payment_id, status, ledger, update, scope, today or date.today())
    if isinstance(outcome, UpdateRejected):
        logger.info("Rejected status change for %s: %s", payment_id, outcome.reason)
        raise SettlementOrderError(outcome.reason, outcome.blocking)
    repository.save_ledger(outcome.ledger)
    logger.info("Payment %s is now %s", payment_id, outcome.entry.status)
    return outcome.entry


def purge_unpaid_dues(repository: LedgerRepository, lease_id: str) -> int:
    """契約に紐づく未払いレコードを削除する。一部入金・入金済みは残す。"""
    ledger = repository.load_ledger()
    kept = [
        entry
        for entry in ledger
        if not (entry.lease_id == lease_id and entry.status == PaymentStatus.UNPAID)
    ]
    removed = len(ledger) - len(kept)
    if removed:
        repository.save_ledger(kept)
    return removed


def check_units_available(
    property_obj,
    requested_units: int,
    repository: LedgerRepository,
    today: Optional[date] = None,
    editing_lease_id: Optional[str] = None,
) -> int:
    today = today or date.today()
    leases = repository.load_leases()
    editing = None
    if editing_lease_id is not None:
        editing = next((lease for lease in leases if lease.id == editing_lease_id), None)
    available = available_units(property_obj, leases, today, editing)
    if requested_units > available:
        raise UnitsUnavailableError(requested_units, available)
    return available


def terminate_lease(
    repository: LedgerRepository,
    lease_id: str,
    purge_unpaid: bool = True,
) -> int:
    """契約を解約済みにし、必要なら未払いの家賃レコードを削除する。"""
    if repository.find_lease(lease_id) is None:
        raise LeaseNotFoundError(f"Lease {lease_id} not found.")
    repository.set_lease_status(lease_id, LeaseStatus.TERMINATED)
    removed = purge_unpaid_dues(repository, lease_id) if purge_unpaid else 0
    logger.info("Terminated lease %s (%d unpaid record(s) removed)", lease_id, removed)
    return removed
