"""家賃台帳エンジン: 入居状況の算出、月次家賃の補完、入金ステータス遷移、収支集計。"""

from .dues import GenerationResult, generate_dues
from .occupancy import available_units, occupied_units, vacant_units
from .payments import (
    PaymentNotFoundError,
    PaymentUpdate,
    SettlementScope,
    UpdateAccepted,
    UpdateRejected,
    apply_update,
)
from .records import ExpenseItem, LeaseStatus, LeaseTerms, LedgerEntry, PaymentStatus, to_cents
from .summary import expense_totals, monthly_cashflow, summarize

__all__ = [
    "ExpenseItem",
    "GenerationResult",
    "LeaseStatus",
    "LeaseTerms",
    "LedgerEntry",
    "PaymentNotFoundError",
    "PaymentStatus",
    "PaymentUpdate",
    "SettlementScope",
    "UpdateAccepted",
    "UpdateRejected",
    "apply_update",
    "available_units",
    "expense_totals",
    "generate_dues",
    "monthly_cashflow",
    "occupied_units",
    "summarize",
    "to_cents",
    "vacant_units",
]
