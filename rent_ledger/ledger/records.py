"""家賃台帳エンジンが扱う値オブジェクトと暦月ユーティリティ。

エンジンは DB にも Flask にも依存せず、ここで定義する不変データだけを入出力する。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

CENTS = Decimal("0.01")

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


class LeaseStatus:
    ACTIVE = "Active"
    EXPIRED = "Expired"
    TERMINATED = "Terminated"

    ALL = (ACTIVE, EXPIRED, TERMINATED)


class PaymentStatus:
    UNPAID = "Unpaid"
    PARTIAL = "Partial"
    PAID = "Paid"

    ALL = (UNPAID, PARTIAL, PAID)
    PENDING = (UNPAID, PARTIAL)


def month_index(month_name: str) -> int:
    """月名を 0 始まりの月番号に変換する。未知の月名は -1。"""
    try:
        return MONTH_NAMES.index(month_name)
    except ValueError:
        return -1


def month_key(year: int, month_name: str) -> int:
    """年月を `year * 12 + monthIndex` の比較キーにする。"""
    return year * 12 + month_index(month_name)


def previous_month(today: date) -> tuple[int, int]:
    """今日から見て最後に終わった暦月を (year, 0 始まりの月) で返す。"""
    if today.month == 1:
        return today.year - 1, 11
    return today.year, today.month - 2


def parse_date(value: Any) -> Optional[date]:
    # 保存形式の揺れ（date / ISO 文字列 / 空値）を吸収し、壊れた値は None にする。
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def to_cents(value: Any) -> Decimal:
    """金額を 1 セント単位に丸める。float は文字列経由で変換する。"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LeaseTerms:
    id: str
    tenant_id: str
    property_id: str
    start_date: Optional[date]
    end_date: Optional[date]
    monthly_rent: Decimal = Decimal("0")
    units: int = 1
    status: Optional[str] = LeaseStatus.ACTIVE

    @property
    def unit_count(self) -> int:
        return self.units or 1

    def is_effectively_active(self, today: date) -> bool:
        """ステータスが Active（または未設定）で、終了日が今日以降なら有効。"""
        if self.status and self.status != LeaseStatus.ACTIVE:
            return False
        if self.end_date is None:
            return False
        return self.end_date >= today


@dataclass(frozen=True)
class LedgerEntry:
    id: str
    tenant_id: str
    lease_id: str
    property_id: str
    month: str
    year: int
    amount: Decimal
    status: str
    date: Optional[date]
    payment_method: Optional[str] = None
    paid_date: Optional[date] = None
    original_amount: Optional[Decimal] = None
    remaining_due: Decimal = field(default=Decimal("0"))

    @property
    def key(self) -> int:
        return month_key(self.year, self.month)

    @property
    def is_pending(self) -> bool:
        return self.status in PaymentStatus.PENDING

    @property
    def total_due(self) -> Decimal:
        return self.original_amount if self.original_amount is not None else self.amount

    @property
    def amount_paid(self) -> Decimal:
        if self.status == PaymentStatus.PAID:
            return self.amount
        if self.status == PaymentStatus.PARTIAL:
            return self.total_due - self.remaining_due
        return Decimal("0")

    def matches_period(self, tenant_id: str, lease_id: str, month: str, year: int) -> bool:
        return (
            self.tenant_id == tenant_id
            and self.lease_id == lease_id
            and self.month == month
            and self.year == year
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "lease_id": self.lease_id,
            "property_id": self.property_id,
            "month": self.month,
            "year": self.year,
            "amount": str(self.amount),
            "status": self.status,
            "date": self.date.isoformat() if self.date else None,
            "payment_method": self.payment_method,
            "paid_date": self.paid_date.isoformat() if self.paid_date else None,
            "original_amount": str(self.original_amount) if self.original_amount is not None else None,
            "remaining_due": str(self.remaining_due),
        }


@dataclass(frozen=True)
class ExpenseItem:
    """物件に紐づく 1 件の支出。"""

    id: str
    property_id: str
    date: Optional[date]
    category: str
    amount: Decimal
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "property_id": self.property_id,
            "date": self.date.isoformat() if self.date else None,
            "category": self.category,
            "description": self.description,
            "amount": str(self.amount),
        }


def due_record_id(tenant_id: str, lease_id: str, year: int, month_name: str) -> str:
    """自動生成レコードの決定的 ID。同じ組み合わせなら常に同じ値になる。"""
    return "-".join(f"rent-due-{tenant_id}-{lease_id}-{year}-{month_name}".split())
