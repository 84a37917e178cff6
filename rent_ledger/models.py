"""家賃台帳で扱うデータモデルと共通カラム定義をまとめたモジュール。"""

from datetime import date
from decimal import Decimal

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from .extensions import db
from .ledger.records import ExpenseItem, LeaseStatus, LeaseTerms, LedgerEntry, PaymentStatus


class TimestampMixin:
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )


class User(UserMixin, TimestampMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(50), default="member", nullable=False)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password, method="pbkdf2:sha256")

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User {self.email}>"


class Property(TimestampMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    total_flats = db.Column(db.Integer, nullable=False, default=0)
    note = db.Column(db.Text, nullable=True)

    leases = db.relationship("Lease", back_populates="property")
    expenses = db.relationship("Expense", back_populates="property")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "total_flats": self.total_flats,
            "note": self.note,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Property {self.name}>"


class Tenant(TimestampMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(50), nullable=True)

    leases = db.relationship("Lease", back_populates="tenant")

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email, "phone": self.phone}

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Tenant {self.name}>"


class Lease(TimestampMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    property_id = db.Column(db.Integer, db.ForeignKey("property.id"), nullable=False)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenant.id"), nullable=False)
    monthly_rent = db.Column(db.Numeric(10, 2), nullable=False)
    units = db.Column(db.Integer, nullable=False, default=1)
    start_date = db.Column(db.Date, nullable=True, default=date.today)
    end_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(50), nullable=True, default=LeaseStatus.ACTIVE)

    property = db.relationship("Property", back_populates="leases")
    tenant = db.relationship("Tenant", back_populates="leases")
    payments = db.relationship("RentPayment", back_populates="lease")

    def to_terms(self) -> LeaseTerms:
        """エンジンに渡す読み取り専用の契約条件へ変換する。"""
        return LeaseTerms(
            id=str(self.id),
            tenant_id=str(self.tenant_id),
            property_id=str(self.property_id) if self.property_id is not None else "",
            start_date=self.start_date,
            end_date=self.end_date,
            monthly_rent=self.monthly_rent,
            units=self.units or 1,
            status=self.status,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "property_id": self.property_id,
            "tenant_id": self.tenant_id,
            "monthly_rent": str(self.monthly_rent),
            "units": self.units,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "status": self.status or LeaseStatus.ACTIVE,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Lease {self.id}: {self.property_id} -> {self.tenant_id}>"


class RentPayment(TimestampMixin, db.Model):
    """1 入居者・1 契約・1 か月分の家賃明細。"""

    __table_args__ = (
        db.UniqueConstraint("tenant_id", "lease_id", "month", "year", name="uq_rent_payment_period"),
    )

    id = db.Column(db.String(160), primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenant.id"), nullable=False, index=True)
    lease_id = db.Column(db.Integer, db.ForeignKey("lease.id"), nullable=False, index=True)
    property_id = db.Column(db.Integer, db.ForeignKey("property.id"), nullable=True)
    month = db.Column(db.String(12), nullable=False)
    year = db.Column(db.Integer, nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=PaymentStatus.UNPAID)
    due_date = db.Column(db.Date, nullable=True)
    payment_method = db.Column(db.String(50), nullable=True)
    paid_date = db.Column(db.Date, nullable=True)
    original_amount = db.Column(db.Numeric(10, 2), nullable=True)
    remaining_due = db.Column(db.Numeric(10, 2), nullable=False, default=0)

    lease = db.relationship("Lease", back_populates="payments")

    def to_entry(self) -> LedgerEntry:
        return LedgerEntry(
            id=self.id,
            tenant_id=str(self.tenant_id),
            lease_id=str(self.lease_id),
            property_id=str(self.property_id) if self.property_id is not None else "",
            month=self.month,
            year=self.year,
            amount=self.amount,
            status=self.status,
            date=self.due_date,
            payment_method=self.payment_method,
            paid_date=self.paid_date,
            original_amount=self.original_amount,
            remaining_due=self.remaining_due if self.remaining_due is not None else Decimal("0"),
        )

    def apply_entry(self, entry: LedgerEntry) -> None:
        self.tenant_id = int(entry.tenant_id)
        self.lease_id = int(entry.lease_id)
        self.property_id = int(entry.property_id) if entry.property_id else None
        self.month = entry.month
        self.year = entry.year
        self.amount = entry.amount
        self.status = entry.status
        self.due_date = entry.date
        self.payment_method = entry.payment_method
        self.paid_date = entry.paid_date
        self.original_amount = entry.original_amount
        self.remaining_due = entry.remaining_due

    def __repr__(self) -> str:  # pragma: no cover
        return f"<RentPayment {self.id} {self.status}>"


class Expense(TimestampMixin, db.Model):
    """物件ごとの支出（修繕費・光熱費・税金など）。"""

    id = db.Column(db.Integer, primary_key=True)
    property_id = db.Column(db.Integer, db.ForeignKey("property.id"), nullable=False, index=True)
    expense_date = db.Column(db.Date, nullable=False, default=date.today)
    category = db.Column(db.String(60), nullable=False)
    description = db.Column(db.String(255), nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)

    property = db.relationship("Property", back_populates="expenses")

    def to_item(self) -> ExpenseItem:
        return ExpenseItem(
            id=str(self.id),
            property_id=str(self.property_id),
            date=self.expense_date,
            category=self.category,
            amount=self.amount,
            description=self.description or "",
        )

    def to_dict(self) -> dict:
        data = self.to_item().to_dict()
        data["id"] = self.id
        data["property_id"] = self.property_id
        data["property_name"] = self.property.name if self.property else None
        return data

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Expense {self.id} {self.category} {self.amount}>"
