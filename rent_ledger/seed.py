"""開発やデモ向けにサンプルデータを投入するユーティリティ。"""

from __future__ import annotations

import random
from datetime import date, timedelta
from decimal import Decimal

from .extensions import db
from .ledger.records import LeaseStatus
from .models import Expense, Lease, Property, RentPayment, Tenant
from .repository import SqlAlchemyLedgerRepository
from .services import sync_dues


def _month_start(reference: date, months_ago: int) -> date:
    year = reference.year
    month = reference.month - months_ago
    while month <= 0:
        month += 12
        year -= 1
    return date(year, month, 1)


def seed_data(with_reset: bool = False, today: date | None = None) -> int:
    """サンプルを投入し、家賃台帳を生成した件数を返す。"""
    today = today or date.today()
    if with_reset:
        RentPayment.query.delete()
        Expense.query.delete()
        Lease.query.delete()
        Tenant.query.delete()
        Property.query.delete()
        db.session.commit()

    if Property.query.count() > 0 and not with_reset:
        return 0

    property_blueprints = [
        ("Sunrise Residency", "12 MG Road, Pune", 8, "Near the metro station"),
        ("Green Park Flats", "4 Lake View, Bengaluru", 6, "Covered parking"),
        ("Harbour Heights", "77 Marine Drive, Mumbai", 10, "Sea-facing units"),
        ("Lotus Apartments", "9 Civil Lines, Jaipur", 4, None),
    ]

    properties: list[Property] = []
    for name, address, total_flats, note in property_blueprints:
        property_obj = Property(name=name, address=address, total_flats=total_flats, note=note)
        db.session.add(property_obj)
        properties.append(property_obj)

    tenants: list[Tenant] = []
    for tenant_index in range(1, 13):
        tenant = Tenant(
            name=f"Tenant {tenant_index:02d}",
            email=f"tenant{tenant_index:02d}@example.com",
            phone=f"98{random.randint(10000000, 99999999)}",
        )
        db.session.add(tenant)
        tenants.append(tenant)

    db.session.flush()

    statuses = [LeaseStatus.ACTIVE, LeaseStatus.ACTIVE, LeaseStatus.ACTIVE, LeaseStatus.TERMINATED]
    for index, tenant in enumerate(tenants):
        start_on = _month_start(today, random.randint(1, 14))
        lease = Lease(
            property=properties[index % len(properties)],
            tenant=tenant,
            monthly_rent=Decimal(random.randint(8, 25)) * Decimal("1000"),
            units=1,
            start_date=start_on,
            end_date=start_on + timedelta(days=365 * 2),
            status=random.choice(statuses),
        )
        db.session.add(lease)

    expense_blueprints = [
        ("Maintenance", "Lift servicing", Decimal("3500")),
        ("Utilities", "Common area electricity", Decimal("1800")),
        ("Repairs", "Water tank repair", Decimal("6200")),
    ]
    for property_obj in properties:
        for months_ago, (category, description, amount) in enumerate(expense_blueprints):
            db.session.add(
                Expense(
                    property=property_obj,
                    expense_date=_month_start(today, months_ago) + timedelta(days=9),
                    category=category,
                    description=description,
                    amount=amount,
                ),
            )

    db.session.commit()
    return sync_dues(SqlAlchemyLedgerRepository(), today=today).new_count
