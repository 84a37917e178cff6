from datetime import date
from decimal import Decimal

from rent_ledger.ledger.records import ExpenseItem, LedgerEntry, PaymentStatus
from rent_ledger.ledger.summary import (
    expense_totals,
    filter_entries,
    is_overdue,
    monthly_cashflow,
    months_pending,
    sort_chronologically,
    summarize,
)

TODAY = date(2025, 3, 15)


def make_entry(month, year, status, amount, tenant_id="T1", property_id="P1", **extra):
    return LedgerEntry(
        id=f"{tenant_id}-{year}-{month}",
        tenant_id=tenant_id,
        lease_id="L1",
        property_id=property_id,
        month=month,
        year=year,
        amount=Decimal(amount),
        status=status,
        date=date(year, 3, 5) if month == "February" else date(year, 2, 5),
        **extra,
    )


def sample_ledger():
    return [
        make_entry("February", 2025, PaymentStatus.UNPAID, "1000"),
        make_entry("January", 2025, PaymentStatus.PARTIAL, "400", original_amount=Decimal("1000"), remaining_due=Decimal("600")),
        make_entry("December", 2024, PaymentStatus.PAID, "1000", tenant_id="T2", property_id="P2"),
    ]


def test_summary_totals():
    summary = summarize(sample_ledger(), TODAY)

    assert summary.collected == Decimal("1400")
    assert summary.outstanding == Decimal("1600")
    assert summary.counts == {PaymentStatus.UNPAID: 1, PaymentStatus.PARTIAL: 1, PaymentStatus.PAID: 1}
    assert summary.overdue_count == 2
    assert summary.to_dict()["collected"] == "1400"


def test_overdue_and_months_pending():
    february, january, december = sample_ledger()

    assert is_overdue(february, TODAY)
    assert not is_overdue(december, TODAY)
    assert not is_overdue(february, date(2025, 3, 5))
    assert months_pending(february, TODAY) == 1
    assert months_pending(december, TODAY) == 3


def test_filter_entries():
    ledger = sample_ledger()

    assert len(filter_entries(ledger, TODAY, status=PaymentStatus.UNPAID)) == 1
    assert [entry.tenant_id for entry in filter_entries(ledger, TODAY, tenant_id="T2")] == ["T2"]
    assert len(filter_entries(ledger, TODAY, property_id="P1")) == 2
    assert [entry.month for entry in filter_entries(ledger, TODAY, min_months_pending=2)] == ["January", "December"]


def test_sort_chronologically():
    assert [entry.month for entry in sort_chronologically(sample_ledger())] == ["December", "January", "February"]


def make_expense(expense_id, spent_on, amount, category="Repairs"):
    return ExpenseItem(
        id=expense_id,
        property_id="P1",
        date=spent_on,
        category=category,
        amount=Decimal(amount),
        description="Water tank repair",
    )


def test_expense_totals():
    expenses = [
        make_expense("E1", date(2025, 3, 2), "1200"),
        make_expense("E2", date(2025, 2, 20), "800", category="Utilities"),
        make_expense("E3", date(2024, 3, 9), "300"),
    ]
    totals = expense_totals(expenses, TODAY)

    assert totals.total == Decimal("2300")
    assert totals.this_month == Decimal("1200")
    assert totals.count == 3
    assert totals.by_category == {"Repairs": Decimal("1500"), "Utilities": Decimal("800")}


def test_monthly_cashflow_covers_recent_months_including_current():
    ledger = [
        make_entry("January", 2025, PaymentStatus.PAID, "1000", paid_date=date(2025, 2, 4)),
        make_entry(
            "February",
            2025,
            PaymentStatus.PARTIAL,
            "400",
            original_amount=Decimal("1000"),
            remaining_due=Decimal("600"),
            paid_date=date(2025, 3, 6),
        ),
        make_entry("December", 2024, PaymentStatus.UNPAID, "1000"),
        make_entry("March", 2024, PaymentStatus.PAID, "1000", paid_date=date(2024, 4, 5)),
    ]
    expenses = [make_expense("E1", date(2025, 3, 2), "250"), make_expense("E2", date(2024, 1, 2), "999")]

    rows = monthly_cashflow(ledger, expenses, TODAY)

    assert [(row.month, row.year) for row in rows] == [
        ("October", 2024),
        ("November", 2024),
        ("December", 2024),
        ("January", 2025),
        ("February", 2025),
        ("March", 2025),
    ]
    assert rows[4].income == Decimal("1000")
    assert rows[5].income == Decimal("400")
    assert rows[5].expenses == Decimal("250")
    assert rows[5].net == Decimal("150")
    assert sum(row.income for row in rows) == Decimal("1400")
    assert rows[5].to_dict()["net"] == "150"
