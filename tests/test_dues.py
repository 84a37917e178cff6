from dataclasses import replace
from datetime import date
from decimal import Decimal

from rent_ledger.ledger.dues import due_date_for, generate_dues
from rent_ledger.ledger.records import MONTH_NAMES, LeaseStatus, LeaseTerms, PaymentStatus


def make_lease(start_date=date(2024, 1, 1), end_date=date(2026, 12, 31), status=LeaseStatus.ACTIVE, lease_id="L1"):
    return LeaseTerms(
        id=lease_id,
        tenant_id="T1",
        property_id="P1",
        start_date=start_date,
        end_date=end_date,
        monthly_rent=Decimal("1000"),
        status=status,
    )


def test_generates_every_completed_month():
    result = generate_dues([make_lease()], [], date(2025, 3, 10))

    assert result.new_count == 14
    periods = [(entry.month, entry.year) for entry in result.payments]
    assert periods[0] == ("January", 2024)
    assert periods[-1] == ("February", 2025)
    assert ("March", 2025) not in periods
    assert all(entry.status == PaymentStatus.UNPAID for entry in result.payments)
    assert all(entry.amount == Decimal("1000") for entry in result.payments)
    assert all(entry.property_id == "P1" for entry in result.payments)


def test_generation_is_idempotent():
    today = date(2025, 3, 10)
    first = generate_dues([make_lease()], [], today)
    second = generate_dues([make_lease()], first.payments, today)

    assert second.new_count == 0
    assert second.payments == first.payments


def test_existing_records_are_never_overwritten():
    today = date(2024, 4, 2)
    first = generate_dues([make_lease()], [], today)
    paid = [
        replace(entry, status=PaymentStatus.PAID) if entry.month == "February" else entry
        for entry in first.payments
    ]
    result = generate_dues([make_lease()], paid, date(2024, 5, 2))

    assert result.new_count == 1
    february = next(entry for entry in result.payments if entry.month == "February")
    assert february.status == PaymentStatus.PAID
    assert result.created[0].month == "April"


def test_due_date_is_fifth_of_following_month():
    result = generate_dues([make_lease(start_date=date(2024, 12, 20))], [], date(2025, 2, 1))

    assert [entry.date for entry in result.payments] == [date(2025, 1, 5), date(2025, 2, 5)]
    assert due_date_for(2024, 1, 31) == date(2024, 3, 31)
    assert due_date_for(2025, 0, 31) == date(2025, 2, 28)


def test_january_uses_previous_december_as_last_completed_month():
    result = generate_dues([make_lease(start_date=date(2024, 11, 1))], [], date(2025, 1, 20))
    assert [(entry.month, entry.year) for entry in result.payments] == [("November", 2024), ("December", 2024)]


def test_lease_end_month_caps_generation():
    lease = make_lease(start_date=date(2024, 1, 1), end_date=date(2025, 3, 31))
    result = generate_dues([lease], [], date(2025, 3, 31))
    assert result.new_count == 14

    short = make_lease(start_date=date(2024, 1, 1), end_date=date(2024, 2, 10), lease_id="L2")
    assert generate_dues([short], [], date(2024, 2, 1)).new_count == 1


def test_inactive_or_unusable_leases_are_skipped():
    leases = [
        make_lease(status=LeaseStatus.TERMINATED, lease_id="L1"),
        make_lease(status=LeaseStatus.EXPIRED, lease_id="L2"),
        make_lease(end_date=date(2025, 1, 1), lease_id="L3"),
        make_lease(end_date=None, lease_id="L4"),
        make_lease(start_date=None, lease_id="L5"),
        make_lease(start_date=date(2025, 3, 1), lease_id="L6"),
    ]
    result = generate_dues(leases, [], date(2025, 3, 10))
    assert result.new_count == 0
    assert result.payments == []


def test_generated_ids_are_deterministic():
    result = generate_dues([make_lease(start_date=date(2025, 1, 1))], [], date(2025, 2, 1))
    assert [entry.id for entry in result.payments] == ["rent-due-T1-L1-2025-January"]


def test_each_lease_of_a_tenant_gets_its_own_records():
    leases = [make_lease(lease_id="L1"), make_lease(lease_id="L2", start_date=date(2025, 1, 1))]
    result = generate_dues(leases, [], date(2025, 2, 1))

    by_lease = {}
    for entry in result.payments:
        by_lease.setdefault(entry.lease_id, []).append(entry.month)
    assert len(by_lease["L1"]) == 13
    assert by_lease["L2"] == ["January"]
    assert set(by_lease["L1"]) <= set(MONTH_NAMES)
