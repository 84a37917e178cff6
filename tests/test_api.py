from datetime import date

from rent_ledger.extensions import db
from rent_ledger.models import Expense, Lease, RentPayment


def create_property(client, total_flats=10, name="Sunrise"):
    response = client.post(
        "/api/properties",
        data={"name": name, "address": "1 MG Road", "total_flats": str(total_flats), "note": ""},
    )
    assert response.status_code == 201
    return response.get_json()["id"]


def create_tenant(client, name="Asha"):
    response = client.post("/api/tenants", data={"name": name, "email": "asha@example.com", "phone": "98"})
    assert response.status_code == 201
    return response.get_json()["id"]


def create_lease(client, property_id, tenant_id, units=1, status="Active", start_date="2024-12-01", **extra):
    data = {
        "property_id": property_id,
        "tenant_id": tenant_id,
        "monthly_rent": "1000",
        "units": str(units),
        "start_date": start_date,
        "end_date": "2025-12-31",
        "status": status,
    }
    data.update(extra)
    return client.post("/api/leases", data=data)


def test_ledger_requires_login(client):
    response = client.get("/api/payments")
    assert response.status_code == 401


def test_login_rejects_wrong_password(client):
    response = client.post("/auth/login", data={"email": "tester@example.com", "password": "nope"})
    assert response.status_code == 401


def test_property_occupancy(auth_client):
    property_id = create_property(auth_client, total_flats=10)
    tenant_id = create_tenant(auth_client)
    assert create_lease(auth_client, property_id, tenant_id, units=4).status_code == 201
    assert create_lease(auth_client, property_id, tenant_id, units=2).status_code == 201
    assert create_lease(auth_client, property_id, tenant_id, units=3, status="Terminated").status_code == 201

    occupancy = auth_client.get(f"/api/properties/{property_id}/occupancy").get_json()
    assert occupancy["occupied_units"] == 6
    assert occupancy["vacant_units"] == 4

    listing = auth_client.get("/api/properties").get_json()
    assert listing[0]["vacant_units"] == 4


def test_lease_cannot_oversell_units(app, auth_client):
    property_id = create_property(auth_client, total_flats=2)
    tenant_id = create_tenant(auth_client)
    response = create_lease(auth_client, property_id, tenant_id, units=2)
    assert response.status_code == 201
    lease_id = response.get_json()["id"]

    oversold = create_lease(auth_client, property_id, tenant_id, units=1)
    assert oversold.status_code == 409
    assert "Only 0 unit(s) available" in oversold.get_json()["error"]

    # 自分自身の戸数は空き枠として扱われるので更新はできる。
    updated = create_lease(auth_client, property_id, tenant_id, units=2, lease_id=str(lease_id))
    assert updated.status_code == 200

    with app.app_context():
        assert Lease.query.count() == 1


def test_lease_form_validation(auth_client):
    property_id = create_property(auth_client)
    tenant_id = create_tenant(auth_client)
    response = create_lease(auth_client, property_id, tenant_id, start_date="2026-01-01")
    assert response.status_code == 400
    assert "end_date" in response.get_json()["fields"]


def test_generate_dues_and_pay_in_order(app, auth_client):
    property_id = create_property(auth_client)
    tenant_id = create_tenant(auth_client)
    create_lease(auth_client, property_id, tenant_id)

    generated = auth_client.post("/api/dues/generate").get_json()
    assert generated["created"] == 3
    assert auth_client.post("/api/dues/generate").get_json()["created"] == 0

    payments = auth_client.get("/api/payments").get_json()
    assert [(row["month"], row["year"]) for row in payments] == [
        ("December", 2024),
        ("January", 2025),
        ("February", 2025),
    ]
    assert all(row["overdue"] for row in payments)
    december, january, _ = payments

    rejected = auth_client.post(
        f"/api/payments/{january['id']}/status",
        data={"status": "Paid", "payment_method": "Cash"},
    )
    assert rejected.status_code == 409
    assert rejected.get_json()["blocking"]["month"] == "December"

    partial = auth_client.post(
        f"/api/payments/{december['id']}/status",
        data={"status": "Partial", "amount": "400", "payment_method": "UPI", "paid_date": "2025-03-10"},
    )
    assert partial.status_code == 200
    assert partial.get_json()["status"] == "Partial"
    assert partial.get_json()["remaining_due"] == "600.00"

    completed = auth_client.post(
        f"/api/payments/{december['id']}/status",
        data={"status": "Paid", "amount": "600", "payment_method": "UPI"},
    )
    body = completed.get_json()
    assert body["status"] == "Paid"
    assert body["amount"] == "1000.00"
    assert body["original_amount"] is None
    assert body["paid_date"] == "2025-03-15"

    assert auth_client.post(
        f"/api/payments/{january['id']}/status",
        data={"status": "Paid", "payment_method": "Cash"},
    ).status_code == 200

    summary = auth_client.get("/api/payments/summary").get_json()
    assert summary["counts"] == {"Unpaid": 1, "Partial": 0, "Paid": 2}
    assert summary["collected"] == "2000.00"

    unpaid = auth_client.get("/api/payments", query_string={"status": "Unpaid"}).get_json()
    assert [row["month"] for row in unpaid] == ["February"]

    reset = auth_client.post(f"/api/payments/{december['id']}/status", data={"status": "Unpaid"})
    assert reset.get_json()["payment_method"] is None
    assert reset.get_json()["amount"] == "1000.00"


def test_partial_requires_amount(auth_client):
    response = auth_client.post("/api/payments/whatever/status", data={"status": "Partial"})
    assert response.status_code == 400


def test_unknown_payment_returns_404(auth_client):
    response = auth_client.post("/api/payments/missing/status", data={"status": "Paid"})
    assert response.status_code == 404


def test_terminate_lease_removes_unpaid_dues(app, auth_client):
    property_id = create_property(auth_client)
    tenant_id = create_tenant(auth_client)
    lease_id = create_lease(auth_client, property_id, tenant_id).get_json()["id"]
    auth_client.post("/api/dues/generate")

    response = auth_client.post(f"/api/leases/{lease_id}/terminate", data={})
    assert response.status_code == 200
    assert response.get_json()["removed_unpaid"] == 3
    assert response.get_json()["lease"]["status"] == "Terminated"

    with app.app_context():
        assert RentPayment.query.count() == 0
    occupancy = auth_client.get(f"/api/properties/{property_id}/occupancy").get_json()
    assert occupancy["occupied_units"] == 0


def test_payments_listing_generates_dues_when_enabled(app, auth_client):
    app.config["AUTO_GENERATE_DUES"] = True
    property_id = create_property(auth_client)
    tenant_id = create_tenant(auth_client)
    create_lease(auth_client, property_id, tenant_id, start_date="2025-02-01")

    payments = auth_client.get("/api/payments").get_json()
    assert [row["month"] for row in payments] == ["February"]
    with app.app_context():
        row = db.session.get(RentPayment, payments[0]["id"])
        assert row.due_date == date(2025, 3, 5)


def test_json_amounts_settle_to_the_cent(auth_client):
    property_id = create_property(auth_client)
    tenant_id = create_tenant(auth_client)
    create_lease(auth_client, property_id, tenant_id, start_date="2025-02-01")
    auth_client.post("/api/dues/generate")
    (february,) = auth_client.get("/api/payments").get_json()

    first = auth_client.post(
        f"/api/payments/{february['id']}/status",
        json={"status": "Partial", "amount": 333.33, "payment_method": "UPI"},
    )
    assert first.status_code == 200
    assert first.get_json()["amount"] == "333.33"
    assert first.get_json()["remaining_due"] == "666.67"

    second = auth_client.post(
        f"/api/payments/{february['id']}/status",
        json={"status": "Partial", "amount": 666.67, "payment_method": "UPI"},
    )
    assert second.status_code == 200
    assert second.get_json()["status"] == "Paid"
    assert second.get_json()["amount"] == "1000.00"

    (stored,) = auth_client.get("/api/payments").get_json()
    assert stored["status"] == "Paid"
    assert stored["original_amount"] is None


def test_paying_a_paid_record_again_keeps_its_details(auth_client):
    property_id = create_property(auth_client)
    tenant_id = create_tenant(auth_client)
    create_lease(auth_client, property_id, tenant_id, start_date="2025-02-01")
    auth_client.post("/api/dues/generate")
    (february,) = auth_client.get("/api/payments").get_json()
    url = f"/api/payments/{february['id']}/status"

    auth_client.post(url, data={"status": "Paid", "payment_method": "UPI", "paid_date": "2025-03-08"})
    again = auth_client.post(url, data={"status": "Paid"}).get_json()

    assert again["payment_method"] == "UPI"
    assert again["paid_date"] == "2025-03-08"
    assert again["amount"] == "1000.00"


def create_expense(client, property_id, amount="1200", expense_date="2025-03-02", **extra):
    data = {
        "property_id": property_id,
        "expense_date": expense_date,
        "category": "Repairs",
        "description": "Water tank repair",
        "amount": amount,
    }
    data.update(extra)
    return client.post("/api/expenses", data=data)


def test_expense_lifecycle(app, auth_client):
    property_id = create_property(auth_client)
    other_property_id = create_property(auth_client, name="Lotus")

    created = create_expense(auth_client, property_id)
    assert created.status_code == 201
    expense = created.get_json()
    assert expense["amount"] == "1200.00"
    assert expense["property_name"] == "Sunrise"
    create_expense(auth_client, property_id, amount="300", expense_date="2025-01-20", category="Utilities")
    create_expense(auth_client, other_property_id, amount="50")

    updated = create_expense(auth_client, property_id, amount="1250.5", expense_id=str(expense["id"]))
    assert updated.status_code == 200
    assert updated.get_json()["amount"] == "1250.50"

    listing = auth_client.get("/api/expenses", query_string={"property_id": property_id}).get_json()
    assert [row["category"] for row in listing] == ["Repairs", "Utilities"]

    summary = auth_client.get("/api/expenses/summary", query_string={"property_id": property_id}).get_json()
    assert summary["total"] == "1550.50"
    assert summary["this_month"] == "1250.50"
    assert summary["count"] == 2

    mismatch = auth_client.post(f"/api/expenses/{expense['id']}/delete", data={"expense_id": "999"})
    assert mismatch.status_code == 400
    deleted = auth_client.post(f"/api/expenses/{expense['id']}/delete", data={"expense_id": str(expense["id"])})
    assert deleted.status_code == 200
    with app.app_context():
        assert Expense.query.count() == 2


def test_expense_form_validation(auth_client):
    property_id = create_property(auth_client)

    response = create_expense(auth_client, property_id, amount="0")
    assert response.status_code == 400
    assert "amount" in response.get_json()["fields"]

    response = create_expense(auth_client, property_id, category="Holiday")
    assert response.status_code == 400
    assert "category" in response.get_json()["fields"]


def test_cashflow_report(auth_client):
    property_id = create_property(auth_client)
    tenant_id = create_tenant(auth_client)
    create_lease(auth_client, property_id, tenant_id, start_date="2025-02-01")
    auth_client.post("/api/dues/generate")
    (february,) = auth_client.get("/api/payments").get_json()
    auth_client.post(f"/api/payments/{february['id']}/status", data={"status": "Paid", "payment_method": "Cash"})
    create_expense(auth_client, property_id, amount="250")

    rows = auth_client.get("/api/reports/cashflow", query_string={"months": 3}).get_json()

    assert [row["month"] for row in rows] == ["January", "February", "March"]
    assert rows[-1] == {"year": 2025, "month": "March", "income": "1000.00", "expenses": "250.00", "net": "750.00"}
    assert auth_client.get("/api/reports/cashflow", query_string={"months": 0}).status_code == 400
