"""物件・契約・家賃台帳・支出を JSON で操作する Blueprint。"""

from __future__ import annotations

from datetime import date

from flask import Blueprint, current_app, jsonify, request
from flask_login import login_required

from ...extensions import db
from ...ledger.occupancy import occupied_units, vacant_units
from ...ledger.payments import PaymentNotFoundError, PaymentUpdate
from ...ledger.records import LeaseStatus, PaymentStatus, parse_date, to_cents
from ...ledger.summary import (
    expense_totals,
    filter_entries,
    is_overdue,
    monthly_cashflow,
    sort_chronologically,
    summarize,
)
from ...models import Expense, Lease, Property, Tenant
from ...repository import SqlAlchemyLedgerRepository
from ...services import (
    LedgerError,
    check_units_available,
    sync_dues,
    terminate_lease,
    update_payment_status,
)
from .forms import (
    DeleteExpenseForm,
    ExpenseForm,
    LeaseForm,
    PaymentStatusForm,
    PropertyForm,
    TenantForm,
    TerminateLeaseForm,
)

ledger_bp = Blueprint("ledger", __name__, url_prefix="/api")


def ledger_today() -> date:
    """`LEDGER_TODAY` が設定されていればそれを今日として扱う。"""
    return parse_date(current_app.config.get("LEDGER_TODAY")) or date.today()


def _form_error(form):
    return jsonify({"error": "validation failed", "fields": form.errors}), 400


@ledger_bp.errorhandler(LedgerError)
def handle_ledger_error(error: LedgerError):
    body = {"error": str(error)}
    blocking = getattr(error, "blocking", None)
    if blocking is not None:
        body["blocking"] = {"id": blocking.id, "month": blocking.month, "year": blocking.year, "status": blocking.status}
    return jsonify(body), error.status_code


@ledger_bp.errorhandler(PaymentNotFoundError)
def handle_missing_payment(error: PaymentNotFoundError):
    return jsonify({"error": str(error)}), 404


@ledger_bp.route("/properties", methods=["GET"])
@login_required
def list_properties():
    """物件一覧。入居戸数・空室数は有効契約から都度算出する。"""
    today = ledger_today()
    leases = SqlAlchemyLedgerRepository().load_leases()
    rows = []
    for property_obj in Property.query.order_by(Property.name).all():
        data = property_obj.to_dict()
        data["occupied_units"] = occupied_units(property_obj, leases, today)
        data["vacant_units"] = vacant_units(property_obj, leases, today)
        rows.append(data)
    return jsonify(rows)


@ledger_bp.route("/properties", methods=["POST"])
@login_required
def create_property():
    form = PropertyForm()
    if not form.validate_on_submit():
        return _form_error(form)
    property_obj = Property(
        name=form.name.data.strip(),
        address=form.address.data,
        total_flats=form.total_flats.data,
        note=form.note.data,
    )
    db.session.add(property_obj)
    db.session.commit()
    return jsonify(property_obj.to_dict()), 201


@ledger_bp.route("/properties/<int:property_id>/occupancy")
@login_required
def property_occupancy(property_id: int):
    property_obj = Property.query.get_or_404(property_id)
    today = ledger_today()
    leases = SqlAlchemyLedgerRepository().load_leases()
    return jsonify(
        {
            "property_id": property_obj.id,
            "total_flats": property_obj.total_flats,
            "occupied_units": occupied_units(property_obj, leases, today),
            "vacant_units": vacant_units(property_obj, leases, today),
        },
    )


@ledger_bp.route("/tenants", methods=["POST"])
@login_required
def create_tenant():
    form = TenantForm()
    if not form.validate_on_submit():
        return _form_error(form)
    tenant = Tenant(name=form.name.data, email=form.email.data or None, phone=form.phone.data or None)
    db.session.add(tenant)
    db.session.commit()
    return jsonify(tenant.to_dict()), 201


@ledger_bp.route("/leases", methods=["GET"])
@login_required
def list_leases():
    leases = Lease.query.order_by(Lease.start_date.desc(), Lease.id).all()
    return jsonify([lease.to_dict() for lease in leases])


@ledger_bp.route("/leases", methods=["POST"])
@login_required
def save_lease():
    """契約の新規登録／更新。hidden の lease_id があれば更新として扱う。"""
    form = LeaseForm()
    if not form.validate_on_submit():
        return _form_error(form)

    property_obj = Property.query.get_or_404(form.property_id.data)
    Tenant.query.get_or_404(form.tenant_id.data)
    lease_id_raw = str(form.lease_id.data or "").strip()
    lease = None
    if lease_id_raw:
        lease = Lease.query.get_or_404(int(lease_id_raw)) if lease_id_raw.isdigit() else None
        if lease is None:
            return jsonify({"error": "invalid lease id"}), 400

    units = form.units.data or 1
    if form.status.data == LeaseStatus.ACTIVE:
        # 編集中の契約自身の戸数は空き枠に足し戻して判定する。
        check_units_available(
            property_obj,
            units,
            SqlAlchemyLedgerRepository(),
            today=ledger_today(),
            editing_lease_id=str(lease.id) if lease else None,
        )

    created = lease is None
    if created:
        lease = Lease()
        db.session.add(lease)
    lease.property_id = property_obj.id
    lease.tenant_id = form.tenant_id.data
    lease.monthly_rent = to_cents(form.monthly_rent.data)
    lease.units = units
    lease.start_date = form.start_date.data
    lease.end_date = form.end_date.data
    lease.status = form.status.data
    db.session.commit()
    return jsonify(lease.to_dict()), 201 if created else 200


@ledger_bp.route("/leases/<int:lease_id>/terminate", methods=["POST"])
@login_required
def terminate(lease_id: int):
    form = TerminateLeaseForm()
    if not form.validate_on_submit():
        return _form_error(form)
    removed = terminate_lease(
        SqlAlchemyLedgerRepository(),
        str(lease_id),
        purge_unpaid=not form.keep_unpaid.data,
    )
    lease = db.session.get(Lease, lease_id)
    return jsonify({"lease": lease.to_dict(), "removed_unpaid": removed})


@ledger_bp.route("/dues/generate", methods=["POST"])
@login_required
def generate():
    result = sync_dues(
        SqlAlchemyLedgerRepository(),
        today=ledger_today(),
        due_day=current_app.config["RENT_DUE_DAY"],
    )
    return jsonify({"created": result.new_count, "ids": [entry.id for entry in result.created]})


@ledger_bp.route("/payments")
@login_required
def list_payments():
    """家賃台帳の一覧。読み込みのたびに不足分の月次レコードを補完する。"""
    today = ledger_today()
    repository = SqlAlchemyLedgerRepository()
    if current_app.config.get("AUTO_GENERATE_DUES"):
        sync_dues(repository, today=today, due_day=current_app.config["RENT_DUE_DAY"])

    status = request.args.get("status")
    if status and status not in PaymentStatus.ALL:
        return jsonify({"error": f"unknown status: {status}"}), 400
    entries = filter_entries(
        repository.load_ledger(),
        today,
        status=status,
        tenant_id=request.args.get("tenant_id"),
        property_id=request.args.get("property_id"),
        min_months_pending=request.args.get("months_pending", type=int),
    )
    rows = []
    for entry in sort_chronologically(entries):
        data = entry.to_dict()
        data["overdue"] = is_overdue(entry, today)
        rows.append(data)
    return jsonify(rows)


@ledger_bp.route("/payments/summary")
@login_required
def payments_summary():
    repository = SqlAlchemyLedgerRepository()
    return jsonify(summarize(repository.load_ledger(), ledger_today()).to_dict())


@ledger_bp.route("/payments/<payment_id>/status", methods=["POST"])
@login_required
def change_payment_status(payment_id: str):
    """入金・一部入金・取り消しを反映する。古い月が未精算なら 409 を返す。"""
    form = PaymentStatusForm()
    if not form.validate_on_submit():
        return _form_error(form)

    update = None
    if form.status.data != PaymentStatus.UNPAID:
        update = PaymentUpdate(
            amount=form.amount.data,
            payment_method=form.payment_method.data or None,
            paid_date=form.paid_date.data,
        )
    entry = update_payment_status(
        SqlAlchemyLedgerRepository(),
        payment_id,
        form.status.data,
        update,
        scope=current_app.config["SETTLEMENT_SCOPE"],
        today=ledger_today(),
    )
    return jsonify(entry.to_dict())


def _expense_query():
    query = Expense.query
    property_id = request.args.get("property_id", type=int)
    if property_id is not None:
        query = query.filter_by(property_id=property_id)
    return query.order_by(Expense.expense_date.desc(), Expense.id.desc())


@ledger_bp.route("/expenses")
@login_required
def list_expenses():
    return jsonify([expense.to_dict() for expense in _expense_query().all()])


@ledger_bp.route("/expenses/summary")
@login_required
def expenses_summary():
    items = [expense.to_item() for expense in _expense_query().all()]
    return jsonify(expense_totals(items, ledger_today()).to_dict())


@ledger_bp.route("/expenses", methods=["POST"])
@login_required
def save_expense():
    """支出の新規登録／更新。hidden の expense_id があれば更新として扱う。"""
    form = ExpenseForm()
    if not form.validate_on_submit():
        return _form_error(form)

    property_obj = Property.query.get_or_404(form.property_id.data)
    expense_id_raw = str(form.expense_id.data or "").strip()
    expense = None
    if expense_id_raw:
        if not expense_id_raw.isdigit():
            return jsonify({"error": "invalid expense id"}), 400
        expense = Expense.query.get_or_404(int(expense_id_raw))

    created = expense is None
    if created:
        expense = Expense()
        db.session.add(expense)
    expense.property_id = property_obj.id
    expense.expense_date = form.expense_date.data
    expense.category = form.category.data
    expense.description = form.description.data.strip()
    expense.amount = to_cents(form.amount.data)
    db.session.commit()
    return jsonify(expense.to_dict()), 201 if created else 200


@ledger_bp.route("/expenses/<int:expense_id>/delete", methods=["POST"])
@login_required
def delete_expense(expense_id: int):
    form = DeleteExpenseForm()
    if not form.validate_on_submit():
        return _form_error(form)
    # hidden の ID と URL が一致しない削除要求は受け付けない。
    if str(form.expense_id.data) != str(expense_id):
        return jsonify({"error": "expense id does not match"}), 400
    expense = Expense.query.get_or_404(expense_id)
    db.session.delete(expense)
    db.session.commit()
    return jsonify({"deleted": expense_id})


@ledger_bp.route("/reports/cashflow")
@login_required
def cashflow_report():
    """直近数か月の家賃入金と支出の月別推移。"""
    months = request.args.get("months", default=6, type=int)
    if months < 1 or months > 36:
        return jsonify({"error": "months must be between 1 and 36"}), 400
    repository = SqlAlchemyLedgerRepository()
    expenses = [expense.to_item() for expense in Expense.query.all()]
    rows = monthly_cashflow(repository.load_ledger(), expenses, ledger_today(), months)
    return jsonify([row.to_dict() for row in rows])
