"""物件・入居者・契約・入金操作の入力検証フォーム。"""

from flask_wtf import FlaskForm
from wtforms import BooleanField, DateField, DecimalField, HiddenField, IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Email, InputRequired, NumberRange, Optional

from ...ledger.records import LeaseStatus, PaymentStatus

PAYMENT_METHODS = ("Cash", "UPI", "Bank Transfer", "Check")


class PropertyForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired()])
    address = StringField("Address", validators=[DataRequired()])
    total_flats = IntegerField("Total flats", validators=[InputRequired(), NumberRange(min=0)])
    note = TextAreaField("Note", validators=[Optional()])


class TenantForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired()])
    email = StringField("Email", validators=[Optional(), Email()])
    phone = StringField("Phone", validators=[Optional()])


LEASE_STATUS_CHOICES = [(status, status) for status in LeaseStatus.ALL]


class LeaseForm(FlaskForm):
    lease_id = HiddenField(validators=[Optional()])
    property_id = IntegerField("Property", validators=[DataRequired()])
    tenant_id = IntegerField("Tenant", validators=[DataRequired()])
    monthly_rent = DecimalField("Monthly rent", places=2, validators=[InputRequired(), NumberRange(min=0)])
    units = IntegerField("Units", default=1, validators=[Optional(), NumberRange(min=1)])
    start_date = DateField("Start date", validators=[DataRequired()], format="%Y-%m-%d")
    end_date = DateField("End date", validators=[DataRequired()], format="%Y-%m-%d")
    status = SelectField("Status", choices=LEASE_STATUS_CHOICES, default=LeaseStatus.ACTIVE)

    def validate(self, extra_validators: dict | None = None) -> bool:
        """終了日が開始日より前の契約は受け付けない。"""
        if not super().validate(extra_validators):
            return False
        if self.end_date.data < self.start_date.data:
            self.end_date.errors.append("End date must be on or after the start date.")
            return False
        return True


class TerminateLeaseForm(FlaskForm):
    keep_unpaid = BooleanField("Keep unpaid rent records")


class PaymentStatusForm(FlaskForm):
    status = SelectField("Status", choices=[(status, status) for status in PaymentStatus.ALL], validators=[DataRequired()])
    amount = DecimalField("Amount received", places=2, validators=[Optional(), NumberRange(min=0.01)])
    payment_method = StringField("Payment method", validators=[Optional(), AnyOf(PAYMENT_METHODS)])
    paid_date = DateField("Paid on", validators=[Optional()], format="%Y-%m-%d")

    def validate(self, extra_validators: dict | None = None) -> bool:
        if not super().validate(extra_validators):
            return False
        if self.status.data == PaymentStatus.PARTIAL and self.amount.data is None:
            self.amount.errors.append("Enter the amount received for a partial payment.")
            return False
        return True


EXPENSE_CATEGORIES = (
    "Maintenance",
    "Utilities",
    "Taxes",
    "Insurance",
    "Management Fees",
    "Supplies",
    "Repairs",
    "Cleaning",
    "Legal & Professional",
    "Advertising",
    "Other",
)


class ExpenseForm(FlaskForm):
    expense_id = HiddenField(validators=[Optional()])
    property_id = IntegerField("Property", validators=[DataRequired()])
    expense_date = DateField("Date", validators=[DataRequired()], format="%Y-%m-%d")
    category = SelectField("Category", choices=[(category, category) for category in EXPENSE_CATEGORIES])
    description = StringField("Description", validators=[DataRequired()])
    amount = DecimalField("Amount", places=2, validators=[InputRequired(), NumberRange(min=0.01)])


class DeleteExpenseForm(FlaskForm):
    expense_id = HiddenField(validators=[DataRequired()])
