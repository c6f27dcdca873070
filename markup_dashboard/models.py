from datetime import datetime
from uuid import uuid4
from .extensions import db


def _new_id():
    return str(uuid4())


class FixedExpense(db.Model):
    __tablename__ = "fixed_expenses"
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    business_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    amount = db.Column(db.Float, nullable=False, default=0.0)  # monthly, currency
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class PayrollEntry(db.Model):
    __tablename__ = "payroll_entries"
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    business_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)
    role = db.Column(db.String(80), nullable=True)
    base_salary = db.Column(db.Float, nullable=False, default=0.0)
    hourly_rate = db.Column(db.Float, nullable=True)     # when set, wins over base_salary
    monthly_hours = db.Column(db.Float, nullable=True)
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class SalesCharge(db.Model):
    __tablename__ = "sales_charges"
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    business_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False)     # drives the category
    percent_of_price = db.Column(db.Float, nullable=True)  # whole percent, 8 == 8%
    currency_amount = db.Column(db.Float, nullable=True)
    active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)


class UserConfiguration(db.Model):
    """Opaque JSON blobs keyed by (business, type): blocks, revenue history, selections."""
    __tablename__ = "user_configurations"
    __table_args__ = (db.UniqueConstraint("business_id", "type", name="uq_configuration_type"),)
    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.String(64), nullable=False, index=True)
    type = db.Column(db.String(120), nullable=False)
    configuration = db.Column(db.JSON, nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CalculatedMarkup(db.Model):
    __tablename__ = "markups"
    id = db.Column(db.Integer, primary_key=True)
    business_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(120), nullable=False, index=True)
    kind = db.Column(db.String(20), nullable=False, default="normal")  # normal / sub_receita
    period = db.Column(db.String(10), nullable=True)  # as stored on the block

    desired_profit_percent = db.Column(db.Float, nullable=False, default=0.0)
    fixed_cost_percent = db.Column(db.Float, nullable=False, default=0.0)
    taxes_percent = db.Column(db.Float, nullable=False, default=0.0)
    payment_fees_percent = db.Column(db.Float, nullable=False, default=0.0)
    commissions_percent = db.Column(db.Float, nullable=False, default=0.0)
    other_percent = db.Column(db.Float, nullable=False, default=0.0)
    sales_charges_percent = db.Column(db.Float, nullable=False, default=0.0)
    flat_currency_total = db.Column(db.Float, nullable=False, default=0.0)

    markup_multiplier = db.Column(db.Float, nullable=False)
    effective_multiplier = db.Column(db.Float, nullable=False)

    # ids included when this row was computed
    selected_fixed_expenses = db.Column(db.JSON, nullable=True)
    selected_payroll = db.Column(db.JSON, nullable=True)
    selected_sales_charges = db.Column(db.JSON, nullable=True)

    active = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
