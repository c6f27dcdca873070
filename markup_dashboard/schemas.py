from marshmallow import Schema, fields, validates, ValidationError, EXCLUDE, pre_load

ALL_PERIODS = {"all", "todos"}


class PricingBlockSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.String(required=True)
    name = fields.String(required=True)
    desired_profit_percent = fields.Float(load_default=0.0)
    period = fields.String(load_default=None, allow_none=True)
    average_ticket = fields.Float(load_default=None, allow_none=True)

    @pre_load
    def stringify_period(self, data, **kwargs):
        # month counts are stored both as "12" and 12
        if isinstance(data, dict) and isinstance(data.get("period"), int):
            data = dict(data, period=str(data["period"]))
        return data

    @validates("period")
    def validate_period(self, v, **kwargs):
        if v is None or v.strip().lower() in ALL_PERIODS:
            return
        if not v.isdigit() or int(v) <= 0:
            raise ValidationError("period must be 'all' or a positive month count")

    @validates("desired_profit_percent")
    def validate_profit(self, v, **kwargs):
        if v < 0:
            raise ValidationError("desired_profit_percent must be >= 0")


class RevenueRecordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    id = fields.String(load_default=None)
    amount = fields.Float(required=True)
    month = fields.Date(required=True)

    @pre_load
    def trim_timestamp(self, data, **kwargs):
        # month starts are sometimes stored as full ISO timestamps
        if isinstance(data, dict) and isinstance(data.get("month"), str) and "T" in data["month"]:
            data = dict(data, month=data["month"].split("T", 1)[0])
        return data


class CalculatedMarkupSchema(Schema):
    """Computed figures only: no row id or timestamps, so two runs dump equal."""
    business_id = fields.String()
    name = fields.String()
    kind = fields.String()
    period = fields.String()
    desired_profit_percent = fields.Float()
    fixed_cost_percent = fields.Float()
    taxes_percent = fields.Float()
    payment_fees_percent = fields.Float()
    commissions_percent = fields.Float()
    other_percent = fields.Float()
    sales_charges_percent = fields.Float()
    flat_currency_total = fields.Float()
    markup_multiplier = fields.Float()
    effective_multiplier = fields.Float()
    selected_fixed_expenses = fields.List(fields.String())
    selected_payroll = fields.List(fields.String())
    selected_sales_charges = fields.List(fields.String())
    active = fields.Boolean()
