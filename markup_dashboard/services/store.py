import logging
from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy.orm.attributes import flag_modified

from ..extensions import db
from ..models import FixedExpense, PayrollEntry, SalesCharge, UserConfiguration

logger = logging.getLogger(__name__)

PRICING_BLOCKS_KEY = "pricing_blocks"
REVENUE_HISTORY_KEY = "revenue_history"


def selection_key(block_id: str) -> str:
    return f"selection-state-{block_id}"


def breakdown_key(block_name: str) -> str:
    return f"markup_{slugify(block_name)}"


def slugify(name: str) -> str:
    """'Venda Balcão' -> 'venda_balcão'; whitespace runs collapse to one underscore."""
    return "_".join(name.lower().split())


class ConfigurationStore:
    """Keyed JSON blobs of one business (user_configurations table)."""

    def __init__(self, business_id: str):
        self.business_id = business_id

    def _row(self, key: str):
        return UserConfiguration.query.filter_by(business_id=self.business_id, type=key).one_or_none()

    def load(self, key: str, default: Any = None) -> Any:
        row = self._row(key)
        if row is None or row.configuration is None:
            return default
        return row.configuration

    def save(self, key: str, value: Any) -> None:
        """Upsert; the caller owns the commit."""
        row = self._row(key)
        if row is None:
            row = UserConfiguration(business_id=self.business_id, type=key)
            db.session.add(row)
        row.configuration = value
        flag_modified(row, "configuration")


def active_items(model, business_id: str) -> List:
    return model.query.filter_by(business_id=business_id, active=True).order_by(model.created_at, model.id).all()


@dataclass(frozen=True)
class FixedExpenseItem:
    id: str
    name: str
    amount: float
    active: bool


@dataclass(frozen=True)
class PayrollItem:
    id: str
    name: str
    base_salary: float
    hourly_rate: Optional[float]
    monthly_hours: Optional[float]
    active: bool


@dataclass(frozen=True)
class SalesChargeItem:
    id: str
    name: str
    percent_of_price: Optional[float]
    currency_amount: Optional[float]
    active: bool


def load_cost_collections(business_id: str):
    """
    Active cost items of a business as frozen copies, detached from the session:
    commits later in the run neither expire nor refresh them.
    """
    fixed = [
        FixedExpenseItem(e.id, e.name, e.amount, e.active)
        for e in active_items(FixedExpense, business_id)
    ]
    payroll = [
        PayrollItem(p.id, p.name, p.base_salary, p.hourly_rate, p.monthly_hours, p.active)
        for p in active_items(PayrollEntry, business_id)
    ]
    charges = [
        SalesChargeItem(c.id, c.name, c.percent_of_price, c.currency_amount, c.active)
        for c in active_items(SalesCharge, business_id)
    ]
    logger.debug(
        f"Loaded costs for {business_id}: {len(fixed)} fixed, {len(payroll)} payroll, {len(charges)} charges"
    )
    return fixed, payroll, charges
