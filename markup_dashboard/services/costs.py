from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set, Union

from config import Config

from .classifier import TAXES, PAYMENT_FEES, COMMISSIONS, classify_charge

Selection = Union[Mapping[str, bool], Iterable[str]]


@dataclass
class CostBreakdown:
    """Percent figures are whole percents of the sale price (8.0 == 8%)."""
    fixed_cost_percent: float = 0.0
    taxes_percent: float = 0.0
    payment_fees_percent: float = 0.0
    commissions_percent: float = 0.0
    other_percent: float = 0.0
    flat_currency_total: float = 0.0
    total_fixed_and_labor: float = 0.0
    selected_fixed_expenses: List[str] = field(default_factory=list)
    selected_payroll: List[str] = field(default_factory=list)
    selected_sales_charges: List[str] = field(default_factory=list)

    @property
    def sales_charges_percent(self) -> float:
        return self.taxes_percent + self.payment_fees_percent + self.commissions_percent + self.other_percent


def selected_ids(selection: Selection) -> Set[str]:
    """Selection blobs come as {item_id: checked} or as a plain list of ids."""
    if isinstance(selection, Mapping):
        return {str(k) for k, checked in selection.items() if checked}
    return {str(i) for i in selection}


def _amount(value) -> float:
    return max(0.0, float(value or 0.0))


def payroll_monthly_cost(entry, default_hours: float = Config.DEFAULT_MONTHLY_HOURS) -> float:
    hourly_rate = float(entry.hourly_rate or 0.0)
    if hourly_rate > 0:
        return _amount(hourly_rate * float(entry.monthly_hours or default_hours))
    return _amount(entry.base_salary)


def _included(items, ids: Set[str]) -> list:
    return [i for i in items if i.active and str(i.id) in ids]


def aggregate_costs(
    fixed_expenses: Iterable,
    payroll: Iterable,
    sales_charges: Iterable,
    selection: Selection,
    average_revenue: float,
    categories: Optional[Mapping[str, str]] = None,
    default_hours: float = Config.DEFAULT_MONTHLY_HOURS,
) -> CostBreakdown:
    """
    Sum one block's included items: fixed expenses and payroll become a percent
    of average monthly revenue, sales charges are bucketed by category and
    their flat amounts summed.
    """
    ids = selected_ids(selection)
    expenses = _included(fixed_expenses, ids)
    staff = _included(payroll, ids)
    charges = _included(sales_charges, ids)

    total = sum(_amount(e.amount) for e in expenses) + sum(payroll_monthly_cost(p, default_hours) for p in staff)
    out = CostBreakdown(
        total_fixed_and_labor=total,
        selected_fixed_expenses=[str(e.id) for e in expenses],
        selected_payroll=[str(p.id) for p in staff],
        selected_sales_charges=[str(c.id) for c in charges],
    )
    if average_revenue > 0 and total > 0:
        out.fixed_cost_percent = round(total / average_revenue * 100, 2)

    buckets: Dict[str, float] = {}
    for charge in charges:
        category = classify_charge(charge.name, categories)
        buckets[category] = buckets.get(category, 0.0) + _amount(charge.percent_of_price)
        out.flat_currency_total += _amount(charge.currency_amount)

    out.taxes_percent = buckets.get(TAXES, 0.0)
    out.payment_fees_percent = buckets.get(PAYMENT_FEES, 0.0)
    out.commissions_percent = buckets.get(COMMISSIONS, 0.0)
    out.other_percent = sum(v for k, v in buckets.items() if k not in (TAXES, PAYMENT_FEES, COMMISSIONS))
    return out
