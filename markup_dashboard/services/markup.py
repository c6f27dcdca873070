import math
from dataclasses import dataclass
from typing import Optional

from config import Config


@dataclass(frozen=True)
class MarkupResult:
    total_percent: float
    multiplier: float
    effective_multiplier: float


def calc_markup(
    percent_fees: float,
    percent_taxes: float,
    percent_payment: float,
    percent_commissions: float,
    percent_others: float,
    desired_profit: float,
    fixed_value: Optional[float] = None,
    average_ticket: Optional[float] = None,
) -> MarkupResult:
    """
    All percentages are fractions (0.10 == 10%).
    multiplier = 1 / (1 - total); a flat amount per sale is spread over the
    average ticket: effective = multiplier + fixed_value / average_ticket.
    When total >= 1 the multiplier is infinite or negative; callers must use
    safe_multiplier() before pricing with it.
    """
    total = (
        percent_fees
        + percent_taxes
        + percent_payment
        + percent_commissions
        + percent_others
        + desired_profit
    )
    denominator = 1.0 - total
    multiplier = 1.0 / denominator if denominator != 0 else math.inf

    effective = spread_fixed_value(multiplier, fixed_value, average_ticket)
    return MarkupResult(total_percent=total, multiplier=multiplier, effective_multiplier=effective)


def spread_fixed_value(
    multiplier: float, fixed_value: Optional[float] = None, average_ticket: Optional[float] = None
) -> float:
    if fixed_value and average_ticket:
        return multiplier + fixed_value / average_ticket
    return multiplier


def safe_multiplier(value: float, fallback: float = Config.MARKUP_FALLBACK_MULTIPLIER) -> float:
    """Return value if it is usable for pricing (finite and > 1), else fallback."""
    if math.isfinite(value) and value > 1:
        return value
    return fallback


def suggest_price(unit_cost: float, multiplier: float) -> float:
    if not math.isfinite(unit_cost) or unit_cost < 0:
        raise ValueError("unit_cost must be a finite number >= 0")
    return round(unit_cost * multiplier, 2)
