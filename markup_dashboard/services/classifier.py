from typing import Dict, Mapping, Optional
from flask import current_app, has_app_context

from config import Config

TAXES = "taxes"
PAYMENT_FEES = "payment_fees"
COMMISSIONS = "commissions"
OTHER = "other"
CATEGORIES = (TAXES, PAYMENT_FEES, COMMISSIONS, OTHER)


def charge_categories() -> Dict[str, str]:
    if has_app_context():
        return current_app.config["CHARGE_CATEGORIES"]
    return Config.CHARGE_CATEGORIES


def classify_charge(name: str, table: Optional[Mapping[str, str]] = None) -> str:
    """
    Category of a sales charge by its exact (case-sensitive) name.
    Unknown names, and names mapped to something outside CATEGORIES, are 'other'.
    """
    if table is None:
        table = charge_categories()
    category = table.get(name, OTHER)
    return category if category in CATEGORIES else OTHER
