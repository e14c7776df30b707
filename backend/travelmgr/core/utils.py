"""
Money helpers shared by schemas and response builders.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from travelmgr.core.config import settings

CENT = Decimal("0.01")


def round_money(amount: Union[Decimal, int, float, str]) -> Decimal:
    """Round an amount to 2 decimals (HALF_UP). Expense totals are stored this way; shares keep full precision."""
    return Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP)


def format_inr(amount: Union[Decimal, int, float, str]) -> str:
    """Format an amount the way the UI shows it, e.g. ``₹1,250.50``."""
    return f"{settings.CURRENCY_SYMBOL}{round_money(amount):,.2f}"
