# backend/utils/money.py
import math
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Optional

from config import settings

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_money(value) -> Decimal:
    """Normalize a price to a non-negative Decimal with two decimal places.

    Floats go through ``str`` so 19.99 stays 19.99 instead of its binary
    expansion. Raises ``ValueError`` for negative or non-numeric input.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Invalid amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid amount: {value!r}")
    if amount < 0:
        raise ValueError(f"Amount must not be negative: {value!r}")
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_stock(value) -> int:
    """Floor a stock level to a whole, non-negative number (missing -> 0)."""
    if value is None:
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid stock value: {value!r}")
    if math.isnan(number) or math.isinf(number):
        raise ValueError(f"Invalid stock value: {value!r}")
    return max(0, math.floor(number))


def to_quantity(value) -> int:
    # Quantities below one are floored to one, never to zero
    return max(1, int(value))


def line_total(price, quantity: int) -> Decimal:
    return (to_money(price) * quantity).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_totals(
    subtotal,
    shipping_fee: Optional[float] = None,
    tax_rate: Optional[float] = None,
) -> Dict[str, Decimal]:
    """Apply the flat-shipping and fixed-rate tax policy to a subtotal.

    Shipping is charged only on a non-empty basket. The total is the exact
    sum of the rounded parts, so total == subtotal + shipping + tax holds.
    """
    subtotal = to_money(subtotal)
    fee = to_money(settings.SHIPPING_FLAT_FEE if shipping_fee is None else shipping_fee)
    rate = Decimal(str(settings.TAX_RATE if tax_rate is None else tax_rate))

    shipping = fee if subtotal > 0 else ZERO
    tax = (subtotal * rate).quantize(CENT, rounding=ROUND_HALF_UP)
    total = subtotal + shipping + tax
    return {"subtotal": subtotal, "shipping": shipping, "tax": tax, "total": total}
