# backend/utils/order_number.py
import random
import re
from datetime import datetime
from typing import Optional

ORDER_NUMBER_PATTERN = re.compile(r"^ORD\d{10}$")


def generate_order_number(now: Optional[datetime] = None, rng: Optional[random.Random] = None) -> str:
    """Build a human-readable order number: ORD + YYMMDD + 4 random digits.

    Only 10,000 numbers exist per day, so uniqueness comes from the
    ``orders.order_number`` constraint and the caller's retry loop.
    """
    now = now or datetime.now()
    suffix = (rng or random).randint(0, 9999)
    return f"ORD{now:%y%m%d}{suffix:04d}"


def is_order_number(value: str) -> bool:
    return bool(ORDER_NUMBER_PATTERN.match(value or ""))
