# storeadmin/services/pricing.py
"""
Discount arithmetic shared by offers and coupons.

Everything here is exact ``Decimal`` math; values are only rounded to cents
when a payload is rendered (see ``utils.money.round_money``).
"""
import math
from collections import namedtuple
from decimal import Decimal

from ..utils.money import D, Money

PERCENTAGE = "percentage"
FIXED = "fixed"
DISCOUNT_TYPES = (PERCENTAGE, FIXED)

Discount = namedtuple("Discount", ["discount_type", "discount_value"])

_HUNDRED = Decimal("100")


def apply_discount(base_price, discount) -> Money:
    """
    Final price of ``base_price`` after ``discount``, never below zero.

    ``discount`` is anything carrying ``discount_type``/``discount_value``:
    a ``Discount`` tuple, an ``Offer`` or a ``Coupon``.
    """
    base = D(base_price)
    dtype = (discount.discount_type or "").lower().strip()
    dval = D(discount.discount_value)

    if dtype == PERCENTAGE:
        final = base * (1 - dval / _HUNDRED)
    elif dtype == FIXED:
        final = base - dval
    else:
        raise ValueError(f"discount type must be one of {', '.join(DISCOUNT_TYPES)}")

    return max(Decimal("0"), final)


def discount_amount(base_price, discount) -> Money:
    return D(base_price) - apply_discount(base_price, discount)


def validate_discount(discount_type, discount_value):
    """Normalize admin input; raises ValueError with a user-facing message."""
    dtype = (discount_type or "").lower().strip()
    if dtype not in DISCOUNT_TYPES:
        raise ValueError("discount_type must be 'percentage' or 'fixed'")
    try:
        dval = float(discount_value)
    except (TypeError, ValueError):
        raise ValueError("discount_value must be numeric")
    if not math.isfinite(dval):
        raise ValueError("discount_value must be a finite number")
    if dval < 0:
        raise ValueError("discount_value must be >= 0")
    if dtype == PERCENTAGE and dval > 100:
        raise ValueError("percentage discount must be <= 100")
    return dtype, dval
