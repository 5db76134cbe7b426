# storeadmin/services/coupon_service.py
import enum
import logging
from dataclasses import dataclass

from sqlalchemy import func

from ..errors import Conflict, NotFound
from ..extensions import db
from ..model import Coupon
from ..utils.dates import as_naive_utc, parse_iso8601, utcnow
from ..utils.money import D, Money, to_float
from ..utils.parse import parse_bool, parse_opt_float, parse_opt_int
from .pricing import apply_discount, validate_discount
from .usage_ledger import count_usage, record_usage

log = logging.getLogger(__name__)


class CouponError(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    INACTIVE = "INACTIVE"
    NOT_STARTED = "NOT_STARTED"
    EXPIRED = "EXPIRED"
    LIMIT_REACHED = "LIMIT_REACHED"
    BELOW_MINIMUM = "BELOW_MINIMUM"


MESSAGES = {
    CouponError.NOT_FOUND: "Coupon not found",
    CouponError.INACTIVE: "Coupon is not active",
    CouponError.NOT_STARTED: "Coupon has not started yet",
    CouponError.EXPIRED: "Coupon has expired",
    CouponError.LIMIT_REACHED: "Coupon usage limit reached",
    CouponError.BELOW_MINIMUM: "Minimum order value for this coupon is {amount:.2f}",
}


@dataclass(frozen=True)
class CouponCheck:
    ok: bool
    reason: CouponError | None = None
    message: str = "Coupon is valid"

    @classmethod
    def reject(cls, reason: CouponError, **fmt):
        return cls(False, reason, MESSAGES[reason].format(**fmt))

    def as_api(self):
        return {"valid": self.ok, "reason": self.reason.value if self.reason else None}


def validate_coupon(coupon, order_total, now, used_count: int) -> CouponCheck:
    """
    Decide whether ``coupon`` may be redeemed against ``order_total``.

    Checks run in a fixed order and the first failure wins, so the customer
    always sees the same reason for the same coupon state. Read-only.
    """
    now = as_naive_utc(now)
    if not coupon.is_active:
        return CouponCheck.reject(CouponError.INACTIVE)
    if coupon.start_date and now < coupon.start_date:
        return CouponCheck.reject(CouponError.NOT_STARTED)
    if coupon.end_date and now > coupon.end_date:
        return CouponCheck.reject(CouponError.EXPIRED)
    if coupon.usage_limit is not None and used_count >= coupon.usage_limit:
        return CouponCheck.reject(CouponError.LIMIT_REACHED)
    if coupon.min_order_value is not None and D(order_total) < D(coupon.min_order_value):
        return CouponCheck.reject(CouponError.BELOW_MINIMUM, amount=float(coupon.min_order_value))
    return CouponCheck(True)


def normalize_code(code) -> str:
    return (code or "").strip().upper()


def find_coupon(code) -> Coupon | None:
    code = normalize_code(code)
    if not code:
        return None
    return Coupon.query.filter(func.upper(Coupon.code) == code).first()


@dataclass(frozen=True)
class CouponQuote:
    coupon: Coupon
    check: CouponCheck
    order_total: Money
    final_total: Money | None = None

    @property
    def discount(self) -> Money | None:
        if self.final_total is None:
            return None
        return self.order_total - self.final_total

    def as_api(self):
        return {
            **self.check.as_api(),
            "message": self.check.message,
            "code": self.coupon.code,
            "discount_type": self.coupon.discount_type,
            "discount_value": self.coupon.discount_value,
            "order_total": to_float(self.order_total),
            "discount": to_float(self.discount),
            "final_total": to_float(self.final_total),
        }


def quote_coupon(code, order_total, now=None) -> CouponQuote:
    """Lookup + validate + price, without touching the ledger."""
    coupon = find_coupon(code)
    if coupon is None:
        raise NotFound(MESSAGES[CouponError.NOT_FOUND], {"reason": CouponError.NOT_FOUND.value})

    total = D(order_total)
    check = validate_coupon(coupon, total, now or utcnow(), count_usage(coupon.id))
    if not check.ok:
        log.info("coupon %s rejected: %s", coupon.code, check.reason.value)
        return CouponQuote(coupon, check, total)
    return CouponQuote(coupon, check, total, apply_discount(total, coupon))


def redeem_coupon(code, order_total, now=None, order_id=None) -> CouponQuote:
    """
    Quote, and record the redemption when the quote is accepted.

    A rejected quote is returned untouched; nothing is appended for it.
    Losing the limit race to a concurrent redemption raises
    ``UsageLimitReached``.
    """
    quote = quote_coupon(code, order_total, now)
    if quote.check.ok:
        record_usage(quote.coupon.id, order_id=order_id, now=now)
    return quote


# ---- admin input --------------------------------------------------------------

def coupon_fields_from_payload(data: dict, current: Coupon | None = None) -> dict:
    def pick(key, default=None):
        if key in data:
            return data.get(key)
        return getattr(current, key) if current is not None else default

    code = normalize_code(pick("code"))
    if not code:
        raise ValueError("code is required")

    existing = find_coupon(code)
    if existing is not None and (current is None or existing.id != current.id):
        raise Conflict("Coupon code already exists")

    dtype, dval = validate_discount(pick("discount_type", "percentage"), pick("discount_value"))

    usage_limit = parse_opt_int(pick("usage_limit"))
    if pick("usage_limit") not in (None, "") and usage_limit is None:
        raise ValueError("usage_limit must be an integer")
    if usage_limit is not None and usage_limit < 0:
        raise ValueError("usage_limit must be >= 0")

    min_order_value = parse_opt_float(pick("min_order_value"))
    if pick("min_order_value") not in (None, "") and min_order_value is None:
        raise ValueError("min_order_value must be numeric")
    if min_order_value is not None and min_order_value < 0:
        raise ValueError("min_order_value must be >= 0")

    start_raw, end_raw = pick("start_date"), pick("end_date")
    start_date, end_date = parse_iso8601(start_raw), parse_iso8601(end_raw)
    if start_raw and not start_date:
        raise ValueError("Invalid datetime format for start_date")
    if end_raw and not end_date:
        raise ValueError("Invalid datetime format for end_date")
    if not start_date or not end_date:
        raise ValueError("start_date and end_date are required")
    if start_date >= end_date:
        raise ValueError("start_date must be before end_date")

    return {
        "code": code,
        "discount_type": dtype,
        "discount_value": dval,
        "usage_limit": usage_limit,
        "min_order_value": min_order_value,
        "start_date": start_date,
        "end_date": end_date,
        "is_active": parse_bool(pick("is_active", True), True),
    }


def delete_coupon(coupon: Coupon):
    if count_usage(coupon.id) > 0:
        raise Conflict("Coupon cannot be deleted because it has been used", {"code": "COUPON_USED"})
    db.session.delete(coupon)
    db.session.commit()
