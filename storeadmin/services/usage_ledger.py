# storeadmin/services/usage_ledger.py
"""
Append-only coupon redemption ledger.

``coupons.used_count`` is a guard counter: it is only ever raised by the
conditional UPDATE in ``record_usage`` and in the same transaction as the
ledger row, so it always equals the number of ``coupon_usages`` rows.
"""
import logging

from sqlalchemy import func, or_, update

from ..errors import UsageLimitReached
from ..extensions import db
from ..model import Coupon, CouponUsage
from ..utils.dates import utcnow

log = logging.getLogger(__name__)


def record_usage(coupon_id: int, order_id: int | None = None, now=None) -> CouponUsage:
    """
    Atomically increment-if-below-limit, then append the ledger entry.

    Raises ``UsageLimitReached`` (and appends nothing) when the coupon is
    already at its ``usage_limit``, e.g. after losing a race with another
    redemption that passed validation at the same time.
    """
    stmt = (
        update(Coupon)
        .where(
            Coupon.id == coupon_id,
            or_(Coupon.usage_limit.is_(None), Coupon.used_count < Coupon.usage_limit),
        )
        .values(used_count=Coupon.used_count + 1)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.session.execute(stmt)
        if result.rowcount != 1:
            db.session.rollback()
            log.info("coupon %s: usage limit reached, redemption refused", coupon_id)
            raise UsageLimitReached("coupon usage limit reached")

        entry = CouponUsage(coupon_id=coupon_id, order_id=order_id, created_at=now or utcnow())
        db.session.add(entry)
        db.session.commit()
    except UsageLimitReached:
        raise
    except Exception:
        db.session.rollback()
        raise

    log.info("coupon %s: usage recorded (entry %s)", coupon_id, entry.id)
    return entry


def count_usage(coupon_id: int) -> int:
    return (
        db.session.query(func.count(CouponUsage.id))
        .filter(CouponUsage.coupon_id == coupon_id)
        .scalar()
    ) or 0


def usage_counts(coupon_ids=None) -> dict:
    """``{coupon_id: count}`` for listings; coupons without entries are absent."""
    q = db.session.query(CouponUsage.coupon_id, func.count(CouponUsage.id))
    if coupon_ids is not None:
        ids = list(coupon_ids)
        if not ids:
            return {}
        q = q.filter(CouponUsage.coupon_id.in_(ids))
    return {cid: n for cid, n in q.group_by(CouponUsage.coupon_id).all()}
