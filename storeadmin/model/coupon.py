# --- storeadmin/model/coupon.py ---

from sqlalchemy.sql import func

from ..extensions import db
from ..utils.dates import isoformat


class Coupon(db.Model):
    __tablename__ = "coupons"

    id = db.Column(db.Integer, primary_key=True)
    # stored upper-cased, matched case-insensitively
    code = db.Column(db.String(64), unique=True, nullable=False, index=True)

    # "percentage" or "fixed"
    discount_type = db.Column(db.String(16), nullable=False, default="percentage")
    discount_value = db.Column(db.Float, nullable=False, default=0.0)

    # Optional constraints
    usage_limit = db.Column(db.Integer, nullable=True)         # None = unlimited
    min_order_value = db.Column(db.Float, nullable=True)       # order total must be >= this
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    # Guard counter, only ever bumped by the usage ledger's conditional update
    used_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")

    created_at = db.Column(db.DateTime, server_default=func.now())

    usages = db.relationship("CouponUsage", back_populates="coupon", lazy="dynamic")

    def as_api(self, usage_count=None):
        return {
            "id": self.id,
            "code": self.code,
            "discount_type": self.discount_type,
            "discount_value": self.discount_value,
            "usage_limit": self.usage_limit,
            "usage_count": self.used_count if usage_count is None else usage_count,
            "min_order_value": self.min_order_value,
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "is_active": self.is_active,
            "created_at": isoformat(self.created_at),
        }


class CouponUsage(db.Model):
    """One row per successful redemption; never updated."""
    __tablename__ = "coupon_usages"

    id = db.Column(db.Integer, primary_key=True)
    coupon_id = db.Column(db.Integer, db.ForeignKey("coupons.id"), index=True, nullable=False)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), index=True, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False)

    coupon = db.relationship("Coupon", back_populates="usages")

    def as_api(self):
        return {
            "id": self.id,
            "coupon_id": self.coupon_id,
            "order_id": self.order_id,
            "created_at": isoformat(self.created_at),
        }
