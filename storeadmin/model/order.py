from sqlalchemy.sql import func

from ..extensions import db
from ..utils.dates import isoformat
from ..utils.money import to_float

ORDER_STATUSES = ("pending", "processing", "shipped", "delivered", "canceled")


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    status = db.Column(db.String(20), nullable=False, default="pending", index=True)

    # Customer snapshot
    customer_name = db.Column(db.String(120))
    phone = db.Column(db.String(50), index=True)
    email = db.Column(db.String(120))
    address = db.Column(db.String(500))
    governorate = db.Column(db.String(40))

    # Money snapshot
    subtotal = db.Column(db.Numeric(12, 2))
    shipping_fee = db.Column(db.Numeric(12, 2))
    discount_amount = db.Column(db.Numeric(12, 2))
    total = db.Column(db.Numeric(12, 2))

    coupon_id = db.Column(db.Integer, db.ForeignKey("coupons.id"), nullable=True)

    created_at = db.Column(db.DateTime, server_default=func.now(), index=True)

    items = db.relationship(
        "OrderItem",
        backref="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id.asc()",
    )
    coupon = db.relationship("Coupon", lazy="joined")

    def as_api(self, with_items=True):
        data = {
            "id": self.id,
            "status": self.status,
            "customer": {
                "name": self.customer_name,
                "phone": self.phone,
                "email": self.email,
                "address": self.address,
                "governorate": self.governorate,
            },
            "money": {
                "subtotal": to_float(self.subtotal or 0),
                "shipping_fee": to_float(self.shipping_fee or 0),
                "discount_amount": to_float(self.discount_amount or 0),
                "total": to_float(self.total or 0),
            },
            "coupon_code": self.coupon.code if self.coupon else None,
            "created_at": isoformat(self.created_at),
        }
        if with_items:
            data["items"] = [i.as_api() for i in self.items]
        return data


class OrderItem(db.Model):
    __tablename__ = "order_items"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)

    product_id = db.Column(db.Integer, index=True)   # not a FK: products may be deleted later
    name = db.Column(db.String(255))
    unit_price = db.Column(db.Numeric(12, 2))
    quantity = db.Column(db.Integer, nullable=False)
    line_total = db.Column(db.Numeric(12, 2))

    def as_api(self):
        return {
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": to_float(self.unit_price or 0),
            "quantity": self.quantity,
            "line_total": to_float(self.line_total or 0),
        }
