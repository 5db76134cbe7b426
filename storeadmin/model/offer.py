# --- storeadmin/model/offer.py ---
from sqlalchemy.sql import func

from ..extensions import db
from ..utils.dates import isoformat

DISCOUNT_TYPES = ("percentage", "fixed")
OFFER_SCOPES = ("all", "category", "product")


class Offer(db.Model):
    __tablename__ = "offers"

    id = db.Column(db.Integer, primary_key=True)
    title_en = db.Column(db.String(255), nullable=False)
    title_ar = db.Column(db.String(255), nullable=False)
    description_en = db.Column(db.Text)
    description_ar = db.Column(db.Text)

    # "percentage" or "fixed"
    discount_type = db.Column(db.String(16), nullable=False, default="percentage")
    discount_value = db.Column(db.Float, nullable=False, default=0.0)

    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    # "all" | "category" | "product"; at most one of the two ids is set
    applies_to = db.Column(db.String(16), nullable=False, default="all")
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id", ondelete="CASCADE"), nullable=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=True)

    created_at = db.Column(db.DateTime, server_default=func.now())

    def as_api(self):
        return {
            "id": self.id,
            "title_en": self.title_en,
            "title_ar": self.title_ar,
            "description_en": self.description_en,
            "description_ar": self.description_ar,
            "discount_type": self.discount_type,
            "discount_value": self.discount_value,
            "start_date": isoformat(self.start_date),
            "end_date": isoformat(self.end_date),
            "is_active": self.is_active,
            "applies_to": self.applies_to,
            "category_id": self.category_id,
            "product_id": self.product_id,
        }
