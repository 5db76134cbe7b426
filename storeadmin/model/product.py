# storeadmin/model/product.py
from sqlalchemy.sql import func

from ..extensions import db
from ..utils.dates import isoformat


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    name_en = db.Column(db.String(255), nullable=False, index=True)
    name_ar = db.Column(db.String(255), nullable=False)
    description_en = db.Column(db.Text)
    description_ar = db.Column(db.Text)

    price = db.Column(db.Float, nullable=False, default=0.0)
    quantity = db.Column(db.Integer, default=0)
    is_active = db.Column(db.Boolean, default=True, index=True)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)
    type_id = db.Column(db.Integer, db.ForeignKey("product_types.id"), nullable=True, index=True)

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    category = db.relationship("Category", back_populates="products", lazy="joined")
    product_type = db.relationship("ProductType", lazy="joined")
    media = db.relationship(
        "ProductMedia",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="ProductMedia.id.asc()",
    )

    def main_media(self):
        main = next((m for m in self.media if m.is_main), None)
        if main is None and self.media:
            main = self.media[0]
        return main

    def as_api(self, pricing=None):
        main = self.main_media()
        data = {
            "id": self.id,
            "name_en": self.name_en,
            "name_ar": self.name_ar,
            "description_en": self.description_en,
            "description_ar": self.description_ar,
            "price": self.price,
            "quantity": self.quantity,
            "is_active": self.is_active,
            "category_id": self.category_id,
            "category": self.category.as_dict() if self.category else None,
            "type_id": self.type_id,
            "type_name_en": self.product_type.name_en if self.product_type else None,
            "type_name_ar": self.product_type.name_ar if self.product_type else None,
            "main_image": main.file_url if main else None,
            "media": [m.as_api() for m in self.media],
            "created_at": isoformat(self.created_at),
            "updated_at": isoformat(self.updated_at),
        }
        if pricing is not None:
            data.update(pricing)
        return data


class ProductMedia(db.Model):
    __tablename__ = "product_media"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file_url = db.Column(db.String(1024), nullable=False)
    file_type = db.Column(db.String(16), nullable=False, default="image")   # "image" | "video"
    public_id = db.Column(db.String(512), nullable=False)                   # object path inside the bucket
    is_main = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, server_default=func.now())

    product = db.relationship("Product", back_populates="media")

    def as_api(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "file_url": self.file_url,
            "file_type": self.file_type,
            "public_id": self.public_id,
            "is_main": self.is_main,
            "created_at": isoformat(self.created_at),
        }
