# --- storeadmin/model/category.py ---
from sqlalchemy.sql import func

from ..extensions import db


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name_en = db.Column(db.String(120), nullable=False, unique=True)
    name_ar = db.Column(db.String(120), nullable=False)
    image_url = db.Column(db.String(1024))
    image_path = db.Column(db.String(512))   # object path when the image lives in our bucket
    created_at = db.Column(db.DateTime, server_default=func.now())

    products = db.relationship("Product", back_populates="category", lazy=True)

    def as_dict(self):
        return {
            "id": self.id,
            "name_en": self.name_en,
            "name_ar": self.name_ar,
            "image_url": self.image_url,
            "image_path": self.image_path,
        }
