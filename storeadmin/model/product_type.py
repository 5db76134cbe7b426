# --- storeadmin/model/product_type.py ---
from ..extensions import db


class ProductType(db.Model):
    __tablename__ = "product_types"

    id = db.Column(db.Integer, primary_key=True)
    name_en = db.Column(db.String(120), nullable=False, unique=True)
    name_ar = db.Column(db.String(120), nullable=False)

    def as_dict(self):
        return {"id": self.id, "name_en": self.name_en, "name_ar": self.name_ar}
