# --- storeadmin/product_type/routes.py ---
from flask import request

from ..extensions import db
from ..model import Product, ProductType
from ..utils.api import err, ok
from ..utils.decorators import login_required, staff_required
from . import bp


def _names(data, current=None):
    name_en = (data.get("name_en", current.name_en if current else "") or "").strip()
    name_ar = (data.get("name_ar", current.name_ar if current else "") or "").strip()
    if not name_en or not name_ar:
        raise ValueError("name_en and name_ar are required")
    return name_en, name_ar


@bp.get("")
@login_required
def list_product_types():
    items = ProductType.query.order_by(ProductType.name_en.asc()).all()
    return ok("Product types fetched", [t.as_dict() for t in items])


@bp.post("")
@staff_required
def create_product_type():
    data = request.get_json(silent=True) or {}
    name_en, name_ar = _names(data)
    if ProductType.query.filter(ProductType.name_en.ilike(name_en)).first():
        return err("product type already exists", 409)
    t = ProductType(name_en=name_en, name_ar=name_ar)
    db.session.add(t)
    db.session.commit()
    return ok("Product type created", t.as_dict(), 201)


@bp.put("/<int:tid>")
@bp.patch("/<int:tid>")
@staff_required
def update_product_type(tid):
    t = db.get_or_404(ProductType, tid)
    data = request.get_json(silent=True) or {}
    name_en, name_ar = _names(data, current=t)
    clash = ProductType.query.filter(ProductType.name_en.ilike(name_en), ProductType.id != tid).first()
    if clash:
        return err("product type already exists", 409)
    t.name_en, t.name_ar = name_en, name_ar
    db.session.commit()
    return ok("Product type updated", t.as_dict())


@bp.delete("/<int:tid>")
@staff_required
def delete_product_type(tid):
    t = db.get_or_404(ProductType, tid)
    if Product.query.filter_by(type_id=tid).first():
        return err("cannot delete: product type is used by products", 409)
    db.session.delete(t)
    db.session.commit()
    return ok(f"Product type {tid} deleted", {"id": tid})
