from io import BytesIO

import pandas as pd
from flask import request, send_file, url_for
from sqlalchemy import asc, desc, or_

from ..extensions import db
from ..model import Category, Offer, Product, ProductType
from ..services import media_service
from ..services.offer_service import active_offers, price_products
from ..storage import get_storage
from ..utils.api import err, ok
from ..utils.dates import utcnow
from ..utils.decorators import login_required, staff_required
from ..utils.parse import (
    page_meta, paginate_args, parse_bool, parse_int, parse_opt_float, parse_opt_int, request_data,
)
from . import bp


# ---------- helpers ----------
def _sort_products(query, sort):
    sort = (sort or "").strip()
    mapping = {
        "id": asc(Product.id), "-id": desc(Product.id),
        "name": asc(Product.name_en), "-name": desc(Product.name_en),
        "price": asc(Product.price), "-price": desc(Product.price),
        "quantity": asc(Product.quantity), "-quantity": desc(Product.quantity),
    }
    col = mapping.get(sort, desc(Product.id))  # default newest first (id desc)
    return query.order_by(col)


def _reference(model, value, label):
    rid = parse_opt_int(value)
    if rid is None:
        return None
    if db.session.get(model, rid) is None:
        raise ValueError(f"{label} {rid} not found")
    return rid


def _apply_fields(product: Product, data: dict, creating=False):
    for field in ("name_en", "name_ar"):
        if field in data or creating:
            value = (data.get(field) or "").strip()
            if not value:
                raise ValueError(f"{field} is required")
            setattr(product, field, value)

    for field in ("description_en", "description_ar"):
        if field in data:
            setattr(product, field, data.get(field))

    if "price" in data or creating:
        price = parse_opt_float(data.get("price"))
        if price is None or price < 0:
            raise ValueError("price must be a number >= 0")
        product.price = price

    if "quantity" in data:
        quantity = parse_int(data.get("quantity"), default=-1)
        if quantity < 0:
            raise ValueError("quantity must be an integer >= 0")
        product.quantity = quantity

    if "is_active" in data:
        product.is_active = parse_bool(data.get("is_active"), True)

    # --- references: normalize, validate, assign ---
    if "category_id" in data:
        product.category_id = _reference(Category, data.get("category_id"), "Category")
    if "type_id" in data:
        product.type_id = _reference(ProductType, data.get("type_id"), "Product type")


def _priced(product):
    return price_products([product])[0]


# ---------- routes ----------
# GET /api/products
@bp.get("")
@login_required
def list_products():
    """
    Query params:
      q            -> substring match on either name; if q is an int, also match id
      category_id  -> int
      type_id      -> int
      is_active    -> bool
      min_price    -> float
      max_price    -> float
      sort         -> id, -id, name, -name, price, -price, quantity, -quantity
      page         -> int, default 1
      per_page     -> int, default 20 (cap 100)
    """
    q = (request.args.get("q") or "").strip()
    category_id = parse_opt_int(request.args.get("category_id"))
    type_id = parse_opt_int(request.args.get("type_id"))
    min_price = parse_opt_float(request.args.get("min_price"))
    max_price = parse_opt_float(request.args.get("max_price"))
    page, per_page = paginate_args(request.args)

    query = Product.query

    if q:
        maybe_id = parse_opt_int(q)
        like = f"%{q}%"
        conds = [Product.name_en.ilike(like), Product.name_ar.ilike(like)]
        if maybe_id is not None:
            conds.append(Product.id == maybe_id)
        query = query.filter(or_(*conds))

    if category_id is not None:
        query = query.filter(Product.category_id == category_id)
    if type_id is not None:
        query = query.filter(Product.type_id == type_id)
    if request.args.get("is_active") is not None:
        query = query.filter(Product.is_active.is_(parse_bool(request.args.get("is_active"))))
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)

    query = _sort_products(query, request.args.get("sort"))
    pagination = query.paginate(page=page, per_page=per_page, error_out=False)

    now = utcnow()
    items = price_products(pagination.items, active_offers(now), now)
    return ok("Products fetched", {"items": items, "meta": page_meta(pagination, per_page)})


# GET /api/products/<id>
@bp.get("/<int:pid>")
@login_required
def get_product(pid):
    product = db.get_or_404(Product, pid)
    return ok("Product fetched", _priced(product))


# POST /api/products
@bp.post("")
@staff_required
def create_product():
    data = request_data()
    product = Product(is_active=True, quantity=0)
    _apply_fields(product, data, creating=True)
    db.session.add(product)
    db.session.commit()

    files = request.files.getlist("files") if request.files else []
    if files:
        try:
            media_service.upload_media(product.id, files, get_storage())
        except Exception:
            # uploads were already rolled back; drop the half-created product too
            db.session.rollback()
            db.session.delete(product)
            db.session.commit()
            raise
        db.session.refresh(product)

    resp = ok("Product created", _priced(product), 201)
    resp.headers["Location"] = url_for("product.get_product", pid=product.id, _external=True)
    return resp


# PUT /api/products/<id>
@bp.put("/<int:pid>")
@bp.patch("/<int:pid>")
@staff_required
def update_product(pid):
    product = db.get_or_404(Product, pid)
    data = request_data()
    try:
        _apply_fields(product, data)
    except ValueError:
        db.session.rollback()
        raise
    db.session.commit()
    return ok("Product updated", _priced(product))


# DELETE /api/products/<id>
@bp.delete("/<int:pid>")
@staff_required
def delete_product(pid):
    product = db.get_or_404(Product, pid)
    # storage first: a failure here leaves the product and its remaining media intact
    media_service.delete_product_media(product, get_storage())
    Offer.query.filter_by(product_id=pid).delete()
    db.session.delete(product)
    db.session.commit()
    return ok(f"Product {pid} deleted", {"id": pid})


@bp.get("/export")
@login_required
def export_products():
    """
    Export all products, with their current offer price, as an Excel file.
    """
    rows = price_products(Product.query.order_by(Product.id.asc()).all())
    product_data = [{
        "ID": p["id"],
        "Name (EN)": p["name_en"],
        "Name (AR)": p["name_ar"],
        "Category": p["category"]["name_en"] if p["category"] else None,
        "Type": p["type_name_en"],
        "Price": p["original_price"],
        "Final Price": p["final_price"],
        "Offer": p["applied_offer"]["title_en"] if p["applied_offer"] else None,
        "Quantity": p["quantity"],
        "Active": p["is_active"],
    } for p in rows]
    df = pd.DataFrame(product_data, columns=[
        "ID", "Name (EN)", "Name (AR)", "Category", "Type",
        "Price", "Final Price", "Offer", "Quantity", "Active",
    ])

    # Create an in-memory buffer
    output = BytesIO()
    df.to_excel(output, index=False)
    output.seek(0)

    return send_file(
        output,
        as_attachment=True,
        download_name="products_export.xlsx",
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


# ---------- media ----------
@bp.get("/<int:pid>/media")
@login_required
def list_media(pid):
    product = db.get_or_404(Product, pid)
    return ok("Media fetched", [m.as_api() for m in product.media])


# POST /api/products/<id>/media  (multipart, one or more "files")
@bp.post("/<int:pid>/media")
@staff_required
def add_media(pid):
    files = [f for f in request.files.getlist("files") if f and f.filename]
    if not files:
        return err("No files uploaded", 422)
    rows = media_service.upload_media(pid, files, get_storage())
    return ok("Media added", [m.as_api() for m in rows], 201)


@bp.patch("/<int:pid>/media/<int:mid>/main")
@staff_required
def set_main_media(pid, mid):
    media = media_service.set_main(pid, mid)
    return ok("Main image updated", media.as_api())


@bp.delete("/<int:pid>/media/<int:mid>")
@staff_required
def delete_media(pid, mid):
    product = db.get_or_404(Product, pid)
    if not any(m.id == mid for m in product.media):
        return err(f"Media {mid} not found for product {pid}", 404)
    media_service.delete_media(mid, get_storage())
    return ok("Media deleted", {"id": mid})
