# --- storeadmin/category/routes.py ---
from flask import request
from sqlalchemy import desc, or_

from ..extensions import db
from ..model import Category, Offer, Product
from ..services.media_service import delete_object, discard_uploads
from ..storage import IMAGE_EXTENSIONS, get_storage
from ..utils.api import err, ok
from ..utils.decorators import login_required, staff_required
from ..utils.parse import page_meta, paginate_args, request_data
from . import bp


def _names(data, current=None):
    name_en = (data.get("name_en", current.name_en if current else "") or "").strip()
    name_ar = (data.get("name_ar", current.name_ar if current else "") or "").strip()
    if not name_en or not name_ar:
        raise ValueError("name_en and name_ar are required")
    return name_en, name_ar


def _image_file():
    f = request.files.get("image") if request.files else None
    if f is None or not f.filename:
        return None
    ext = f.filename.rsplit(".", 1)[-1].lower() if "." in f.filename else ""
    if ext not in IMAGE_EXTENSIONS:
        raise ValueError(f"image must be one of: {', '.join(sorted(IMAGE_EXTENSIONS))}")
    return f


def _commit_or_discard(storage, uploaded):
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        if uploaded:
            discard_uploads(storage, [uploaded["path"]])
        raise


def _name_taken(name_en, exclude_id=None):
    q = Category.query.filter(Category.name_en.ilike(name_en))
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    return q.first() is not None


@bp.post("")
@staff_required
def create_category():
    """JSON, or multipart with an optional ``image`` file stored in the bucket."""
    data = request_data()
    name_en, name_ar = _names(data)
    if _name_taken(name_en):
        return err("category name already exists", 409)
    image = _image_file()

    c = Category(name_en=name_en, name_ar=name_ar, image_url=data.get("image_url") or None)
    storage, uploaded = get_storage(), None
    if image is not None:
        uploaded = storage.upload(image, folder="categories")
        c.image_url, c.image_path = uploaded["url"], uploaded["path"]
    db.session.add(c)
    _commit_or_discard(storage, uploaded)
    return ok("Category created", c.as_dict(), 201)


@bp.get("")
@login_required
def list_categories():
    """
    q        -> substring match on either name
    sort     -> name, -name, id, -id
    page     -> default 1
    per_page -> default 20 (cap 100)
    """
    q = (request.args.get("q") or "").strip()
    sort = (request.args.get("sort") or "name").strip()
    page, per_page = paginate_args(request.args)

    qry = Category.query
    if q:
        qry = qry.filter(or_(Category.name_en.ilike(f"%{q}%"), Category.name_ar.ilike(f"%{q}%")))

    sort_map = {
        "id": Category.id,
        "-id": desc(Category.id),
        "name": Category.name_en,
        "-name": desc(Category.name_en),
    }
    qry = qry.order_by(sort_map.get(sort, Category.name_en))
    paged = qry.paginate(page=page, per_page=per_page, error_out=False)

    return ok("Categories fetched", {
        "meta": page_meta(paged, per_page),
        "items": [c.as_dict() for c in paged.items],
    })


@bp.get("/<int:cid>")
@login_required
def get_category(cid):
    c = db.get_or_404(Category, cid)
    return ok("Category fetched", c.as_dict())


@bp.put("/<int:cid>")
@bp.patch("/<int:cid>")
@staff_required
def update_category(cid):
    c = db.get_or_404(Category, cid)
    data = request_data()
    name_en, name_ar = _names(data, current=c)
    if _name_taken(name_en, exclude_id=c.id):
        return err("category name already exists", 409)
    image = _image_file()

    c.name_en, c.name_ar = name_en, name_ar
    storage, uploaded, old_path = get_storage(), None, c.image_path
    if image is not None:
        uploaded = storage.upload(image, folder="categories")
        c.image_url, c.image_path = uploaded["url"], uploaded["path"]
    elif "image_url" in data:
        # an external url replaces the stored image
        c.image_url, c.image_path = data.get("image_url") or None, None
    _commit_or_discard(storage, uploaded)

    if old_path and old_path != c.image_path:
        discard_uploads(storage, [old_path])
    return ok("Category updated", c.as_dict())


@bp.delete("/<int:cid>")
@staff_required
def delete_category(cid):
    c = db.get_or_404(Category, cid)
    if Product.query.filter_by(category_id=cid).first():
        return err("cannot delete: category has products", 409)
    if c.image_path:
        # storage first: a refused delete keeps the category
        delete_object(get_storage(), c.image_path, category_id=cid)
    Offer.query.filter_by(category_id=cid).delete()
    db.session.delete(c)
    db.session.commit()
    return ok(f"Category {cid} deleted", {"id": cid})
