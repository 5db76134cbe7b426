# storeadmin/offer/routes.py
from flask import request

from ..extensions import db
from ..model import Offer
from ..services.offer_service import is_temporally_active, offer_fields_from_payload
from ..utils.api import ok
from ..utils.dates import utcnow
from ..utils.decorators import login_required, staff_required
from ..utils.parse import page_meta, paginate_args, parse_bool, parse_opt_int
from . import bp


def _as_api(offer, now):
    return {**offer.as_api(), "is_current": is_temporally_active(offer, now)}


@bp.get("")
@login_required
def list_offers():
    """
    Query params:
      - active=true|false     stored flag
      - current=true          only offers inside their date window right now
      - applies_to=all|category|product
      - category_id, product_id
      - page, per_page
    """
    q = Offer.query
    if request.args.get("active") is not None:
        q = q.filter(Offer.is_active.is_(parse_bool(request.args.get("active"))))
    if request.args.get("applies_to"):
        q = q.filter(Offer.applies_to == request.args["applies_to"].lower())
    category_id = parse_opt_int(request.args.get("category_id"))
    if category_id is not None:
        q = q.filter(Offer.category_id == category_id)
    product_id = parse_opt_int(request.args.get("product_id"))
    if product_id is not None:
        q = q.filter(Offer.product_id == product_id)

    now = utcnow()
    if parse_bool(request.args.get("current")):
        q = q.filter(Offer.is_active.is_(True), Offer.start_date <= now, Offer.end_date >= now)

    page, per_page = paginate_args(request.args)
    paged = q.order_by(Offer.id.desc()).paginate(page=page, per_page=per_page, error_out=False)
    return ok("Offers fetched", {
        "meta": page_meta(paged, per_page),
        "items": [_as_api(o, now) for o in paged.items],
    })


@bp.get("/<int:oid>")
@login_required
def get_offer(oid):
    return ok("Offer fetched", _as_api(db.get_or_404(Offer, oid), utcnow()))


@bp.post("")
@staff_required
def create_offer():
    data = request.get_json(silent=True) or {}
    offer = Offer(**offer_fields_from_payload(data))
    db.session.add(offer)
    db.session.commit()
    return ok("Offer created", _as_api(offer, utcnow()), 201)


@bp.put("/<int:oid>")
@bp.patch("/<int:oid>")
@staff_required
def update_offer(oid):
    offer = db.get_or_404(Offer, oid)
    data = request.get_json(silent=True) or {}
    for field, value in offer_fields_from_payload(data, current=offer).items():
        setattr(offer, field, value)
    db.session.commit()
    return ok("Offer updated", _as_api(offer, utcnow()))


@bp.delete("/<int:oid>")
@staff_required
def delete_offer(oid):
    offer = db.get_or_404(Offer, oid)
    db.session.delete(offer)
    db.session.commit()
    return ok(f"Offer {oid} deleted", {"id": oid})
