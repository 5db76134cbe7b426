# storeadmin/coupon/routes.py
from __future__ import annotations

import logging

from flask import request

from ..extensions import db
from ..model import Coupon, CouponUsage, Order
from ..services.coupon_service import (
    coupon_fields_from_payload, delete_coupon, quote_coupon, redeem_coupon,
)
from ..services.usage_ledger import count_usage, usage_counts
from ..utils.api import err, ok
from ..utils.decorators import login_required, staff_required
from ..utils.parse import page_meta, paginate_args, parse_bool, parse_opt_float, parse_opt_int
from . import bp

log = logging.getLogger(__name__)


def _order_total(data):
    total = parse_opt_float(data.get("order_total"))
    if total is None or total < 0:
        raise ValueError("order_total must be a number >= 0")
    return total


def _order_ref(data):
    raw = data.get("order_id")
    if raw in (None, ""):
        return None
    order_id = parse_opt_int(raw)
    if order_id is None:
        raise ValueError("order_id must be an integer")
    if db.session.get(Order, order_id) is None:
        raise ValueError(f"Order {order_id} not found")
    return order_id


def _quote_response(quote, success_message):
    if quote.check.ok:
        return ok(success_message, quote.as_api())
    return err(quote.check.message, 422, quote.as_api())


@bp.post("")
@staff_required
def create_coupon():
    data = request.get_json(silent=True) or {}
    c = Coupon(**coupon_fields_from_payload(data), used_count=0)
    db.session.add(c)
    db.session.commit()
    log.info("coupon %s created", c.code)
    return ok("Coupon created", c.as_api(usage_count=0), 201)


@bp.get("")
@login_required
def list_coupons():
    q = Coupon.query
    active = request.args.get("active")
    if active is not None:
        q = q.filter(Coupon.is_active.is_(parse_bool(active)))
    code = (request.args.get("q") or "").strip()
    if code:
        q = q.filter(Coupon.code.ilike(f"%{code}%"))

    page, per_page = paginate_args(request.args)
    paged = q.order_by(Coupon.id.desc()).paginate(page=page, per_page=per_page, error_out=False)
    counts = usage_counts(c.id for c in paged.items)
    return ok("Coupons fetched", {
        "meta": page_meta(paged, per_page),
        "items": [c.as_api(usage_count=counts.get(c.id, 0)) for c in paged.items],
    })


@bp.get("/<int:cid>")
@login_required
def get_coupon(cid):
    c = db.get_or_404(Coupon, cid)
    return ok("Coupon fetched", c.as_api(usage_count=count_usage(c.id)))


@bp.get("/<int:cid>/usages")
@login_required
def list_usages(cid):
    db.get_or_404(Coupon, cid)
    order_id = parse_opt_int(request.args.get("order_id"))
    q = CouponUsage.query.filter(CouponUsage.coupon_id == cid)
    if order_id is not None:
        q = q.filter(CouponUsage.order_id == order_id)
    page, per_page = paginate_args(request.args)
    paged = q.order_by(CouponUsage.id.desc()).paginate(page=page, per_page=per_page, error_out=False)
    return ok("Coupon usages fetched", {
        "meta": page_meta(paged, per_page),
        "items": [u.as_api() for u in paged.items],
    })


@bp.put("/<int:cid>")
@bp.patch("/<int:cid>")
@staff_required
def update_coupon(cid):
    c = db.get_or_404(Coupon, cid)
    data = request.get_json(silent=True) or {}
    for field, value in coupon_fields_from_payload(data, current=c).items():
        setattr(c, field, value)
    db.session.commit()
    return ok("Coupon updated", c.as_api(usage_count=count_usage(c.id)))


@bp.delete("/<int:cid>")
@staff_required
def remove_coupon(cid):
    c = db.get_or_404(Coupon, cid)
    delete_coupon(c)
    return ok(f"Coupon {cid} deleted", {"id": cid})


@bp.post("/validate")
@login_required
def validate():
    """
    Body: { "code": "SAVE10", "order_total": 200 }
    Read-only: reports whether the coupon applies and the resulting total.
    """
    data = request.get_json(silent=True) or {}
    quote = quote_coupon(data.get("code"), _order_total(data))
    return _quote_response(quote, "Coupon is valid")


@bp.post("/redeem")
@login_required
def redeem():
    """
    Body: { "code": "SAVE10", "order_total": 200, "order_id": 12 (optional) }
    Validates, then records one usage in the ledger.
    """
    data = request.get_json(silent=True) or {}
    quote = redeem_coupon(
        data.get("code"), _order_total(data), order_id=_order_ref(data),
    )
    return _quote_response(quote, "Coupon applied")
