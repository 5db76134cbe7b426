# storeadmin/order/routes.py
import logging
from datetime import datetime, timedelta

from flask import current_app, request
from sqlalchemy import or_

from ..extensions import db
from ..model import Order
from ..model.order import ORDER_STATUSES
from ..shipping import governorate_list
from ..utils.api import ok
from ..utils.decorators import login_required, staff_required
from ..utils.parse import page_meta, paginate_args, parse_opt_int
from . import bp

log = logging.getLogger(__name__)


def _parse_day(value, name):
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"{name} must be YYYY-MM-DD")


@bp.get("")
@login_required
def list_orders():
    """
    Query params:
      - page, per_page
      - status=pending|processing|shipped|delivered|canceled
      - q=customer name, phone or email (substring), or order id
      - start=YYYY-MM-DD
      - end=YYYY-MM-DD (inclusive)
    """
    q = Order.query

    status = request.args.get("status")
    term = (request.args.get("q") or "").strip()
    start = request.args.get("start")
    end = request.args.get("end")

    if status:
        if status not in ORDER_STATUSES:
            raise ValueError(f"status must be one of {', '.join(ORDER_STATUSES)}")
        q = q.filter(Order.status == status)
    if term:
        like = f"%{term}%"
        conds = [Order.customer_name.ilike(like), Order.phone.ilike(like), Order.email.ilike(like)]
        maybe_id = parse_opt_int(term)
        if maybe_id is not None:
            conds.append(Order.id == maybe_id)
        q = q.filter(or_(*conds))
    if start:
        q = q.filter(Order.created_at >= _parse_day(start, "start"))
    if end:
        # make end inclusive for the whole day
        q = q.filter(Order.created_at < _parse_day(end, "end") + timedelta(days=1))

    page, per_page = paginate_args(request.args)
    paged = q.order_by(Order.created_at.desc(), Order.id.desc()).paginate(
        page=page, per_page=per_page, error_out=False
    )
    return ok("Orders fetched", {
        "meta": page_meta(paged, per_page),
        "items": [o.as_api(with_items=False) for o in paged.items],
    })


@bp.get("/governorates")
@login_required
def governorates():
    return ok("Governorates fetched", {
        "currency": current_app.config["CURRENCY"],
        "items": governorate_list(),
    })


@bp.get("/<int:order_id>")
@login_required
def get_order(order_id: int):
    return ok("Order fetched", db.get_or_404(Order, order_id).as_api())


@bp.patch("/<int:order_id>/status")
@staff_required
def update_status(order_id: int):
    """Body: { "status": "shipped" }"""
    o = db.get_or_404(Order, order_id)
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip().lower()
    if status not in ORDER_STATUSES:
        raise ValueError(f"status must be one of {', '.join(ORDER_STATUSES)}")
    previous, o.status = o.status, status
    db.session.commit()
    log.info("order %s: status %s -> %s", o.id, previous, status)
    return ok("Order status updated", {"id": o.id, "status": o.status})
