# storeadmin/dashboard/routes.py
from sqlalchemy import func

from ..extensions import db
from ..model import Category, Coupon, Offer, Order, Product, ProductType
from ..services.offer_service import is_temporally_active
from ..services.usage_ledger import usage_counts
from ..utils.api import ok
from ..utils.dates import utcnow
from ..utils.decorators import login_required
from . import bp


def _count(model):
    return db.session.query(func.count(model.id)).scalar() or 0


@bp.get("")
@login_required
def summary():
    now = utcnow()
    offers = Offer.query.filter(Offer.is_active.is_(True)).order_by(Offer.end_date.asc()).all()
    coupons = Coupon.query.filter(Coupon.is_active.is_(True)).order_by(Coupon.id.desc()).all()
    counts = usage_counts(c.id for c in coupons)

    orders_by_status = dict(
        db.session.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
    )

    return ok("Dashboard", {
        "counts": {
            "products": _count(Product),
            "categories": _count(Category),
            "product_types": _count(ProductType),
            "orders": _count(Order),
        },
        "orders_by_status": orders_by_status,
        "active_offers": [
            {**o.as_api(), "is_current": is_temporally_active(o, now)} for o in offers
        ],
        "active_coupons": [c.as_api(usage_count=counts.get(c.id, 0)) for c in coupons],
    })
