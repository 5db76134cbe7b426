# storeadmin/services/offer_service.py
import logging
from datetime import datetime

from ..extensions import db
from ..model import Category, Offer, Product
from ..utils.dates import as_naive_utc, parse_iso8601, utcnow
from ..utils.money import D, to_float
from ..utils.parse import parse_bool, parse_opt_int
from .pricing import apply_discount, validate_discount

log = logging.getLogger(__name__)

# lower rank wins: the most specific offer applies
_SCOPE_RANK = {"product": 0, "category": 1, "all": 2}


def is_temporally_active(row, now: datetime) -> bool:
    """``is_active`` and ``start_date <= now <= end_date`` (open bounds when unset)."""
    now = as_naive_utc(now)
    if not row.is_active:
        return False
    if row.start_date and now < row.start_date:
        return False
    if row.end_date and now > row.end_date:
        return False
    return True


def offer_matches(offer, product_id, category_id) -> bool:
    scope = offer.applies_to
    if scope == "all":
        return True
    if scope == "category":
        return category_id is not None and offer.category_id == category_id
    if scope == "product":
        return product_id is not None and offer.product_id == product_id
    return False


def select_offer(product, category_id, offers, now: datetime):
    """
    Pick the single offer that applies to ``product`` at ``now``, or None.

    Ties between matching offers resolve by scope (product, then category,
    then all), then latest ``start_date``, then lowest ``id``.
    """
    now = as_naive_utc(now)
    if category_id is None:
        category_id = getattr(product, "category_id", None)
    product_id = getattr(product, "id", None)

    matches = [
        o for o in offers
        if is_temporally_active(o, now) and offer_matches(o, product_id, category_id)
    ]
    if not matches:
        return None

    # stable sorts, least significant key first
    matches.sort(key=lambda o: o.id if o.id is not None else 0)
    matches.sort(key=lambda o: o.start_date or datetime.min, reverse=True)
    matches.sort(key=lambda o: _SCOPE_RANK.get(o.applies_to, len(_SCOPE_RANK)))
    return matches[0]


def resolve_price(product, offers, now: datetime):
    """Returns ``(offer_or_None, final_price)`` for one product snapshot."""
    offer = select_offer(product, product.category_id, offers, now)
    if offer is None:
        return None, D(product.price)
    return offer, apply_discount(product.price, offer)


def pricing_payload(product, offers, now: datetime) -> dict:
    offer, final = resolve_price(product, offers, now)
    return {
        "original_price": to_float(product.price),
        "final_price": to_float(final),
        "applied_offer": offer.as_api() if offer is not None else None,
    }


def active_offers(now: datetime | None = None):
    """Candidate offers for pricing; the date window is re-checked per product."""
    now = now or utcnow()
    return (
        Offer.query
        .filter(Offer.is_active.is_(True), Offer.end_date >= now)
        .order_by(Offer.id.asc())
        .all()
    )


def price_products(products, offers=None, now: datetime | None = None):
    now = now or utcnow()
    if offers is None:
        offers = active_offers(now)
    return [p.as_api(pricing_payload(p, offers, now)) for p in products]


# ---- admin input --------------------------------------------------------------

def offer_fields_from_payload(data: dict, current: Offer | None = None) -> dict:
    """
    Validate an offer create/update payload and return column values.

    On update (``current`` given) missing keys keep their stored value so the
    cross-field rules are always checked against the resulting row.
    """
    def pick(key, default=None):
        if key in data:
            return data.get(key)
        return getattr(current, key) if current is not None else default

    title_en = (pick("title_en") or "").strip()
    title_ar = (pick("title_ar") or "").strip()
    if not title_en or not title_ar:
        raise ValueError("title_en and title_ar are required")

    dtype, dval = validate_discount(pick("discount_type", "percentage"), pick("discount_value"))

    start_raw, end_raw = pick("start_date"), pick("end_date")
    start_date, end_date = parse_iso8601(start_raw), parse_iso8601(end_raw)
    if start_raw and not start_date:
        raise ValueError("Invalid datetime format for start_date")
    if end_raw and not end_date:
        raise ValueError("Invalid datetime format for end_date")
    if not start_date or not end_date:
        raise ValueError("start_date and end_date are required")
    if start_date >= end_date:
        raise ValueError("start_date must be before end_date")

    applies_to = (pick("applies_to", "all") or "").lower().strip()
    category_id = parse_opt_int(pick("category_id"))
    product_id = parse_opt_int(pick("product_id"))

    if applies_to == "all":
        category_id = product_id = None
    elif applies_to == "category":
        if category_id is None:
            raise ValueError("category_id is required when applies_to is 'category'")
        if db.session.get(Category, category_id) is None:
            raise ValueError(f"Category {category_id} not found")
        product_id = None
    elif applies_to == "product":
        if product_id is None:
            raise ValueError("product_id is required when applies_to is 'product'")
        if db.session.get(Product, product_id) is None:
            raise ValueError(f"Product {product_id} not found")
        category_id = None
    else:
        raise ValueError("applies_to must be 'all', 'category' or 'product'")

    return {
        "title_en": title_en,
        "title_ar": title_ar,
        "description_en": pick("description_en"),
        "description_ar": pick("description_ar"),
        "discount_type": dtype,
        "discount_value": dval,
        "start_date": start_date,
        "end_date": end_date,
        "is_active": parse_bool(pick("is_active", True), True),
        "applies_to": applies_to,
        "category_id": category_id,
        "product_id": product_id,
    }
