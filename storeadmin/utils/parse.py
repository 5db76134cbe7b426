# storeadmin/utils/parse.py
"""Lenient coercion of query-string and form values."""
import math

from flask import request


def parse_bool(v, default=False):
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    return str(v).strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_int(v, default=0):
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def parse_opt_int(v):
    if v is None:
        return None
    if isinstance(v, str) and v.strip().lower() in {"", "null"}:
        return None
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def parse_opt_float(v):
    if v is None:
        return None
    if isinstance(v, str) and v.strip() == "":
        return None
    try:
        f = float(v)
    except (TypeError, ValueError):
        return None
    # nan and inf never make a price or a total
    return f if math.isfinite(f) else None


def paginate_args(args, default_per_page=20):
    page = max(parse_int(args.get("page"), 1), 1)
    per_page = min(max(parse_int(args.get("per_page"), default_per_page), 1), 100)
    return page, per_page


def page_meta(pagination, per_page):
    return {
        "page": pagination.page,
        "pages": pagination.pages or 1,
        "per_page": per_page,
        "total": pagination.total,
    }


def request_data():
    """Form fields for multipart requests, the JSON body otherwise."""
    if request.content_type and "multipart/form-data" in request.content_type:
        return request.form.to_dict(flat=True)
    return request.get_json(silent=True) or {}
