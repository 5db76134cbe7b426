from flask import Blueprint

bp = Blueprint("product_type", __name__, url_prefix="/api/product-types")

from . import routes  # noqa: E402,F401
