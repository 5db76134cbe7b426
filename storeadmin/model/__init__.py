# ------ storeadmin/model/__init__.py ------

from .user import User
from .category import Category
from .product_type import ProductType
from .product import Product, ProductMedia
from .offer import Offer
from .coupon import Coupon, CouponUsage
from .order import Order, OrderItem

__all__ = [
    "User",
    "Category",
    "ProductType",
    "Product",
    "ProductMedia",
    "Offer",
    "Coupon",
    "CouponUsage",
    "Order",
    "OrderItem",
]
