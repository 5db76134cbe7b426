"""Shared fixtures: an app on a throwaway SQLite file, users, tokens, factories."""
from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token
from werkzeug.security import generate_password_hash

from storeadmin import create_app
from storeadmin.config import TestConfig
from storeadmin.extensions import db as _db
from storeadmin.model import Category, Coupon, Offer, Order, OrderItem, Product, User
from storeadmin.utils.dates import utcnow


@pytest.fixture
def app(tmp_path):
    app = create_app(TestConfig, {
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'test.db'}",
        "MEDIA_ROOT": str(tmp_path / "media"),
    })
    with app.app_context():
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def storage(app):
    return app.extensions["storage"]


def _user(role):
    u = User(
        email=f"{role}@example.com",
        name=role.title(),
        password_hash=generate_password_hash("secret123"),
        role=role,
    )
    _db.session.add(u)
    _db.session.commit()
    return u


def _headers(user):
    token = create_access_token(identity=str(user.id), expires_delta=timedelta(hours=1))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(app):
    return _headers(_user("admin"))


@pytest.fixture
def user_headers(app):
    return _headers(_user("user"))


@pytest.fixture
def make_category(db):
    counter = {"n": 0}

    def factory(**kw):
        counter["n"] += 1
        c = Category(
            name_en=kw.pop("name_en", f"Category {counter['n']}"),
            name_ar=kw.pop("name_ar", f"فئة {counter['n']}"),
            **kw,
        )
        db.session.add(c)
        db.session.commit()
        return c

    return factory


@pytest.fixture
def make_product(db):
    def factory(**kw):
        p = Product(
            name_en=kw.pop("name_en", "Mug"),
            name_ar=kw.pop("name_ar", "كوب"),
            price=kw.pop("price", 100.0),
            quantity=kw.pop("quantity", 10),
            is_active=kw.pop("is_active", True),
            **kw,
        )
        db.session.add(p)
        db.session.commit()
        return p

    return factory


@pytest.fixture
def make_offer(db):
    def factory(**kw):
        now = utcnow()
        o = Offer(
            title_en=kw.pop("title_en", "Sale"),
            title_ar=kw.pop("title_ar", "تخفيض"),
            discount_type=kw.pop("discount_type", "percentage"),
            discount_value=kw.pop("discount_value", 10),
            start_date=kw.pop("start_date", now - timedelta(days=1)),
            end_date=kw.pop("end_date", now + timedelta(days=1)),
            is_active=kw.pop("is_active", True),
            applies_to=kw.pop("applies_to", "all"),
            **kw,
        )
        db.session.add(o)
        db.session.commit()
        return o

    return factory


@pytest.fixture
def make_coupon(db):
    def factory(**kw):
        now = utcnow()
        c = Coupon(
            code=kw.pop("code", "SAVE10"),
            discount_type=kw.pop("discount_type", "percentage"),
            discount_value=kw.pop("discount_value", 10),
            start_date=kw.pop("start_date", now - timedelta(days=1)),
            end_date=kw.pop("end_date", now + timedelta(days=1)),
            is_active=kw.pop("is_active", True),
            used_count=0,
            **kw,
        )
        db.session.add(c)
        db.session.commit()
        return c

    return factory


@pytest.fixture
def make_order(db):
    def factory(**kw):
        o = Order(
            customer_name=kw.pop("customer_name", "Mona Adel"),
            phone=kw.pop("phone", "01000000000"),
            email=kw.pop("email", "mona@example.com"),
            governorate=kw.pop("governorate", "cairo"),
            subtotal=kw.pop("subtotal", 200),
            shipping_fee=kw.pop("shipping_fee", 35),
            discount_amount=kw.pop("discount_amount", 0),
            total=kw.pop("total", 235),
            status=kw.pop("status", "pending"),
            **kw,
        )
        o.items.append(OrderItem(product_id=1, name="Mug", unit_price=100, quantity=2, line_total=200))
        db.session.add(o)
        db.session.commit()
        return o

    return factory
