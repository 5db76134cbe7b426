# --- storeadmin/__init__.py ---
import logging
import os

from flask import Flask, send_from_directory

from .config import Config
from .extensions import cors, db, jwt, migrate
from .storage import LocalStorage


def create_app(config_class=Config, overrides=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    if overrides:
        app.config.update(overrides)
    config_class.init_app(app)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": "*"}})
    migrate.init_app(app, db)

    os.makedirs(app.config["MEDIA_ROOT"], exist_ok=True)
    app.extensions["storage"] = LocalStorage(
        app.config["MEDIA_ROOT"], app.config["MEDIA_URL"], app.config["MEDIA_BUCKET"]
    )

    # Register blueprints
    from .category import bp as category_bp; app.register_blueprint(category_bp)
    from .product_type import bp as product_type_bp; app.register_blueprint(product_type_bp)
    from .product import bp as product_bp; app.register_blueprint(product_bp)
    from .offer import bp as offer_bp; app.register_blueprint(offer_bp)
    from .coupon import bp as coupon_bp; app.register_blueprint(coupon_bp)
    from .order import bp as order_bp; app.register_blueprint(order_bp)
    from .dashboard import bp as dashboard_bp; app.register_blueprint(dashboard_bp)

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def health():
        return {"ok": True, "msg": "API running"}

    @app.get(f"{app.config['MEDIA_URL'].rstrip('/')}/<path:filename>")
    def media_file(filename):
        return send_from_directory(app.config["MEDIA_ROOT"], filename)

    with app.app_context():
        db.create_all()
        app.logger.debug("blueprints: %s", sorted(app.blueprints.keys()))

    return app
