import os
from datetime import timedelta


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me-please-32-bytes!")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=1)

    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", 20 * 1024 * 1024))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CURRENCY = os.getenv("CURRENCY", "EGP")

    # object storage
    MEDIA_ROOT = os.getenv("MEDIA_ROOT")            # defaults to <instance>/media
    MEDIA_URL = os.getenv("MEDIA_URL", "/media")
    MEDIA_BUCKET = os.getenv("MEDIA_BUCKET", "media")

    @staticmethod
    def init_app(app):
        os.makedirs(app.instance_path, exist_ok=True)
        if not app.config.get("SQLALCHEMY_DATABASE_URI"):
            if os.getenv("DATABASE_URL"):
                app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")
            else:
                app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'app.db')}"
        if not app.config.get("MEDIA_ROOT"):
            app.config["MEDIA_ROOT"] = os.path.join(app.instance_path, "media")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-secret-key-that-is-long-enough-for-hs256"
    LOG_LEVEL = "DEBUG"
