import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "metislap-dev")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///metislap.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Optional engine options for better PostgreSQL behavior under concurrency
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", 5))
    DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", 10))
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
    if not SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS.update({
            "pool_size": DB_POOL_SIZE,
            "max_overflow": DB_MAX_OVERFLOW,
        })

    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@metislap.local")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin")

    DEFAULT_MAX_PARTICIPANTS = int(os.getenv("DEFAULT_MAX_PARTICIPANTS", 30))
    LADDER_ROWS = int(os.getenv("LADDER_ROWS", 10))
    LADDER_DENSITY = float(os.getenv("LADDER_DENSITY", 0.4))
    POLL_INTERVAL_SECONDS = int(os.getenv("POLL_INTERVAL_SECONDS", 3))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_HISTORY_LIMIT = 1000


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    ADMIN_EMAIL = "admin@test.local"
    ADMIN_PASSWORD = "admin-pass"
    LOG_LEVEL = "WARNING"
