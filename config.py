import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")
    # PyJWT warns on HS256 keys shorter than 32 bytes
    JWT_SECRET = os.getenv("JWT_SECRET", "khanza-dev-only-jwt-secret-change-me-in-prod")
    JWT_ALGORITHM = "HS256"

    # SQLite database file stored next to this file as khanza.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "khanza.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Build tables without migrations (tests / quick local runs)
    AUTO_CREATE_TABLES = _env_flag("AUTO_CREATE_TABLES", "false")
    SEED_ON_STARTUP = _env_flag("SEED_ON_STARTUP", "true")

    # Bearer token lifetime: 24 hours
    TOKEN_LIFETIME_SECONDS = 24 * 60 * 60
    BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Admin bootstrap (set in environment for production)
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")

    # Simple IP rate limit for login endpoint
    LOGIN_RATE_WINDOW_SECONDS = 60
    LOGIN_RATE_MAX_REQUESTS = 15

    # Public forms (claim voucher, booking, testimonial): 1 request per minute per IP
    PUBLIC_RATE_WINDOW_SECONDS = 60
    PUBLIC_RATE_MAX_REQUESTS = 1

    # Vouchers
    VOUCHER_CODE_PREFIX = "KHANZA"
    VOUCHER_DEFAULT_DISCOUNT = 30
    VOUCHER_ONE_PER_EMAIL = True
    VOUCHER_CLAIM_MAX_RETRIES = 3

    # Bookings: one booking per scheduled timestamp
    BOOKING_SLOT_EXCLUSIVE = True

    # Basic app settings
    DEBUG = False


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    AUTO_CREATE_TABLES = True
    SEED_ON_STARTUP = True
    BCRYPT_ROUNDS = 4

    ADMIN_EMAIL = "admin@khanza.test"
    ADMIN_PASSWORD = "Sup3r-Secret!"

    LOGIN_RATE_MAX_REQUESTS = 1000
    PUBLIC_RATE_MAX_REQUESTS = 1000
