"""Key/value site configuration: feature flags and branding."""

from flask import current_app

from models import db
from models.site_config import SiteConfig

VOUCHER_ENABLED = "voucher_enabled"
VOUCHER_DEFAULT_DISCOUNT = "voucher_default_discount"

BRANDING_KEYS = ("site_name", "logo_url", "footer_text")

DEFAULT_SETTINGS = {
    "site_name": "Khanza Repaint",
    "logo_url": "",
    "footer_text": (
        "Premium automotive painting and detailing services. We bring your "
        "car's true colors back to life with precision and passion."
    ),
    VOUCHER_ENABLED: "1",
}


def get_value(key: str, default=None):
    row = db.session.get(SiteConfig, key)
    if row is None or row.value is None:
        return default
    return row.value


def set_value(key: str, value) -> None:
    """Insert-or-update on the primary key. Caller commits."""
    db.session.merge(SiteConfig(key=key, value=None if value is None else str(value)))


def all_settings() -> dict:
    return {row.key: row.value for row in SiteConfig.query.order_by(SiteConfig.key).all()}


def voucher_enabled() -> bool:
    # missing row means enabled
    return get_value(VOUCHER_ENABLED, "1") == "1"


def default_discount() -> int:
    fallback = int(current_app.config.get("VOUCHER_DEFAULT_DISCOUNT", 30))
    raw = get_value(VOUCHER_DEFAULT_DISCOUNT)
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return fallback
    if not 1 <= value <= 100:
        return fallback
    return value


def seed_defaults() -> int:
    """Adds any missing default key. Existing values are never overwritten."""
    added = 0
    for key, value in DEFAULT_SETTINGS.items():
        if db.session.get(SiteConfig, key) is None:
            db.session.add(SiteConfig(key=key, value=value))
            added += 1
    db.session.commit()
    return added
