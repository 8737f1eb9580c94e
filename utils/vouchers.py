"""
Voucher ledger: single-use, email-bound discount codes.

A code is handed to the claimant exactly once (the claim response); nothing
else in the API returns it to the public side.
"""

import secrets
import string
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models import db
from models.newsletter import NewsletterSubscriber
from models.voucher import Voucher
from utils import site_config
from utils.errors import ApiError, Conflict, NotFound

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_SUFFIX_LENGTH = 6

INVALID_VOUCHER = "Voucher is invalid or already used"


def normalize_email(value) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and len(email) <= 255


def normalize_code(value) -> str:
    return value.strip().upper() if isinstance(value, str) else ""


def parse_discount(value, field: str = "discount_percent") -> int:
    try:
        discount = int(value)
    except (TypeError, ValueError):
        raise ApiError("Discount must be a whole number between 1 and 100", inline_error=field)
    if isinstance(value, float) and value != discount:
        raise ApiError("Discount must be a whole number between 1 and 100", inline_error=field)
    if not 1 <= discount <= 100:
        raise ApiError("Discount must be a whole number between 1 and 100", inline_error=field)
    return discount


def generate_code(discount_percent: int, prefix: str = None) -> str:
    prefix = prefix if prefix is not None else current_app.config.get("VOUCHER_CODE_PREFIX", "KHANZA")
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_SUFFIX_LENGTH))
    return f"{prefix}{discount_percent}-{suffix}"


def _subscribe_quietly(email: str) -> None:
    # newsletter signup piggybacks on the claim; its failure never fails the claim
    if NewsletterSubscriber.query.filter_by(email=email).first():
        return
    db.session.add(NewsletterSubscriber(email=email))
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.info("newsletter signup skipped for %s (already subscribed)", email)


def issue_voucher(email: str = None, discount_percent: int = None, subscribe: bool = False,
                  code: str = None) -> Voucher:
    """
    Creates an unused voucher. Generated codes that collide on the unique index
    are retried with a fresh suffix, up to VOUCHER_CLAIM_MAX_RETRIES attempts.
    A caller-chosen ``code`` is tried once.
    """
    if discount_percent is None:
        discount_percent = site_config.default_discount()

    if email and current_app.config.get("VOUCHER_ONE_PER_EMAIL", True):
        if Voucher.query.filter_by(email_claimed=email).first():
            raise Conflict("This email has already claimed a voucher", inline_error="email")

    attempts = 1 if code else max(1, int(current_app.config.get("VOUCHER_CLAIM_MAX_RETRIES", 3)))
    for attempt in range(1, attempts + 1):
        voucher = Voucher(
            code=code or generate_code(discount_percent),
            discount_percent=discount_percent,
            email_claimed=email or None,
            is_used=False,
        )
        db.session.add(voucher)
        try:
            db.session.commit()
            break
        except IntegrityError:
            db.session.rollback()
            current_app.logger.warning("voucher code collision (attempt %d/%d)", attempt, attempts)
    else:
        if code:
            raise Conflict("That voucher code already exists", inline_error="code")
        raise Conflict("Could not allocate a unique voucher code, please retry")

    if subscribe and email:
        _subscribe_quietly(email)
    return voucher


def claim_voucher(email) -> Voucher:
    if not site_config.voucher_enabled():
        raise ApiError("The voucher feature is currently disabled")
    email = normalize_email(email)
    if not email:
        raise ApiError("Email is required", inline_error="email")
    if not is_valid_email(email):
        raise ApiError("Invalid email", inline_error="email")
    return issue_voucher(email=email, subscribe=True)


def find_redeemable(code) -> Voucher:
    """Read-only lookup; does not reserve the voucher."""
    code = normalize_code(code)
    if not code:
        raise ApiError("Voucher code is required", inline_error="code")
    voucher = Voucher.query.filter_by(code=code, is_used=False).first()
    if not voucher:
        raise NotFound(INVALID_VOUCHER)
    return voucher


def redeem(code) -> Voucher:
    """
    Check-unused and mark-used in one conditional UPDATE. Zero affected rows
    means the code never existed or another booking consumed it first.
    Does not commit: the caller commits together with the booking insert.
    """
    code = normalize_code(code)
    updated = (
        Voucher.query
        .filter(Voucher.code == code, Voucher.is_used.is_(False))
        .update({"is_used": True, "used_at": datetime.utcnow()}, synchronize_session=False)
    )
    if updated != 1:
        raise ApiError(INVALID_VOUCHER, inline_error="voucher_code")
    return Voucher.query.filter_by(code=code).populate_existing().first()


def mark_used(voucher: Voucher, used: bool = True) -> None:
    if used and not voucher.is_used:
        voucher.is_used = True
        voucher.used_at = datetime.utcnow()
    elif not used:
        voucher.is_used = False
        voucher.used_at = None
