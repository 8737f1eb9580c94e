from flask import Blueprint, request, jsonify, g

from models import db
from models.voucher import Voucher
from security.rate_limit import check_and_increment_rate
from utils import site_config
from utils import vouchers as ledger
from utils.audit import log_event
from utils.auth_context import admin_required
from utils.errors import ApiError

voucher_bp = Blueprint("vouchers", __name__, url_prefix="/api")


def _voucher_json(v: Voucher) -> dict:
    return {
        "id": v.id,
        "code": v.code,
        "discount_percent": v.discount_percent,
        "email_claimed": v.email_claimed,
        "is_used": v.is_used,
        "created_at": v.created_at.isoformat() if v.created_at else None,
        "used_at": v.used_at.isoformat() if v.used_at else None,
    }


# ---------- PUBLIC: claim / validate ----------
@voucher_bp.post("/claim-voucher")
def claim_voucher():
    allowed, retry_after = check_and_increment_rate("claim")
    if not allowed:
        return jsonify(error="Too many requests. Try again later.", retry_after_seconds=retry_after), 429

    data = request.get_json(silent=True) or {}
    voucher = ledger.claim_voucher(data.get("email"))

    log_event("VOUCHER_CLAIM", entity="voucher", entity_id=voucher.id, metadata={"email": voucher.email_claimed})
    # the only time the code is ever returned to the claimant
    return jsonify(success=True, code=voucher.code, discount=voucher.discount_percent,
                   discount_percent=voucher.discount_percent), 201


@voucher_bp.post("/validate-voucher")
def validate_voucher():
    data = request.get_json(silent=True) or {}
    voucher = ledger.find_redeemable(data.get("code"))
    return jsonify(valid=True, discount_percent=voucher.discount_percent, code=voucher.code), 200


@voucher_bp.get("/voucher-status")
def voucher_status():
    return jsonify(enabled=site_config.voucher_enabled()), 200


# ---------- ADMIN: ledger + config ----------
@voucher_bp.get("/admin/vouchers")
@admin_required
def list_vouchers():
    used = request.args.get("used")
    q = Voucher.query
    if used in ("0", "1"):
        q = q.filter(Voucher.is_used.is_(used == "1"))

    rows = q.order_by(Voucher.id.desc()).all()
    return jsonify(
        vouchers=[_voucher_json(v) for v in rows],
        enabled=site_config.voucher_enabled(),
        default_discount=site_config.default_discount(),
    ), 200


@voucher_bp.post("/admin/vouchers")
@admin_required
def create_voucher():
    data = request.get_json(silent=True) or {}
    email = ledger.normalize_email(data.get("email")) or None
    if email and not ledger.is_valid_email(email):
        raise ApiError("Invalid email", inline_error="email")

    discount = data.get("discount_percent")
    discount = ledger.parse_discount(discount) if discount not in (None, "") else None

    code = ledger.normalize_code(data.get("code")) or None
    if code and (len(code) > 40 or not all(ch in ledger.CODE_ALPHABET or ch == "-" for ch in code)):
        raise ApiError("Code may only use letters, digits and '-' (max 40)", inline_error="code")

    voucher = ledger.issue_voucher(email=email, discount_percent=discount, code=code)
    log_event("ADMIN_VOUCHER_CREATE", user_id=g.user.id, entity="voucher", entity_id=voucher.id)
    return jsonify(_voucher_json(voucher)), 201


@voucher_bp.put("/admin/vouchers/<int:voucher_id>")
@admin_required
def update_voucher(voucher_id: int):
    data = request.get_json(silent=True) or {}
    voucher = db.session.get(Voucher, voucher_id)
    if not voucher:
        return jsonify(error="Voucher not found"), 404

    changes = {}
    if "discount_percent" in data:
        voucher.discount_percent = ledger.parse_discount(data.get("discount_percent"))
        changes["discount_percent"] = voucher.discount_percent
    if "is_used" in data:
        if not isinstance(data.get("is_used"), bool):
            raise ApiError("is_used must be true or false", inline_error="is_used")
        ledger.mark_used(voucher, data["is_used"])
        changes["is_used"] = voucher.is_used

    db.session.commit()
    log_event("ADMIN_VOUCHER_UPDATE", user_id=g.user.id, entity="voucher", entity_id=voucher.id, metadata=changes)
    return jsonify(_voucher_json(voucher)), 200


@voucher_bp.delete("/admin/vouchers/<int:voucher_id>")
@admin_required
def delete_voucher(voucher_id: int):
    voucher = db.session.get(Voucher, voucher_id)
    if not voucher:
        return jsonify(error="Voucher not found"), 404

    # bookings and invoices keep their copy of the code
    code = voucher.code
    db.session.delete(voucher)
    db.session.commit()

    log_event("ADMIN_VOUCHER_DELETE", user_id=g.user.id, entity="voucher", entity_id=voucher_id, metadata={"code": code})
    return jsonify(success=True), 200


@voucher_bp.put("/admin/voucher-toggle")
@admin_required
def toggle_vouchers():
    data = request.get_json(silent=True) or {}
    enabled = data.get("enabled")
    if not isinstance(enabled, bool):
        raise ApiError("enabled must be true or false", inline_error="enabled")

    site_config.set_value(site_config.VOUCHER_ENABLED, "1" if enabled else "0")
    db.session.commit()

    log_event("ADMIN_VOUCHER_TOGGLE", user_id=g.user.id, metadata={"enabled": enabled})
    return jsonify(success=True, enabled=enabled), 200


@voucher_bp.put("/admin/voucher-discount")
@admin_required
def set_default_discount():
    data = request.get_json(silent=True) or {}
    discount = ledger.parse_discount(data.get("discount"), field="discount")

    site_config.set_value(site_config.VOUCHER_DEFAULT_DISCOUNT, discount)
    db.session.commit()

    log_event("ADMIN_VOUCHER_DISCOUNT", user_id=g.user.id, metadata={"discount": discount})
    return jsonify(success=True, default_discount=discount), 200
