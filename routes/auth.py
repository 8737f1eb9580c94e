from flask import Blueprint, request, jsonify, current_app, g

from models.user import User
from security.password import verify_password
from security.rate_limit import check_and_increment_rate
from security.tokens import issue_token
from utils.audit import log_event
from utils.auth_context import admin_required
from utils.vouchers import normalize_email


auth_bp = Blueprint("auth", __name__, url_prefix="/api/admin")


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = normalize_email(data.get("email"))
    password = data.get("password")
    password = password if isinstance(password, str) else ""

    allowed, retry_after = check_and_increment_rate("login")
    if not allowed:
        log_event("LOGIN_RATE_LIMIT", metadata={"email": email, "retry_after": retry_after})
        return jsonify(error="Too many login requests. Slow down.", retry_after_seconds=retry_after), 429

    if not email or not password:
        return jsonify(error="Email and password are required"), 400

    user = User.query.filter_by(email=email).first()
    if not user or not user.is_admin or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", user_id=user.id if user else None, metadata={"email": email})
        return jsonify(error="Invalid credentials"), 401

    token = issue_token(user.id, user.email)

    log_event("LOGIN_SUCCESS", user_id=user.id)
    return jsonify(
        success=True,
        token=token,
        expires_in=current_app.config.get("TOKEN_LIFETIME_SECONDS", 24 * 60 * 60),
    ), 200


@auth_bp.get("/me")
@admin_required
def me():
    return jsonify(
        id=g.user.id,
        email=g.user.email,
        role=g.user.role,
    ), 200
