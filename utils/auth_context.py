from functools import wraps
from flask import g, jsonify
from models import db
from models.user import User
from security.tokens import bearer_token_from_request, decode_token

def load_current_user():
    g.user = None
    g.token_claims = None

    raw_token = bearer_token_from_request()
    g.token_present = raw_token is not None
    claims = decode_token(raw_token)
    if not claims:
        return

    user = db.session.get(User, claims.get("userId"))
    # claims must still describe the stored account
    if not user or user.email != claims.get("email"):
        return
    g.token_claims = claims
    g.user = user

def admin_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        user = getattr(g, "user", None)
        if user is None or not user.is_admin:
            if getattr(g, "token_present", False):
                return jsonify(error="Invalid or expired token"), 401
            return jsonify(error="Unauthorized"), 401
        return fn(*args, **kwargs)
    return wrapper
