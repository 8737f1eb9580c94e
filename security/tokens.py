from datetime import datetime, timedelta, timezone

import jwt
from flask import request, current_app


def issue_token(user_id: int, email: str) -> str:
    """
    Signs a stateless bearer token carrying {userId, email}.
    There is no server-side revocation: logout means the client drops it.
    """
    now = datetime.now(timezone.utc)
    lifetime = current_app.config.get("TOKEN_LIFETIME_SECONDS", 24 * 60 * 60)
    payload = {
        "userId": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(seconds=lifetime),
    }
    return jwt.encode(
        payload,
        current_app.config["JWT_SECRET"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def decode_token(token: str):
    """Returns the claims, or None when the token is malformed, forged or expired."""
    if not token:
        return None
    try:
        return jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        )
    except jwt.PyJWTError:
        return None


def bearer_token_from_request():
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
