from datetime import datetime, timedelta
from flask import request, current_app

from models import db
from models.ip_rate_limit import IpRateLimit

def _client_ip() -> str:
    return request.headers.get("X-Forwarded-For", request.remote_addr) or "unknown"

def _limits(bucket: str) -> tuple[int, int]:
    if bucket == "login":
        return (
            current_app.config.get("LOGIN_RATE_WINDOW_SECONDS", 60),
            current_app.config.get("LOGIN_RATE_MAX_REQUESTS", 15),
        )
    return (
        current_app.config.get("PUBLIC_RATE_WINDOW_SECONDS", 60),
        current_app.config.get("PUBLIC_RATE_MAX_REQUESTS", 1),
    )

def check_and_increment_rate(bucket: str) -> tuple[bool, int]:
    """
    Returns (allowed, retry_after_seconds).
    Simple fixed window per IP and bucket (login, claim, booking, testimonial).
    """
    ip = _client_ip()
    now = datetime.utcnow()
    window_seconds, max_requests = _limits(bucket)

    row = IpRateLimit.query.filter_by(ip=ip, bucket=bucket).first()
    if not row:
        row = IpRateLimit(ip=ip, bucket=bucket, window_start=now, count=0)
        db.session.add(row)

    window_end = row.window_start + timedelta(seconds=window_seconds)

    # Reset window if expired
    if now >= window_end:
        row.window_start = now
        row.count = 0
        window_end = row.window_start + timedelta(seconds=window_seconds)

    row.count += 1
    db.session.commit()

    if row.count > max_requests:
        retry_after = int((window_end - now).total_seconds())
        return False, max(retry_after, 1)

    return True, 0
