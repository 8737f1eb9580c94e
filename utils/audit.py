"""Audit trail: one row per security or business event, mirrored to the app log."""

import json

from flask import current_app, has_request_context, request

from models import db
from models.audit_log import AuditLog


def _request_origin():
    if not has_request_context():
        return None, None
    ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    agent = request.headers.get("User-Agent", "")
    return ip, (agent[:255] or None)


def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    ip, user_agent = _request_origin()
    db.session.add(AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        user_agent=user_agent,
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    ))
    db.session.commit()
    current_app.logger.info("audit %s user=%s %s=%s", action, user_id, entity or "-", entity_id)


def audit_json(row: AuditLog) -> dict:
    return {
        "id": row.id,
        "created_at": row.timestamp.isoformat() if row.timestamp else None,
        "user_id": row.user_id,
        "action": row.action,
        "entity": row.entity,
        "entity_id": row.entity_id,
        "ip": row.ip,
        "user_agent": row.user_agent,
        "metadata": json.loads(row.metadata_json) if row.metadata_json else None,
    }
