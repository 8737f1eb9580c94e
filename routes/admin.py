from datetime import date
from flask import Blueprint, Response, jsonify, g, request

from models import db
from models.audit_log import AuditLog
from models.booking import Booking
from models.garage_item import GarageItem
from models.invoice import Invoice
from models.newsletter import NewsletterSubscriber
from models.voucher import Voucher
from utils import reports, site_config
from utils.audit import audit_json, log_event
from utils.auth_context import admin_required
from utils.errors import ApiError

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/stats")
@admin_required
def stats():
    return jsonify(
        total_bookings=Booking.query.count(),
        pending_bookings=Booking.query.filter_by(status="pending").count(),
        completed_bookings=Booking.query.filter_by(status="completed").count(),
        available_cars=GarageItem.query.filter_by(status="available").count(),
        active_vouchers=Voucher.query.filter(Voucher.is_used.is_(False)).count(),
        newsletter_subs=NewsletterSubscriber.query.count(),
        invoices_outstanding=Invoice.query.filter(Invoice.remaining_amount > 0).count(),
    ), 200


# ---------- Reports over completed bookings ----------
@admin_bp.get("/reports/summary")
@admin_required
def report_summary():
    period = (request.args.get("period") or "month").strip().lower()
    if period not in reports.PERIODS:
        return jsonify(error="period must be week, month or year", inline_error="period"), 400

    date_str = request.args.get("date")
    try:
        today = date.fromisoformat(date_str) if date_str else date.today()
    except ValueError:
        return jsonify(error="Invalid date. Use YYYY-MM-DD", inline_error="date"), 400

    scheduled = [b.scheduled_at for b in reports.completed_bookings()]
    return jsonify(period=period, date=today.isoformat(), rows=reports.summarize(scheduled, period, today)), 200


@admin_bp.get("/reports/export")
@admin_required
def report_export():
    fmt = (request.args.get("format") or "json").strip().lower()
    if fmt not in reports.EXPORT_FORMATS:
        return jsonify(error="format must be json, csv or pdf", inline_error="format"), 400

    rows = reports.export_rows(reports.completed_bookings())
    log_event("ADMIN_REPORT_EXPORT", user_id=g.user.id, metadata={"format": fmt, "rows": len(rows)})

    if fmt == "csv":
        return Response(
            reports.rows_to_csv(rows),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={reports.export_filename()}"},
        )
    if fmt == "pdf":
        site_name = site_config.get_value("site_name") or site_config.DEFAULT_SETTINGS["site_name"]
        return Response(
            reports.rows_to_pdf(rows, site_name=site_name),
            mimetype="application/pdf",
            headers={"Content-Disposition": f"attachment; filename={reports.export_filename(ext='pdf')}"},
        )
    return jsonify(columns=list(reports.EXPORT_COLUMNS), rows=rows), 200


# ---------- Branding settings ----------
@admin_bp.put("/settings")
@admin_required
def update_settings():
    data = request.get_json(silent=True) or {}
    changed = {}
    for key in site_config.BRANDING_KEYS:
        if key not in data:
            continue
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise ApiError(f"{key} must be text", inline_error=key)
        site_config.set_value(key, (value or "").strip())
        changed[key] = (value or "").strip()

    if not changed:
        return jsonify(error="Nothing to update"), 400
    db.session.commit()

    log_event("ADMIN_SETTINGS_UPDATE", user_id=g.user.id, metadata={"keys": sorted(changed)})
    return jsonify(success=True, settings=site_config.all_settings()), 200


# ---------- Newsletter list ----------
@admin_bp.get("/newsletters")
@admin_required
def list_newsletters():
    rows = NewsletterSubscriber.query.order_by(NewsletterSubscriber.subscribed_at.desc()).all()
    return jsonify([
        {"id": s.id, "email": s.email, "subscribed_at": s.subscribed_at.isoformat()}
        for s in rows
    ]), 200


@admin_bp.delete("/newsletters/<int:subscriber_id>")
@admin_required
def delete_newsletter(subscriber_id: int):
    row = db.session.get(NewsletterSubscriber, subscriber_id)
    if not row:
        return jsonify(error="Subscriber not found"), 404
    db.session.delete(row)
    db.session.commit()

    log_event("ADMIN_NEWSLETTER_DELETE", user_id=g.user.id, entity="newsletter", entity_id=subscriber_id)
    return jsonify(success=True), 200


# ---------- Audit trail ----------
@admin_bp.get("/audit-logs")
@admin_required
def list_audit_logs():
    limit = request.args.get("limit", type=int) or 200
    limit = max(1, min(limit, 500))

    action = request.args.get("action")
    q = AuditLog.query
    if action:
        q = q.filter(AuditLog.action == action)

    rows = q.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).limit(limit).all()
    return jsonify([audit_json(r) for r in rows]), 200
