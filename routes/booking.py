from datetime import datetime, timezone
from sqlalchemy.exc import IntegrityError

from flask import Blueprint, request, jsonify, current_app, g
from models import db
from models.booking import Booking, BookingSlot, BOOKING_STATUSES
from models.service import Service
from models.voucher import Voucher
from security.rate_limit import check_and_increment_rate
from utils import vouchers as ledger
from utils.audit import log_event
from utils.auth_context import admin_required
from utils.catalog import text_field
from utils.errors import ApiError

booking_bp = Blueprint("booking", __name__, url_prefix="/api")

def _parse_iso(dt_str: str) -> datetime:
    # Expect ISO format like "2026-01-20T18:00" (browser datetime-local)
    dt = datetime.fromisoformat(dt_str.strip())
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt

def _slot_exclusive() -> bool:
    return bool(current_app.config.get("BOOKING_SLOT_EXCLUSIVE", True))

def _claim_slot(booking: Booking) -> None:
    db.session.add(BookingSlot(scheduled_at=booking.scheduled_at, booking_id=booking.id))
    db.session.flush()

def _release_slot(booking_id: int) -> None:
    BookingSlot.query.filter_by(booking_id=booking_id).delete(synchronize_session=False)

def _booking_json(b: Booking, services=None, vouchers=None) -> dict:
    services = services or {}
    vouchers = vouchers or {}
    svc = services.get(b.service_id)
    v = vouchers.get(b.voucher_code)
    return {
        "id": b.id,
        "name": b.name,
        "email": b.email,
        "phone": b.phone,
        "vehicle_info": b.vehicle_info,
        "service_id": b.service_id,
        "service_title": svc.title if svc else None,
        "scheduled_at": b.scheduled_at.isoformat(),
        "status": b.status,
        "voucher_code": b.voucher_code,
        "voucher_discount": v.discount_percent if v else None,
        "created_at": b.created_at.isoformat() if b.created_at else None,
    }

def _lookups(rows):
    service_ids = {b.service_id for b in rows if b.service_id is not None}
    codes = {b.voucher_code for b in rows if b.voucher_code}
    services = {s.id: s for s in Service.query.filter(Service.id.in_(service_ids)).all()} if service_ids else {}
    vouchers = {v.code: v for v in Voucher.query.filter(Voucher.code.in_(codes)).all()} if codes else {}
    return services, vouchers


# ---------- PUBLIC: submit booking (DOUBLE-BOOKING + DOUBLE-SPEND SAFE) ----------
@booking_bp.post("/bookings")
def create_booking():
    allowed, retry_after = check_and_increment_rate("booking")
    if not allowed:
        return jsonify(error="Too many requests. Try again later.", retry_after_seconds=retry_after), 429

    data = request.get_json(silent=True) or {}
    scheduled_raw = data.get("scheduled_at") or data.get("date")
    service_raw = data.get("service_id") or data.get("service")
    if not scheduled_raw or not service_raw:
        return jsonify(error="Date and service are required"), 400

    try:
        scheduled_at = _parse_iso(str(scheduled_raw))
    except ValueError:
        return jsonify(error="Invalid datetime format. Use ISO e.g. 2026-01-20T10:00", inline_error="scheduled_at"), 400

    try:
        service_id = int(service_raw)
    except (TypeError, ValueError):
        return jsonify(error="Invalid service", inline_error="service_id"), 400
    if not db.session.get(Service, service_id):
        return jsonify(error="Service not found", inline_error="service_id"), 404

    name = text_field(data, "name", max_len=120)
    email = text_field(data, "email", max_len=255)
    phone = text_field(data, "phone", max_len=30)
    vehicle_info = text_field(data, "vehicle_info", max_len=255)
    if email and not ledger.is_valid_email(email):
        return jsonify(error="Invalid email", inline_error="email"), 400

    raw_code = data.get("voucher_code")
    if raw_code is not None and not isinstance(raw_code, str):
        return jsonify(error="voucher_code must be text", inline_error="voucher_code"), 400
    voucher_code = ledger.normalize_code(raw_code) or None

    booking = Booking(
        name=name or "",
        email=email.lower() if email else None,
        phone=phone,
        vehicle_info=vehicle_info or "Unknown",
        service_id=service_id,
        scheduled_at=scheduled_at,
        status="pending",
        voucher_code=voucher_code,
    )

    # voucher redemption, booking insert and slot claim commit or roll back together
    try:
        if voucher_code:
            ledger.redeem(voucher_code)
        db.session.add(booking)
        db.session.flush()
        if _slot_exclusive():
            _claim_slot(booking)
        db.session.commit()
    except ApiError:
        db.session.rollback()
        log_event("BOOKING_FAIL_VOUCHER", entity="voucher", metadata={"code": voucher_code})
        raise
    except IntegrityError:
        db.session.rollback()
        # Unique constraint uq_booking_slot_time triggers here
        log_event("BOOKING_FAIL_ALREADY_BOOKED", metadata={"scheduled_at": scheduled_at.isoformat()})
        return jsonify(error="That date and time is already booked", inline_error="scheduled_at"), 409

    log_event("BOOKING_CREATE", entity="booking", entity_id=booking.id, metadata={"voucher_code": voucher_code})
    return jsonify(success=True, message="Booking confirmed", id=booking.id, status=booking.status), 201


# ---------- ADMIN: list / inspect ----------
@booking_bp.get("/admin/bookings")
@admin_required
def list_bookings():
    status = request.args.get("status")
    q = Booking.query
    if status:
        q = q.filter_by(status=status)

    rows = q.order_by(Booking.scheduled_at.desc()).all()
    services, vouchers = _lookups(rows)
    return jsonify([_booking_json(b, services, vouchers) for b in rows]), 200


@booking_bp.get("/admin/bookings/<int:booking_id>")
@admin_required
def get_booking(booking_id: int):
    booking = db.session.get(Booking, booking_id)
    if not booking:
        return jsonify(error="Booking not found"), 404
    services, vouchers = _lookups([booking])
    return jsonify(_booking_json(booking, services, vouchers)), 200


# ---------- ADMIN: status (no transition table) ----------
@booking_bp.put("/admin/bookings/<int:booking_id>")
@admin_required
def update_booking_status(booking_id: int):
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    status = status.strip().lower() if isinstance(status, str) else ""
    if status not in BOOKING_STATUSES:
        return jsonify(error="status must be pending, completed or cancelled", inline_error="status"), 400

    booking = db.session.get(Booking, booking_id)
    if not booking:
        return jsonify(error="Booking not found"), 404

    previous = booking.status
    booking.status = status
    try:
        if _slot_exclusive():
            if status == "cancelled":
                _release_slot(booking.id)
            elif previous == "cancelled":
                _claim_slot(booking)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error="That date and time has been booked by someone else", inline_error="status"), 409

    log_event("ADMIN_BOOKING_STATUS", user_id=g.user.id, entity="booking", entity_id=booking.id,
              metadata={"from": previous, "to": status})
    return jsonify(success=True, status=status), 200


# ---------- ADMIN: hard delete (invoices keep their booking_id) ----------
@booking_bp.delete("/admin/bookings/<int:booking_id>")
@admin_required
def delete_booking(booking_id: int):
    booking = db.session.get(Booking, booking_id)
    if not booking:
        return jsonify(error="Booking not found"), 404

    _release_slot(booking.id)
    db.session.delete(booking)
    db.session.commit()

    log_event("ADMIN_BOOKING_DELETE", user_id=g.user.id, entity="booking", entity_id=booking_id)
    return jsonify(success=True), 200
