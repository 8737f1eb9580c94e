from flask import Blueprint, request, jsonify, g

from models import db
from models.booking import Booking
from models.service import Service
from models.invoice import Invoice
from models.voucher import Voucher
from utils import invoices as billing
from utils.audit import log_event
from utils.auth_context import admin_required
from utils.errors import ApiError
from utils.vouchers import normalize_code

invoice_bp = Blueprint("invoices", __name__, url_prefix="/api/admin/invoices")


def _invoice_json(inv: Invoice, bookings=None, services=None) -> dict:
    # booking/service fields are joined at read time; a deleted booking leaves them blank
    bookings = bookings or {}
    services = services or {}
    b = bookings.get(inv.booking_id)
    s = services.get(b.service_id) if b else None
    return {
        "id": inv.id,
        "booking_id": inv.booking_id,
        "items": inv.items or [],
        "voucher_code": inv.voucher_code,
        "discount_percent": inv.discount_percent,
        "subtotal": inv.subtotal,
        "total": inv.total,
        "payment_status": inv.payment_status,
        "dp_amount": inv.dp_amount,
        "remaining_amount": inv.remaining_amount,
        "created_at": inv.created_at.isoformat() if inv.created_at else None,
        "booking_missing": b is None,
        "client_name": b.name if b else None,
        "client_email": b.email if b else None,
        "client_phone": b.phone if b else None,
        "vehicle_info": b.vehicle_info if b else None,
        "scheduled_at": b.scheduled_at.isoformat() if b else None,
        "booking_voucher": b.voucher_code if b else None,
        "service_title": s.title if s else None,
        "service_price": s.price if s else None,
    }


def _lookups(rows):
    booking_ids = {i.booking_id for i in rows if i.booking_id is not None}
    bookings = {b.id: b for b in Booking.query.filter(Booking.id.in_(booking_ids)).all()} if booking_ids else {}
    service_ids = {b.service_id for b in bookings.values() if b.service_id is not None}
    services = {s.id: s for s in Service.query.filter(Service.id.in_(service_ids)).all()} if service_ids else {}
    return bookings, services


def _discount_from_ledger(code):
    """Copies the discount of a voucher as it stands now; 0 when the code is gone."""
    if not code:
        return 0
    voucher = Voucher.query.filter_by(code=code).first()
    return voucher.discount_percent if voucher else 0


def _financials(data: dict, voucher_code, discount_percent) -> dict:
    items = billing.parse_items(data.get("items"))
    payment_status = billing.parse_payment_status(data.get("payment_status"))
    totals = billing.compute_totals(items, discount_percent, payment_status, data.get("dp_amount"))
    totals["items"] = items
    totals["voucher_code"] = voucher_code
    return totals


@invoice_bp.get("")
@admin_required
def list_invoices():
    status = (request.args.get("payment_status") or "").strip().upper()
    q = Invoice.query
    if status:
        q = q.filter(Invoice.payment_status == status)

    rows = q.order_by(Invoice.created_at.desc(), Invoice.id.desc()).all()
    bookings, services = _lookups(rows)
    return jsonify([_invoice_json(i, bookings, services) for i in rows]), 200


@invoice_bp.get("/<int:invoice_id>")
@admin_required
def get_invoice(invoice_id: int):
    inv = db.session.get(Invoice, invoice_id)
    if not inv:
        return jsonify(error="Invoice not found"), 404
    bookings, services = _lookups([inv])
    return jsonify(_invoice_json(inv, bookings, services)), 200


@invoice_bp.post("")
@admin_required
def create_invoice():
    data = request.get_json(silent=True) or {}
    try:
        booking_id = int(data.get("booking_id"))
    except (TypeError, ValueError):
        raise ApiError("booking_id is required", inline_error="booking_id")

    booking = db.session.get(Booking, booking_id)
    if not booking:
        return jsonify(error="Booking not found", inline_error="booking_id"), 404

    voucher_code = normalize_code(data.get("voucher_code")) or booking.voucher_code
    if data.get("discount_percent") not in (None, ""):
        discount = billing.parse_invoice_discount(data.get("discount_percent"))
    else:
        discount = _discount_from_ledger(voucher_code)

    fields = _financials(data, voucher_code, discount)
    inv = Invoice(booking_id=booking.id, **fields)
    db.session.add(inv)
    db.session.commit()

    log_event("ADMIN_INVOICE_CREATE", user_id=g.user.id, entity="invoice", entity_id=inv.id,
              metadata={"booking_id": booking.id, "total": inv.total, "payment_status": inv.payment_status})
    bookings, services = _lookups([inv])
    return jsonify(_invoice_json(inv, bookings, services)), 201


@invoice_bp.put("/<int:invoice_id>")
@admin_required
def update_invoice(invoice_id: int):
    data = request.get_json(silent=True) or {}
    inv = db.session.get(Invoice, invoice_id)
    if not inv:
        return jsonify(error="Invoice not found"), 404

    # the stored discount is a snapshot, only an explicit value replaces it
    voucher_code = inv.voucher_code
    if "voucher_code" in data:
        voucher_code = normalize_code(data.get("voucher_code")) or None
    if data.get("discount_percent") not in (None, ""):
        discount = billing.parse_invoice_discount(data.get("discount_percent"))
    else:
        discount = inv.discount_percent

    fields = _financials(data, voucher_code, discount)
    for key, value in fields.items():
        setattr(inv, key, value)
    db.session.commit()

    log_event("ADMIN_INVOICE_UPDATE", user_id=g.user.id, entity="invoice", entity_id=inv.id,
              metadata={"total": inv.total, "payment_status": inv.payment_status})
    bookings, services = _lookups([inv])
    return jsonify(_invoice_json(inv, bookings, services)), 200


@invoice_bp.delete("/<int:invoice_id>")
@admin_required
def delete_invoice(invoice_id: int):
    inv = db.session.get(Invoice, invoice_id)
    if not inv:
        return jsonify(error="Invoice not found"), 404

    db.session.delete(inv)
    db.session.commit()

    log_event("ADMIN_INVOICE_DELETE", user_id=g.user.id, entity="invoice", entity_id=invoice_id)
    return jsonify(success=True), 200
