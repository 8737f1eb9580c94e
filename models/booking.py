from datetime import datetime
from models.db import db

BOOKING_STATUSES = ("pending", "completed", "cancelled")

class Booking(db.Model):
    __tablename__ = "bookings"

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False, default="")
    email = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(30), nullable=True)
    vehicle_info = db.Column(db.String(255), nullable=False, default="Unknown")

    # weak references: no FK, rows may outlive what they point to
    service_id = db.Column(db.Integer, nullable=True, index=True)
    voucher_code = db.Column(db.String(40), nullable=True, index=True)

    scheduled_at = db.Column(db.DateTime, nullable=False, index=True)
    status = db.Column(db.String(20), nullable=False, default="pending")
    # status values: pending, completed, cancelled

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class BookingSlot(db.Model):
    __tablename__ = "booking_slots"

    id = db.Column(db.Integer, primary_key=True)
    scheduled_at = db.Column(db.DateTime, nullable=False)
    booking_id = db.Column(db.Integer, db.ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)

    __table_args__ = (
        # Only one live booking per timestamp (prevents double booking)
        db.UniqueConstraint("scheduled_at", name="uq_booking_slot_time"),
    )
