from datetime import datetime
from models.db import db

PAYMENT_STATUSES = ("LUNAS", "DP")  # LUNAS = paid in full, DP = down payment

class Invoice(db.Model):
    __tablename__ = "invoices"

    id = db.Column(db.Integer, primary_key=True)

    # weak reference, the booking may be deleted later
    booking_id = db.Column(db.Integer, nullable=True, index=True)

    items = db.Column(db.JSON, nullable=False, default=list)  # [{"name": str, "price": int}]

    # point-in-time copy, not a live link to the voucher ledger
    voucher_code = db.Column(db.String(40), nullable=True)
    discount_percent = db.Column(db.Integer, nullable=False, default=0)

    # amounts in rupiah (smallest unit)
    subtotal = db.Column(db.BigInteger, nullable=False, default=0)
    total = db.Column(db.BigInteger, nullable=False, default=0)

    payment_status = db.Column(db.String(10), nullable=False, default="LUNAS")
    dp_amount = db.Column(db.BigInteger, nullable=False, default=0)
    remaining_amount = db.Column(db.BigInteger, nullable=False, default=0)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
