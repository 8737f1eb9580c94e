from datetime import datetime
from models.db import db

class Voucher(db.Model):
    __tablename__ = "vouchers"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(40), unique=True, nullable=False, index=True)
    discount_percent = db.Column(db.Integer, nullable=False)
    email_claimed = db.Column(db.String(255), nullable=True, index=True)

    # flips false -> true once, when a booking redeems it
    is_used = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    used_at = db.Column(db.DateTime, nullable=True)
