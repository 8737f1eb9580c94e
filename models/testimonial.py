from datetime import datetime
from models.db import db

class Testimonial(db.Model):
    __tablename__ = "testimonials"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    review = db.Column(db.Text, nullable=False)
    rating = db.Column(db.Integer, nullable=False)  # 1-5

    # public submissions stay hidden until an admin approves them
    is_approved = db.Column(db.Boolean, default=False, nullable=False, index=True)

    profile_photo = db.Column(db.String(255), nullable=True)
    service_ordered = db.Column(db.String(160), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
