from models.db import db

GARAGE_STATUSES = ("available", "reserved", "sold")

class GarageItem(db.Model):
    __tablename__ = "garage"

    id = db.Column(db.Integer, primary_key=True)
    car_model = db.Column(db.String(160), nullable=False)
    year = db.Column(db.Integer, nullable=True)
    price = db.Column(db.BigInteger, nullable=False, default=0)
    description = db.Column(db.Text, nullable=True)
    images = db.Column(db.Text, nullable=True)  # comma separated URLs
    status = db.Column(db.String(20), nullable=False, default="available")
