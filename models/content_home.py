from models.db import db

class ContentHome(db.Model):
    # single row: the home page hero block
    __tablename__ = "content_home"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=True)
    description = db.Column(db.Text, nullable=True)
    hero_image = db.Column(db.String(255), nullable=True)
