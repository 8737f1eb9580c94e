from models.db import db

class SiteConfig(db.Model):
    __tablename__ = "site_config"

    # generic key -> value store: feature flags and branding
    key = db.Column(db.String(80), primary_key=True)
    value = db.Column(db.Text, nullable=True)
