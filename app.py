from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import Config
from routes import (
    health_bp,
    auth_bp,
    public_bp,
    voucher_bp,
    booking_bp,
    invoice_bp,
    catalog_bp,
    admin_bp,
)

from models import db
from flask_migrate import Migrate
from utils.auth_context import load_current_user
from utils.errors import ApiError
from utils.seed import seed_startup


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    # Register routes
    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(public_bp)
    app.register_blueprint(voucher_bp)
    app.register_blueprint(booking_bp)
    app.register_blueprint(invoice_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(admin_bp)

    # Database init
    db.init_app(app)

    # Migrations
    Migrate(app, db)

    with app.app_context():
        if app.config.get("AUTO_CREATE_TABLES"):
            db.create_all()
        # Seed config defaults + admin at startup (safe & idempotent)
        if app.config.get("SEED_ON_STARTUP"):
            seed_startup()

    @app.before_request
    def _load_user():
        load_current_user()

    register_error_handlers(app)

    @app.after_request
    def add_security_headers(resp):
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["Referrer-Policy"] = "no-referrer"
        resp.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"
        resp.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none';"
        return resp

    register_cli(app)

    return app


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def _api_error(exc):
        db.session.rollback()
        return exc.to_response()

    @app.errorhandler(HTTPException)
    def _http_error(exc):
        return jsonify(error=exc.description or exc.name), exc.code

    @app.errorhandler(Exception)
    def _unexpected(exc):
        db.session.rollback()
        app.logger.exception("Unhandled error: %s", exc)
        return jsonify(error="Internal server error"), 500

#-------------------------
import click
from models.user import User
from security.password import hash_password
from utils.seed import seed_demo

def register_cli(app):
    @app.cli.command("create-admin")
    @click.argument("email")
    @click.argument("password")
    def create_admin(email, password):
        """Create an admin, or reset the password of an existing one."""
        email = email.strip().lower()
        user = User.query.filter_by(email=email).first()
        if user:
            user.password_hash = hash_password(password)
            user.role = "admin"
            db.session.commit()
            click.echo(f"{email} password reset")
            return

        db.session.add(User(email=email, password_hash=hash_password(password), role="admin"))
        db.session.commit()
        click.echo(f"{email} created as admin")

    @app.cli.command("seed-demo")
    def seed_demo_command():
        """Fill empty catalog tables with demo content."""
        added = seed_demo()
        if not added:
            click.echo("Catalog already populated, nothing to do")
            return
        for table, count in added.items():
            click.echo(f"{table}: {count} rows")

#-------------------------




if __name__ == "__main__":
    app = create_app()
    # Run locally
    app.run(host="127.0.0.1", port=5002)
