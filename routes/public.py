from sqlalchemy.exc import IntegrityError

from flask import Blueprint, request, jsonify
from models import db
from models.service import Service
from models.garage_item import GarageItem
from models.testimonial import Testimonial
from models.faq import Faq
from models.content_home import ContentHome
from models.newsletter import NewsletterSubscriber
from security.rate_limit import check_and_increment_rate
from utils import catalog
from utils.audit import log_event
from utils.site_config import all_settings
from utils.vouchers import is_valid_email, normalize_email

public_bp = Blueprint("public", __name__, url_prefix="/api")


@public_bp.get("/settings")
def get_settings():
    return jsonify(all_settings()), 200


@public_bp.get("/content-home")
def get_content_home():
    row = ContentHome.query.order_by(ContentHome.id.asc()).first()
    return jsonify(catalog.content_home_json(row) if row else {}), 200


@public_bp.get("/services")
def list_services():
    rows = Service.query.order_by(Service.id.asc()).all()
    return jsonify([catalog.service_json(s) for s in rows]), 200


@public_bp.get("/garage")
def list_garage():
    status = (request.args.get("status") or "").strip().lower()
    q = GarageItem.query
    if status:
        q = q.filter(GarageItem.status == status)
    rows = q.order_by(GarageItem.id.asc()).all()
    return jsonify([catalog.garage_json(c) for c in rows]), 200


@public_bp.get("/faqs")
def list_faqs():
    rows = Faq.query.order_by(Faq.display_order.asc(), Faq.id.asc()).all()
    return jsonify([catalog.faq_json(f) for f in rows]), 200


@public_bp.get("/testimonials")
def list_testimonials():
    rows = (
        Testimonial.query
        .filter(Testimonial.is_approved.is_(True))
        .order_by(Testimonial.id.desc())
        .all()
    )
    return jsonify([catalog.testimonial_json(t) for t in rows]), 200


@public_bp.post("/testimonials/submit")
def submit_testimonial():
    allowed, retry_after = check_and_increment_rate("testimonial")
    if not allowed:
        return jsonify(error="Too many requests. Try again later.", retry_after_seconds=retry_after), 429

    data = request.get_json(silent=True) or {}
    t = Testimonial(**catalog.parse_testimonial(data, public=True))
    db.session.add(t)
    db.session.commit()

    log_event("TESTIMONIAL_SUBMIT", entity="testimonial", entity_id=t.id)
    return jsonify(success=True, message="Thank you! Your review is waiting for approval."), 201


@public_bp.post("/newsletter")
def subscribe_newsletter():
    data = request.get_json(silent=True) or {}
    email = normalize_email(data.get("email"))
    if not email:
        return jsonify(error="Email is required", inline_error="email"), 400
    if not is_valid_email(email):
        return jsonify(error="Invalid email", inline_error="email"), 400

    db.session.add(NewsletterSubscriber(email=email))
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jsonify(error="Email is already subscribed", inline_error="email"), 409

    log_event("NEWSLETTER_SUBSCRIBE", entity="newsletter", metadata={"email": email})
    return jsonify(success=True, message="Subscribed to the newsletter"), 201
