from flask import Blueprint, jsonify, g, request

from models import db
from models.service import Service
from models.garage_item import GarageItem
from models.testimonial import Testimonial
from models.faq import Faq
from models.content_home import ContentHome
from utils import catalog
from utils.audit import log_event
from utils.auth_context import admin_required

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api/admin")


def _create(model, fields: dict, entity: str):
    row = model(**fields)
    db.session.add(row)
    db.session.commit()
    log_event(f"ADMIN_{entity.upper()}_CREATE", user_id=g.user.id, entity=entity, entity_id=row.id)
    return row


def _update(model, row_id: int, parse, entity: str):
    row = db.session.get(model, row_id)
    if not row:
        return None
    for key, value in parse(request.get_json(silent=True) or {}).items():
        setattr(row, key, value)
    db.session.commit()
    log_event(f"ADMIN_{entity.upper()}_UPDATE", user_id=g.user.id, entity=entity, entity_id=row.id)
    return row


def _delete(model, row_id: int, entity: str) -> bool:
    row = db.session.get(model, row_id)
    if not row:
        return False
    db.session.delete(row)
    db.session.commit()
    log_event(f"ADMIN_{entity.upper()}_DELETE", user_id=g.user.id, entity=entity, entity_id=row_id)
    return True


# ---------- Services ----------
@catalog_bp.post("/services")
@admin_required
def create_service():
    row = _create(Service, catalog.parse_service(request.get_json(silent=True) or {}), "service")
    return jsonify(catalog.service_json(row)), 201


@catalog_bp.put("/services/<int:service_id>")
@admin_required
def update_service(service_id: int):
    row = _update(Service, service_id, catalog.parse_service, "service")
    if not row:
        return jsonify(error="Service not found"), 404
    return jsonify(catalog.service_json(row)), 200


@catalog_bp.delete("/services/<int:service_id>")
@admin_required
def delete_service(service_id: int):
    # bookings keep the dangling service_id; their service_title reads back as null
    if not _delete(Service, service_id, "service"):
        return jsonify(error="Service not found"), 404
    return jsonify(success=True), 200


# ---------- Garage inventory ----------
@catalog_bp.get("/garage")
@admin_required
def list_garage():
    rows = GarageItem.query.order_by(GarageItem.id.desc()).all()
    return jsonify([catalog.garage_json(c) for c in rows]), 200


@catalog_bp.post("/garage")
@admin_required
def create_garage_item():
    row = _create(GarageItem, catalog.parse_garage_item(request.get_json(silent=True) or {}), "garage")
    return jsonify(catalog.garage_json(row)), 201


@catalog_bp.put("/garage/<int:item_id>")
@admin_required
def update_garage_item(item_id: int):
    row = _update(GarageItem, item_id, catalog.parse_garage_item, "garage")
    if not row:
        return jsonify(error="Vehicle not found"), 404
    return jsonify(catalog.garage_json(row)), 200


@catalog_bp.delete("/garage/<int:item_id>")
@admin_required
def delete_garage_item(item_id: int):
    if not _delete(GarageItem, item_id, "garage"):
        return jsonify(error="Vehicle not found"), 404
    return jsonify(success=True), 200


# ---------- Testimonials ----------
@catalog_bp.get("/testimonials")
@admin_required
def list_testimonials():
    approved = request.args.get("approved")
    q = Testimonial.query
    if approved in ("0", "1"):
        q = q.filter(Testimonial.is_approved.is_(approved == "1"))
    rows = q.order_by(Testimonial.id.desc()).all()
    return jsonify([catalog.testimonial_json(t) for t in rows]), 200


@catalog_bp.post("/testimonials")
@admin_required
def create_testimonial():
    row = _create(Testimonial, catalog.parse_testimonial(request.get_json(silent=True) or {}), "testimonial")
    return jsonify(catalog.testimonial_json(row)), 201


@catalog_bp.put("/testimonials/<int:testimonial_id>")
@admin_required
def update_testimonial(testimonial_id: int):
    row = _update(Testimonial, testimonial_id, catalog.parse_testimonial, "testimonial")
    if not row:
        return jsonify(error="Testimonial not found"), 404
    return jsonify(catalog.testimonial_json(row)), 200


@catalog_bp.delete("/testimonials/<int:testimonial_id>")
@admin_required
def delete_testimonial(testimonial_id: int):
    if not _delete(Testimonial, testimonial_id, "testimonial"):
        return jsonify(error="Testimonial not found"), 404
    return jsonify(success=True), 200


# ---------- FAQs ----------
@catalog_bp.post("/faqs")
@admin_required
def create_faq():
    row = _create(Faq, catalog.parse_faq(request.get_json(silent=True) or {}), "faq")
    return jsonify(catalog.faq_json(row)), 201


@catalog_bp.put("/faqs/<int:faq_id>")
@admin_required
def update_faq(faq_id: int):
    row = _update(Faq, faq_id, catalog.parse_faq, "faq")
    if not row:
        return jsonify(error="FAQ not found"), 404
    return jsonify(catalog.faq_json(row)), 200


@catalog_bp.delete("/faqs/<int:faq_id>")
@admin_required
def delete_faq(faq_id: int):
    if not _delete(Faq, faq_id, "faq"):
        return jsonify(error="FAQ not found"), 404
    return jsonify(success=True), 200


# ---------- Home page content (single row) ----------
@catalog_bp.put("/content-home")
@admin_required
def update_content_home():
    fields = catalog.parse_content_home(request.get_json(silent=True) or {})
    row = ContentHome.query.order_by(ContentHome.id.asc()).first()
    if row is None:
        row = ContentHome()
        db.session.add(row)
    for key, value in fields.items():
        setattr(row, key, value)
    db.session.commit()

    log_event("ADMIN_CONTENT_HOME_UPDATE", user_id=g.user.id, entity="content_home", entity_id=row.id)
    return jsonify(catalog.content_home_json(row)), 200
