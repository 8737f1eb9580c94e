"""Serialization and input parsing for the plain catalog records."""

from models.service import Service
from models.garage_item import GARAGE_STATUSES, GarageItem
from models.testimonial import Testimonial
from models.faq import Faq
from models.content_home import ContentHome
from utils.errors import ApiError
from utils.icons import display_icon, normalize_icon
from utils.invoices import to_amount



def service_json(s: Service) -> dict:
    return {
        "id": s.id,
        "title": s.title,
        "description": s.description,
        "price": s.price,
        "icon_name": display_icon(s.icon_name),
    }


def garage_json(c: GarageItem) -> dict:
    return {
        "id": c.id,
        "car_model": c.car_model,
        "year": c.year,
        "price": c.price,
        "description": c.description,
        "images": c.images,
        "status": c.status,
    }


def testimonial_json(t: Testimonial) -> dict:
    return {
        "id": t.id,
        "name": t.name,
        "review": t.review,
        "rating": t.rating,
        "is_approved": t.is_approved,
        "profile_photo": t.profile_photo,
        "service_ordered": t.service_ordered,
        "created_at": t.created_at.isoformat() if t.created_at else None,
    }


def faq_json(f: Faq) -> dict:
    return {
        "id": f.id,
        "question": f.question,
        "answer": f.answer,
        "display_order": f.display_order,
    }


def content_home_json(c: ContentHome) -> dict:
    return {
        "id": c.id,
        "title": c.title,
        "description": c.description,
        "hero_image": c.hero_image,
    }


def text_field(data: dict, field: str, required: bool = False, max_len: int = None):
    value = data.get(field)
    if value is None:
        value = ""
    if not isinstance(value, str):
        raise ApiError(f"{field} must be text", inline_error=field)
    value = value.strip()
    if required and not value:
        raise ApiError(f"{field} is required", inline_error=field)
    if max_len and len(value) > max_len:
        raise ApiError(f"{field} is too long", inline_error=field)
    return value or None


def _int(data: dict, field: str, default=None, low=None, high=None):
    value = data.get(field)
    if value is None or value == "":
        if default is None:
            raise ApiError(f"{field} is required", inline_error=field)
        return default
    if isinstance(value, bool):
        raise ApiError(f"{field} must be a whole number", inline_error=field)
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ApiError(f"{field} must be a whole number", inline_error=field)
    if isinstance(value, float) and value != number:
        raise ApiError(f"{field} must be a whole number", inline_error=field)
    if (low is not None and number < low) or (high is not None and number > high):
        raise ApiError(f"{field} is out of range", inline_error=field)
    return number


def _flag(data: dict, field: str, default: bool = False) -> bool:
    value = data.get(field)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ApiError(f"{field} must be true or false", inline_error=field)
    return value


def parse_service(data: dict) -> dict:
    return {
        "title": text_field(data, "title", required=True, max_len=160),
        "description": text_field(data, "description"),
        "price": to_amount(data.get("price", 0), "price"),
        "icon_name": normalize_icon(data.get("icon_name")),
    }


def parse_garage_item(data: dict) -> dict:
    status = (text_field(data, "status") or "available").lower()
    if status not in GARAGE_STATUSES:
        raise ApiError("status must be available, reserved or sold", inline_error="status")
    year = data.get("year")
    return {
        "car_model": text_field(data, "car_model", required=True, max_len=160),
        "year": _int(data, "year", low=1900, high=2100) if year not in (None, "") else None,
        "price": to_amount(data.get("price", 0), "price"),
        "description": text_field(data, "description"),
        "images": text_field(data, "images"),
        "status": status,
    }


def parse_testimonial(data: dict, public: bool = False) -> dict:
    fields = {
        "name": text_field(data, "name", required=True, max_len=120),
        "review": text_field(data, "review", required=True),
        "rating": _int(data, "rating", low=1, high=5),
        "service_ordered": text_field(data, "service_ordered", max_len=160),
        "profile_photo": text_field(data, "profile_photo", max_len=255),
    }
    # public submissions always wait for approval
    fields["is_approved"] = False if public else _flag(data, "is_approved")
    return fields


def parse_faq(data: dict) -> dict:
    return {
        "question": text_field(data, "question", required=True),
        "answer": text_field(data, "answer", required=True),
        "display_order": _int(data, "display_order", default=0),
    }


def parse_content_home(data: dict) -> dict:
    return {
        "title": text_field(data, "title", max_len=255),
        "description": text_field(data, "description"),
        "hero_image": text_field(data, "hero_image", max_len=255),
    }
