from flask import current_app

from models import db
from models.user import User
from models.service import Service
from models.garage_item import GarageItem
from models.testimonial import Testimonial
from models.faq import Faq
from models.content_home import ContentHome
from security.password import hash_password, is_bcrypt_hash
from utils import site_config


def seed_admin(email: str = None, password: str = None) -> bool:
    """
    Creates the admin account when it is missing. An existing account whose
    stored password is not a bcrypt hash is re-keyed. Returns True on change.
    """
    email = (email or current_app.config.get("ADMIN_EMAIL") or "").strip().lower()
    password = password or current_app.config.get("ADMIN_PASSWORD")
    if not email or not password:
        current_app.logger.warning("ADMIN_EMAIL/ADMIN_PASSWORD not set, no admin seeded")
        return False

    user = User.query.filter_by(email=email).first()
    if user is None:
        db.session.add(User(email=email, password_hash=hash_password(password), role="admin"))
        db.session.commit()
        current_app.logger.info("admin %s seeded", email)
        return True

    if not is_bcrypt_hash(user.password_hash):
        user.password_hash = hash_password(password)
        db.session.commit()
        current_app.logger.info("admin %s password upgraded to bcrypt", email)
        return True
    return False


DEMO_SERVICES = [
    ("Cat Ulang Full Body", "Complete multi-stage premium exterior repaint.", 25000000, "PaintBucket"),
    ("Ganti Warna Custom", "A unique custom colour, matched to your brief.", 35000000, "Palette"),
    ("Ceramic Coating", "Long-lasting protection from weather, UV and light scratches.", 8000000, "Shield"),
    ("Detailing Signature", "Deep cleaning and restoration, inside and out.", 3500000, "Sparkles"),
]

DEMO_GARAGE = [
    ("Porsche 911 GT3 RS", 2023, 4500000000, "Excellent condition"),
    ("Ferrari F8 Tributo", 2022, 5200000000, "Low mileage"),
    ("Lamborghini Huracan EVO", 2021, 4700000000, "Custom exhaust"),
]

DEMO_FAQS = [
    ("How long does a full body repaint take?",
     "Usually two to four weeks, depending on the vehicle, the colour and the prep work required."),
    ("Is the paintwork under warranty?",
     "Yes. Full body repaints carry a five year warranty against peeling, fading and bubbling."),
]

DEMO_TESTIMONIALS = [
    ("Budi Santoso", "They transformed my 911 with a custom colour that turns heads everywhere.", 5),
    ("Sari Dewi", "Ceramic coating and paint correction left it looking better than new.", 5),
]


def seed_demo() -> dict:
    """Fills each empty catalog table with demo rows."""
    added = {}

    if Service.query.count() == 0:
        for title, description, price, icon in DEMO_SERVICES:
            db.session.add(Service(title=title, description=description, price=price, icon_name=icon))
        added["services"] = len(DEMO_SERVICES)

    if GarageItem.query.count() == 0:
        for idx, (model, year, price, description) in enumerate(DEMO_GARAGE, start=1):
            db.session.add(GarageItem(
                car_model=model,
                year=year,
                price=price,
                description=description,
                images=f"https://picsum.photos/seed/car{idx}/800/600",
                status="available",
            ))
        added["garage"] = len(DEMO_GARAGE)

    if Faq.query.count() == 0:
        for order, (question, answer) in enumerate(DEMO_FAQS, start=1):
            db.session.add(Faq(question=question, answer=answer, display_order=order))
        added["faqs"] = len(DEMO_FAQS)

    if Testimonial.query.count() == 0:
        for name, review, rating in DEMO_TESTIMONIALS:
            db.session.add(Testimonial(name=name, review=review, rating=rating, is_approved=True))
        added["testimonials"] = len(DEMO_TESTIMONIALS)

    if ContentHome.query.count() == 0:
        db.session.add(ContentHome(
            title="Redefining Automotive Perfection",
            description="Premium repaint, detailing and restoration services.",
            hero_image="https://picsum.photos/seed/car/1920/1080",
        ))
        added["content_home"] = 1

    db.session.commit()
    return added


def seed_startup():
    site_config.seed_defaults()
    seed_admin()
