from .db import db
from .user import User
from .audit_log import AuditLog
from .ip_rate_limit import IpRateLimit
from .site_config import SiteConfig
from .service import Service
from .garage_item import GarageItem
from .testimonial import Testimonial
from .faq import Faq
from .content_home import ContentHome
from .newsletter import NewsletterSubscriber
from .voucher import Voucher
from .booking import Booking, BookingSlot
from .invoice import Invoice
