from .health import health_bp
from .auth import auth_bp
from .public import public_bp
from .vouchers import voucher_bp
from .booking import booking_bp
from .invoices import invoice_bp
from .catalog import catalog_bp
from .admin import admin_bp
