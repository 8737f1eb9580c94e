"""Invoice arithmetic. Amounts are whole rupiah."""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from models.invoice import PAYMENT_STATUSES
from utils.errors import ApiError


def to_amount(value, field: str) -> int:
    """Parses a non-negative money amount, rounded half-up to a whole unit."""
    if isinstance(value, bool) or value is None or value == "":
        raise ApiError(f"{field} must be a non-negative number", inline_error=field)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ApiError(f"{field} must be a non-negative number", inline_error=field)
    if not amount.is_finite() or amount < 0:
        raise ApiError(f"{field} must be a non-negative number", inline_error=field)
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def parse_items(raw) -> list:
    if not isinstance(raw, list):
        raise ApiError("items must be a list of {name, price}", inline_error="items")

    items = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ApiError("items must be a list of {name, price}", inline_error=f"items[{idx}]")
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ApiError("Every item needs a name", inline_error=f"items[{idx}].name")
        items.append({
            "name": name.strip(),
            "price": to_amount(item.get("price"), f"items[{idx}].price"),
        })
    return items


def parse_invoice_discount(value) -> int:
    if value is None or value == "":
        return 0
    try:
        discount = int(value)
    except (TypeError, ValueError):
        raise ApiError("discount_percent must be between 0 and 100", inline_error="discount_percent")
    if isinstance(value, bool) or not 0 <= discount <= 100:
        raise ApiError("discount_percent must be between 0 and 100", inline_error="discount_percent")
    return discount


def parse_payment_status(value) -> str:
    status = (value or "LUNAS").strip().upper() if isinstance(value, (str, type(None))) else ""
    if status not in PAYMENT_STATUSES:
        raise ApiError("payment_status must be LUNAS or DP", inline_error="payment_status")
    return status


def discounted_total(subtotal: int, discount_percent: int) -> int:
    total = Decimal(subtotal) * (Decimal(100) - Decimal(discount_percent)) / Decimal(100)
    return int(total.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_totals(items: list, discount_percent: int, payment_status: str, dp_amount=None) -> dict:
    """
    subtotal = sum of item prices, total = subtotal less the discount.
    LUNAS forces dp_amount and remaining_amount to 0 whatever was supplied;
    DP requires 0 <= dp_amount <= total.
    """
    subtotal = sum(item["price"] for item in items)
    total = discounted_total(subtotal, discount_percent)

    if payment_status == "LUNAS":
        dp, remaining = 0, 0
    else:
        dp = 0 if dp_amount is None or dp_amount == "" else to_amount(dp_amount, "dp_amount")
        if dp > total:
            raise ApiError("Down payment cannot exceed the invoice total", inline_error="dp_amount")
        remaining = total - dp

    return {
        "subtotal": subtotal,
        "discount_percent": discount_percent,
        "total": total,
        "payment_status": payment_status,
        "dp_amount": dp,
        "remaining_amount": remaining,
    }
