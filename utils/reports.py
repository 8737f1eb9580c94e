"""Aggregates over completed bookings for the admin dashboard and exports."""

import calendar
import csv
import io
import math
from datetime import date, datetime, timedelta

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from models.booking import Booking
from models.service import Service

PERIODS = ("week", "month", "year")
DAY_NAMES = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

EXPORT_COLUMNS = ("id", "client", "contact", "vehicle", "service", "scheduled_at")
EXPORT_FORMATS = ("json", "csv", "pdf")


def completed_bookings():
    return (
        Booking.query
        .filter(Booking.status == "completed")
        .order_by(Booking.scheduled_at.asc())
        .all()
    )


def week_of_month(day: int) -> int:
    """
    ceil(day / 7), capped at 4. Days 29-31 are counted in week 4; the old
    dashboard chart matched only weeks 1-4 exactly and dropped those days.
    """
    return min(math.ceil(day / 7), 4)


def summarize(scheduled: list, period: str, today: date) -> list:
    """
    Buckets the scheduled_at datetimes of completed bookings.

    week:  the Monday-Sunday week containing ``today``, one row per day
    month: weeks 1-4 of today's month
    year:  the 12 months of today's year
    """
    if period == "week":
        start = today - timedelta(days=today.weekday())
        days = [start + timedelta(days=i) for i in range(7)]
        counts = {d: 0 for d in days}
        for ts in scheduled:
            if ts.date() in counts:
                counts[ts.date()] += 1
        return [
            {"name": DAY_NAMES[d.weekday()], "date": d.isoformat(), "total": counts[d]}
            for d in days
        ]

    if period == "month":
        counts = {week: 0 for week in range(1, 5)}
        for ts in scheduled:
            if ts.year == today.year and ts.month == today.month:
                counts[week_of_month(ts.day)] += 1
        return [{"name": f"Week {week}", "total": counts[week]} for week in range(1, 5)]

    if period == "year":
        counts = {month: 0 for month in range(1, 13)}
        for ts in scheduled:
            if ts.year == today.year:
                counts[ts.month] += 1
        return [
            {"name": calendar.month_abbr[month], "month": month, "total": counts[month]}
            for month in range(1, 13)
        ]

    raise ValueError(f"unknown period: {period}")


def export_rows(bookings: list) -> list:
    service_ids = {b.service_id for b in bookings if b.service_id is not None}
    services = (
        {s.id: s for s in Service.query.filter(Service.id.in_(service_ids)).all()}
        if service_ids else {}
    )

    rows = []
    for b in bookings:
        svc = services.get(b.service_id)
        rows.append({
            "id": b.id,
            "client": b.name or "-",
            "contact": f"{b.email or '-'} | {b.phone or '-'}",
            "vehicle": b.vehicle_info,
            "service": svc.title if svc else "-",
            "scheduled_at": b.scheduled_at.strftime("%Y-%m-%d %H:%M") if b.scheduled_at else "-",
        })
    return rows


def rows_to_csv(rows: list) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    writer.writerows(rows)
    return buf.getvalue()


PDF_COLUMNS = (
    ("id", "ID", 36),
    ("client", "Client", 120),
    ("vehicle", "Vehicle", 130),
    ("service", "Service", 130),
    ("scheduled_at", "Scheduled", 100),
)


def rows_to_pdf(rows: list, site_name: str = "Khanza Repaint", now: datetime = None) -> bytes:
    """Completed-bookings recap as a one-table PDF, continued across pages."""
    now = now or datetime.utcnow()
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    w, h = A4

    x = 40
    lh = 16

    def header(y):
        c.setFont("Helvetica-Bold", 11)
        col_x = x
        for _, label, width in PDF_COLUMNS:
            c.drawString(col_x, y, label)
            col_x += width
        c.line(x, y - 4, w - x, y - 4)
        return y - lh

    y = h - 48
    c.setFont("Helvetica-Bold", 18)
    c.drawString(x, y, site_name)
    y -= 20
    c.setFont("Helvetica", 10)
    c.drawString(x, y, "Completed bookings recap")
    y -= 14
    c.drawString(x, y, f"Printed: {now.strftime('%d %B %Y')}")
    y -= 26
    y = header(y)

    c.setFont("Helvetica", 9)
    if not rows:
        c.drawString(x, y, "No completed bookings.")
    for row in rows:
        if y < 48:
            c.showPage()
            y = header(h - 48)
            c.setFont("Helvetica", 9)
        col_x = x
        for key, _, width in PDF_COLUMNS:
            # clip to the column; Helvetica 9pt averages ~5pt per character
            c.drawString(col_x, y, str(row.get(key, "-"))[: max(1, width // 5 - 1)])
            col_x += width
        y -= lh

    c.showPage()
    c.save()
    return buf.getvalue()


def export_filename(now: datetime = None, ext: str = "csv") -> str:
    now = now or datetime.utcnow()
    return f"completed_bookings_{now.strftime('%d%m%Y')}.{ext}"
