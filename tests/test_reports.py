import csv
import io
import re
import unittest
from datetime import date, datetime

from tests.base import ApiTestCase
from utils.reports import export_filename, rows_to_pdf, summarize, week_of_month


class SummarizeTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.scheduled = [
            datetime(2026, 10, 19, 9, 0),   # Monday
            datetime(2026, 10, 19, 14, 0),
            datetime(2026, 10, 25, 10, 0),  # Sunday
            datetime(2026, 10, 30, 10, 0),
            datetime(2026, 3, 2, 10, 0),
            datetime(2025, 10, 19, 10, 0),
        ]

    def test_week(self) -> None:
        rows = summarize(self.scheduled, "week", date(2026, 10, 21))
        self.assertEqual([r["name"] for r in rows], ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"])
        self.assertEqual(rows[0]["date"], "2026-10-19")
        self.assertEqual([r["total"] for r in rows], [2, 0, 0, 0, 0, 0, 1])

    def test_month_folds_late_days_into_week_four(self) -> None:
        rows = summarize(self.scheduled, "month", date(2026, 10, 1))
        self.assertEqual([r["name"] for r in rows], ["Week 1", "Week 2", "Week 3", "Week 4"])
        self.assertEqual([r["total"] for r in rows], [0, 0, 2, 2])
        self.assertEqual(week_of_month(1), 1)
        self.assertEqual(week_of_month(7), 1)
        self.assertEqual(week_of_month(8), 2)
        self.assertEqual(week_of_month(31), 4)

    def test_year(self) -> None:
        rows = summarize(self.scheduled, "year", date(2026, 6, 1))
        self.assertEqual(len(rows), 12)
        self.assertEqual(rows[0]["name"], "Jan")
        self.assertEqual(rows[2]["total"], 1)
        self.assertEqual(rows[9]["total"], 4)
        self.assertEqual(sum(r["total"] for r in rows), 5)

    def test_unknown_period(self) -> None:
        with self.assertRaises(ValueError):
            summarize([], "decade", date(2026, 1, 1))

    def test_pdf_spans_pages(self) -> None:
        rows = [
            {"id": i, "client": "Budi", "contact": "-", "vehicle": "Civic", "service": "Repaint",
             "scheduled_at": "2026-10-19 10:00"}
            for i in range(120)
        ]
        data = rows_to_pdf(rows, site_name="Khanza", now=datetime(2026, 10, 19))
        self.assertTrue(data.startswith(b"%PDF"))
        page_counts = [int(n) for n in re.findall(rb"/Count (\d+)", data)]
        self.assertGreater(max(page_counts), 1)
        self.assertTrue(rows_to_pdf([]).startswith(b"%PDF"))

    def test_export_filename(self) -> None:
        self.assertEqual(export_filename(datetime(2026, 10, 19)), "completed_bookings_19102026.csv")
        self.assertEqual(export_filename(datetime(2026, 10, 19), ext="pdf"), "completed_bookings_19102026.pdf")


class ReportApiTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.admin_headers()
        done = self.book("2026-10-19T10:00").get_json()["id"]
        self.book("2026-10-20T10:00")
        self.client.put(f"/api/admin/bookings/{done}", json={"status": "completed"}, headers=self.headers)

    def test_stats(self) -> None:
        self.claim()
        self.client.post("/api/newsletter", json={"email": "fan@b.com"})
        stats = self.client.get("/api/admin/stats", headers=self.headers).get_json()
        self.assertEqual(stats["total_bookings"], 2)
        self.assertEqual(stats["pending_bookings"], 1)
        self.assertEqual(stats["completed_bookings"], 1)
        self.assertEqual(stats["active_vouchers"], 1)
        self.assertEqual(stats["newsletter_subs"], 2)

    def test_summary_counts_completed_only(self) -> None:
        resp = self.client.get("/api/admin/reports/summary?period=week&date=2026-10-21", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        rows = resp.get_json()["rows"]
        self.assertEqual(rows[0]["total"], 1)
        self.assertEqual(rows[1]["total"], 0)

    def test_summary_validation(self) -> None:
        bad_period = self.client.get("/api/admin/reports/summary?period=decade", headers=self.headers)
        self.assertEqual(bad_period.status_code, 400)
        bad_date = self.client.get("/api/admin/reports/summary?period=week&date=21-10-2026", headers=self.headers)
        self.assertEqual(bad_date.status_code, 400)

    def test_export_json(self) -> None:
        body = self.client.get("/api/admin/reports/export", headers=self.headers).get_json()
        self.assertEqual(body["columns"], ["id", "client", "contact", "vehicle", "service", "scheduled_at"])
        self.assertEqual(len(body["rows"]), 1)
        row = body["rows"][0]
        self.assertEqual(row["contact"], "budi@example.com | 08123456789")
        self.assertEqual(row["scheduled_at"], "2026-10-19 10:00")

    def test_export_csv(self) -> None:
        resp = self.client.get("/api/admin/reports/export?format=csv", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.mimetype.startswith("text/csv"))
        self.assertIn("attachment; filename=completed_bookings_", resp.headers["Content-Disposition"])
        rows = list(csv.DictReader(io.StringIO(resp.get_data(as_text=True))))
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["service"], "Cat Ulang Full Body")

    def test_export_pdf(self) -> None:
        resp = self.client.get("/api/admin/reports/export?format=pdf", headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.mimetype, "application/pdf")
        self.assertIn("attachment; filename=completed_bookings_", resp.headers["Content-Disposition"])
        self.assertTrue(resp.headers["Content-Disposition"].endswith(".pdf"))
        self.assertTrue(resp.get_data().startswith(b"%PDF"))

    def test_export_rejects_unknown_format(self) -> None:
        resp = self.client.get("/api/admin/reports/export?format=xlsx", headers=self.headers)
        self.assertEqual(resp.status_code, 400)


if __name__ == "__main__":
    unittest.main()
