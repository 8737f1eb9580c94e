import unittest

from tests.base import ApiTestCase
from utils.errors import ApiError
from utils.invoices import compute_totals, discounted_total, parse_items, to_amount


class InvoiceArithmeticTestCase(unittest.TestCase):
    def test_down_payment_scenario(self) -> None:
        totals = compute_totals([{"name": "Repaint", "price": 25000000}], 10, "DP", 10000000)
        self.assertEqual(totals["subtotal"], 25000000)
        self.assertEqual(totals["total"], 22500000)
        self.assertEqual(totals["dp_amount"], 10000000)
        self.assertEqual(totals["remaining_amount"], 12500000)

    def test_paid_in_full_zeroes_down_payment(self) -> None:
        totals = compute_totals([{"name": "Coating", "price": 8000000}], 0, "LUNAS", 5000000)
        self.assertEqual(totals["total"], 8000000)
        self.assertEqual(totals["dp_amount"], 0)
        self.assertEqual(totals["remaining_amount"], 0)

    def test_down_payment_bounds(self) -> None:
        items = [{"name": "Repaint", "price": 1000}]
        with self.assertRaises(ApiError) as ctx:
            compute_totals(items, 0, "DP", 1001)
        self.assertEqual(ctx.exception.inline_error, "dp_amount")
        with self.assertRaises(ApiError):
            compute_totals(items, 0, "DP", -1)
        self.assertEqual(compute_totals(items, 0, "DP", 1000)["remaining_amount"], 0)
        self.assertEqual(compute_totals(items, 0, "DP", None)["remaining_amount"], 1000)

    def test_rounds_half_up(self) -> None:
        self.assertEqual(discounted_total(5, 10), 5)
        self.assertEqual(discounted_total(15, 10), 14)
        self.assertEqual(discounted_total(25, 10), 23)
        self.assertEqual(to_amount("1500.5", "price"), 1501)

    def test_empty_items_total_zero(self) -> None:
        self.assertEqual(compute_totals([], 30, "LUNAS")["total"], 0)

    def test_item_validation(self) -> None:
        with self.assertRaises(ApiError):
            parse_items("Repaint")
        with self.assertRaises(ApiError) as ctx:
            parse_items([{"name": "Repaint", "price": -5}])
        self.assertEqual(ctx.exception.inline_error, "items[0].price")
        with self.assertRaises(ApiError):
            parse_items([{"name": " ", "price": 5}])


class InvoiceApiTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.headers = self.admin_headers()

    def _create(self, **payload):
        return self.client.post("/api/admin/invoices", json=payload, headers=self.headers)

    def test_create_inherits_booking_voucher_discount(self) -> None:
        code = self.claim().get_json()["code"]
        booking_id = self.book(voucher_code=code).get_json()["id"]

        resp = self._create(
            booking_id=booking_id,
            items=[{"name": "Cat Ulang Full Body", "price": 25000000}],
            payment_status="DP",
            dp_amount=10000000,
        )
        self.assertEqual(resp.status_code, 201)
        inv = resp.get_json()
        self.assertEqual(inv["voucher_code"], code)
        self.assertEqual(inv["discount_percent"], 30)
        self.assertEqual(inv["total"], 17500000)
        self.assertEqual(inv["remaining_amount"], 7500000)
        self.assertEqual(inv["client_name"], "Budi")
        self.assertEqual(inv["service_title"], "Cat Ulang Full Body")
        self.assertFalse(inv["booking_missing"])

    def test_explicit_discount_wins(self) -> None:
        booking_id = self.book().get_json()["id"]
        inv = self._create(
            booking_id=booking_id,
            items=[{"name": "Repaint", "price": 25000000}],
            discount_percent=10,
            payment_status="DP",
            dp_amount=10000000,
        ).get_json()
        self.assertEqual(inv["total"], 22500000)
        self.assertEqual(inv["remaining_amount"], 12500000)

    def test_create_validation(self) -> None:
        booking_id = self.book().get_json()["id"]
        items = [{"name": "Repaint", "price": 1000}]
        self.assertEqual(self._create(items=items).status_code, 400)
        self.assertEqual(self._create(booking_id=999, items=items).status_code, 404)
        over = self._create(booking_id=booking_id, items=items, payment_status="DP", dp_amount=2000)
        self.assertEqual(over.status_code, 400)
        self.assertEqual(over.get_json()["inline_error"], "dp_amount")
        self.assertEqual(self._create(booking_id=booking_id, items=items, payment_status="KREDIT").status_code, 400)
        self.assertEqual(self._create(booking_id=booking_id, items=items, discount_percent=101).status_code, 400)

    def test_update_keeps_snapshot_discount(self) -> None:
        code = self.claim().get_json()["code"]
        booking_id = self.book(voucher_code=code).get_json()["id"]
        inv = self._create(booking_id=booking_id, items=[{"name": "Repaint", "price": 1000}]).get_json()

        # changing the ledger afterwards does not touch the invoice
        vouchers = self.client.get("/api/admin/vouchers", headers=self.headers).get_json()["vouchers"]
        self.client.put(f"/api/admin/vouchers/{vouchers[0]['id']}", json={"discount_percent": 80}, headers=self.headers)

        resp = self.client.put(f"/api/admin/invoices/{inv['id']}", json={
            "items": [{"name": "Repaint", "price": 1000}, {"name": "Polish", "price": 1000}],
            "payment_status": "DP",
            "dp_amount": 400,
        }, headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["discount_percent"], 30)
        self.assertEqual(body["subtotal"], 2000)
        self.assertEqual(body["total"], 1400)
        self.assertEqual(body["remaining_amount"], 1000)

    def test_invoice_and_booking_change_independently(self) -> None:
        code = self.claim().get_json()["code"]
        booking_id = self.book(voucher_code=code).get_json()["id"]
        inv = self._create(booking_id=booking_id, items=[{"name": "Repaint", "price": 2000000}],
                           payment_status="DP", dp_amount=400000).get_json()
        stored = ("items", "voucher_code", "discount_percent", "subtotal", "total",
                  "payment_status", "dp_amount", "remaining_amount")
        before = {key: inv[key] for key in stored}

        for status in ("completed", "cancelled"):
            resp = self.client.put(f"/api/admin/bookings/{booking_id}", json={"status": status}, headers=self.headers)
            self.assertEqual(resp.status_code, 200)
            after = self.client.get(f"/api/admin/invoices/{inv['id']}", headers=self.headers).get_json()
            self.assertEqual({key: after[key] for key in stored}, before)

        updated = self.client.put(f"/api/admin/invoices/{inv['id']}", json={
            "items": [{"name": "Polish", "price": 500000}],
            "voucher_code": "",
            "discount_percent": 0,
            "payment_status": "LUNAS",
        }, headers=self.headers)
        self.assertEqual(updated.status_code, 200)
        self.assertIsNone(updated.get_json()["voucher_code"])

        booking = self.client.get(f"/api/admin/bookings/{booking_id}", headers=self.headers).get_json()
        self.assertEqual(booking["status"], "cancelled")
        self.assertEqual(booking["voucher_code"], code)

    def test_switching_to_lunas_clears_down_payment(self) -> None:
        booking_id = self.book().get_json()["id"]
        inv = self._create(booking_id=booking_id, items=[{"name": "Repaint", "price": 1000}],
                           payment_status="DP", dp_amount=500).get_json()
        body = self.client.put(f"/api/admin/invoices/{inv['id']}", json={
            "items": inv["items"], "payment_status": "LUNAS", "dp_amount": 500,
        }, headers=self.headers).get_json()
        self.assertEqual(body["dp_amount"], 0)
        self.assertEqual(body["remaining_amount"], 0)

    def test_list_filter_and_delete(self) -> None:
        booking_id = self.book().get_json()["id"]
        items = [{"name": "Repaint", "price": 1000}]
        paid = self._create(booking_id=booking_id, items=items).get_json()
        self._create(booking_id=booking_id, items=items, payment_status="DP", dp_amount=100)

        listing = self.client.get("/api/admin/invoices", headers=self.headers).get_json()
        self.assertEqual(len(listing), 2)
        dp_only = self.client.get("/api/admin/invoices?payment_status=dp", headers=self.headers).get_json()
        self.assertEqual([i["payment_status"] for i in dp_only], ["DP"])

        self.assertEqual(self.client.delete(f"/api/admin/invoices/{paid['id']}", headers=self.headers).status_code, 200)
        self.assertEqual(self.client.get(f"/api/admin/invoices/{paid['id']}", headers=self.headers).status_code, 404)

    def test_deleted_booking_leaves_invoice_readable(self) -> None:
        booking_id = self.book().get_json()["id"]
        inv = self._create(booking_id=booking_id, items=[{"name": "Repaint", "price": 1000}]).get_json()
        self.client.delete(f"/api/admin/bookings/{booking_id}", headers=self.headers)

        body = self.client.get(f"/api/admin/invoices/{inv['id']}", headers=self.headers).get_json()
        self.assertEqual(body["booking_id"], booking_id)
        self.assertTrue(body["booking_missing"])
        self.assertIsNone(body["client_name"])
        self.assertIsNone(body["service_title"])
        self.assertEqual(body["total"], 1000)

    def test_deleted_voucher_keeps_invoice_code(self) -> None:
        code = self.claim().get_json()["code"]
        booking_id = self.book(voucher_code=code).get_json()["id"]
        inv = self._create(booking_id=booking_id, items=[{"name": "Repaint", "price": 1000}]).get_json()

        vouchers = self.client.get("/api/admin/vouchers", headers=self.headers).get_json()["vouchers"]
        self.client.delete(f"/api/admin/vouchers/{vouchers[0]['id']}", headers=self.headers)

        body = self.client.get(f"/api/admin/invoices/{inv['id']}", headers=self.headers).get_json()
        self.assertEqual(body["voucher_code"], code)
        self.assertEqual(body["discount_percent"], 30)


if __name__ == "__main__":
    unittest.main()
