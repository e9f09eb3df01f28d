"""API tests for invoices and the client counters they maintain."""

from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase
from rest_framework.test import APIClient

from ..models import BalanceSummary, Invoice
from . import create_client, create_invoice, create_user


class InvoiceApiTests(TestCase):
    def setUp(self):
        self.user = create_user("invoicer", tax_rate=Decimal("10"), invoice_prefix="INV")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.customer = create_client(self.user, "Acme Corp", payment_terms="net30", address="1 Main St")

    def _create(self, **overrides):
        payload = {
            "client": self.customer.id,
            "date_issued": "2025-01-01",
            "status": "Pending",
            "items": [
                {"description": "Design", "quantity": 2, "rate": "50.00"},
                {"description": "Hosting", "quantity": 1, "rate": "25.00"},
            ],
        }
        payload.update(overrides)
        return self.client.post("/api/invoices/", payload, format="json")

    def test_create_computes_totals_and_number(self):
        response = self._create()

        self.assertEqual(response.status_code, 201, response.data)
        self.assertEqual(response.data["invoice_number"], "INV-0001")
        self.assertEqual(Decimal(str(response.data["subtotal"])), Decimal("125.00"))
        self.assertEqual(Decimal(str(response.data["tax"])), Decimal("12.50"))
        self.assertEqual(Decimal(str(response.data["amount"])), Decimal("137.50"))
        self.assertEqual(Decimal(str(response.data["items"][0]["amount"])), Decimal("100.00"))
        self.assertEqual(response.data["due_date"], "2025-01-31")
        self.assertEqual(response.data["client_name"], "Acme Corp")
        self.assertEqual(response.data["client_address"], "1 Main St")

        second = self._create()
        self.assertEqual(second.data["invoice_number"], "INV-0002")

    def test_create_updates_client_totals_and_balance(self):
        self._create(status="Paid")
        self._create(status="Pending")

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_invoices, 2)
        self.assertEqual(self.customer.total_amount, Decimal("137.50"))

        summary = BalanceSummary.objects.get(user=self.user)
        self.assertEqual(summary.total_earnings, Decimal("137.50"))
        self.assertEqual(summary.current_balance, Decimal("137.50"))

    def test_rejects_negative_quantity_and_foreign_client(self):
        response = self._create(items=[{"description": "Bad", "quantity": -1, "rate": "10"}])
        self.assertEqual(response.status_code, 400)
        self.assertIn("items", response.data)

        stranger = create_user("stranger")
        foreign_client = create_client(stranger, "Hidden Co")
        response = self._create(client=foreign_client.id)
        self.assertEqual(response.status_code, 400)
        self.assertIn("client", response.data)

    def test_due_date_before_issue_date_is_rejected(self):
        response = self._create(date_issued="2025-02-01", due_date="2025-01-15")
        self.assertEqual(response.status_code, 400)
        self.assertIn("due_date", response.data)

        yesterday = (date.today() - timedelta(days=1)).isoformat()
        payload = {
            "client": self.customer.id,
            "due_date": yesterday,
            "items": [{"description": "Work", "quantity": 1, "rate": "10.00"}],
        }
        response = self.client.post("/api/invoices/", payload, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("due_date", response.data)

    def test_fractional_quantities_keep_subtotal_equal_to_line_sum(self):
        line = {"description": "Bolt", "quantity": "1.5", "rate": "0.33"}
        response = self._create(items=[line, line, line])

        self.assertEqual(response.status_code, 201, response.data)
        line_total = sum(Decimal(str(item["amount"])) for item in response.data["items"])
        self.assertEqual(Decimal(str(response.data["subtotal"])), line_total)
        self.assertEqual(line_total, Decimal("1.50"))
        self.assertEqual(Decimal(str(response.data["amount"])), Decimal("1.65"))

    def test_lookup_by_invoice_number_and_missing_invoice(self):
        self._create()
        response = self.client.get("/api/invoices/INV-0001/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["invoice_number"], "INV-0001")

        missing = self.client.get("/api/invoices/INV-9999/")
        self.assertEqual(missing.status_code, 404)

    def test_update_items_recomputes_totals(self):
        self._create(status="Paid")
        response = self.client.patch(
            "/api/invoices/INV-0001/",
            {"items": [{"description": "Retainer", "quantity": 1, "rate": "200.00"}]},
            format="json",
        )
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(Decimal(str(response.data["amount"])), Decimal("220.00"))

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_amount, Decimal("220.00"))

    def test_moving_invoice_to_other_client_refreshes_both(self):
        other = create_client(self.user, "Globex")
        self._create(status="Paid")

        response = self.client.patch("/api/invoices/INV-0001/", {"client": other.id}, format="json")
        self.assertEqual(response.status_code, 200, response.data)
        self.assertEqual(response.data["client_name"], "Globex")

        self.customer.refresh_from_db()
        other.refresh_from_db()
        self.assertEqual((self.customer.total_invoices, self.customer.total_amount), (0, Decimal("0.00")))
        self.assertEqual((other.total_invoices, other.total_amount), (1, Decimal("137.50")))

    def test_status_change_and_delete(self):
        self._create()
        response = self.client.post("/api/invoices/INV-0001/status/", {"status": "Paid"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["status"], "Paid")
        self.assertEqual(BalanceSummary.objects.get(user=self.user).total_earnings, Decimal("137.50"))

        bad = self.client.post("/api/invoices/INV-0001/status/", {"status": "Lost"}, format="json")
        self.assertEqual(bad.status_code, 400)

        deleted = self.client.delete("/api/invoices/INV-0001/")
        self.assertEqual(deleted.status_code, 204)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_invoices, 0)
        self.assertEqual(BalanceSummary.objects.get(user=self.user).total_earnings, Decimal("0.00"))

    def test_filters(self):
        create_invoice(self.user, self.customer, "INV-0100", status=Invoice.PAID, date_issued=date(2025, 1, 5))
        create_invoice(self.user, self.customer, "INV-0101", status=Invoice.DRAFT, date_issued=date(2025, 2, 5))
        globex = create_client(self.user, "Globex")
        create_invoice(self.user, globex, "INV-0102", status=Invoice.PAID, date_issued=date(2025, 3, 5))

        paid = self.client.get("/api/invoices/", {"status": "Paid"})
        self.assertEqual({row["invoice_number"] for row in paid.data}, {"INV-0100", "INV-0102"})

        ranged = self.client.get("/api/invoices/", {"date_from": "2025-02-01", "date_to": "2025-02-28"})
        self.assertEqual([row["invoice_number"] for row in ranged.data], ["INV-0101"])

        searched = self.client.get("/api/invoices/", {"search": "glob"})
        self.assertEqual([row["invoice_number"] for row in searched.data], ["INV-0102"])

        newest_first = self.client.get("/api/invoices/")
        self.assertEqual(newest_first.data[0]["invoice_number"], "INV-0102")

        by_client = self.client.get("/api/invoices/", {"client": globex.id})
        self.assertEqual([row["invoice_number"] for row in by_client.data], ["INV-0102"])

        bad_date = self.client.get("/api/invoices/", {"date_from": "02/01/2025"})
        self.assertEqual(bad_date.status_code, 400)

        bad_client = self.client.get("/api/invoices/", {"client": "abc"})
        self.assertEqual(bad_client.status_code, 400)
        self.assertIn("client", bad_client.data)

    def test_next_number_does_not_consume_sequence(self):
        first = self.client.get("/api/invoices/next-number/")
        second = self.client.get("/api/invoices/next-number/")
        self.assertEqual(first.data["invoice_number"], "INV-0001")
        self.assertEqual(second.data["invoice_number"], "INV-0001")

    def test_other_users_invoices_are_invisible(self):
        stranger = create_user("peeker")
        create_invoice(stranger, create_client(stranger, "Secret"), "INV-0001")

        response = self.client.get("/api/invoices/")
        self.assertEqual(response.data, [])
        self.assertEqual(self.client.get("/api/invoices/INV-0001/").status_code, 404)


class ClientApiTests(TestCase):
    def setUp(self):
        self.user = create_user("clientele")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)

    def test_create_requires_valid_email(self):
        response = self.client.post("/api/clients/", {"name": "Acme", "email": "not-an-email"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("email", response.data)

        response = self.client.post(
            "/api/clients/",
            {"name": "Acme", "email": "billing@acme.test", "payment_terms": "net15"},
            format="json",
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data["total_invoices"], 0)

    def test_details_and_nested_invoices(self):
        acme = create_client(self.user, "Acme")
        create_invoice(self.user, acme, "INV-0001", status=Invoice.PAID)
        create_invoice(self.user, acme, "INV-0002", status=Invoice.PENDING)

        details = self.client.get(f"/api/clients/{acme.id}/details/")
        self.assertEqual(details.status_code, 200)
        self.assertEqual(len(details.data["invoices"]), 2)
        statuses = {entry["status"]: entry["count"] for entry in details.data["summary"]["status_breakdown"]}
        self.assertEqual(statuses["Paid"], 1)
        self.assertEqual(statuses["Cancelled"], 0)

        nested = self.client.get(f"/api/clients/{acme.id}/invoices/")
        self.assertEqual(nested.status_code, 200)
        self.assertEqual(len(nested.data), 2)

        self.assertEqual(self.client.get("/api/clients/999999/invoices/").status_code, 404)

    def test_search_and_delete_cascades(self):
        acme = create_client(self.user, "Acme", company="Acme Holdings")
        create_client(self.user, "Globex")
        create_invoice(self.user, acme, "INV-0001", status=Invoice.PAID)

        found = self.client.get("/api/clients/", {"search": "holdings"})
        self.assertEqual([row["name"] for row in found.data], ["Acme"])

        response = self.client.delete(f"/api/clients/{acme.id}/")
        self.assertEqual(response.status_code, 204)
        self.assertFalse(Invoice.objects.filter(created_by=self.user).exists())
        self.assertEqual(BalanceSummary.objects.get(user=self.user).total_earnings, Decimal("0.00"))

    def test_requires_authentication(self):
        anonymous = APIClient()
        self.assertEqual(anonymous.get("/api/clients/").status_code, 401)
