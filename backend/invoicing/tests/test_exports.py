import csv
from datetime import date
from decimal import Decimal
from io import BytesIO, StringIO
from types import SimpleNamespace

from django.test import SimpleTestCase, TestCase
from openpyxl import load_workbook
from rest_framework.test import APIClient

from ..exports import EXPENSE_CSV_HEADERS, export_invoices_csv, write_csv
from ..invoice_pdf import generate_invoice_pdf, invoice_pdf_filename
from ..models import Invoice
from ..report_exports import generate_financial_report_pdf, generate_financial_report_workbook
from . import create_client, create_expense, create_invoice, create_user


class CsvWriterTests(SimpleTestCase):
    def test_quotes_delimiters_and_quotes(self):
        content = write_csv(["Name", "Notes"], [["Acme, Inc", 'said "hi"'], ["Plain", "line\nbreak"]])
        rows = list(csv.reader(StringIO(content)))
        self.assertEqual(rows[0], ["Name", "Notes"])
        self.assertEqual(rows[1], ["Acme, Inc", 'said "hi"'])
        self.assertEqual(rows[2], ["Plain", "line\nbreak"])
        self.assertIn('"said ""hi"""', content)

    def test_invoice_items_are_summarised(self):
        invoice = SimpleNamespace(
            invoice_number="INV-0001",
            client_name="Acme",
            date_issued=date(2025, 1, 1),
            due_date=date(2025, 1, 31),
            status="Paid",
            subtotal=Decimal("125.00"),
            tax=Decimal("0.00"),
            amount=Decimal("125.00"),
            items=[
                {"description": "Design", "quantity": "2", "rate": "50.00"},
                {"description": "Hosting", "quantity": "1", "rate": "25.00"},
            ],
        )
        rows = list(csv.reader(StringIO(export_invoices_csv([invoice]))))
        self.assertEqual(rows[1][2], "2025-01-01")
        self.assertEqual(rows[1][-1], "Design (2x50.00); Hosting (1x25.00)")


class PdfFilenameTests(SimpleTestCase):
    def test_unsafe_characters_are_replaced(self):
        self.assertEqual(invoice_pdf_filename("INV-0001"), "Invoice_INV-0001.pdf")
        self.assertEqual(invoice_pdf_filename("INV/2025 #1"), "Invoice_INV_2025__1.pdf")


class FinancialReportFileTests(SimpleTestCase):
    report = {
        "period": {"start": date(2025, 1, 1), "end": date(2025, 3, 31)},
        "revenue": Decimal("1500.00"),
        "expenses": Decimal("500.00"),
        "net_profit": Decimal("1000.00"),
        "profit_margin": Decimal("66.67"),
        "top_clients": [
            {"client_name": "Acme", "revenue": Decimal("1500.00"), "invoice_count": 2,
             "avg_invoice_amount": Decimal("750.00")},
        ],
        "top_expense_categories": [
            {"category": "Technology", "amount": Decimal("500.00"), "count": 1, "percentage": Decimal("100.00")},
        ],
        "invoice_stats": {"total": 3, "paid": 2, "pending": 1, "overdue": 0},
    }

    def test_workbook(self):
        workbook = load_workbook(BytesIO(generate_financial_report_workbook(self.report, currency="USD")))
        sheet = workbook["Financial Report"]
        self.assertEqual(sheet["A1"].value, "Financial Report")
        self.assertEqual(sheet["A2"].value, "Period: 2025-01-01 to 2025-03-31")
        self.assertEqual(sheet["B4"].value, "Amount (USD)")
        self.assertEqual(sheet["A5"].value, "Revenue")
        self.assertEqual(sheet["B5"].value, 1500.0)
        values = [cell.value for cell in sheet["A"]]
        self.assertIn("Acme", values)
        self.assertIn("Technology", values)

    def test_pdf(self):
        self.assertTrue(generate_financial_report_pdf(self.report).startswith(b"%PDF"))


class ExportEndpointTests(TestCase):
    def setUp(self):
        self.user = create_user("exporter", currency="USD", company_name="Ledger & Co")
        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.customer = create_client(self.user, "Acme, Inc", address="1 Main St\nSpringfield")
        create_invoice(self.user, self.customer, "INV-0001", status=Invoice.PAID, date_issued=date(2025, 2, 1))

    def test_invoice_pdf_download(self):
        response = self.client.get("/api/invoices/INV-0001/pdf/")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertIn("Invoice_INV-0001.pdf", response["Content-Disposition"])
        self.assertTrue(b"".join(response.streaming_content).startswith(b"%PDF"))

    def test_pdf_without_settings_or_items(self):
        other = create_user("bare")
        invoice = create_invoice(other, create_client(other, "Bare"), "X-1")
        invoice.items = []
        self.assertTrue(generate_invoice_pdf(invoice).getvalue().startswith(b"%PDF"))

    def test_invoice_csv_export(self):
        response = self.client.get("/api/invoices/export/")
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response["Content-Type"].startswith("text/csv"))
        self.assertRegex(response["Content-Disposition"], r'filename="invoices_\d{4}-\d{2}-\d{2}\.csv"')
        rows = list(csv.reader(StringIO(response.content.decode())))
        self.assertEqual(rows[1][:2], ["INV-0001", "Acme, Inc"])

    def test_client_and_expense_csv_exports(self):
        create_expense(self.user, "42.50", 'Cables, "HDMI"', vendor_name="Shop", tax_deductible=True)

        clients = list(csv.reader(StringIO(self.client.get("/api/clients/export/").content.decode())))
        self.assertEqual(clients[1][0], "Acme, Inc")
        self.assertEqual(clients[1][4], "1 Main St\nSpringfield")

        expenses = list(csv.reader(StringIO(self.client.get("/api/expenses/export/").content.decode())))
        self.assertEqual(expenses[0], EXPENSE_CSV_HEADERS)
        self.assertEqual(expenses[1][1], 'Cables, "HDMI"')
        self.assertEqual(expenses[1][3], "42.50")
        self.assertEqual(expenses[1][8], "Yes")

    def test_financial_report_formats(self):
        create_expense(self.user, "10.00", "Paper", date_incurred=date(2025, 2, 3))
        params = {"date_from": "2025-01-01", "date_to": "2025-12-31"}

        json_report = self.client.get("/api/reports/financial/", params)
        self.assertEqual(json_report.status_code, 200)
        self.assertEqual(Decimal(str(json_report.data["revenue"])), Decimal("100.00"))
        self.assertEqual(Decimal(str(json_report.data["expenses"])), Decimal("10.00"))

        xlsx = self.client.get("/api/reports/financial/", {**params, "export_format": "xlsx"})
        self.assertEqual(xlsx.status_code, 200)
        self.assertIn(".xlsx", xlsx["Content-Disposition"])
        sheet = load_workbook(BytesIO(xlsx.content)).active
        self.assertEqual(sheet["B4"].value, "Amount (USD)")

        pdf = self.client.get("/api/reports/financial/", {**params, "format": "pdf"})
        self.assertEqual(pdf.status_code, 200)
        self.assertTrue(pdf.content.startswith(b"%PDF"))
