"""Tests for the report-building functions in ``invoicing.analytics``."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from .. import analytics


def expense(amount, category_name="Uncategorized", day=date(2025, 1, 15), **extra):
    data = {
        "amount": Decimal(str(amount)),
        "category_name": category_name,
        "date_incurred": day,
        "is_business_expense": True,
        "tax_deductible": False,
    }
    data.update(extra)
    return SimpleNamespace(**data)


def invoice(amount, status="Paid", client_id=1, client_name="Acme", issued=date(2025, 1, 1),
            due=date(2025, 1, 31), number="INV-0001"):
    return SimpleNamespace(
        invoice_number=number,
        amount=Decimal(str(amount)),
        status=status,
        client_id=client_id,
        client_name=client_name,
        date_issued=issued,
        due_date=due,
    )


class CategoryBreakdownTests(SimpleTestCase):
    def test_groups_and_ranks_categories(self):
        expenses = [
            expense(100, "Travel"),
            expense(50, "Travel"),
            expense(50, "Food"),
        ]

        breakdown = analytics.category_breakdown(expenses)

        self.assertEqual([entry["category"] for entry in breakdown], ["Travel", "Food"])
        self.assertEqual(breakdown[0]["amount"], Decimal("150"))
        self.assertEqual(breakdown[0]["count"], 2)
        self.assertEqual(breakdown[0]["percentage"], Decimal("75"))
        self.assertEqual(breakdown[1]["amount"], Decimal("50"))
        self.assertEqual(breakdown[1]["percentage"], Decimal("25"))
        self.assertEqual(analytics.top_category(breakdown)["category"], "Travel")

    def test_percentages_sum_to_hundred_including_uncategorized(self):
        expenses = [
            expense("33.33", "Travel"),
            expense("12.10", None),
            expense("7.77", "Food"),
            expense("1.01", ""),
        ]

        breakdown = analytics.category_breakdown(expenses)
        total = sum(entry["percentage"] for entry in breakdown)

        self.assertAlmostEqual(float(total), 100.0, places=6)
        self.assertIn("Uncategorized", [entry["category"] for entry in breakdown])

    def test_icon_and_color_come_from_catalog_with_fallback(self):
        catalog = [SimpleNamespace(name="Travel", icon="🚗", color="#10B981")]
        breakdown = analytics.category_breakdown([expense(10, "Travel"), expense(5, "Other")], catalog)

        travel, other = breakdown
        self.assertEqual((travel["icon"], travel["color"]), ("🚗", "#10B981"))
        self.assertEqual(
            (other["icon"], other["color"]),
            (analytics.FALLBACK_CATEGORY_ICON, analytics.FALLBACK_CATEGORY_COLOR),
        )

    def test_empty_input_yields_empty_breakdown_and_placeholder(self):
        self.assertEqual(analytics.category_breakdown([]), [])
        top = analytics.top_category([])
        self.assertEqual(top["category"], "No expenses")
        self.assertEqual(top["amount"], Decimal("0"))

    def test_expense_analytics_totals(self):
        expenses = [
            expense(100, "Travel", tax_deductible=True),
            expense(50, "Food", is_business_expense=False, day=date(2025, 2, 3)),
        ]

        report = analytics.expense_analytics(expenses)

        self.assertEqual(report["total_expenses"], Decimal("150"))
        self.assertEqual(report["expense_count"], 2)
        self.assertEqual(report["average_expense"], Decimal("75"))
        self.assertEqual(report["business_expenses"], Decimal("100"))
        self.assertEqual(report["tax_deductible_expenses"], Decimal("100"))
        self.assertEqual([bucket["period"] for bucket in report["monthly_data"]], ["2025-01", "2025-02"])

    def test_expense_analytics_on_empty_input(self):
        report = analytics.expense_analytics([])
        self.assertEqual(report["total_expenses"], Decimal("0"))
        self.assertEqual(report["average_expense"], Decimal("0"))
        self.assertEqual(report["category_breakdown"], [])
        self.assertEqual(report["monthly_data"], [])


class TimeSeriesTests(SimpleTestCase):
    def test_period_keys(self):
        day = date(2025, 11, 3)
        self.assertEqual(analytics.period_key(day, "monthly"), "2025-11")
        self.assertEqual(analytics.period_key(day, "quarterly"), "2025-Q4")
        self.assertEqual(analytics.period_key(date(2025, 3, 31), "quarterly"), "2025-Q1")
        self.assertEqual(analytics.period_key(date(2025, 4, 1), "quarterly"), "2025-Q2")
        self.assertEqual(analytics.period_key(day, "yearly"), "2025")

    def test_same_month_maps_to_same_bucket(self):
        self.assertEqual(
            analytics.period_key(date(2024, 2, 1)),
            analytics.period_key(date(2024, 2, 29)),
        )
        self.assertNotEqual(
            analytics.period_key(date(2024, 2, 1)),
            analytics.period_key(date(2025, 2, 1)),
        )

    def test_unknown_period_is_rejected(self):
        with self.assertRaises(ValueError):
            analytics.period_key(date(2025, 1, 1), "weekly")

    def test_series_is_sorted_by_key(self):
        rows = [
            expense(10, day=date(2025, 3, 1)),
            expense(5, day=date(2024, 12, 31)),
            expense(7, day=date(2025, 3, 20)),
        ]
        series = analytics.time_series(rows, "date_incurred")
        self.assertEqual([bucket["period"] for bucket in series], ["2024-12", "2025-03"])
        self.assertEqual(series[1]["amount"], Decimal("17"))
        self.assertEqual(series[1]["count"], 2)

    def test_one_year_range_has_twelve_seeded_buckets(self):
        series = analytics.seeded_monthly_series([], "date_incurred", date(2025, 1, 1), date(2025, 12, 31))
        self.assertEqual(len(series), 12)
        self.assertTrue(all(bucket["amount"] == 0 for bucket in series))

    def test_seeded_series_ignores_rows_outside_range(self):
        rows = [expense(10, day=date(2025, 2, 10)), expense(99, day=date(2024, 1, 1))]
        series = analytics.seeded_monthly_series(rows, "date_incurred", date(2025, 1, 1), date(2025, 3, 31))
        self.assertEqual([bucket["amount"] for bucket in series], [Decimal("0"), Decimal("10"), Decimal("0")])

    def test_last_six_months_crosses_year_boundary(self):
        rows = [invoice(40, issued=date(2025, 12, 5))]
        series = analytics.last_months_series(rows, "date_issued", date(2026, 2, 14))
        self.assertEqual(
            [bucket["period"] for bucket in series],
            ["2025-09", "2025-10", "2025-11", "2025-12", "2026-01", "2026-02"],
        )
        self.assertEqual(series[3]["amount"], Decimal("40"))


class ClientAndInvoiceTests(SimpleTestCase):
    def test_client_revenue_only_counts_paid_invoices(self):
        invoices = [
            invoice(100, client_id=1, client_name="Acme"),
            invoice(300, client_id=2, client_name="Globex"),
            invoice(50, client_id=1, client_name="Acme"),
            invoice(999, status="Pending", client_id=1),
        ]
        clients = [SimpleNamespace(id=1, name="Acme Ltd"), SimpleNamespace(id=2, name="Globex")]

        ranking = analytics.client_revenue(invoices, clients)

        self.assertEqual([entry["client_name"] for entry in ranking], ["Globex", "Acme Ltd"])
        self.assertEqual(ranking[1]["revenue"], Decimal("150"))
        self.assertEqual(ranking[1]["invoice_count"], 2)
        self.assertEqual(ranking[1]["avg_invoice_amount"], Decimal("75"))

        paid_total = sum(inv.amount for inv in invoices if inv.status == "Paid")
        self.assertEqual(sum(entry["revenue"] for entry in ranking), paid_total)

    def test_client_revenue_truncates_to_limit(self):
        invoices = [invoice(index + 1, client_id=index) for index in range(8)]
        self.assertEqual(len(analytics.client_revenue(invoices, limit=5)), 5)
        self.assertEqual(
            analytics.client_distribution(invoices, limit=2),
            [{"name": "Acme", "value": Decimal("8")}, {"name": "Acme", "value": Decimal("7")}],
        )

    def test_status_breakdown_keeps_zero_entries(self):
        breakdown = analytics.invoice_status_breakdown([invoice(10, status="Paid")])
        self.assertEqual([entry["status"] for entry in breakdown], ["Paid", "Pending", "Overdue", "Draft"])
        self.assertEqual(breakdown[1], {"status": "Pending", "count": 0, "amount": Decimal("0")})

        with_cancelled = analytics.invoice_status_breakdown([], include_cancelled=True)
        self.assertEqual(with_cancelled[-1]["status"], "Cancelled")

    def test_average_payment_days_uses_stated_terms_of_paid_invoices(self):
        invoices = [
            invoice(10, issued=date(2025, 1, 1), due=date(2025, 1, 31)),
            invoice(10, issued=date(2025, 1, 1), due=date(2025, 1, 16)),
            invoice(10, status="Pending", issued=date(2025, 1, 1), due=date(2025, 3, 1)),
        ]
        self.assertEqual(analytics.average_payment_days(invoices), Decimal("22.5"))
        self.assertEqual(analytics.average_payment_days([]), Decimal("0"))

    def test_average_invoice_value(self):
        invoices = [invoice(100), invoice(50, status="Pending")]
        self.assertEqual(analytics.average_invoice_value(invoices), Decimal("75"))
        self.assertEqual(analytics.average_invoice_value(invoices, paid_only=True), Decimal("100"))
        self.assertEqual(analytics.average_invoice_value([]), Decimal("0"))


class ProfitAndChangeTests(SimpleTestCase):
    def test_profit_margin_and_trend(self):
        series = [{"amount": Decimal("100")}, {"amount": Decimal("150")}]
        summary = analytics.profit_summary(Decimal("200"), Decimal("50"), series)
        self.assertEqual(summary["net"], Decimal("150"))
        self.assertEqual(summary["margin"], Decimal("75"))
        self.assertEqual(summary["trend"], "up")

        self.assertEqual(analytics.profit_summary(0, 0, [])["trend"], "stable")
        self.assertEqual(
            analytics.profit_summary(0, 0, [{"amount": 5}, {"amount": 2}])["trend"],
            "down",
        )

    def test_margin_is_zero_without_revenue(self):
        summary = analytics.profit_summary(Decimal("0"), Decimal("40"))
        self.assertEqual(summary["net"], Decimal("-40"))
        self.assertEqual(summary["margin"], Decimal("0"))

    def test_percent_change_guards_zero_previous(self):
        self.assertEqual(analytics.percent_change(150, 100), Decimal("50"))
        self.assertEqual(analytics.percent_change(150, 0), Decimal("0"))
        badge = analytics.change_badge(50, 100)
        self.assertEqual(badge["direction"], "down")
        self.assertEqual(badge["change"], Decimal("-50"))

    def test_balance_totals(self):
        totals = analytics.balance_totals(
            [invoice(100), invoice(40, status="Pending")],
            [expense(30), expense(20)],
        )
        self.assertEqual(totals["total_earnings"], Decimal("100"))
        self.assertEqual(totals["total_expenses"], Decimal("50"))
        self.assertEqual(totals["current_balance"], Decimal("50"))


class CompositeReportTests(SimpleTestCase):
    def test_financial_report_counts_overdue_against_today(self):
        invoices = [
            invoice(100, status="Paid", due=date(2025, 1, 10)),
            invoice(60, status="Pending", due=date(2025, 1, 10)),
            invoice(70, status="Pending", due=date(2025, 3, 1)),
        ]
        report = analytics.financial_report(
            invoices,
            [expense(40, "Travel")],
            start=date(2025, 1, 1),
            end=date(2025, 1, 31),
            today=date(2025, 2, 1),
        )
        self.assertEqual(report["revenue"], Decimal("100"))
        self.assertEqual(report["net_profit"], Decimal("60"))
        self.assertEqual(report["invoice_stats"], {"total": 3, "paid": 1, "pending": 2, "overdue": 1})
        self.assertEqual(report["top_expense_categories"][0]["category"], "Travel")

    def test_reports_on_empty_input(self):
        dashboard = analytics.dashboard_metrics([], [], [], today=date(2025, 6, 1))
        self.assertEqual(dashboard["total_revenue"], Decimal("0"))
        self.assertEqual(dashboard["average_invoice_value"], Decimal("0"))
        self.assertEqual(dashboard["monthly_growth"], Decimal("0"))
        self.assertEqual(len(dashboard["charts"]["monthly_revenue"]), 6)
        self.assertEqual(dashboard["recent_activity"], [])

        report = analytics.analytics_report([], [], [])
        self.assertEqual(report["revenue"]["monthly"], [])
        self.assertEqual(report["profit"]["margin"], Decimal("0"))
        self.assertEqual(report["invoices"]["payment_time"], Decimal("0"))

    def test_dashboard_growth_compares_with_previous_month_of_prior_year(self):
        invoices = [
            invoice(200, issued=date(2026, 1, 5)),
            invoice(100, issued=date(2025, 12, 20)),
            invoice(999, issued=date(2025, 1, 20)),
        ]
        metrics = analytics.dashboard_metrics(invoices, [], [], today=date(2026, 1, 15))
        self.assertEqual(metrics["monthly_growth"], Decimal("100"))
        self.assertEqual(metrics["monthly_growth_badge"]["direction"], "up")
