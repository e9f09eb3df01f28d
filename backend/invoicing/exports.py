"""CSV exports for expenses, invoices and clients."""

import csv
from io import StringIO
from typing import Iterable, Sequence

__all__ = [
    "CLIENT_CSV_HEADERS",
    "EXPENSE_CSV_HEADERS",
    "INVOICE_CSV_HEADERS",
    "export_clients_csv",
    "export_expenses_csv",
    "export_invoices_csv",
    "write_csv",
]

EXPENSE_CSV_HEADERS = [
    "Date",
    "Description",
    "Category",
    "Amount",
    "Payment Method",
    "Vendor",
    "Receipt Number",
    "Business Expense",
    "Tax Deductible",
    "Notes",
]

INVOICE_CSV_HEADERS = [
    "Invoice Number",
    "Client",
    "Date Issued",
    "Due Date",
    "Status",
    "Subtotal",
    "Tax",
    "Total Amount",
    "Items",
]

CLIENT_CSV_HEADERS = [
    "Company Name",
    "Contact Person",
    "Email",
    "Phone",
    "Address",
    "Payment Terms",
    "Total Invoices",
    "Total Revenue",
]


def _yes_no(value) -> str:
    return "Yes" if value else "No"


def _text(value) -> str:
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def write_csv(headers: Sequence[str], rows: Iterable[Sequence]) -> str:
    """Serialise ``rows`` under ``headers``.

    Fields containing the delimiter, quotes or line breaks are quoted and
    embedded quotes are doubled.
    """

    buffer = StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_text(value) for value in row])
    return buffer.getvalue()


def export_expenses_csv(expenses: Iterable) -> str:
    rows = (
        [
            expense.date_incurred,
            expense.description,
            expense.category_name or "Uncategorized",
            expense.amount,
            expense.payment_method,
            expense.vendor_name or "",
            expense.receipt_number or "",
            _yes_no(expense.is_business_expense),
            _yes_no(expense.tax_deductible),
            expense.notes or "",
        ]
        for expense in expenses
    )
    return write_csv(EXPENSE_CSV_HEADERS, rows)


def _items_summary(items) -> str:
    return "; ".join(
        f"{item.get('description', '')} ({item.get('quantity', 0)}x{item.get('rate', 0)})"
        for item in items or []
    )


def export_invoices_csv(invoices: Iterable) -> str:
    rows = (
        [
            invoice.invoice_number,
            invoice.client_name,
            invoice.date_issued,
            invoice.due_date,
            invoice.status,
            invoice.subtotal,
            invoice.tax,
            invoice.amount,
            _items_summary(invoice.items),
        ]
        for invoice in invoices
    )
    return write_csv(INVOICE_CSV_HEADERS, rows)


def export_clients_csv(clients: Iterable) -> str:
    rows = (
        [
            client.name,
            client.contact_name or "",
            client.email,
            client.phone or "",
            client.address or "",
            client.payment_terms,
            client.total_invoices or 0,
            client.total_amount or 0,
        ]
        for client in clients
    )
    return write_csv(CLIENT_CSV_HEADERS, rows)
