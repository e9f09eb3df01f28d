"""Invoice arithmetic and numbering."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Mapping

from django.apps import apps
from django.db import transaction

from .summaries import to_money

__all__ = [
    "PAYMENT_TERM_DAYS",
    "calculate_invoice_totals",
    "calculate_line_items",
    "due_date_for_terms",
    "format_invoice_id",
    "next_invoice_id",
    "peek_invoice_id",
]

PAYMENT_TERM_DAYS = {
    "due_on_receipt": 0,
    "net15": 15,
    "net30": 30,
    "net45": 45,
    "net60": 60,
}


def _decimal(value) -> Decimal:
    if value in (None, ""):
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def calculate_line_items(items: Iterable[Mapping]) -> list[dict]:
    """Return normalised line items with ``amount = quantity * rate``.

    Values are stored as strings so the list can live in a JSON column
    without losing precision.
    """

    lines = []
    for item in items or []:
        quantity = _decimal(item.get("quantity"))
        rate = _decimal(item.get("rate"))
        lines.append(
            {
                "description": str(item.get("description") or ""),
                "quantity": str(quantity),
                "rate": str(to_money(rate)),
                "amount": str(to_money(quantity * rate)),
            }
        )
    return lines


def calculate_invoice_totals(items: Iterable[Mapping], tax_rate) -> dict:
    """Compute ``subtotal``, ``tax`` and ``amount`` for a list of line items.

    ``tax_rate`` is a percentage.  An empty item list yields zeros.  The
    subtotal is the sum of the individually rounded line amounts, so it
    always matches the lines stored on the invoice.
    """

    subtotal = sum(
        (to_money(_decimal(item.get("quantity")) * _decimal(item.get("rate"))) for item in items or []),
        Decimal("0"),
    )
    subtotal = to_money(subtotal)
    tax = to_money(subtotal * _decimal(tax_rate) / Decimal("100"))
    return {
        "subtotal": subtotal,
        "tax": tax,
        "amount": to_money(subtotal + tax),
    }


def due_date_for_terms(issued: date, payment_terms: str | None) -> date:
    days = PAYMENT_TERM_DAYS.get(payment_terms or "", PAYMENT_TERM_DAYS["net30"])
    return issued + timedelta(days=days)


def format_invoice_id(prefix: str, number: int) -> str:
    """``format_invoice_id("INV", 7) == "INV-0007"``."""

    return f"{prefix}-{int(number):04d}"


def peek_invoice_id(user) -> str:
    """Return the id the next invoice would receive without consuming it."""

    settings = apps.get_model("invoicing", "UserSettings").load(user)
    return format_invoice_id(settings.invoice_prefix, settings.next_invoice_number)


def next_invoice_id(user) -> str:
    """Consume and return the next invoice id for ``user``.

    The settings row is locked while the sequence advances.  Numbers that are
    already taken (for example by a manually numbered invoice) are skipped.
    """

    settings_model = apps.get_model("invoicing", "UserSettings")
    invoice_model = apps.get_model("invoicing", "Invoice")

    with transaction.atomic():
        settings_model.objects.get_or_create(user=user)
        settings = settings_model.objects.select_for_update().get(user=user)
        number = settings.next_invoice_number
        candidate = format_invoice_id(settings.invoice_prefix, number)
        while invoice_model.objects.filter(created_by=user, invoice_number=candidate).exists():
            number += 1
            candidate = format_invoice_id(settings.invoice_prefix, number)
        settings.next_invoice_number = number + 1
        settings.save(update_fields=["next_invoice_number", "updated_at"])
        return candidate
