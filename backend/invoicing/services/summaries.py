"""Recompute denormalized counters for clients and balance summaries.

Every helper runs inside ``transaction.atomic()`` and takes a row lock on the
row it rewrites, so callers that are already inside a transaction (the API
write paths) get the recompute committed or rolled back together with the
triggering write.  Values are always re-summed from scratch for the owner, so
the stored counters equal a fresh recomputation after every write.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from django.apps import apps
from django.db import transaction
from django.db.models import Count, DecimalField, Q, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

__all__ = [
    "MONEY_QUANTIZER",
    "recompute_balance_summary",
    "recompute_client_totals",
    "recompute_clients",
    "to_money",
]

MONEY_QUANTIZER = Decimal("0.01")

_ZERO = Value(Decimal("0.00"), output_field=DecimalField(max_digits=14, decimal_places=2))


def to_money(amount: Optional[Decimal | int | float | str]) -> Decimal:
    """Normalise *amount* to a Decimal with the project's rounding rules."""

    if amount in (None, ""):
        return Decimal("0.00")
    if isinstance(amount, Decimal):
        value = amount
    else:
        value = Decimal(str(amount))
    return value.quantize(MONEY_QUANTIZER, rounding=ROUND_HALF_UP)


def recompute_client_totals(client_id: Optional[int]):
    """Refresh ``total_invoices`` and ``total_amount`` for one client.

    ``total_invoices`` counts every invoice of the client, ``total_amount``
    sums only the Paid ones.  Returns the updated client or ``None`` when the
    client no longer exists.
    """

    if not client_id:
        return None

    client_model = apps.get_model("invoicing", "Client")
    invoice_model = apps.get_model("invoicing", "Invoice")

    with transaction.atomic():
        client = client_model.objects.select_for_update().filter(pk=client_id).first()
        if client is None:
            return None
        totals = invoice_model.objects.filter(client_id=client_id).aggregate(
            count=Count("id"),
            paid=Coalesce(Sum("amount", filter=Q(status=invoice_model.PAID)), _ZERO),
        )
        client.total_invoices = totals["count"]
        client.total_amount = to_money(totals["paid"])
        client.save(update_fields=["total_invoices", "total_amount", "updated_at"])
        return client


def recompute_clients(client_ids: Iterable[Optional[int]]) -> None:
    for client_id in sorted({pk for pk in client_ids if pk}):
        recompute_client_totals(client_id)


def recompute_balance_summary(user):
    """Rebuild the owner's balance summary from Paid invoices and expenses."""

    summary_model = apps.get_model("invoicing", "BalanceSummary")
    invoice_model = apps.get_model("invoicing", "Invoice")
    expense_model = apps.get_model("invoicing", "Expense")

    with transaction.atomic():
        summary_model.objects.get_or_create(user=user)
        summary = summary_model.objects.select_for_update().get(user=user)

        earnings = invoice_model.objects.filter(
            created_by=user, status=invoice_model.PAID
        ).aggregate(total=Coalesce(Sum("amount"), _ZERO))["total"]
        expenses = expense_model.objects.filter(created_by=user).aggregate(
            total=Coalesce(Sum("amount"), _ZERO)
        )["total"]

        summary.total_earnings = to_money(earnings)
        summary.total_expenses = to_money(expenses)
        summary.current_balance = to_money(summary.total_earnings - summary.total_expenses)
        summary.last_calculated_at = timezone.now()
        summary.save(
            update_fields=[
                "total_earnings",
                "total_expenses",
                "current_balance",
                "last_calculated_at",
                "updated_at",
            ]
        )
        return summary
