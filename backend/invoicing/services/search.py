"""Global search across invoices, clients and expenses."""

from __future__ import annotations

import logging
from typing import Optional

from django.apps import apps
from django.core.cache import cache
from django.db.models import Q

__all__ = [
    "MIN_TERM_LENGTH",
    "RESULTS_PER_TYPE",
    "SearchSequencer",
    "global_search",
]

logger = logging.getLogger(__name__)

MIN_TERM_LENGTH = 2
RESULTS_PER_TYPE = 5


def _invoice_result(invoice) -> dict:
    return {
        "id": invoice.invoice_number,
        "type": "invoice",
        "title": invoice.invoice_number,
        "subtitle": f"{invoice.client_name} - {invoice.amount}",
        "url": f"/invoices/{invoice.invoice_number}/edit",
    }


def _client_result(client) -> dict:
    return {
        "id": str(client.pk),
        "type": "client",
        "title": client.name,
        "subtitle": client.email,
        "url": f"/clients/{client.pk}",
    }


def _expense_result(expense) -> dict:
    subtitle = f"{expense.category_name} - {expense.amount}"
    if expense.vendor_name:
        subtitle = f"{subtitle} ({expense.vendor_name})"
    return {
        "id": str(expense.pk),
        "type": "expense",
        "title": expense.description,
        "subtitle": subtitle,
        "url": f"/expenses/{expense.pk}",
    }


def global_search(user, term: str, limit: int = RESULTS_PER_TYPE) -> list[dict]:
    """Return invoice, client and expense hits for ``term`` in that order.

    Each type is capped at ``limit`` results.  Terms shorter than two
    characters (after trimming) return an empty list.
    """

    term = (term or "").strip()
    if len(term) < MIN_TERM_LENGTH:
        return []

    invoice_model = apps.get_model("invoicing", "Invoice")
    client_model = apps.get_model("invoicing", "Client")
    expense_model = apps.get_model("invoicing", "Expense")

    invoices = invoice_model.objects.filter(created_by=user).filter(
        Q(invoice_number__icontains=term) | Q(client_name__icontains=term)
    ).order_by("-date_issued", "-id")[:limit]
    clients = client_model.objects.filter(created_by=user).filter(
        Q(name__icontains=term) | Q(email__icontains=term)
    ).order_by("name", "id")[:limit]
    expenses = expense_model.objects.filter(created_by=user).filter(
        Q(description__icontains=term) | Q(vendor_name__icontains=term)
    ).order_by("-date_incurred", "-id")[:limit]

    results = [_invoice_result(invoice) for invoice in invoices]
    results.extend(_client_result(client) for client in clients)
    results.extend(_expense_result(expense) for expense in expenses)
    return results


class SearchSequencer:
    """Track the newest search request per user.

    Clients send a monotonically increasing ``seq`` with every search.  A
    request whose ``seq`` is lower than one already seen for the same user is
    stale and its results must not be shown.
    """

    cache_prefix = "invoicing:search-seq"
    timeout = 60 * 60

    def __init__(self, backend=None):
        self.backend = backend or cache

    def _key(self, user_id) -> str:
        return f"{self.cache_prefix}:{user_id}"

    def latest(self, user_id) -> Optional[int]:
        return self.backend.get(self._key(user_id))

    def register(self, user_id, seq: Optional[int]) -> bool:
        """Record ``seq`` and return ``True`` when it is the newest request.

        Requests without a ``seq`` are always considered current.
        """

        if seq is None:
            return True
        key = self._key(user_id)
        if self.backend.add(key, seq, self.timeout):
            return True
        latest = self.backend.get(key)
        if latest is not None and seq < latest:
            logger.debug("Dropping stale search seq=%s (latest=%s) for user %s", seq, latest, user_id)
            return False
        if latest != seq:
            self.backend.set(key, seq, self.timeout)
        return True

    def is_current(self, user_id, seq: Optional[int]) -> bool:
        """``False`` once a newer ``seq`` has been registered for ``user_id``.

        Checked again after the search ran, so a request overtaken while its
        queries were in flight is still reported stale.
        """

        if seq is None:
            return True
        latest = self.latest(user_id)
        return latest is None or seq >= latest
