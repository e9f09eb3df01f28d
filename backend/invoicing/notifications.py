"""In-process event channel and the inbox notifications it produces.

Delivery is at-most-once: each handler subscribed to an event is invoked a
single time per publish.  A handler that raises is logged and skipped; it is
never retried and it does not prevent the remaining handlers from running.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from typing import Any, Callable, Optional

from django.db.models import Q

from .models import Invoice, Notification, UserSettings

__all__ = [
    "INVOICE_CREATED",
    "INVOICE_UPDATED",
    "EventChannel",
    "channel",
    "check_overdue_invoices",
    "notify",
    "register_default_handlers",
]

logger = logging.getLogger(__name__)

INVOICE_CREATED = "invoice.created"
INVOICE_UPDATED = "invoice.updated"

Handler = Callable[[dict], Any]


class EventChannel:
    def __init__(self):
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, event: str, handler: Handler) -> Handler:
        if handler not in self._handlers[event]:
            self._handlers[event].append(handler)
        return handler

    def unsubscribe(self, event: str, handler: Handler) -> bool:
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def handlers(self, event: str) -> list[Handler]:
        return list(self._handlers.get(event, []))

    def publish(self, event: str, payload: dict) -> int:
        """Deliver ``payload`` to every handler of ``event``.

        Returns the number of handlers that completed without raising.
        """

        delivered = 0
        for handler in self.handlers(event):
            try:
                handler(payload)
            except Exception:
                logger.exception("Handler %r failed for event %s", handler, event)
                continue
            delivered += 1
        return delivered

    def clear(self):
        self._handlers.clear()


channel = EventChannel()


def notify(
    user,
    kind: str,
    title: str,
    message: str = "",
    action_label: str = "",
    action_url: str = "",
    metadata: Optional[dict] = None,
) -> Notification:
    return Notification.objects.create(
        user=user,
        kind=kind,
        title=title,
        message=message,
        action_label=action_label,
        action_url=action_url,
        metadata=metadata or {},
    )


def _invoice_for(payload: dict) -> Optional[Invoice]:
    invoice = Invoice.objects.select_related("created_by").filter(pk=payload.get("invoice_id")).first()
    if invoice is None:
        logger.info("Invoice %s vanished before its notification was delivered", payload.get("invoice_id"))
    return invoice


def _invoice_url(invoice: Invoice) -> str:
    return f"/invoices/{invoice.invoice_number}"


def on_invoice_created(payload: dict):
    invoice = _invoice_for(payload)
    if invoice is None:
        return
    notify(
        invoice.created_by,
        "info",
        "New Invoice Created",
        f"Invoice {invoice.invoice_number} for {invoice.client_name} has been created",
        action_label="View Invoice",
        action_url=_invoice_url(invoice),
        metadata={"invoice_number": invoice.invoice_number},
    )
    if invoice.status == Invoice.PAID:
        on_invoice_status_changed(payload)


def on_invoice_status_changed(payload: dict):
    status = payload.get("status")
    if status == payload.get("previous_status"):
        return
    if status not in (Invoice.PAID, Invoice.OVERDUE):
        return

    invoice = _invoice_for(payload)
    if invoice is None:
        return
    settings = UserSettings.load(invoice.created_by)

    if status == Invoice.OVERDUE and settings.overdue_reminders:
        notify(
            invoice.created_by,
            "warning",
            "Invoice Overdue",
            f"Invoice {invoice.invoice_number} for {invoice.client_name} is now overdue",
            action_label="View Invoice",
            action_url=_invoice_url(invoice),
            metadata={"invoice_number": invoice.invoice_number},
        )
    elif status == Invoice.PAID and settings.payment_alerts:
        notify(
            invoice.created_by,
            "success",
            "Payment Received",
            f"Payment received for invoice {invoice.invoice_number} ({invoice.amount})",
            action_label="View Invoice",
            action_url=_invoice_url(invoice),
            metadata={"invoice_number": invoice.invoice_number},
        )


def register_default_handlers(target: Optional[EventChannel] = None) -> EventChannel:
    target = target or channel
    target.subscribe(INVOICE_CREATED, on_invoice_created)
    target.subscribe(INVOICE_UPDATED, on_invoice_status_changed)
    return target


def check_overdue_invoices(user, today: Optional[date] = None) -> Optional[Notification]:
    """Post one warning when ``user`` has unpaid invoices past their due date."""

    today = today or date.today()
    count = (
        Invoice.objects.filter(created_by=user, due_date__lt=today)
        .exclude(Q(status=Invoice.PAID) | Q(status=Invoice.CANCELLED))
        .count()
    )
    if not count:
        return None
    if not UserSettings.load(user).overdue_reminders:
        return None
    plural = "s" if count != 1 else ""
    return notify(
        user,
        "warning",
        "Overdue Invoices",
        f"You have {count} overdue invoice{plural}",
        action_label="View Invoices",
        action_url="/invoices?status=overdue",
        metadata={"count": count},
    )
