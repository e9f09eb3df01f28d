"""Owner-scoped, filtered reads shared by the API views and exports."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional

from django.apps import apps
from django.db.models import Q, QuerySet
from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError

__all__ = [
    "filter_clients",
    "filter_expenses",
    "filter_invoices",
    "parse_bool",
    "parse_date_param",
]

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_bool(value: Any) -> Optional[bool]:
    if value in (None, ""):
        return None
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return None


def parse_date_param(value: Any, field: str) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    parsed = parse_date(str(value))
    if parsed is None:
        raise ValidationError({field: ["Use the YYYY-MM-DD format."]})
    return parsed


def filter_expenses(user, params: Optional[Mapping[str, Any]] = None) -> QuerySet:
    """Expenses of ``user`` newest first, narrowed by the optional filters.

    Supported keys: ``category`` (id or name), ``payment_method``,
    ``date_from``, ``date_to``, ``business_only`` and ``search`` which matches
    description or vendor case-insensitively.
    """

    params = params or {}
    expense_model = apps.get_model("invoicing", "Expense")
    queryset = expense_model.objects.filter(created_by=user).select_related("category")

    category = params.get("category")
    if category not in (None, "", "all"):
        if str(category).isdigit():
            queryset = queryset.filter(category_id=int(category))
        else:
            queryset = queryset.filter(category_name=category)

    payment_method = params.get("payment_method")
    if payment_method not in (None, "", "all"):
        queryset = queryset.filter(payment_method=payment_method)

    date_from = parse_date_param(params.get("date_from"), "date_from")
    if date_from:
        queryset = queryset.filter(date_incurred__gte=date_from)
    date_to = parse_date_param(params.get("date_to"), "date_to")
    if date_to:
        queryset = queryset.filter(date_incurred__lte=date_to)

    if parse_bool(params.get("business_only")):
        queryset = queryset.filter(is_business_expense=True)

    search = (params.get("search") or "").strip()
    if search:
        queryset = queryset.filter(
            Q(description__icontains=search) | Q(vendor_name__icontains=search)
        )

    return queryset.order_by("-date_incurred", "-id")


def filter_invoices(user, params: Optional[Mapping[str, Any]] = None) -> QuerySet:
    params = params or {}
    invoice_model = apps.get_model("invoicing", "Invoice")
    queryset = invoice_model.objects.filter(created_by=user).select_related("client")

    status_value = params.get("status")
    if status_value not in (None, "", "all"):
        queryset = queryset.filter(status__iexact=status_value)

    client = params.get("client")
    if client not in (None, ""):
        if not str(client).isdigit():
            raise ValidationError({"client": ["A client id is required."]})
        queryset = queryset.filter(client_id=int(client))

    date_from = parse_date_param(params.get("date_from"), "date_from")
    if date_from:
        queryset = queryset.filter(date_issued__gte=date_from)
    date_to = parse_date_param(params.get("date_to"), "date_to")
    if date_to:
        queryset = queryset.filter(date_issued__lte=date_to)

    search = (params.get("search") or "").strip()
    if search:
        queryset = queryset.filter(
            Q(invoice_number__icontains=search) | Q(client_name__icontains=search)
        )

    return queryset.order_by("-date_issued", "-id")


def filter_clients(user, params: Optional[Mapping[str, Any]] = None) -> QuerySet:
    params = params or {}
    client_model = apps.get_model("invoicing", "Client")
    queryset = client_model.objects.filter(created_by=user)

    search = (params.get("search") or "").strip()
    if search:
        queryset = queryset.filter(
            Q(name__icontains=search) | Q(email__icontains=search) | Q(company__icontains=search)
        )

    return queryset.order_by("name", "id")
