"""Report building over already-fetched invoices, expenses and clients.

Everything in this module is a pure function.  Rows may be model instances,
plain dicts or any object exposing the expected attributes, which keeps the
functions usable from views, management commands and tests alike.  Empty
input always produces a zeroed structure and every division is guarded.
"""

from __future__ import annotations

import math
from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Sequence

__all__ = [
    "FALLBACK_CATEGORY_COLOR",
    "FALLBACK_CATEGORY_ICON",
    "INVOICE_STATUSES",
    "UNCATEGORIZED",
    "analytics_report",
    "average_invoice_value",
    "average_payment_days",
    "balance_totals",
    "category_breakdown",
    "change_badge",
    "client_distribution",
    "client_revenue",
    "dashboard_metrics",
    "expense_analytics",
    "financial_report",
    "invoice_status_breakdown",
    "is_overdue",
    "last_months_series",
    "month_keys_between",
    "percent_change",
    "period_key",
    "profit_summary",
    "seeded_monthly_series",
    "time_series",
    "top_category",
]

PAID = "Paid"
PENDING = "Pending"
OVERDUE = "Overdue"
DRAFT = "Draft"
CANCELLED = "Cancelled"

INVOICE_STATUSES = (PAID, PENDING, OVERDUE, DRAFT)
UNCATEGORIZED = "Uncategorized"
NO_EXPENSES = "No expenses"
FALLBACK_CATEGORY_ICON = "📎"
FALLBACK_CATEGORY_COLOR = "#6B7280"

PERIODS = ("monthly", "quarterly", "yearly")

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _get(row: Any, attr: str, default: Any = None) -> Any:
    if isinstance(row, Mapping):
        return row.get(attr, default)
    return getattr(row, attr, default)


def _amount(row: Any, attr: str = "amount") -> Decimal:
    value = _get(row, attr)
    if value in (None, ""):
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _as_date(value: Any) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _divide(numerator: Decimal, denominator: Decimal | int) -> Decimal:
    if not denominator:
        return ZERO
    return Decimal(numerator) / Decimal(denominator)


def _client_key(invoice: Any):
    client_id = _get(invoice, "client_id")
    if client_id is None:
        client = _get(invoice, "client")
        client_id = _get(client, "id") if client is not None and not isinstance(client, (int, str)) else client
    return client_id


def _is_paid(invoice: Any) -> bool:
    return _get(invoice, "status") == PAID


# ---------------------------------------------------------------------------
# Time buckets
# ---------------------------------------------------------------------------


def period_key(day: date | datetime | str, period: str = "monthly") -> str:
    """Bucket key for ``day``: ``YYYY-MM``, ``YYYY-Qn`` or ``YYYY``."""

    day = _as_date(day)
    if period == "monthly":
        return f"{day.year:04d}-{day.month:02d}"
    if period == "quarterly":
        return f"{day.year:04d}-Q{(day.month - 1) // 3 + 1}"
    if period == "yearly":
        return f"{day.year:04d}"
    raise ValueError(f"Unknown period {period!r}; expected one of {', '.join(PERIODS)}.")


def time_series(
    rows: Iterable[Any],
    date_attr: str,
    period: str = "monthly",
    amount_attr: str = "amount",
) -> list[dict]:
    buckets: dict[str, dict] = {}
    for row in rows:
        day = _as_date(_get(row, date_attr))
        if day is None:
            continue
        key = period_key(day, period)
        bucket = buckets.setdefault(key, {"period": key, "amount": ZERO, "count": 0})
        bucket["amount"] += _amount(row, amount_attr)
        bucket["count"] += 1
    return [buckets[key] for key in sorted(buckets)]


def _shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def month_keys_between(start: date, end: date) -> list[str]:
    """Every ``YYYY-MM`` key from ``start``'s month to ``end``'s month inclusive."""

    start = _as_date(start)
    end = _as_date(end)
    if start is None or end is None or start > end:
        return []
    keys = []
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        keys.append(f"{year:04d}-{month:02d}")
        year, month = _shift_month(year, month, 1)
    return keys


def seeded_monthly_series(
    rows: Iterable[Any],
    date_attr: str,
    start: date,
    end: date,
    amount_attr: str = "amount",
) -> list[dict]:
    """Monthly totals with every month of the range present, even when empty."""

    buckets = OrderedDict(
        (key, {"period": key, "amount": ZERO, "count": 0}) for key in month_keys_between(start, end)
    )
    for row in rows:
        day = _as_date(_get(row, date_attr))
        if day is None:
            continue
        bucket = buckets.get(period_key(day, "monthly"))
        if bucket is None:
            continue
        bucket["amount"] += _amount(row, amount_attr)
        bucket["count"] += 1
    return list(buckets.values())


def last_months_series(
    rows: Iterable[Any],
    date_attr: str,
    today: date,
    months: int = 6,
    amount_attr: str = "amount",
) -> list[dict]:
    today = _as_date(today)
    if months <= 0:
        return []
    year, month = _shift_month(today.year, today.month, -(months - 1))
    return seeded_monthly_series(rows, date_attr, date(year, month, 1), today, amount_attr)


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------


def _category_catalog(categories: Iterable[Any]) -> dict[str, Any]:
    catalog = {}
    for category in categories or ():
        name = _get(category, "name")
        if name and name not in catalog:
            catalog[name] = category
    return catalog


def category_breakdown(expenses: Iterable[Any], categories: Iterable[Any] = ()) -> list[dict]:
    """Group expenses by category name with share of the overall total.

    Groups are sorted by amount, largest first.  Icon and colour come from the
    matching category in ``categories`` when there is one.
    """

    catalog = _category_catalog(categories)
    groups: "OrderedDict[str, dict]" = OrderedDict()
    total = ZERO
    for expense in expenses:
        name = _get(expense, "category_name") or UNCATEGORIZED
        amount = _amount(expense)
        total += amount
        group = groups.get(name)
        if group is None:
            category = catalog.get(name)
            group = groups[name] = {
                "category": name,
                "amount": ZERO,
                "count": 0,
                "percentage": ZERO,
                "icon": (_get(category, "icon") if category is not None else None) or FALLBACK_CATEGORY_ICON,
                "color": (_get(category, "color") if category is not None else None) or FALLBACK_CATEGORY_COLOR,
            }
        group["amount"] += amount
        group["count"] += 1

    for group in groups.values():
        group["percentage"] = _divide(group["amount"], total) * HUNDRED
    return sorted(groups.values(), key=lambda group: group["amount"], reverse=True)


def top_category(breakdown: Sequence[dict]) -> dict:
    if breakdown:
        return breakdown[0]
    return {
        "category": NO_EXPENSES,
        "amount": ZERO,
        "count": 0,
        "percentage": ZERO,
        "icon": FALLBACK_CATEGORY_ICON,
        "color": FALLBACK_CATEGORY_COLOR,
    }


def expense_analytics(expenses: Iterable[Any], categories: Iterable[Any] = ()) -> dict:
    expenses = list(expenses)
    total = sum((_amount(expense) for expense in expenses), ZERO)
    breakdown = category_breakdown(expenses, categories)
    return {
        "total_expenses": total,
        "expense_count": len(expenses),
        "average_expense": _divide(total, len(expenses)),
        "business_expenses": sum(
            (_amount(expense) for expense in expenses if _get(expense, "is_business_expense", True)),
            ZERO,
        ),
        "tax_deductible_expenses": sum(
            (_amount(expense) for expense in expenses if _get(expense, "tax_deductible", False)),
            ZERO,
        ),
        "top_category": top_category(breakdown),
        "category_breakdown": breakdown,
        "monthly_data": time_series(expenses, "date_incurred", "monthly"),
    }


# ---------------------------------------------------------------------------
# Invoices and clients
# ---------------------------------------------------------------------------


def client_revenue(
    invoices: Iterable[Any],
    clients: Optional[Iterable[Any]] = None,
    limit: Optional[int] = None,
) -> list[dict]:
    """Revenue per client over Paid invoices, highest first."""

    names = {}
    for client in clients or ():
        names[_get(client, "id")] = _get(client, "name")

    groups: "OrderedDict[Any, dict]" = OrderedDict()
    for invoice in invoices:
        if not _is_paid(invoice):
            continue
        client_id = _client_key(invoice)
        group = groups.get(client_id)
        if group is None:
            name = names.get(client_id) or _get(invoice, "client_name") or "Unknown"
            group = groups[client_id] = {
                "client_id": client_id,
                "client_name": name,
                "revenue": ZERO,
                "invoice_count": 0,
            }
        group["revenue"] += _amount(invoice)
        group["invoice_count"] += 1

    ranked = sorted(groups.values(), key=lambda group: group["revenue"], reverse=True)
    for group in ranked:
        group["avg_invoice_amount"] = _divide(group["revenue"], group["invoice_count"])
    if limit is not None:
        ranked = ranked[:limit]
    return ranked


def client_distribution(
    invoices: Iterable[Any],
    clients: Optional[Iterable[Any]] = None,
    limit: int = 5,
) -> list[dict]:
    return [
        {"name": entry["client_name"], "value": entry["revenue"]}
        for entry in client_revenue(invoices, clients, limit=limit)
    ]


def invoice_status_breakdown(invoices: Iterable[Any], include_cancelled: bool = False) -> list[dict]:
    statuses = INVOICE_STATUSES + ((CANCELLED,) if include_cancelled else ())
    entries = OrderedDict((status, {"status": status, "count": 0, "amount": ZERO}) for status in statuses)
    for invoice in invoices:
        entry = entries.get(_get(invoice, "status") or DRAFT)
        if entry is None:
            continue
        entry["count"] += 1
        entry["amount"] += _amount(invoice)
    return list(entries.values())


def average_invoice_value(invoices: Iterable[Any], paid_only: bool = False) -> Decimal:
    """Mean invoice amount; with ``paid_only`` the mean of Paid invoices."""

    invoices = [invoice for invoice in invoices if not paid_only or _is_paid(invoice)]
    total = sum((_amount(invoice) for invoice in invoices), ZERO)
    return _divide(total, len(invoices))


def _days_between(start: Any, end: Any) -> int:
    if isinstance(start, datetime) and isinstance(end, datetime):
        return math.ceil((end - start).total_seconds() / 86400)
    return (_as_date(end) - _as_date(start)).days


def average_payment_days(invoices: Iterable[Any]) -> Decimal:
    """Average stated term (due date minus issue date) of Paid invoices, in days."""

    days = [
        _days_between(_get(invoice, "date_issued"), _get(invoice, "due_date"))
        for invoice in invoices
        if _is_paid(invoice) and _get(invoice, "date_issued") and _get(invoice, "due_date")
    ]
    return _divide(Decimal(sum(days)), len(days))


def is_overdue(invoice: Any, today: date) -> bool:
    """Not Paid (nor Cancelled) and due before ``today``."""

    if _get(invoice, "status") in (PAID, CANCELLED):
        return False
    due = _as_date(_get(invoice, "due_date"))
    return due is not None and due < today


# ---------------------------------------------------------------------------
# Profit and change
# ---------------------------------------------------------------------------


def _trend(series: Optional[Sequence[Any]]) -> str:
    series = list(series or ())
    latest = _amount(series[-1]) if series else ZERO
    previous = _amount(series[-2]) if len(series) > 1 else ZERO
    if latest > previous:
        return "up"
    if latest < previous:
        return "down"
    return "stable"


def profit_summary(revenue, expenses, series: Optional[Sequence[Any]] = None) -> dict:
    revenue = Decimal(str(revenue or 0))
    expenses = Decimal(str(expenses or 0))
    net = revenue - expenses
    margin = _divide(net, revenue) * HUNDRED if revenue > 0 else ZERO
    return {
        "revenue": revenue,
        "expenses": expenses,
        "net": net,
        "margin": margin,
        "trend": _trend(series),
    }


def percent_change(current, previous) -> Decimal:
    current = Decimal(str(current or 0))
    previous = Decimal(str(previous or 0))
    if previous <= 0:
        return ZERO
    return (current - previous) / previous * HUNDRED


def change_badge(current, previous) -> dict:
    change = percent_change(current, previous)
    positive = change >= 0
    return {
        "change": change,
        "direction": "up" if positive else "down",
        "color": "green" if positive else "red",
    }


def balance_totals(invoices: Iterable[Any], expenses: Iterable[Any]) -> dict:
    earnings = sum((_amount(invoice) for invoice in invoices if _is_paid(invoice)), ZERO)
    spent = sum((_amount(expense) for expense in expenses), ZERO)
    return {
        "total_earnings": earnings,
        "total_expenses": spent,
        "current_balance": earnings - spent,
    }


# ---------------------------------------------------------------------------
# Composite reports
# ---------------------------------------------------------------------------


def _in_range(value: Any, start: Optional[date], end: Optional[date]) -> bool:
    day = _as_date(value)
    if day is None:
        return False
    if start is not None and day < start:
        return False
    if end is not None and day > end:
        return False
    return True


def financial_report(
    invoices: Iterable[Any],
    expenses: Iterable[Any],
    clients: Iterable[Any] = (),
    start: Optional[date] = None,
    end: Optional[date] = None,
    today: Optional[date] = None,
    categories: Iterable[Any] = (),
) -> dict:
    """Period summary used by the report export endpoints."""

    today = _as_date(today) or date.today()
    start = _as_date(start)
    end = _as_date(end)
    period_invoices = [inv for inv in invoices if _in_range(_get(inv, "date_issued"), start, end)]
    period_expenses = [exp for exp in expenses if _in_range(_get(exp, "date_incurred"), start, end)]

    paid = [invoice for invoice in period_invoices if _is_paid(invoice)]
    revenue = sum((_amount(invoice) for invoice in paid), ZERO)
    spent = sum((_amount(expense) for expense in period_expenses), ZERO)
    profit = profit_summary(revenue, spent)

    return {
        "period": {"start": start, "end": end},
        "revenue": revenue,
        "expenses": spent,
        "net_profit": profit["net"],
        "profit_margin": profit["margin"],
        "top_clients": client_revenue(period_invoices, clients, limit=5),
        "top_expense_categories": category_breakdown(period_expenses, categories)[:5],
        "invoice_stats": {
            "total": len(period_invoices),
            "paid": len(paid),
            "pending": sum(1 for invoice in period_invoices if _get(invoice, "status") == PENDING),
            "overdue": sum(1 for invoice in period_invoices if is_overdue(invoice, today)),
        },
    }


def _recent_activity(invoices: Sequence[Any], expenses: Sequence[Any], limit: int = 5) -> list[dict]:
    def _stamp(row, date_attr):
        created = _get(row, "created_at")
        if isinstance(created, datetime):
            return created.replace(tzinfo=None)
        day = _as_date(_get(row, date_attr))
        return datetime.combine(day, datetime.min.time()) if day else datetime.min

    latest_invoices = sorted(invoices, key=lambda row: _stamp(row, "date_issued"), reverse=True)[:3]
    latest_expenses = sorted(expenses, key=lambda row: _stamp(row, "date_incurred"), reverse=True)[:2]

    activity = [
        {
            "type": "invoice",
            "id": _get(invoice, "invoice_number"),
            "title": f"Invoice {_get(invoice, 'invoice_number')}",
            "description": f"{_get(invoice, 'client_name') or 'Unknown'} - {_get(invoice, 'status')}",
            "amount": _amount(invoice),
            "timestamp": _stamp(invoice, "date_issued"),
        }
        for invoice in latest_invoices
    ]
    activity.extend(
        {
            "type": "expense",
            "id": _get(expense, "id"),
            "title": _get(expense, "description"),
            "description": _get(expense, "category_name") or UNCATEGORIZED,
            "amount": _amount(expense),
            "timestamp": _stamp(expense, "date_incurred"),
        }
        for expense in latest_expenses
    )
    activity.sort(key=lambda entry: entry["timestamp"], reverse=True)
    return activity[:limit]


def dashboard_metrics(
    invoices: Iterable[Any],
    expenses: Iterable[Any],
    clients: Iterable[Any] = (),
    today: Optional[date] = None,
    categories: Iterable[Any] = (),
) -> dict:
    """Dashboard cards and chart data."""

    today = _as_date(today) or date.today()
    invoices = list(invoices)
    expenses = list(expenses)
    clients = list(clients)

    paid = [invoice for invoice in invoices if _is_paid(invoice)]
    revenue = sum((_amount(invoice) for invoice in paid), ZERO)
    spent = sum((_amount(expense) for expense in expenses), ZERO)
    profit = profit_summary(revenue, spent)

    active_since = today - timedelta(days=90)
    active_clients = {
        _client_key(invoice)
        for invoice in invoices
        if (_as_date(_get(invoice, "date_issued")) or date.min) > active_since
    }

    previous_year, previous_month = _shift_month(today.year, today.month, -1)
    current_key = f"{today.year:04d}-{today.month:02d}"
    previous_key = f"{previous_year:04d}-{previous_month:02d}"
    monthly = {bucket["period"]: bucket["amount"] for bucket in time_series(paid, "date_issued")}
    current_revenue = monthly.get(current_key, ZERO)
    previous_revenue = monthly.get(previous_key, ZERO)

    return {
        "total_revenue": revenue,
        "total_expenses": spent,
        "net_profit": profit["net"],
        "profit_margin": profit["margin"],
        "total_clients": len(clients),
        "active_clients": len(active_clients),
        "total_invoices": len(invoices),
        "pending_invoices": sum(1 for invoice in invoices if _get(invoice, "status") == PENDING),
        "overdue_invoices": sum(1 for invoice in invoices if is_overdue(invoice, today)),
        "average_invoice_value": average_invoice_value(invoices, paid_only=True),
        "monthly_growth": percent_change(current_revenue, previous_revenue),
        "monthly_growth_badge": change_badge(current_revenue, previous_revenue),
        "recent_activity": _recent_activity(invoices, expenses),
        "charts": {
            "monthly_revenue": last_months_series(paid, "date_issued", today),
            "client_distribution": client_distribution(invoices, clients, limit=5),
            "invoice_status": invoice_status_breakdown(invoices),
            "expense_categories": category_breakdown(expenses, categories),
        },
    }


def analytics_report(
    invoices: Iterable[Any],
    expenses: Iterable[Any],
    clients: Iterable[Any] = (),
    categories: Iterable[Any] = (),
) -> dict:
    """Revenue, expense, profit, client and invoice analytics for a period."""

    invoices = list(invoices)
    expenses = list(expenses)
    paid = [invoice for invoice in invoices if _is_paid(invoice)]
    revenue = sum((_amount(invoice) for invoice in paid), ZERO)
    spent = sum((_amount(expense) for expense in expenses), ZERO)
    monthly_revenue = time_series(paid, "date_issued", "monthly")
    top_clients = client_revenue(paid, clients, limit=10)

    return {
        "revenue": {
            "total": revenue,
            "monthly": monthly_revenue,
            "quarterly": time_series(paid, "date_issued", "quarterly"),
            "yearly": time_series(paid, "date_issued", "yearly"),
        },
        "expenses": {
            "total": spent,
            "monthly": time_series(expenses, "date_incurred", "monthly"),
            "by_category": category_breakdown(expenses, categories),
        },
        "profit": profit_summary(revenue, spent, monthly_revenue),
        "clients": {
            "top_clients": top_clients,
            "distribution": [
                {"name": entry["client_name"], "value": entry["revenue"]} for entry in top_clients[:5]
            ],
        },
        "invoices": {
            "status_breakdown": invoice_status_breakdown(invoices),
            "average_value": average_invoice_value(invoices),
            "payment_time": average_payment_days(invoices),
        },
    }
