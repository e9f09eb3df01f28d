"""Service layer helpers for the invoicing app."""

from .billing import (
    calculate_invoice_totals,
    calculate_line_items,
    due_date_for_terms,
    format_invoice_id,
    next_invoice_id,
    peek_invoice_id,
)
from .records import filter_clients, filter_expenses, filter_invoices
from .search import SearchSequencer, global_search
from .summaries import (
    recompute_balance_summary,
    recompute_client_totals,
    recompute_clients,
    to_money,
)

__all__ = [
    "SearchSequencer",
    "calculate_invoice_totals",
    "calculate_line_items",
    "due_date_for_terms",
    "filter_clients",
    "filter_expenses",
    "filter_invoices",
    "format_invoice_id",
    "global_search",
    "next_invoice_id",
    "peek_invoice_id",
    "recompute_balance_summary",
    "recompute_client_totals",
    "recompute_clients",
    "to_money",
]
