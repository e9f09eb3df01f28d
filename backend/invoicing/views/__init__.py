"""Expose public API views for the application."""

from .clients import ClientInvoiceViewSet, ClientViewSet
from .common import analytics_report, dashboard_summary, financial_report
from .expenses import ExpenseCategoryViewSet, ExpenseViewSet, balance_summary
from .invoices import InvoiceViewSet
from .notifications import NotificationViewSet
from .search import search
from .settings import UserSettingsViewSet, app_state

__all__ = [
    'ClientInvoiceViewSet',
    'ClientViewSet',
    'ExpenseCategoryViewSet',
    'ExpenseViewSet',
    'InvoiceViewSet',
    'NotificationViewSet',
    'UserSettingsViewSet',
    'analytics_report',
    'app_state',
    'balance_summary',
    'dashboard_summary',
    'financial_report',
    'search',
]
