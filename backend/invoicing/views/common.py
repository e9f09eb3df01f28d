"""Dashboard, analytics and financial report endpoints."""

from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .. import analytics
from ..models import ExpenseCategory, UserSettings
from ..report_exports import (
    generate_financial_report_pdf,
    generate_financial_report_workbook,
)
from ..services import filter_expenses, filter_invoices
from .utils import XLSX_CONTENT_TYPE, attachment_response, get_date_range, get_export_format


def _range_params(start, end) -> dict:
    return {'date_from': start, 'date_to': end}


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_summary(request):
    """Provide summary cards and chart data for the dashboard."""

    user = request.user
    metrics = analytics.dashboard_metrics(
        filter_invoices(user),
        filter_expenses(user),
        user.clients.all(),
        today=timezone.localdate(),
        categories=user.expense_categories.all(),
    )
    return Response(metrics)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def analytics_report(request):
    """Revenue, expense, profit, client and invoice analytics for a date range."""

    user = request.user
    start, end = get_date_range(request)
    if end is None:
        end = timezone.localdate()
    if start is None:
        start = end.replace(month=1, day=1)
    ExpenseCategory.ensure_defaults(user)

    report = analytics.analytics_report(
        filter_invoices(user, _range_params(start, end)),
        filter_expenses(user, _range_params(start, end)),
        user.clients.all(),
        categories=user.expense_categories.all(),
    )
    report['period'] = {'start': start, 'end': end}
    return Response(report)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def financial_report(request):
    """Financial report for a date range, optionally exported as xlsx or pdf."""

    user = request.user
    start, end = get_date_range(request)
    today = timezone.localdate()

    report = analytics.financial_report(
        filter_invoices(user, _range_params(start, end)),
        filter_expenses(user, _range_params(start, end)),
        user.clients.all(),
        start=start,
        end=end,
        today=today,
        categories=user.expense_categories.all(),
    )

    export_format = get_export_format(request)
    currency = UserSettings.load(user).currency
    filename_stub = f"financial-report-{start or 'start'}-to-{end or today}"

    if export_format in {'xlsx', 'excel'}:
        return attachment_response(
            generate_financial_report_workbook(report, currency=currency),
            XLSX_CONTENT_TYPE,
            f"{filename_stub}.xlsx",
        )

    if export_format == 'pdf':
        return attachment_response(
            generate_financial_report_pdf(report, currency=currency),
            'application/pdf',
            f"{filename_stub}.pdf",
        )

    return Response(report)
