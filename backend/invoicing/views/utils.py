"""Utility helpers shared across API view modules."""

from django.http import HttpResponse
from django.utils import timezone

from ..services.records import parse_date_param

XLSX_CONTENT_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def get_export_format(request) -> str:
    """Return the requested export format (``export_format`` or ``format``), lower-cased."""

    export_format = request.query_params.get('export_format')
    if not export_format:
        export_format = request.query_params.get('format')
    return (export_format or '').lower()


def get_date_range(request):
    """Parse ``date_from``/``date_to`` (or ``start_date``/``end_date``) query params."""

    params = request.query_params
    start = parse_date_param(params.get('date_from') or params.get('start_date'), 'date_from')
    end = parse_date_param(params.get('date_to') or params.get('end_date'), 'date_to')
    return start, end


def attachment_response(content, content_type: str, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type=content_type)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


def csv_response(content: str, stub: str) -> HttpResponse:
    """Wrap CSV text as a download named ``{stub}_{YYYY-MM-DD}.csv``."""

    filename = f"{stub}_{timezone.localdate().isoformat()}.csv"
    return attachment_response(content, 'text/csv; charset=utf-8', filename)
