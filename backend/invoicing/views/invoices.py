"""Invoice related API views."""

import logging

from django.db import transaction
from django.http import FileResponse
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..exports import export_invoices_csv
from ..invoice_pdf import generate_invoice_pdf, invoice_pdf_filename
from ..serializers import InvoiceSerializer, InvoiceStatusSerializer
from ..services import (
    filter_invoices,
    peek_invoice_id,
    recompute_balance_summary,
    recompute_clients,
)
from .utils import csv_response

logger = logging.getLogger(__name__)


class InvoiceViewSet(viewsets.ModelViewSet):
    """CRUD operations for invoices, addressed by their invoice number."""

    serializer_class = InvoiceSerializer
    permission_classes = [IsAuthenticated]
    lookup_field = 'invoice_number'
    lookup_value_regex = '[^/]+'

    def get_queryset(self):
        return filter_invoices(self.request.user, self.request.query_params)

    def perform_create(self, serializer):
        with transaction.atomic():
            invoice = serializer.save(created_by=self.request.user)
            recompute_clients([invoice.client_id])
            recompute_balance_summary(self.request.user)
        logger.info("Invoice %s created by %s", invoice.invoice_number, self.request.user)

    def perform_update(self, serializer):
        previous_client_id = serializer.instance.client_id
        with transaction.atomic():
            invoice = serializer.save()
            recompute_clients([previous_client_id, invoice.client_id])
            recompute_balance_summary(self.request.user)

    def perform_destroy(self, instance):
        client_id = instance.client_id
        with transaction.atomic():
            instance.delete()
            recompute_clients([client_id])
            recompute_balance_summary(self.request.user)

    @action(detail=True, methods=['post', 'patch'], url_path='status')
    def change_status(self, request, invoice_number=None):
        invoice = self.get_object()
        serializer = InvoiceStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data['status']
        if new_status != invoice.status:
            with transaction.atomic():
                invoice.status = new_status
                invoice.save(update_fields=['status', 'updated_at'])
                recompute_clients([invoice.client_id])
                recompute_balance_summary(request.user)
        return Response(InvoiceSerializer(invoice, context=self.get_serializer_context()).data)

    @action(detail=True, methods=['get'])
    def pdf(self, request, invoice_number=None):
        invoice = self.get_object()
        buffer = generate_invoice_pdf(invoice)
        return FileResponse(
            buffer,
            as_attachment=True,
            filename=invoice_pdf_filename(invoice.invoice_number),
            content_type='application/pdf',
        )

    @action(detail=False, methods=['get'], url_path='export')
    def export_csv(self, request):
        return csv_response(export_invoices_csv(self.get_queryset()), 'invoices')

    @action(detail=False, methods=['get'], url_path='next-number')
    def next_number(self, request):
        return Response({'invoice_number': peek_invoice_id(request.user)}, status=status.HTTP_200_OK)
