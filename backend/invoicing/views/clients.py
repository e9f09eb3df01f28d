"""Client related API views."""

import logging

from django.db import transaction
from rest_framework import mixins, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .. import analytics
from ..exports import export_clients_csv
from ..models import Client
from ..serializers import ClientSerializer, InvoiceSerializer
from ..services import filter_clients, recompute_balance_summary
from .utils import csv_response

logger = logging.getLogger(__name__)


class ClientViewSet(viewsets.ModelViewSet):
    """CRUD operations for clients."""

    serializer_class = ClientSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return filter_clients(self.request.user, self.request.query_params)

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def perform_destroy(self, instance):
        # Invoices cascade with the client; the balance must follow.
        client_id = instance.pk
        with transaction.atomic():
            instance.delete()
            recompute_balance_summary(self.request.user)
        logger.info("Client %s deleted by %s", client_id, self.request.user)

    @action(detail=True, methods=['get'])
    def details(self, request, pk=None):
        client = self.get_object()
        invoices = list(client.invoices.order_by('-date_issued', '-id'))

        data = {
            'client': ClientSerializer(client).data,
            'invoices': InvoiceSerializer(invoices, many=True).data,
            'summary': {
                'total_invoices': client.total_invoices,
                'total_revenue': client.total_amount,
                'status_breakdown': analytics.invoice_status_breakdown(invoices, include_cancelled=True),
                'average_invoice_value': analytics.average_invoice_value(invoices),
            },
        }
        return Response(data)

    @action(detail=False, methods=['get'], url_path='export')
    def export_csv(self, request):
        return csv_response(export_clients_csv(self.get_queryset()), 'clients')


class ClientInvoiceViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """Read-only list of the invoices issued to one client."""

    serializer_class = InvoiceSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        client_id = self.kwargs.get('client_pk')
        if not str(client_id).isdigit() or not Client.objects.filter(
            pk=client_id, created_by=self.request.user
        ).exists():
            raise NotFound('Client not found.')
        return self.request.user.invoices.filter(client_id=client_id).order_by('-date_issued', '-id')
