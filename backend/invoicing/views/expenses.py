"""Expense related API views and the balance summary."""

from django.db import transaction
from rest_framework import viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .. import analytics
from ..exports import export_expenses_csv
from ..models import BalanceSummary, ExpenseCategory
from ..serializers import (
    BalanceSummarySerializer,
    ExpenseCategorySerializer,
    ExpenseSerializer,
)
from ..services import filter_expenses, recompute_balance_summary
from .utils import csv_response


class ExpenseCategoryViewSet(viewsets.ModelViewSet):
    """CRUD operations for expense categories.

    The default categories are created the first time a user with no
    categories lists them.
    """

    serializer_class = ExpenseCategorySerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return self.request.user.expense_categories.order_by('name')

    def list(self, request, *args, **kwargs):
        ExpenseCategory.ensure_defaults(request.user)
        return super().list(request, *args, **kwargs)

    def perform_create(self, serializer):
        serializer.save(created_by=self.request.user)

    def perform_update(self, serializer):
        with transaction.atomic():
            category = serializer.save()
            category.expenses.update(category_name=category.name)

    def perform_destroy(self, instance):
        with transaction.atomic():
            instance.expenses.update(category_name='Uncategorized')
            instance.delete()


class ExpenseViewSet(viewsets.ModelViewSet):
    """CRUD operations for expenses."""

    serializer_class = ExpenseSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return filter_expenses(self.request.user, self.request.query_params)

    def perform_create(self, serializer):
        with transaction.atomic():
            serializer.save(created_by=self.request.user)
            recompute_balance_summary(self.request.user)

    def perform_update(self, serializer):
        with transaction.atomic():
            serializer.save()
            recompute_balance_summary(self.request.user)

    def perform_destroy(self, instance):
        with transaction.atomic():
            instance.delete()
            recompute_balance_summary(self.request.user)

    @action(detail=False, methods=['get'], url_path='export')
    def export_csv(self, request):
        return csv_response(export_expenses_csv(self.get_queryset()), 'expenses')

    @action(detail=False, methods=['get'], url_path='analytics')
    def expense_analytics(self, request):
        ExpenseCategory.ensure_defaults(request.user)
        report = analytics.expense_analytics(
            self.get_queryset(),
            request.user.expense_categories.all(),
        )
        return Response(report)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def balance_summary(request):
    """Return the balance summary; POST forces a full recalculation."""

    summary, created = BalanceSummary.objects.get_or_create(user=request.user)
    if created or request.method == 'POST':
        summary = recompute_balance_summary(request.user)
    return Response(BalanceSummarySerializer(summary).data)
