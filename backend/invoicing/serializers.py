# backend/invoicing/serializers.py
from datetime import date
from decimal import Decimal

from django.contrib.auth.models import User
from django.db import transaction
from rest_framework import serializers

from .models import (
    BalanceSummary,
    Client,
    Expense,
    ExpenseCategory,
    Invoice,
    Notification,
    UserSettings,
)
from .services.billing import (
    calculate_invoice_totals,
    calculate_line_items,
    due_date_for_terms,
    next_invoice_id,
)

STATE_SCHEMA_VERSION = 1


class OwnedSerializerMixin:
    """Access to the requesting user for ownership checks."""

    def get_user(self):
        request = self.context.get('request')
        return getattr(request, 'user', None)


class ClientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Client
        fields = [
            'id',
            'name',
            'email',
            'phone',
            'company',
            'address',
            'contact_name',
            'payment_terms',
            'total_invoices',
            'total_amount',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['total_invoices', 'total_amount', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = (value or '').strip()
        if not value:
            raise serializers.ValidationError('Client name is required.')
        return value


class LineItemSerializer(serializers.Serializer):
    description = serializers.CharField(max_length=500, allow_blank=True, required=False, default='')
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    rate = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0'))
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)


class InvoiceSerializer(OwnedSerializerMixin, serializers.ModelSerializer):
    """Invoice with embedded line items.

    ``subtotal``, ``tax`` and ``amount`` are always derived from ``items``.
    New invoices take the owner's current tax rate and the next id from the
    owner's numbering sequence; ``due_date`` defaults from the client's
    payment terms when it is not supplied.
    """

    items = LineItemSerializer(many=True, required=False)
    client = serializers.PrimaryKeyRelatedField(queryset=Client.objects.all())

    class Meta:
        model = Invoice
        fields = [
            'id',
            'invoice_number',
            'client',
            'client_name',
            'client_email',
            'client_address',
            'date_issued',
            'due_date',
            'status',
            'items',
            'subtotal',
            'tax_rate',
            'tax',
            'amount',
            'notes',
            'created_at',
            'updated_at',
        ]
        read_only_fields = [
            'id',
            'invoice_number',
            'client_name',
            'client_email',
            'client_address',
            'subtotal',
            'tax_rate',
            'tax',
            'amount',
            'created_at',
            'updated_at',
        ]
        extra_kwargs = {
            'due_date': {'required': False},
            'notes': {'required': False},
        }

    def validate_client(self, client):
        user = self.get_user()
        if user is not None and client.created_by_id != user.id:
            raise serializers.ValidationError('Client not found.')
        return client

    def validate(self, attrs):
        attrs = super().validate(attrs)
        date_issued = attrs.get('date_issued') or getattr(self.instance, 'date_issued', None)
        if date_issued is None and self.instance is None:
            # New invoices without an issue date are issued today.
            date_issued = date.today()
        due_date = attrs.get('due_date') or getattr(self.instance, 'due_date', None)
        if date_issued and due_date and due_date < date_issued:
            raise serializers.ValidationError({'due_date': 'Due date cannot be before the issue date.'})
        return attrs

    def _apply_client(self, validated_data, client):
        validated_data['client_name'] = client.name
        validated_data['client_email'] = client.email or ''
        validated_data['client_address'] = client.address or ''

    def _apply_items(self, validated_data, items, tax_rate):
        lines = calculate_line_items(items)
        validated_data['items'] = lines
        validated_data.update(calculate_invoice_totals(lines, tax_rate))

    def create(self, validated_data):
        user = validated_data['created_by']
        client = validated_data['client']
        items = validated_data.pop('items', [])
        with transaction.atomic():
            settings = UserSettings.load(user)
            validated_data['invoice_number'] = next_invoice_id(user)
            validated_data['tax_rate'] = settings.tax_rate
            self._apply_client(validated_data, client)
            self._apply_items(validated_data, items, settings.tax_rate)
            if not validated_data.get('due_date'):
                issued = validated_data.get('date_issued') or date.today()
                validated_data['date_issued'] = issued
                validated_data['due_date'] = due_date_for_terms(issued, client.payment_terms)
            return super().create(validated_data)

    def update(self, instance, validated_data):
        client = validated_data.get('client')
        if client is not None:
            self._apply_client(validated_data, client)
        items = validated_data.pop('items', None)
        if items is not None:
            self._apply_items(validated_data, items, instance.tax_rate)
        return super().update(instance, validated_data)


class InvoiceStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Invoice.STATUS_CHOICES)


class ExpenseCategorySerializer(OwnedSerializerMixin, serializers.ModelSerializer):
    class Meta:
        model = ExpenseCategory
        fields = ['id', 'name', 'description', 'icon', 'color', 'is_default', 'created_at', 'updated_at']
        read_only_fields = ['is_default', 'created_at', 'updated_at']

    def validate_name(self, value):
        value = (value or '').strip()
        if not value:
            raise serializers.ValidationError('Category name is required.')
        user = self.get_user()
        if user is not None:
            existing = ExpenseCategory.objects.filter(created_by=user, name__iexact=value)
            if self.instance is not None:
                existing = existing.exclude(pk=self.instance.pk)
            if existing.exists():
                raise serializers.ValidationError('A category with this name already exists.')
        return value


class ExpenseSerializer(OwnedSerializerMixin, serializers.ModelSerializer):
    tags = serializers.ListField(child=serializers.CharField(max_length=50), required=False)

    class Meta:
        model = Expense
        fields = [
            'id',
            'amount',
            'description',
            'category',
            'category_name',
            'date_incurred',
            'payment_method',
            'vendor_name',
            'receipt_number',
            'notes',
            'tags',
            'is_business_expense',
            'tax_deductible',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['category_name', 'created_at', 'updated_at']

    def validate_amount(self, value):
        if value is None or value <= 0:
            raise serializers.ValidationError('Amount must be greater than zero.')
        return value

    def validate_description(self, value):
        value = (value or '').strip()
        if not value:
            raise serializers.ValidationError('Description is required.')
        return value

    def validate_category(self, category):
        user = self.get_user()
        if category is not None and user is not None and category.created_by_id != user.id:
            raise serializers.ValidationError('Category not found.')
        return category

    def validate(self, attrs):
        attrs = super().validate(attrs)
        if 'category' in attrs:
            category = attrs['category']
            attrs['category_name'] = category.name if category is not None else Expense.UNCATEGORIZED
        return attrs


class BalanceSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = BalanceSummary
        fields = [
            'total_earnings',
            'total_expenses',
            'current_balance',
            'balance_start_date',
            'last_calculated_at',
        ]
        read_only_fields = fields


class UserSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserSettings
        exclude = ['id', 'user', 'created_at']
        read_only_fields = ['updated_at']

    def validate_tax_rate(self, value):
        if value < 0 or value > 100:
            raise serializers.ValidationError('Tax rate must be between 0 and 100.')
        return value

    def validate_currency(self, value):
        value = (value or '').strip().upper()
        if len(value) != 3 or not value.isalpha():
            raise serializers.ValidationError('Currency must be a 3-letter ISO code.')
        return value

    def validate_invoice_prefix(self, value):
        value = (value or '').strip()
        if not value:
            raise serializers.ValidationError('Invoice prefix is required.')
        return value

    def validate_next_invoice_number(self, value):
        if value < 1:
            raise serializers.ValidationError('Next invoice number must be at least 1.')
        return value


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = [
            'id',
            'kind',
            'title',
            'message',
            'action_label',
            'action_url',
            'metadata',
            'is_read',
            'created_at',
        ]
        read_only_fields = fields


class StateUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name']
        read_only_fields = fields


def persisted_state(user, settings: UserSettings, context=None) -> dict:
    """The part of the client state that must survive a reload."""

    return {
        'schema_version': STATE_SCHEMA_VERSION,
        'user': StateUserSerializer(user).data,
        'settings': UserSettingsSerializer(settings, context=context or {}).data,
    }
