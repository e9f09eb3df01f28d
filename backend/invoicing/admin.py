# backend/invoicing/admin.py

from django.contrib import admin
from .models import (
    BalanceSummary,
    Client,
    Expense,
    ExpenseCategory,
    Invoice,
    Notification,
    UserSettings,
)


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ('name', 'email', 'payment_terms', 'total_invoices', 'total_amount', 'created_by')
    search_fields = ('name', 'email', 'company')


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ('invoice_number', 'client_name', 'date_issued', 'due_date', 'status', 'amount', 'created_by')
    list_filter = ('status',)
    search_fields = ('invoice_number', 'client_name')


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ('description', 'category_name', 'amount', 'date_incurred', 'payment_method', 'created_by')
    list_filter = ('payment_method', 'is_business_expense', 'tax_deductible')
    search_fields = ('description', 'vendor_name')


admin.site.register(ExpenseCategory)
admin.site.register(BalanceSummary)
admin.site.register(UserSettings)
admin.site.register(Notification)
