# backend/invoicing/models.py
from datetime import date
from decimal import Decimal

from django.contrib.auth.models import User
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models
from django.utils import timezone


class Client(models.Model):
    PAYMENT_TERMS_CHOICES = [
        ('due_on_receipt', 'Due on Receipt'),
        ('net15', 'Net 15'),
        ('net30', 'Net 30'),
        ('net45', 'Net 45'),
        ('net60', 'Net 60'),
    ]

    name = models.CharField(max_length=255)
    email = models.EmailField(max_length=254)
    phone = models.CharField(max_length=20, blank=True, null=True)
    company = models.CharField(max_length=255, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    contact_name = models.CharField(max_length=255, blank=True, null=True)
    payment_terms = models.CharField(max_length=20, choices=PAYMENT_TERMS_CHOICES, default='net30')

    # Denormalized counters, refreshed by services.summaries after invoice writes.
    total_invoices = models.PositiveIntegerField(default=0)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))

    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name='clients')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Invoice(models.Model):
    DRAFT = 'Draft'
    PENDING = 'Pending'
    PAID = 'Paid'
    OVERDUE = 'Overdue'
    CANCELLED = 'Cancelled'

    STATUS_CHOICES = [
        (DRAFT, 'Draft'),
        (PENDING, 'Pending'),
        (PAID, 'Paid'),
        (OVERDUE, 'Overdue'),
        (CANCELLED, 'Cancelled'),
    ]

    # Human readable id, e.g. "INV-0007"; unique per owner.
    invoice_number = models.CharField(max_length=50)
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='invoices')
    client_name = models.CharField(max_length=255, blank=True, default='')
    client_email = models.EmailField(max_length=254, blank=True, default='')
    client_address = models.TextField(blank=True, default='')
    date_issued = models.DateField(default=date.today)
    due_date = models.DateField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=DRAFT)
    items = models.JSONField(default=list, blank=True)
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True, default='')

    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name='invoices')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date_issued', '-id']
        constraints = [
            models.UniqueConstraint(
                fields=['created_by', 'invoice_number'],
                name='unique_invoice_number_per_owner',
            )
        ]

    def __str__(self):
        return f"Invoice {self.invoice_number} for {self.client_name}"


class ExpenseCategory(models.Model):
    DEFAULT_CATEGORIES = [
        {'name': 'Office Supplies', 'icon': '🏢', 'color': '#3B82F6'},
        {'name': 'Transportation', 'icon': '🚗', 'color': '#10B981'},
        {'name': 'Technology', 'icon': '💻', 'color': '#8B5CF6'},
        {'name': 'Communication', 'icon': '📱', 'color': '#F59E0B'},
        {'name': 'Food & Entertainment', 'icon': '🍽️', 'color': '#EF4444'},
        {'name': 'Utilities', 'icon': '⚡', 'color': '#06B6D4'},
        {'name': 'Education & Training', 'icon': '📚', 'color': '#EC4899'},
        {'name': 'Healthcare', 'icon': '🏥', 'color': '#84CC16'},
        {'name': 'Marketing', 'icon': '📢', 'color': '#F97316'},
        {'name': 'Miscellaneous', 'icon': '📎', 'color': '#6B7280'},
    ]

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, null=True)
    icon = models.CharField(max_length=16, default='📎')
    color = models.CharField(
        max_length=7,
        default='#6B7280',
        validators=[RegexValidator(r'^#[0-9A-Fa-f]{6}$', 'Color must be a hex value like #3B82F6.')],
    )
    is_default = models.BooleanField(default=False)
    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name='expense_categories')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        # Ensures that each user has unique category names
        unique_together = ('name', 'created_by')
        ordering = ['name']
        verbose_name_plural = "Expense Categories"

    def __str__(self):
        return self.name

    @classmethod
    def ensure_defaults(cls, user: User) -> bool:
        """Seed the default categories for ``user`` if they have none.

        Returns ``True`` when categories were created.
        """

        if cls.objects.filter(created_by=user).exists():
            return False
        cls.objects.bulk_create(
            [cls(created_by=user, is_default=True, **data) for data in cls.DEFAULT_CATEGORIES]
        )
        return True


class Expense(models.Model):
    UNCATEGORIZED = 'Uncategorized'

    PAYMENT_METHODS = [
        ('cash', 'Cash'),
        ('upi', 'UPI'),
        ('card', 'Debit/Credit Card'),
        ('net_banking', 'Net Banking'),
        ('bank_transfer', 'Bank Transfer'),
        ('wallet', 'Digital Wallet'),
        ('cheque', 'Cheque'),
        ('other', 'Other'),
    ]

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    description = models.CharField(max_length=255)
    category = models.ForeignKey(
        ExpenseCategory,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses',
    )
    category_name = models.CharField(max_length=100, default=UNCATEGORIZED)
    date_incurred = models.DateField(default=date.today)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHODS, default='cash')
    vendor_name = models.CharField(max_length=255, blank=True, null=True)
    receipt_number = models.CharField(max_length=100, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    tags = models.JSONField(default=list, blank=True)
    is_business_expense = models.BooleanField(default=True)
    tax_deductible = models.BooleanField(default=False)

    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name='expenses')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date_incurred', '-id']

    def __str__(self):
        return f"Expense of {self.amount} on {self.date_incurred}"

    def save(self, *args, **kwargs):
        if self.category_id and self.category is not None:
            self.category_name = self.category.name
        elif not self.category_name:
            self.category_name = self.UNCATEGORIZED
        super().save(*args, **kwargs)


class BalanceSummary(models.Model):
    """Per-user aggregate of paid earnings against recorded expenses."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='balance_summary')
    total_earnings = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    total_expenses = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    current_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    balance_start_date = models.DateTimeField(default=timezone.now)
    last_calculated_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "Balance Summaries"

    def __str__(self):
        return f"Balance for {self.user}: {self.current_balance}"


class UserSettings(models.Model):
    """Profile, company, invoicing, banking and notification preferences."""

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='invoicing_settings')

    profile_name = models.CharField(max_length=255, blank=True, default='')
    profile_email = models.EmailField(max_length=254, blank=True, default='')
    profile_phone = models.CharField(max_length=20, blank=True, default='')
    profile_address = models.TextField(blank=True, default='')
    profile_gstin = models.CharField(max_length=20, blank=True, default='')

    company_name = models.CharField(max_length=255, blank=True, default='')
    company_website = models.URLField(blank=True, default='')
    company_registration = models.CharField(max_length=100, blank=True, default='')
    company_logo = models.ImageField(upload_to='company_logos/', blank=True, null=True)

    invoice_prefix = models.CharField(max_length=20, default='INV')
    next_invoice_number = models.PositiveIntegerField(default=1)
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))],
    )
    currency = models.CharField(max_length=3, default='INR')

    bank_account_name = models.CharField(max_length=255, blank=True, default='')
    bank_name = models.CharField(max_length=255, blank=True, default='')
    bank_account = models.CharField(max_length=64, blank=True, default='')
    bank_branch = models.CharField(max_length=255, blank=True, default='')
    bank_ifsc = models.CharField(max_length=20, blank=True, default='')
    bank_swift = models.CharField(max_length=20, blank=True, default='')
    account_type = models.CharField(max_length=50, blank=True, default='')

    email_notifications = models.BooleanField(default=True)
    invoice_reminders = models.BooleanField(default=True)
    payment_alerts = models.BooleanField(default=True)
    weekly_reports = models.BooleanField(default=False)
    overdue_reminders = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "User Settings"

    def __str__(self):
        return f"Settings for {self.user}"

    def save(self, *args, **kwargs):
        if self.currency:
            self.currency = self.currency.upper()
        super().save(*args, **kwargs)

    @classmethod
    def load(cls, user: User) -> "UserSettings":
        obj, _ = cls.objects.get_or_create(user=user)
        return obj


class Notification(models.Model):
    KIND_CHOICES = [
        ('success', 'Success'),
        ('error', 'Error'),
        ('warning', 'Warning'),
        ('info', 'Info'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='invoicing_notifications')
    kind = models.CharField(max_length=10, choices=KIND_CHOICES, default='info')
    title = models.CharField(max_length=255)
    message = models.CharField(max_length=500, blank=True, default='')
    action_label = models.CharField(max_length=100, blank=True, default='')
    action_url = models.CharField(max_length=255, blank=True, default='')
    metadata = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', 'is_read', 'created_at'], name='invoicing_notif_unread_idx'),
        ]

    def __str__(self):
        return f"{self.user}: {self.title}"
