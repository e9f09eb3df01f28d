from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth.models import User

from ..models import Client, Expense, Invoice, UserSettings
from ..services.billing import calculate_invoice_totals, calculate_line_items


def create_user(username: str, password: str = "pw", **settings_overrides):
    user = User.objects.create_user(username=username, password=password)
    if settings_overrides:
        settings = UserSettings.load(user)
        for field, value in settings_overrides.items():
            setattr(settings, field, value)
        settings.save()
    return user


def create_client(user, name="Acme Corp", **extra):
    extra.setdefault("email", f"{name.lower().replace(' ', '.')}@example.com")
    return Client.objects.create(name=name, created_by=user, **extra)


def create_invoice(user, client, invoice_number, items=None, status=Invoice.PENDING,
                   date_issued=None, due_date=None, tax_rate=Decimal("0")):
    """Create an invoice row directly, bypassing the API numbering."""

    items = calculate_line_items(items or [{"description": "Work", "quantity": 1, "rate": "100.00"}])
    date_issued = date_issued or date.today()
    return Invoice.objects.create(
        invoice_number=invoice_number,
        client=client,
        client_name=client.name,
        client_email=client.email,
        date_issued=date_issued,
        due_date=due_date or date_issued + timedelta(days=30),
        status=status,
        items=items,
        tax_rate=tax_rate,
        created_by=user,
        **calculate_invoice_totals(items, tax_rate),
    )


def create_expense(user, amount, description="Expense", category=None, **extra):
    return Expense.objects.create(
        amount=Decimal(str(amount)),
        description=description,
        category=category,
        created_by=user,
        **extra,
    )
