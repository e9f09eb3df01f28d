from django.contrib.auth.models import User
from django.core.management.base import BaseCommand
from django.utils import timezone

from invoicing.notifications import check_overdue_invoices


class Command(BaseCommand):
    help = 'Post an "Overdue Invoices" notification to every user with unpaid invoices past due.'

    def handle(self, *args, **options):
        today = timezone.localdate()
        posted = 0
        for user in User.objects.filter(is_active=True):
            notification = check_overdue_invoices(user, today=today)
            if notification is None:
                continue
            posted += 1
            self.stdout.write(f'{user.username}: {notification.message}')
        self.stdout.write(self.style.SUCCESS(f'Posted {posted} overdue notification(s).'))
