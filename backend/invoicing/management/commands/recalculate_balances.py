from django.contrib.auth.models import User
from django.core.management.base import BaseCommand

from invoicing.models import Client
from invoicing.services import recompute_balance_summary, recompute_client_totals


class Command(BaseCommand):
    help = 'Recalculate client invoice totals and balance summaries from scratch.'

    def add_arguments(self, parser):
        parser.add_argument('--user', help='Only recalculate data owned by this username.')

    def handle(self, *args, **options):
        users = User.objects.all()
        if options.get('user'):
            users = users.filter(username=options['user'])

        for user in users:
            for client_id in Client.objects.filter(created_by=user).values_list('id', flat=True):
                client = recompute_client_totals(client_id)
                self.stdout.write(
                    f'Client {client_id}: {client.total_invoices} invoices, {client.total_amount} paid'
                )
            summary = recompute_balance_summary(user)
            self.stdout.write(
                self.style.SUCCESS(f'User {user.username} balance updated to {summary.current_balance}')
            )
