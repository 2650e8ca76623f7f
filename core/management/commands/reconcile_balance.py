# core/management/commands/reconcile_balance.py

from django.core.management.base import BaseCommand

from core.services.balance import audit_balance, reconcile_balance


class Command(BaseCommand):
    help = 'Compares the stored balance with payments minus expenses, and optionally fixes it.'

    def add_arguments(self, parser):
        parser.add_argument('--fix', action='store_true', help='Overwrite the stored balance with the replayed value.')

    def handle(self, *args, **options):
        report = audit_balance()
        self.stdout.write(f"Stored balance:        {report['stored']}")
        self.stdout.write(f"Payments - expenses:   {report['reconstructed']}")

        if not report['drift']:
            self.stdout.write(self.style.SUCCESS('The balance is consistent.'))
            return

        self.stdout.write(self.style.WARNING(f"Drift: {report['drift']}"))
        if options['fix']:
            reconcile_balance()
            self.stdout.write(self.style.SUCCESS(f"Balance set to {report['reconstructed']}."))
