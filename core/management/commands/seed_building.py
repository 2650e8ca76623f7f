# core/management/commands/seed_building.py

from django.core.management.base import BaseCommand, CommandError

from core.exceptions import LedgerValidationError
from core.models import Floor, MonthlyDueConfig, SystemBalance
from core.services.money import to_money


class Command(BaseCommand):
    help = 'Creates the building floors and the system documents (balance, monthly due).'

    def add_arguments(self, parser):
        parser.add_argument('--floors', type=int, required=True, help='Number of floors, ground floor included.')
        parser.add_argument('--monthly-due', help='Monthly amount due per floor.')

    def handle(self, *args, **options):
        count = options['floors']
        if count <= 0:
            raise CommandError('--floors must be greater than zero.')

        required = None
        if options.get('monthly_due') is not None:
            try:
                required = to_money(options['monthly_due'], 'monthly_due')
            except LedgerValidationError as exc:
                raise CommandError(f'--monthly-due: {exc.message}')
            if required < 0:
                raise CommandError('--monthly-due must not be negative.')

        created = 0
        for number in range(count):
            _, was_created = Floor.objects.get_or_create(floor_number=number)
            if was_created:
                created += 1
                self.stdout.write(f'  - Created floor {number}')

        SystemBalance.objects.get_or_create(pk=1)
        config = MonthlyDueConfig.load()
        if required is not None:
            config.required = required
            config.save()

        self.stdout.write(self.style.SUCCESS(
            f'\nDone. {created} new floors, {Floor.objects.count()} in total; monthly due {config.required}.'
        ))
