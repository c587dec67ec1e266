import logging

from django.core.management.base import BaseCommand, CommandError

from stock.services import DailyReportService, ServiceError

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Rebuild precomputed daily report summaries'

    def add_arguments(self, parser):
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            '--date',
            help='Rebuild a single day (YYYY-MM-DD)'
        )
        group.add_argument(
            '--days',
            type=int,
            default=7,
            help='Rebuild this many days before today (default: 7)'
        )

    def handle(self, *args, **options):
        try:
            if options['date']:
                results = {options['date']: DailyReportService.rebuild(options['date'])}
            else:
                results = DailyReportService.rebuild_recent(options['days'])
        except ServiceError as e:
            raise CommandError(e.message)

        for day, summary in results.items():
            if summary is None:
                self.stdout.write(f'{day}: no transactions')
            else:
                self.stdout.write(self.style.SUCCESS(
                    f"{day}: {summary['total_transactions']} transactions"
                ))
