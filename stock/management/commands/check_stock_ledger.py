import logging

from django.core.management.base import BaseCommand, CommandError

from stock.services import StockLedgerService

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Replay the stock transaction log and report keys whose quantity disagrees with it'

    def add_arguments(self, parser):
        parser.add_argument(
            '--fail-on-drift',
            action='store_true',
            help='Exit with an error when any key has drifted'
        )

    def handle(self, *args, **options):
        drift = StockLedgerService.verify_ledger()

        if not drift:
            self.stdout.write(self.style.SUCCESS('Stock ledger is consistent.'))
            return

        for row in drift:
            line = (
                f"#{row['item_id']} {row['part_category']}: stored {row['quantity']}, "
                f"log says {row['replayed_quantity']}"
            )
            logger.warning('Ledger drift %s', line)
            self.stdout.write(self.style.WARNING(line))

        message = f'{len(drift)} stock key(s) disagree with the transaction log'
        if options['fail_on_drift']:
            raise CommandError(message)
        self.stdout.write(self.style.ERROR(message))
