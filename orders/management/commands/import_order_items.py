import json
import logging

from django.core.management.base import BaseCommand, CommandError

from orders.services import OrderListService
from stock.services import ServiceError

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Import exported order list rows (JSON array), converting the legacy ordered flag to a status'

    def add_arguments(self, parser):
        parser.add_argument('file', help='Path to a JSON file holding a list of order rows')

    def handle(self, *args, **options):
        path = options['file']
        try:
            with open(path, encoding='utf-8') as fh:
                rows = json.load(fh)
        except OSError as e:
            raise CommandError(f'Cannot read {path}: {e}')
        except json.JSONDecodeError as e:
            raise CommandError(f'{path} is not valid JSON: {e}')

        if isinstance(rows, dict):
            rows = rows.get('items', [])
        if not isinstance(rows, list):
            raise CommandError('Expected a JSON array of order rows')

        try:
            result = OrderListService.import_legacy_items(rows)
        except ServiceError as e:
            raise CommandError(e.message)

        self.stdout.write(self.style.SUCCESS(result['message']))
