import logging

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from stock.services import DailyReportService

logger = logging.getLogger(__name__)


def rebuild_yesterday():
    logger.info("Executing daily report rebuild job")
    results = DailyReportService.rebuild_recent(days=1)
    for day, summary in results.items():
        if summary is None:
            logger.info("No transactions on %s", day)
        else:
            logger.info("Report %s: %s transactions", day, summary["total_transactions"])


def build_scheduler(hour: int = None, minute: int = None) -> BlockingScheduler:
    if hour is None:
        hour = getattr(settings, "STOCK_REPORT_REBUILD_HOUR", 0)
    if minute is None:
        minute = getattr(settings, "STOCK_REPORT_REBUILD_MINUTE", 15)

    scheduler = BlockingScheduler(timezone=settings.TIME_ZONE)
    scheduler.add_job(
        rebuild_yesterday,
        CronTrigger(hour=hour, minute=minute, timezone=settings.TIME_ZONE),
        id='rebuild_daily_report',
        name='Rebuild yesterday\'s stock report',
        replace_existing=True
    )
    return scheduler


class Command(BaseCommand):
    help = 'Run the nightly daily report rebuild scheduler'

    def add_arguments(self, parser):
        parser.add_argument('--hour', type=int, help='Hour to run the rebuild (local time)')
        parser.add_argument('--minute', type=int, help='Minute to run the rebuild')
        parser.add_argument(
            '--run-now',
            action='store_true',
            help='Rebuild yesterday once before starting the scheduler'
        )

    def handle(self, *args, **options):
        scheduler = build_scheduler(options['hour'], options['minute'])
        job = scheduler.get_job('rebuild_daily_report')

        self.stdout.write(self.style.SUCCESS('Starting daily report scheduler...'))
        self.stdout.write(f'Current time: {timezone.localtime()}')
        self.stdout.write(f'Schedule: {job.trigger}')

        if options['run_now']:
            rebuild_yesterday()

        try:
            logger.info("Scheduler started. Press Ctrl+C to exit.")
            scheduler.start()
        except (KeyboardInterrupt, SystemExit):
            logger.info("Scheduler stopped.")
            scheduler.shutdown(wait=False)
