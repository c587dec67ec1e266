from datetime import timedelta

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone

from stock.models import DailyReportSummary, StockTransaction
from stock.services import BusinessRuleError, DailyReportService, Mode, ValidationError

pytestmark = pytest.mark.django_db


def move_to_day(day_offset, **filters):
    """Shift matching transactions day_offset days into the past."""
    for trans in StockTransaction.objects.filter(**filters):
        StockTransaction.objects.filter(pk=trans.pk).update(
            created_at=trans.created_at - timedelta(days=day_offset)
        )


@pytest.fixture
def mixed_day(add_stock):
    """Yesterday: ADD 5 and SUBTRACT 2 on one key, SET on a second key."""
    add_stock(item_id=2, part_category="BATTERY", quantity=10)
    move_to_day(3)

    add_stock(item_id=1, part_category="SCREEN", quantity=5)
    add_stock(item_id=1, part_category="SCREEN", quantity=-2)
    add_stock(item_id=2, part_category="BATTERY", quantity=4, mode=Mode.SET)
    move_to_day(1)
    return timezone.localdate() - timedelta(days=1)


class TestReport:

    def test_summary_counts(self, mixed_day):
        report = DailyReportService.report(mixed_day)
        summary = report["summary"]

        assert summary["total_added"] == 5
        assert summary["total_subtracted"] == 2
        assert summary["total_set"] == 1
        assert summary["unique_items"] == 2
        assert summary["unique_part_categories"] == 2
        assert summary["total_transactions"] == 3
        assert report["from_summary"] is False

    def test_breakdowns(self, mixed_day):
        summary = DailyReportService.report(mixed_day)["summary"]

        assert summary["by_type"] == {
            "ADD": {"count": 1, "quantity": 5},
            "SUBTRACT": {"count": 1, "quantity": 2},
            "SET": {"count": 1, "quantity": 4},
        }
        assert summary["by_source"]["MANUAL"] == {
            "count": 3, "added": 5, "subtracted": 2, "set": 1,
        }

    def test_transactions_returned_with_summary(self, mixed_day):
        report = DailyReportService.report(mixed_day)

        assert len(report["transactions"]) == report["summary"]["total_transactions"]
        assert report["date"] == mixed_day.isoformat()

    def test_items_grouping(self, mixed_day):
        items = {row["item_id"]: row for row in DailyReportService.report(mixed_day)["items"]}

        assert items[1]["net_change"] == 3
        assert items[1]["total_added"] == 5
        assert items[1]["total_subtracted"] == 2
        assert items[2]["total_set"] == 1
        assert items[2]["net_change"] == -6
        assert items[2]["part_categories"] == ["BATTERY"]

    def test_no_activity_returns_none(self, mixed_day):
        assert DailyReportService.report(mixed_day - timedelta(days=1)) is None

    def test_other_days_excluded(self, mixed_day):
        earlier = DailyReportService.report(mixed_day - timedelta(days=3))
        assert earlier["summary"]["total_transactions"] == 1
        assert earlier["summary"]["total_added"] == 10

    def test_accepts_iso_string(self, mixed_day):
        assert DailyReportService.report(mixed_day.isoformat()) is not None

    def test_bad_date(self, db):
        with pytest.raises(ValidationError):
            DailyReportService.report("yesterday")


class TestSummaryCache:

    def test_rebuilt_summary_is_used_and_matches_fold(self, mixed_day):
        live = DailyReportService.report(mixed_day)["summary"]
        DailyReportService.rebuild(mixed_day)

        report = DailyReportService.report(mixed_day)
        assert report["from_summary"] is True
        assert report["generated_at"] is not None
        assert report["summary"] == live

    def test_mutation_drops_summary_for_the_day(self, add_stock):
        today = timezone.localdate()
        add_stock(quantity=2)
        DailyReportSummary.objects.create(report_date=today, total_transactions=1)

        add_stock(item_id=3, part_category="CABLE", quantity=1)

        assert not DailyReportSummary.objects.filter(report_date=today).exists()
        report = DailyReportService.report(today)
        assert report["from_summary"] is False
        assert report["summary"]["total_transactions"] == 2

    def test_today_cannot_be_rebuilt(self, add_stock):
        add_stock(quantity=2)

        with pytest.raises(BusinessRuleError):
            DailyReportService.rebuild(timezone.localdate())
        assert not DailyReportSummary.objects.exists()

    def test_future_day_cannot_be_rebuilt(self, db):
        with pytest.raises(BusinessRuleError):
            DailyReportService.rebuild(timezone.localdate() + timedelta(days=1))

    def test_rebuild_empty_day_removes_summary(self, db):
        day = timezone.localdate() - timedelta(days=10)
        DailyReportSummary.objects.create(report_date=day, total_transactions=1)

        assert DailyReportService.rebuild(day) is None
        assert not DailyReportSummary.objects.filter(report_date=day).exists()

    def test_rebuild_recent_covers_past_days(self, mixed_day):
        today = timezone.localdate()
        results = DailyReportService.rebuild_recent(days=4)

        assert list(results) == [
            (today - timedelta(days=offset)).isoformat() for offset in (1, 2, 3, 4)
        ]
        assert results[mixed_day.isoformat()]["total_transactions"] == 3
        assert results[(today - timedelta(days=4)).isoformat()]["total_added"] == 10
        assert DailyReportSummary.objects.count() == 2


class TestAvailableDates:

    def test_distinct_dates_newest_first(self, add_stock):
        add_stock(quantity=1)
        move_to_day(5)
        add_stock(quantity=1)
        add_stock(quantity=1)
        move_to_day(2, pk__in=StockTransaction.objects.order_by("-id").values("pk")[:2])
        add_stock(quantity=1)

        today = timezone.localdate()
        assert DailyReportService.available_dates() == [
            today.isoformat(),
            (today - timedelta(days=2)).isoformat(),
            (today - timedelta(days=5)).isoformat(),
        ]

    def test_limit(self, add_stock):
        for _ in range(4):
            add_stock(quantity=1)
            move_to_day(1)
        assert len(DailyReportService.available_dates(limit=2)) == 2

    def test_cached_until_next_mutation(self, add_stock):
        add_stock(quantity=1)
        first = DailyReportService.available_dates()

        StockTransaction.objects.update(
            created_at=timezone.now() - timedelta(days=1)
        )
        assert DailyReportService.available_dates() == first

        add_stock(quantity=1)
        assert len(DailyReportService.available_dates()) == 2

    def test_rejects_bad_limit(self, db):
        with pytest.raises(ValidationError):
            DailyReportService.available_dates(limit=0)


class TestCommands:

    def test_rebuild_single_date(self, mixed_day, capsys):
        call_command("rebuild_daily_reports", "--date", mixed_day.isoformat())

        assert DailyReportSummary.objects.filter(report_date=mixed_day).exists()
        assert "3 transactions" in capsys.readouterr().out

    def test_rebuild_today_fails(self, add_stock):
        add_stock(quantity=1)
        with pytest.raises(CommandError):
            call_command("rebuild_daily_reports", "--date", timezone.localdate().isoformat())

    def test_check_ledger_consistent(self, mixed_day, capsys):
        call_command("check_stock_ledger")
        assert "consistent" in capsys.readouterr().out
