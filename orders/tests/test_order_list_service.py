import json
from datetime import date

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from django.utils import timezone

from orders.models import OrderListItem, WeekCycle
from orders.services import OrderListService, OrderWorkflowService, WeekCycleService
from stock.models import StockItem
from stock.services import BusinessRuleError, NotFoundError, ValidationError

pytestmark = pytest.mark.django_db

Status = OrderListItem.Status


class TestWeekCycle:

    def test_week_of_uses_iso_week(self):
        assert WeekCycleService.week_of(date(2024, 12, 31)) == (
            "2025-W01", date(2024, 12, 30), date(2025, 1, 5),
        )
        assert WeekCycleService.week_of(date(2024, 5, 1)) == (
            "2024-W18", date(2024, 4, 29), date(2024, 5, 5),
        )

    def test_current_created_lazily(self):
        cycle = WeekCycleService.current()

        week_id, start, end = WeekCycleService.week_of(timezone.localdate())
        assert cycle.id == week_id
        assert (cycle.start_date, cycle.end_date) == (start, end)
        assert cycle.is_active
        assert WeekCycleService.current().id == week_id
        assert WeekCycle.objects.count() == 1

    def test_create_current_deactivates_others(self):
        WeekCycle.objects.create(
            id="2020-W01", start_date=date(2019, 12, 30), end_date=date(2020, 1, 5), is_active=True,
        )

        cycle = WeekCycleService.create_current()

        assert WeekCycle.objects.filter(is_active=True).get() == cycle
        assert not WeekCycle.objects.get(id="2020-W01").is_active

    def test_get_or_create_for_bad_id(self):
        with pytest.raises(ValidationError):
            WeekCycleService.get_or_create_for("last-week")


class TestOrderList:

    def test_add_item_goes_to_current_week(self, order_item):
        assert order_item["status"] == Status.PENDING
        assert order_item["quantity"] == 3
        assert order_item["added_by"] == "u1"
        assert order_item["week_cycle_id"] == WeekCycleService.current().id

    def test_add_item_validation(self):
        with pytest.raises(ValidationError):
            OrderListService.add_item(0, "SCREEN")
        with pytest.raises(ValidationError):
            OrderListService.add_item(10, "")

    def test_zero_quantity_means_unspecified(self):
        item = OrderListService.add_item(10, "SCREEN", quantity=0)["item"]
        assert item["quantity"] is None

    def test_current_list_newest_first(self, order_item):
        second = OrderListService.add_item(11, "BATTERY")["item"]

        result = OrderListService.current_list()
        assert result["count"] == 2
        assert [row["id"] for row in result["items"]] == [second["id"], order_item["id"]]

    def test_remove_item(self, order_item):
        OrderListService.remove_item(order_item["id"])
        assert not OrderListItem.objects.exists()

        with pytest.raises(NotFoundError):
            OrderListService.remove_item(order_item["id"])

    def test_remove_does_not_touch_stock(self, order_item):
        item_id = order_item["id"]
        OrderWorkflowService.mark_ordered(item_id)
        OrderWorkflowService.advance(item_id)
        OrderWorkflowService.advance(item_id)
        OrderWorkflowService.complete_with_stock(item_id, 4)

        OrderListService.remove_item(item_id)

        assert StockItem.objects.get(item_id=10, part_category="SCREEN").quantity == 4

    def test_reset_current_week(self, order_item):
        OrderListService.add_item(11, "BATTERY")
        old = WeekCycle.objects.create(
            id="2020-W01", start_date=date(2019, 12, 30), end_date=date(2020, 1, 5),
        )
        OrderListItem.objects.create(item_id=12, part_category="CABLE", week_cycle=old)

        result = OrderListService.reset_current_week()

        assert result["removed"] == 2
        assert OrderListItem.objects.count() == 1

    def test_update_quantity(self, order_item):
        result = OrderListService.update_quantity(order_item["id"], 8)
        assert result["item"]["quantity"] == 8

        result = OrderListService.update_quantity(order_item["id"], None)
        assert result["item"]["quantity"] is None

    def test_update_quantity_locked_after_stock_added(self, order_item):
        OrderListItem.objects.filter(pk=order_item["id"]).update(status=Status.STOCK_ADDED)
        with pytest.raises(BusinessRuleError):
            OrderListService.update_quantity(order_item["id"], 2)

    def test_update_tracking(self, order_item):
        with pytest.raises(BusinessRuleError):
            OrderListService.update_tracking(order_item["id"], "TRK9")

        OrderWorkflowService.mark_ordered(order_item["id"], tracking_number="TRK1")
        result = OrderListService.update_tracking(
            order_item["id"], "TRK9", "https://track.example/TRK9"
        )
        assert result["item"]["tracking_number"] == "TRK9"
        assert result["item"]["tracking_url"] == "https://track.example/TRK9"

    def test_summary(self, order_item):
        OrderListService.add_item(11, "BATTERY")
        OrderListService.add_item(12, "SCREEN")
        OrderWorkflowService.mark_ordered(order_item["id"])

        summary = OrderListService.summary()
        assert summary["total_items"] == 3
        assert summary["ordered_items"] == 1
        assert summary["pending_items"] == 2
        assert summary["items_by_part_category"] == {"SCREEN": 2, "BATTERY": 1}
        assert summary["items_by_status"]["ORDERED"] == 1
        assert summary["items_by_status"]["PENDING"] == 2


class TestLegacyImport:

    def test_status_from_ordered_flag(self):
        rows = [
            {"item_id": 1, "part_category": "SCREEN", "ordered": True,
             "ordered_at": "2024-05-01T10:00:00+00:00", "tracking_number": "T1"},
            {"item_id": 2, "part_category": "BATTERY", "ordered": False,
             "tracking_number": "stale"},
            {"item_id": 3, "part_category": "CABLE", "status": "SHIPPING", "ordered": False,
             "shipping_at": "2024-05-02T10:00:00+00:00", "received_at": "2024-05-03T10:00:00+00:00"},
        ]

        result = OrderListService.import_legacy_items(rows)
        assert result["imported"] == 3

        items = {item.item_id: item for item in OrderListItem.objects.all()}
        assert items[1].status == Status.ORDERED
        assert items[1].tracking_number == "T1"
        assert items[1].ordered_at.year == 2024
        assert items[2].status == Status.PENDING
        assert items[2].tracking_number is None
        assert items[3].status == Status.SHIPPING
        assert items[3].shipping_at is not None
        assert items[3].received_at is None

    def test_week_cycle_from_row(self):
        OrderListService.import_legacy_items([
            {"item_id": 1, "part_category": "SCREEN", "week_cycle_id": "2024-W18"},
        ])

        cycle = WeekCycle.objects.get(id="2024-W18")
        assert cycle.start_date == date(2024, 4, 29)
        assert cycle.is_active is False

    def test_bad_row_rolls_back_import(self):
        rows = [
            {"item_id": 1, "part_category": "SCREEN"},
            {"item_id": 2, "part_category": "SCREEN", "status": "LOST"},
        ]
        with pytest.raises(ValidationError):
            OrderListService.import_legacy_items(rows)
        assert not OrderListItem.objects.exists()

    def test_import_command(self, tmp_path, capsys):
        path = tmp_path / "orders.json"
        path.write_text(json.dumps([
            {"item_id": 5, "part_category": "SCREEN", "ordered": True},
        ]))

        call_command("import_order_items", str(path))

        assert OrderListItem.objects.get().status == Status.ORDERED
        assert "Imported 1" in capsys.readouterr().out

    def test_import_command_bad_file(self, tmp_path):
        path = tmp_path / "orders.json"
        path.write_text("{broken")
        with pytest.raises(CommandError):
            call_command("import_order_items", str(path))
