import logging
from datetime import date, timedelta
from typing import Dict, Any, Iterable, Optional, Tuple

from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime

from orders.models import OrderListItem, WeekCycle
from orders.workflow import STATUS_ORDER, fields_after, resolve_legacy_status
from stock.services import (
    BaseService, success_response, ValidationError, BusinessRuleError,
    to_int, to_positive_id, clean_text,
)
from stock.services.base_service import isoformat

logger = logging.getLogger(__name__)


class WeekCycleService(BaseService):
    model = WeekCycle

    @classmethod
    def serialize(cls, cycle: WeekCycle) -> Dict[str, Any]:
        return {
            "id": cycle.id,
            "start_date": cycle.start_date.isoformat(),
            "end_date": cycle.end_date.isoformat(),
            "is_active": cycle.is_active,
        }

    @staticmethod
    def week_of(day: date) -> Tuple[str, date, date]:
        year, week, _ = day.isocalendar()
        start = day - timedelta(days=day.weekday())
        return f"{year}-W{week:02d}", start, start + timedelta(days=6)

    @classmethod
    def current(cls) -> WeekCycle:
        """The active cycle, created for this week if none is active."""
        cycle = cls.model.objects.filter(is_active=True).first()
        if cycle:
            return cycle
        return cls.create_current()

    @classmethod
    @transaction.atomic
    def create_current(cls) -> WeekCycle:
        week_id, start, end = cls.week_of(timezone.localdate())

        try:
            with transaction.atomic():
                cls.model.objects.filter(is_active=True).exclude(id=week_id).update(is_active=False)
                cycle, _ = cls.model.objects.update_or_create(
                    id=week_id,
                    defaults={"start_date": start, "end_date": end, "is_active": True},
                )
        except IntegrityError:
            # Another request activated a cycle in the meantime.
            return cls.model.objects.get(is_active=True)

        logger.info("Week cycle %s activated (%s - %s)", week_id, start, end)
        return cycle

    @classmethod
    def get_or_create_for(cls, week_id: str) -> WeekCycle:
        cycle = cls.get_by_pk(week_id)
        if cycle:
            return cycle
        try:
            year, week = week_id.split("-W")
            start = date.fromisocalendar(int(year), int(week), 1)
        except ValueError:
            raise ValidationError(f"Invalid week cycle id: {week_id}", "week_cycle_id")
        return cls.model.objects.create(
            id=week_id, start_date=start, end_date=start + timedelta(days=6), is_active=False
        )

    @classmethod
    def get_by_pk(cls, week_id: str) -> Optional[WeekCycle]:
        return cls.model.objects.filter(pk=week_id).first()


class OrderListService(BaseService):
    model = OrderListItem

    @classmethod
    def serialize(cls, item: OrderListItem) -> Dict[str, Any]:
        return {
            "id": item.id,
            "uuid": str(item.uuid),
            "item_id": item.item_id,
            "part_category": item.part_category,
            "quantity": item.quantity,
            "status": item.status,
            "status_display": item.get_status_display(),
            "is_ordered": item.is_ordered,
            "week_cycle_id": item.week_cycle_id,
            "added_at": isoformat(item.added_at),
            "added_by": item.added_by,
            "ordered_at": isoformat(item.ordered_at),
            "ordered_by": item.ordered_by,
            "tracking_number": item.tracking_number,
            "tracking_url": item.tracking_url,
            "shipping_at": isoformat(item.shipping_at),
            "received_at": isoformat(item.received_at),
            "stock_added_at": isoformat(item.stock_added_at),
            "stock_added_by": item.stock_added_by,
            "stock_quantity_added": item.stock_quantity_added,
        }

    @classmethod
    def _clean_quantity(cls, quantity) -> Optional[int]:
        if quantity in (None, ""):
            return None
        quantity = to_int(quantity, "quantity")
        return quantity or None

    @classmethod
    def current_list(cls) -> Dict[str, Any]:
        cycle = WeekCycleService.current()
        items = cls.model.objects.filter(week_cycle=cycle).order_by("-added_at", "-id")
        return success_response({
            "week_cycle": WeekCycleService.serialize(cycle),
            "items": [cls.serialize(item) for item in items],
            "count": items.count(),
        })

    @classmethod
    @transaction.atomic
    def add_item(cls,
                 item_id: int,
                 part_category: str,
                 quantity: int = None,
                 user_id: str = None) -> Dict[str, Any]:
        item_id = to_positive_id(item_id, "item_id")
        part_category = clean_text(part_category)
        if not part_category:
            raise ValidationError("Part category is required", "part_category")

        item = cls.model.objects.create(
            item_id=item_id,
            part_category=part_category,
            quantity=cls._clean_quantity(quantity),
            added_by=clean_text(user_id),
            week_cycle=WeekCycleService.current(),
        )
        return success_response({"item": cls.serialize(item)}, "Item added to order list")

    @classmethod
    @transaction.atomic
    def remove_item(cls, order_item_id: int) -> Dict[str, Any]:
        item = cls.get_or_404(order_item_id)
        item.delete()
        return success_response({"id": order_item_id}, "Item removed from order list")

    @classmethod
    @transaction.atomic
    def reset_current_week(cls) -> Dict[str, Any]:
        cycle = WeekCycleService.current()
        deleted, _ = cls.model.objects.filter(week_cycle=cycle).delete()
        logger.info("Week cycle %s reset: %s items removed", cycle.id, deleted)
        return success_response({
            "week_cycle": WeekCycleService.serialize(cycle),
            "removed": deleted,
        }, "Order list reset")

    @classmethod
    @transaction.atomic
    def update_quantity(cls, order_item_id: int, quantity: int = None) -> Dict[str, Any]:
        item = cls.get_for_update(order_item_id)
        if item.status == OrderListItem.Status.STOCK_ADDED:
            raise BusinessRuleError(
                "Cannot change quantity after stock was added", "update_quantity"
            )
        item.quantity = cls._clean_quantity(quantity)
        item.save(update_fields=["quantity", "updated_at"])
        return success_response({"item": cls.serialize(item)}, "Quantity updated")

    @classmethod
    @transaction.atomic
    def update_tracking(cls,
                        order_item_id: int,
                        tracking_number: str = None,
                        tracking_url: str = None) -> Dict[str, Any]:
        item = cls.get_for_update(order_item_id)
        if item.status not in (OrderListItem.Status.ORDERED, OrderListItem.Status.SHIPPING):
            raise BusinessRuleError(
                f"Tracking can only be changed while ORDERED or SHIPPING, not {item.status}",
                "update_tracking",
            )
        item.tracking_number = clean_text(tracking_number)
        item.tracking_url = clean_text(tracking_url)
        item.save(update_fields=["tracking_number", "tracking_url", "updated_at"])
        return success_response({"item": cls.serialize(item)}, "Tracking updated")

    @classmethod
    def summary(cls) -> Dict[str, Any]:
        cycle = WeekCycleService.current()
        items = list(cls.model.objects.filter(week_cycle=cycle))

        by_part_category = {}
        by_status = {status.value: 0 for status in STATUS_ORDER}
        for item in items:
            by_part_category[item.part_category] = by_part_category.get(item.part_category, 0) + 1
            by_status[item.status] += 1

        ordered = sum(1 for item in items if item.is_ordered)
        return success_response({
            "week_cycle_id": cycle.id,
            "total_items": len(items),
            "ordered_items": ordered,
            "pending_items": len(items) - ordered,
            "items_by_part_category": by_part_category,
            "items_by_status": by_status,
        })

    @classmethod
    @transaction.atomic
    def import_legacy_items(cls, rows: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Load exported order rows. Rows without a status take it from the old
        ``ordered`` flag; fields belonging to later statuses are dropped.
        """
        datetime_fields = (
            "added_at", "ordered_at", "shipping_at", "received_at", "stock_added_at",
        )
        imported = 0

        for index, row in enumerate(rows):
            if not isinstance(row, dict):
                raise ValidationError(f"Row {index} is not an object", "rows")
            try:
                status = resolve_legacy_status(row.get("status"), row.get("ordered"))
            except BusinessRuleError as e:
                raise ValidationError(f"Row {index}: {e.message}", "status")

            week_id = row.get("week_cycle_id")
            cycle = WeekCycleService.get_or_create_for(week_id) if week_id else WeekCycleService.current()

            values = {
                "item_id": to_positive_id(row.get("item_id", row.get("sku_id")), "item_id"),
                "part_category": clean_text(row.get("part_category", row.get("part_type"))),
                "quantity": cls._clean_quantity(row.get("quantity")),
                "status": status,
                "week_cycle": cycle,
                "added_by": clean_text(row.get("added_by")),
                "ordered_by": clean_text(row.get("ordered_by")),
                "tracking_number": clean_text(row.get("tracking_number")),
                "tracking_url": clean_text(row.get("tracking_url")),
                "stock_added_by": clean_text(row.get("stock_added_by")),
                "stock_quantity_added": cls._clean_quantity(row.get("stock_quantity_added")),
            }
            if not values["part_category"]:
                raise ValidationError(f"Row {index}: part category is required", "part_category")

            for name in datetime_fields:
                raw = row.get(name)
                values[name] = parse_datetime(raw) if isinstance(raw, str) else raw
            if values["added_at"] is None:
                values["added_at"] = timezone.now()

            for name in fields_after(status):
                values[name] = None

            cls.model.objects.create(**values)
            imported += 1

        logger.info("Imported %s legacy order items", imported)
        return success_response({"imported": imported}, f"Imported {imported} order items")
