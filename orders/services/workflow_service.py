import logging
from typing import Dict, Any

from django.db import transaction
from django.utils import timezone

from orders.models import OrderListItem
from orders.workflow import (
    Transition, LedgerEffect, STATUS_ORDER,
    plan_advance, plan_mark_ordered, plan_complete_with_stock, plan_revert,
)
from stock.services import (
    BaseService, StockLedgerService, Mode, success_response,
    to_int, clean_text, ValidationError,
)
from .order_list_service import OrderListService

logger = logging.getLogger(__name__)


class OrderWorkflowService(BaseService):
    """
    Moves order items through their lifecycle.

    Each operation locks the order item row, plans the transition, runs the
    attached ledger call and saves the item inside one database transaction:
    if the ledger call raises, the item keeps its previous status and fields.
    """

    model = OrderListItem

    @classmethod
    def _apply(cls, item: OrderListItem, plan: Transition) -> Dict[str, Any]:
        ledger_result = None

        if plan.ledger_effect is not None:
            ledger_result = cls._run_ledger_effect(plan.ledger_effect)

        if not plan.is_noop:
            plan.apply_to(item)
            item.save(update_fields=[*plan.changed_fields, "updated_at"])
            logger.info(
                "Order item %s: %s -> %s", item.id, plan.from_status, plan.to_status
            )

        message = (
            f"Order item moved to {plan.to_status}" if not plan.is_noop
            else f"Order item stays in {plan.from_status}"
        )
        return success_response({
            "item": OrderListService.serialize(item),
            "transition": plan.as_dict(),
            "stock": ledger_result["stock"] if ledger_result else None,
        }, message)

    @classmethod
    def _run_ledger_effect(cls, effect: LedgerEffect) -> Dict[str, Any]:
        if effect.is_compensation:
            logger.warning(
                "Reversing %s of #%s %s (%s)",
                -effect.quantity, effect.item_id, effect.part_category, effect.notes,
            )
        return StockLedgerService.mutate(
            effect.item_id,
            effect.part_category,
            effect.quantity,
            Mode.ADD,
            effect.source,
            notes=effect.notes,
            user_id=effect.user_id,
        )

    @classmethod
    @transaction.atomic
    def advance(cls, order_item_id: int) -> Dict[str, Any]:
        """
        Step forward where no extra input is needed (SHIPPING, RECEIVED).
        PENDING and RECEIVED items stay put and report what is required:
        tracking details via mark_ordered, a quantity via complete_with_stock.
        """
        item = cls.get_for_update(order_item_id)
        return cls._apply(item, plan_advance(item, timezone.now()))

    @classmethod
    @transaction.atomic
    def mark_ordered(cls,
                     order_item_id: int,
                     user_id: str = None,
                     tracking_number: str = None,
                     tracking_url: str = None) -> Dict[str, Any]:
        item = cls.get_for_update(order_item_id)
        plan = plan_mark_ordered(
            item, timezone.now(),
            user_id=clean_text(user_id),
            tracking_number=clean_text(tracking_number),
            tracking_url=clean_text(tracking_url),
        )
        return cls._apply(item, plan)

    @classmethod
    @transaction.atomic
    def complete_with_stock(cls,
                            order_item_id: int,
                            quantity: int,
                            user_id: str = None) -> Dict[str, Any]:
        quantity = to_int(quantity, "quantity")
        if quantity <= 0:
            raise ValidationError("Quantity must be a positive whole number", "quantity")

        item = cls.get_for_update(order_item_id)
        plan = plan_complete_with_stock(item, quantity, timezone.now(), clean_text(user_id))
        return cls._apply(item, plan)

    @classmethod
    @transaction.atomic
    def revert(cls, order_item_id: int, user_id: str = None) -> Dict[str, Any]:
        """
        Step back one status. Leaving STOCK_ADDED takes the received
        quantity back out of stock first; a failure there aborts the revert.
        """
        item = cls.get_for_update(order_item_id)
        return cls._apply(item, plan_revert(item, clean_text(user_id)))

    @classmethod
    def status_summary(cls, week_cycle_id: str = None) -> Dict[str, Any]:
        queryset = cls.model.objects.all()
        if week_cycle_id:
            queryset = queryset.filter(week_cycle_id=week_cycle_id)

        by_status = {status.value: 0 for status in STATUS_ORDER}
        for status in queryset.values_list("status", flat=True):
            by_status[status] += 1

        return success_response({
            "total": sum(by_status.values()),
            "by_status": by_status,
        })
