"""
Order item lifecycle.

    PENDING -> ORDERED -> SHIPPING -> RECEIVED -> STOCK_ADDED

Each planning function looks at an item and returns a Transition describing
the status change, the fields to stamp or clear, and the stock ledger call
(if any) that has to succeed together with it. Nothing here touches the
database; OrderWorkflowService applies the plans.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from orders.models import OrderListItem
from stock.models import StockTransaction
from stock.services.base_service import BusinessRuleError

Status = OrderListItem.Status

STATUS_ORDER = (
    Status.PENDING,
    Status.ORDERED,
    Status.SHIPPING,
    Status.RECEIVED,
    Status.STOCK_ADDED,
)

# Fields owned by each status; they are null while the item sits in an
# earlier status.
STATE_FIELDS = {
    Status.PENDING: (),
    Status.ORDERED: ("ordered_at", "ordered_by", "tracking_number", "tracking_url"),
    Status.SHIPPING: ("shipping_at",),
    Status.RECEIVED: ("received_at",),
    Status.STOCK_ADDED: ("stock_added_at", "stock_added_by", "stock_quantity_added"),
}


class NeedsInput:
    TRACKING = "tracking"
    QUANTITY = "quantity"


def next_status(status: str) -> Optional[str]:
    index = STATUS_ORDER.index(status)
    return STATUS_ORDER[index + 1] if index + 1 < len(STATUS_ORDER) else None


def previous_status(status: str) -> Optional[str]:
    index = STATUS_ORDER.index(status)
    return STATUS_ORDER[index - 1] if index > 0 else None


def fields_after(status: str) -> Tuple[str, ...]:
    index = STATUS_ORDER.index(status)
    return tuple(f for later in STATUS_ORDER[index + 1:] for f in STATE_FIELDS[later])


def resolve_legacy_status(status: Optional[str], ordered: Optional[bool]) -> str:
    """Status for rows exported before the status column existed."""
    if status:
        if status not in STATUS_ORDER:
            raise BusinessRuleError(f"Unknown order status: {status}", "legacy_status")
        return status
    return Status.ORDERED if ordered else Status.PENDING


@dataclass(frozen=True)
class LedgerEffect:
    """An ADD-mode stock ledger call bound to a transition."""

    item_id: int
    part_category: str
    quantity: int
    source: str
    notes: str
    user_id: Optional[str] = None

    @property
    def is_compensation(self) -> bool:
        return self.quantity < 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "item_id": self.item_id,
            "part_category": self.part_category,
            "quantity": self.quantity,
            "mode": "ADD",
            "source": self.source,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class Transition:
    order_item_id: int
    from_status: str
    to_status: str
    stamp: Dict[str, Any] = field(default_factory=dict)
    clear: Tuple[str, ...] = ()
    ledger_effect: Optional[LedgerEffect] = None
    requires: Optional[str] = None

    @property
    def is_noop(self) -> bool:
        return self.from_status == self.to_status and not self.stamp

    def apply_to(self, item: OrderListItem):
        for name in self.clear:
            setattr(item, name, None)
        for name, value in self.stamp.items():
            setattr(item, name, value)
        item.status = self.to_status

    @property
    def changed_fields(self):
        return ["status", *self.clear, *self.stamp.keys()]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "from_status": self.from_status,
            "to_status": self.to_status,
            "changed": not self.is_noop,
            "requires": self.requires,
            "cleared": list(self.clear),
            "ledger_effect": self.ledger_effect.as_dict() if self.ledger_effect else None,
        }


def _stay(item: OrderListItem, requires: str = None) -> Transition:
    return Transition(item.id, item.status, item.status, requires=requires)


def plan_advance(item: OrderListItem, now) -> Transition:
    target = next_status(item.status)

    if target is None:
        return _stay(item)
    if target == Status.ORDERED:
        return _stay(item, NeedsInput.TRACKING)
    if target == Status.STOCK_ADDED:
        return _stay(item, NeedsInput.QUANTITY)

    stamp_field = STATE_FIELDS[target][0]
    return Transition(item.id, item.status, target, stamp={stamp_field: now})


def plan_mark_ordered(item: OrderListItem, now, user_id: str = None,
                      tracking_number: str = None, tracking_url: str = None) -> Transition:
    if item.status not in (Status.PENDING, Status.ORDERED):
        raise BusinessRuleError(
            f"Cannot mark order item as ordered in {item.status} status", "mark_ordered"
        )
    return Transition(
        item.id, item.status, Status.ORDERED,
        stamp={
            "ordered_at": now,
            "ordered_by": user_id,
            "tracking_number": tracking_number,
            "tracking_url": tracking_url,
        },
        clear=fields_after(Status.ORDERED),
    )


def plan_complete_with_stock(item: OrderListItem, quantity: int, now,
                             user_id: str = None) -> Transition:
    if item.status != Status.RECEIVED:
        raise BusinessRuleError(
            f"Stock can only be added to received items, not {item.status}", "complete_with_stock"
        )
    return Transition(
        item.id, item.status, Status.STOCK_ADDED,
        stamp={
            "stock_added_at": now,
            "stock_added_by": user_id,
            "stock_quantity_added": quantity,
        },
        ledger_effect=LedgerEffect(
            item_id=item.item_id,
            part_category=item.part_category,
            quantity=quantity,
            source=StockTransaction.Source.ORDER_RECEIVED,
            notes=f"Received from order {item.id}",
            user_id=user_id,
        ),
    )


def plan_revert(item: OrderListItem, user_id: str = None) -> Transition:
    target = previous_status(item.status)
    if target is None:
        return _stay(item)

    effect = None
    added = item.stock_quantity_added or 0
    if item.status == Status.STOCK_ADDED and added > 0:
        effect = LedgerEffect(
            item_id=item.item_id,
            part_category=item.part_category,
            quantity=-added,
            source=StockTransaction.Source.MANUAL,
            notes="Reverted from STOCK_ADDED",
            user_id=user_id,
        )

    return Transition(
        item.id, item.status, target,
        clear=fields_after(target),
        ledger_effect=effect,
    )
