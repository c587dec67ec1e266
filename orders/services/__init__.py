"""
Order Services - weekly order list and order item lifecycle

Usage:
    from orders.services import OrderListService, OrderWorkflowService

    item = OrderListService.add_item(10, "SCREEN", quantity=20)["item"]
    OrderWorkflowService.mark_ordered(item["id"], tracking_number="1Z999")
"""

from .order_list_service import OrderListService, WeekCycleService
from .workflow_service import OrderWorkflowService


__all__ = [
    "WeekCycleService",
    "OrderListService",
    "OrderWorkflowService",
]
