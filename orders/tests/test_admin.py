import pytest
from django.contrib import admin
from django.urls import reverse

from orders.models import OrderListItem, WeekCycle
from orders.services import OrderWorkflowService
from orders.workflow import STATE_FIELDS

pytestmark = pytest.mark.django_db

WORKFLOW_FIELDS = {name for fields in STATE_FIELDS.values() for name in fields}


@pytest.fixture
def item_admin():
    return admin.site._registry[OrderListItem]


class TestOrderListItemAdmin:

    def test_add_form_allows_the_stock_key(self, item_admin, rf):
        readonly = set(item_admin.get_readonly_fields(rf.get("/")))

        assert "status" in readonly
        assert WORKFLOW_FIELDS <= readonly
        assert not {"item_id", "part_category", "quantity"} & readonly

    def test_existing_item_locks_key_and_workflow_fields(self, item_admin, rf, order_item):
        item = OrderListItem.objects.get(pk=order_item["id"])
        readonly = set(item_admin.get_readonly_fields(rf.get("/"), item))

        assert {"item_id", "part_category", "week_cycle", "status"} <= readonly
        assert {"tracking_number", "tracking_url", "ordered_by"} <= readonly
        assert "quantity" not in readonly

    def test_quantity_locked_once_stock_added(self, item_admin, rf, order_item):
        item_id = order_item["id"]
        OrderWorkflowService.mark_ordered(item_id, user_id="u1", tracking_number="TRK-1")
        OrderWorkflowService.advance(item_id)
        OrderWorkflowService.advance(item_id)
        OrderWorkflowService.complete_with_stock(item_id, 3, user_id="u1")

        item = OrderListItem.objects.get(pk=item_id)
        assert item.status == OrderListItem.Status.STOCK_ADDED
        assert "quantity" in item_admin.get_readonly_fields(rf.get("/"), item)

    def test_change_form_ignores_locked_fields(self, admin_client, order_item):
        url = reverse("admin:orders_orderlistitem_change", args=[order_item["id"]])

        response = admin_client.post(url, {
            "quantity": 5,
            "item_id": 99,
            "part_category": "BATTERY",
            "status": OrderListItem.Status.STOCK_ADDED,
            "tracking_number": "FORGED",
            "_save": "Save",
        })

        assert response.status_code == 302
        item = OrderListItem.objects.get(pk=order_item["id"])
        assert item.quantity == 5
        assert (item.item_id, item.part_category) == (10, "SCREEN")
        assert item.status == OrderListItem.Status.PENDING
        assert item.tracking_number is None


class TestWeekCycleAdmin:

    def test_inline_items_are_read_only(self):
        inline = admin.site._registry[WeekCycle].inlines[0]

        assert inline.model is OrderListItem
        assert set(inline.fields) <= set(inline.readonly_fields)
        assert inline.max_num == 0
