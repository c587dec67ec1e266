import pytest
from django.core.cache import cache

from orders.services import OrderListService
from stock.services import StockLedgerService, Mode


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def add_stock(db):
    def _add(item_id=10, part_category="SCREEN", quantity=20, mode=Mode.ADD, **kwargs):
        return StockLedgerService.mutate(item_id, part_category, quantity, mode, **kwargs)
    return _add


@pytest.fixture
def order_item(db):
    """A PENDING order item for key (10, SCREEN) in the current week."""
    result = OrderListService.add_item(10, "SCREEN", quantity=3, user_id="u1")
    return result["item"]
