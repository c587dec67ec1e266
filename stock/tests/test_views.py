import json
from datetime import timedelta

import pytest
from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone

from stock.models import DailyReportSummary, StockTransaction
from stock.services import StockLedgerService

pytestmark = pytest.mark.django_db


def post_json(client, url, data):
    return client.post(url, data=json.dumps(data), content_type="application/json")


class TestMutateView:

    def test_add_then_read(self, client):
        response = post_json(client, reverse("stock:mutate"), {
            "item_id": 10, "part_category": "SCREEN", "quantity": 20,
            "source": "QUICK_ADD", "user_id": "u1",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["transaction"]["source"] == "QUICK_ADD"
        assert body["transaction"]["created_by"] == "u1"

        detail = client.get(reverse("stock:item-detail", args=[10, "SCREEN"]))
        assert detail.json()["stock"]["quantity"] == 20

    def test_validation_error_is_400(self, client):
        response = post_json(client, reverse("stock:mutate"), {
            "item_id": 10, "part_category": "", "quantity": 1,
        })
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        assert error["details"]["field"] == "part_category"

    def test_invalid_json_is_400(self, client):
        response = client.post(
            reverse("stock:mutate"), data="{not json", content_type="application/json"
        )
        assert response.status_code == 400

    def test_missing_key_subtract_is_404(self, client):
        response = post_json(client, reverse("stock:mutate"), {
            "item_id": 10, "part_category": "SCREEN", "quantity": -1,
        })
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    def test_datastore_failure_is_503(self, client, monkeypatch):
        def boom(*args, **kwargs):
            raise DatabaseError("connection lost")

        monkeypatch.setattr(StockLedgerService, "mutate", boom)
        response = post_json(client, reverse("stock:mutate"), {
            "item_id": 10, "part_category": "SCREEN", "quantity": 1,
        })
        assert response.status_code == 503
        assert response.json()["error"]["code"] == "dependency_failure"


class TestReadViews:

    def test_missing_key_is_not_an_error(self, client):
        response = client.get(reverse("stock:item-detail", args=[99, "SCREEN"]))
        assert response.status_code == 200
        assert response.json()["found"] is False

    def test_lists_and_history(self, client, add_stock):
        add_stock(quantity=2)
        add_stock(quantity=-1)

        assert client.get(reverse("stock:item-list")).json()["count"] == 1
        assert client.get(reverse("stock:low-stock")).json()["count"] == 1
        assert client.get(reverse("stock:summary")).json()["total_items"] == 1
        history = client.get(
            reverse("stock:transaction-history", args=[10, "SCREEN"]), {"limit": 1}
        ).json()
        assert history["count"] == 1
        assert history["transactions"][0]["transaction_type"] == "SUBTRACT"
        assert client.get(reverse("stock:transaction-list")).json()["count"] == 2
        assert client.get(reverse("stock:ledger-verify")).json()["consistent"] is True

    def test_report_views(self, client, add_stock):
        add_stock(quantity=2)
        StockTransaction.objects.update(created_at=timezone.now() - timedelta(days=1))

        dates = client.get(reverse("stock:report-dates")).json()["dates"]
        assert dates == [(timezone.localdate() - timedelta(days=1)).isoformat()]

        report = client.get(reverse("stock:report", args=[dates[0]])).json()["report"]
        assert report["summary"]["total_added"] == 2

        rebuilt = client.post(reverse("stock:report-rebuild", args=[dates[0]])).json()
        assert rebuilt["summary"]["total_transactions"] == 1

    def test_rebuilding_today_is_409(self, client, add_stock):
        add_stock(quantity=2)
        today = timezone.localdate().isoformat()

        response = client.post(reverse("stock:report-rebuild", args=[today]))

        assert response.status_code == 409
        assert not DailyReportSummary.objects.exists()

    def test_report_for_quiet_day_is_null(self, client):
        response = client.get(reverse("stock:report", args=["2020-01-01"]))
        assert response.status_code == 200
        assert response.json()["report"] is None

    def test_report_bad_date_is_400(self, client):
        response = client.get(reverse("stock:report", args=["01-01-2020"]))
        assert response.status_code == 400
