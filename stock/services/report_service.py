"""
Daily transaction reports.

A report for a local calendar day is read from DailyReportSummary when a
row exists for that day, otherwise the day's transactions are folded on the
fly. The raw transactions are always returned alongside the summary so the
counts can be checked against them.
"""
import logging
from datetime import date, timedelta
from typing import Dict, Any, Iterable, List, Optional

from django.conf import settings
from django.core.cache import cache
from django.db import transaction
from django.utils import timezone

from stock.models import StockTransaction, DailyReportSummary
from stock.services.base_service import (
    BusinessRuleError, parse_date, day_window, to_positive_id, isoformat,
)

logger = logging.getLogger(__name__)

CACHE_PREFIX = "stock:report_dates"

ADD = StockTransaction.TransactionType.ADD
SUBTRACT = StockTransaction.TransactionType.SUBTRACT
SET = StockTransaction.TransactionType.SET


class DailyReportService:

    @classmethod
    def fold(cls, transactions: Iterable[StockTransaction]) -> Dict[str, Any]:
        summary = {
            "total_transactions": 0,
            "total_added": 0,
            "total_subtracted": 0,
            "total_set": 0,
            "unique_items": 0,
            "unique_part_categories": 0,
            "by_source": {},
            "by_type": {},
        }
        items = set()
        part_categories = set()

        for trans in transactions:
            summary["total_transactions"] += 1
            items.add(trans.item_id)
            part_categories.add(trans.part_category)

            source = summary["by_source"].setdefault(
                trans.source, {"count": 0, "added": 0, "subtracted": 0, "set": 0}
            )
            by_type = summary["by_type"].setdefault(
                trans.transaction_type, {"count": 0, "quantity": 0}
            )
            source["count"] += 1
            by_type["count"] += 1
            by_type["quantity"] += trans.quantity

            if trans.transaction_type == ADD:
                summary["total_added"] += trans.quantity
                source["added"] += trans.quantity
            elif trans.transaction_type == SUBTRACT:
                summary["total_subtracted"] += trans.quantity
                source["subtracted"] += trans.quantity
            elif trans.transaction_type == SET:
                summary["total_set"] += 1
                source["set"] += 1

        summary["unique_items"] = len(items)
        summary["unique_part_categories"] = len(part_categories)
        return summary

    @classmethod
    def group_by_item(cls, transactions: Iterable[StockTransaction]) -> List[Dict[str, Any]]:
        groups = {}
        for trans in transactions:
            group = groups.setdefault(trans.item_id, {
                "item_id": trans.item_id,
                "transaction_count": 0,
                "total_added": 0,
                "total_subtracted": 0,
                "total_set": 0,
                "net_change": 0,
                "part_categories": set(),
                "sources": set(),
            })
            group["transaction_count"] += 1
            group["part_categories"].add(trans.part_category)
            group["sources"].add(trans.source)

            if trans.transaction_type == ADD:
                group["total_added"] += trans.quantity
                group["net_change"] += trans.quantity
            elif trans.transaction_type == SUBTRACT:
                group["total_subtracted"] += trans.quantity
                group["net_change"] -= trans.quantity
            else:
                group["total_set"] += 1
                group["net_change"] += trans.net_change

        result = []
        for group in groups.values():
            group["part_categories"] = sorted(group["part_categories"])
            group["sources"] = sorted(group["sources"])
            result.append(group)
        return result

    @classmethod
    def serialize_summary(cls, summary: DailyReportSummary) -> Dict[str, Any]:
        return {
            "total_transactions": summary.total_transactions,
            "total_added": summary.total_added,
            "total_subtracted": summary.total_subtracted,
            "total_set": summary.total_set,
            "unique_items": summary.unique_items,
            "unique_part_categories": summary.unique_part_categories,
            "by_source": summary.by_source,
            "by_type": summary.by_type,
        }

    @classmethod
    def transactions_for(cls, day: date):
        start, end = day_window(day)
        return StockTransaction.objects.filter(
            created_at__gte=start, created_at__lte=end
        ).order_by("-created_at", "-id")

    @classmethod
    def report(cls, day) -> Optional[Dict[str, Any]]:
        """Report for one local day, or None when nothing happened that day."""
        from .ledger_service import StockLedgerService

        day = parse_date(day)
        cached = DailyReportSummary.objects.filter(report_date=day).first()
        transactions = list(cls.transactions_for(day))

        if not transactions:
            return None

        summary = cls.serialize_summary(cached) if cached else cls.fold(transactions)

        return {
            "date": day.isoformat(),
            "summary": summary,
            "from_summary": cached is not None,
            "generated_at": isoformat(cached.generated_at) if cached else None,
            "items": cls.group_by_item(transactions),
            "transactions": [
                StockLedgerService.serialize_transaction(t) for t in transactions
            ],
        }

    @classmethod
    def available_dates(cls, limit: int = 30) -> List[str]:
        limit = to_positive_id(limit, "limit")
        key = f"{CACHE_PREFIX}:{limit}"
        dates = cache.get(key)
        if dates is not None:
            return dates

        factor = getattr(settings, "STOCK_REPORT_DATE_SCAN_FACTOR", 10)
        rows = StockTransaction.objects.order_by("-created_at").values_list(
            "created_at", flat=True
        )[:limit * factor]

        dates = []
        for created_at in rows:
            day = timezone.localdate(created_at).isoformat()
            if day not in dates:
                dates.append(day)
                if len(dates) >= limit:
                    break

        cache.set(key, dates, getattr(settings, "STOCK_REPORT_CACHE_TIMEOUT", 300))
        return dates

    @classmethod
    @transaction.atomic
    def rebuild(cls, day) -> Optional[Dict[str, Any]]:
        """Store the fold of a finished day. The current day is still being written to."""
        day = parse_date(day)
        if day >= timezone.localdate():
            raise BusinessRuleError(
                f"Only past days can be rebuilt, not {day.isoformat()}", "rebuild_open_day"
            )
        transactions = list(cls.transactions_for(day))

        if not transactions:
            DailyReportSummary.objects.filter(report_date=day).delete()
            return None

        folded = cls.fold(transactions)
        summary, _ = DailyReportSummary.objects.update_or_create(
            report_date=day, defaults=folded
        )
        logger.info(
            "Daily report %s rebuilt: %s transactions",
            day.isoformat(), summary.total_transactions,
        )
        return cls.serialize_summary(summary)

    @classmethod
    def rebuild_recent(cls, days: int = 7) -> Dict[str, Optional[Dict[str, Any]]]:
        today = timezone.localdate()
        results = {}
        for offset in range(1, days + 1):
            day = today - timedelta(days=offset)
            results[day.isoformat()] = cls.rebuild(day)
        return results

    @classmethod
    def invalidate(cls, day: date):
        DailyReportSummary.objects.filter(report_date=day).delete()
        cls._clear_cache()

    @staticmethod
    def _clear_cache():
        try:
            cache.delete_pattern(f"{CACHE_PREFIX}:*")
        except AttributeError:
            cache.clear()
