import logging
from typing import Dict, Any, Optional, List

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from stock.models import StockItem, StockTransaction, LOW_STOCK_DISABLED
from stock.services.base_service import (
    BaseService, success_response, ValidationError, NotFoundError,
    to_int, to_positive_id, clean_text, isoformat,
)
from .report_service import DailyReportService

logger = logging.getLogger(__name__)


class Mode:
    ADD = "ADD"
    SET = "SET"

    choices = (ADD, SET)


class StockLedgerService(BaseService):
    """
    Single entry point for changing inventory.

    Every mutation writes the StockItem aggregate and appends a
    StockTransaction in the same database transaction, with the aggregate
    row locked for the duration so concurrent writers on one key queue up.
    """

    model = StockItem

    @classmethod
    def serialize(cls, stock: StockItem) -> Dict[str, Any]:
        return {
            "id": stock.id,
            "uuid": str(stock.uuid),
            "item_id": stock.item_id,
            "part_category": stock.part_category,
            "quantity": stock.quantity,
            "low_stock_threshold": stock.low_stock_threshold,
            "is_low_stock": stock.is_low_stock,
            "notes": stock.notes,
            "tracking_number": stock.tracking_number,
            "last_updated": isoformat(stock.last_updated),
            "updated_by": stock.updated_by,
        }

    @classmethod
    def serialize_transaction(cls, trans: StockTransaction) -> Dict[str, Any]:
        return {
            "id": trans.id,
            "uuid": str(trans.uuid),
            "stock_id": trans.stock_id,
            "item_id": trans.item_id,
            "part_category": trans.part_category,
            "quantity": trans.quantity,
            "quantity_before": trans.quantity_before,
            "quantity_after": trans.quantity_after,
            "transaction_type": trans.transaction_type,
            "source": trans.source,
            "source_display": trans.get_source_display(),
            "tracking_number": trans.tracking_number,
            "notes": trans.notes,
            "created_at": isoformat(trans.created_at),
            "created_by": trans.created_by,
        }

    @classmethod
    def _clean_key(cls, item_id, part_category) -> tuple:
        item_id = to_positive_id(item_id, "item_id")
        part_category = clean_text(part_category)
        if not part_category:
            raise ValidationError("Part category is required", "part_category")
        return item_id, part_category

    @classmethod
    def _lock(cls, item_id: int, part_category: str) -> Optional[StockItem]:
        return cls.model.objects.select_for_update().filter(
            item_id=item_id, part_category=part_category
        ).first()

    @classmethod
    def get_stock(cls, item_id, part_category) -> Optional[StockItem]:
        item_id, part_category = cls._clean_key(item_id, part_category)
        return cls.model.objects.filter(
            item_id=item_id, part_category=part_category
        ).first()

    @classmethod
    @transaction.atomic
    def mutate(cls,
               item_id: int,
               part_category: str,
               quantity: int,
               mode: str = Mode.ADD,
               source: str = StockTransaction.Source.MANUAL,
               low_stock_threshold: int = None,
               notes: str = None,
               user_id: str = None,
               tracking_number: str = None) -> Dict[str, Any]:
        """
        Apply a relative (ADD) or absolute (SET) change to a stock key.

        ``tracking_number=None`` leaves the stored value alone; an empty
        string clears it. ``notes`` and ``low_stock_threshold`` are only
        written when given.
        """
        item_id, part_category = cls._clean_key(item_id, part_category)

        if mode not in Mode.choices:
            raise ValidationError(f"Invalid mode. Valid: {list(Mode.choices)}", "mode")

        valid_sources = [c[0] for c in StockTransaction.Source.choices]
        if source not in valid_sources:
            raise ValidationError(f"Invalid source. Valid: {valid_sources}", "source")

        quantity = to_int(quantity, "quantity", allow_negative=(mode == Mode.ADD))

        if low_stock_threshold is not None:
            low_stock_threshold = to_int(low_stock_threshold, "low_stock_threshold")

        user_id = clean_text(user_id)

        created = False
        stock = cls._lock(item_id, part_category)
        # Stamped under the lock: per key, created_at order is commit order.
        now = timezone.now()

        if stock is None:
            if mode == Mode.ADD and quantity < 0:
                raise NotFoundError("Stock item", f"{item_id}/{part_category}")
            stock = cls._create(
                item_id, part_category, max(0, quantity), now,
                low_stock_threshold, notes, user_id, tracking_number,
            )
            if stock is None:
                # Another writer created the key first; apply as an update.
                stock = cls._lock(item_id, part_category)
                now = timezone.now()
            else:
                created = True

        if created:
            quantity_before = 0
            quantity_after = stock.quantity
            magnitude = quantity_after
            transaction_type = StockTransaction.TransactionType.ADD
        else:
            quantity_before = stock.quantity
            if mode == Mode.SET:
                quantity_after = max(0, quantity)
                magnitude = quantity_after
                transaction_type = StockTransaction.TransactionType.SET
            else:
                quantity_after = max(0, quantity_before + quantity)
                magnitude = abs(quantity)
                transaction_type = (
                    StockTransaction.TransactionType.ADD if quantity >= 0
                    else StockTransaction.TransactionType.SUBTRACT
                )

            stock.quantity = quantity_after
            if low_stock_threshold is not None:
                stock.low_stock_threshold = low_stock_threshold
            if notes is not None:
                stock.notes = notes
            if tracking_number is not None:
                stock.tracking_number = clean_text(tracking_number)
            stock.last_updated = now
            stock.updated_by = user_id
            stock.save(update_fields=[
                "quantity", "low_stock_threshold", "notes",
                "tracking_number", "last_updated", "updated_by",
            ])

        trans = StockTransaction.objects.create(
            stock=stock,
            item_id=item_id,
            part_category=part_category,
            quantity=magnitude,
            quantity_before=quantity_before,
            quantity_after=quantity_after,
            transaction_type=transaction_type,
            source=source,
            tracking_number=clean_text(tracking_number),
            notes=notes or None,
            created_at=now,
            created_by=user_id,
        )

        DailyReportService.invalidate(timezone.localdate(now))

        logger.info(
            "Stock %s #%s %s: %s -> %s (source=%s, txn=%s)",
            transaction_type, item_id, part_category,
            quantity_before, quantity_after, source, trans.id,
        )

        return success_response({
            "stock": cls.serialize(stock),
            "transaction": cls.serialize_transaction(trans),
        }, f"Stock {transaction_type.lower()}: {quantity_before} → {quantity_after}")

    @classmethod
    def _create(cls, item_id, part_category, quantity, now,
                low_stock_threshold, notes, user_id, tracking_number) -> Optional[StockItem]:
        if low_stock_threshold is None:
            low_stock_threshold = getattr(settings, "STOCK_DEFAULT_LOW_STOCK_THRESHOLD", 5)
        stock = cls.model(
            item_id=item_id,
            part_category=part_category,
            quantity=quantity,
            low_stock_threshold=low_stock_threshold,
            notes=notes or None,
            tracking_number=clean_text(tracking_number),
            last_updated=now,
            updated_by=user_id,
        )
        try:
            with transaction.atomic():
                stock.save()
        except IntegrityError:
            logger.info("Stock key #%s %s created concurrently", item_id, part_category)
            return None
        return stock

    @classmethod
    def current_quantity(cls, item_id, part_category) -> Dict[str, Any]:
        stock = cls.get_stock(item_id, part_category)
        return success_response({
            "found": stock is not None,
            "stock": cls.serialize(stock) if stock else None,
        })

    @classmethod
    def history(cls, item_id, part_category, limit: int = None) -> Dict[str, Any]:
        item_id, part_category = cls._clean_key(item_id, part_category)
        queryset = StockTransaction.objects.filter(
            item_id=item_id, part_category=part_category
        ).order_by("-created_at", "-id")
        if limit is not None:
            queryset = queryset[:to_positive_id(limit, "limit")]
        transactions = [cls.serialize_transaction(t) for t in queryset]
        return success_response({
            "transactions": transactions,
            "count": len(transactions),
        })

    @classmethod
    def all_history(cls, limit: int = None) -> Dict[str, Any]:
        queryset = StockTransaction.objects.order_by("-created_at", "-id")
        if limit is not None:
            queryset = queryset[:to_positive_id(limit, "limit")]
        transactions = [cls.serialize_transaction(t) for t in queryset]
        return success_response({
            "transactions": transactions,
            "count": len(transactions),
        })

    @classmethod
    def list_stock(cls, low_stock_only: bool = False) -> Dict[str, Any]:
        if low_stock_only:
            return cls.low_stock_items()
        items = [cls.serialize(s) for s in cls.model.objects.order_by("-last_updated", "-id")]
        return success_response({"items": items, "count": len(items)})

    @classmethod
    def low_stock_items(cls) -> Dict[str, Any]:
        queryset = cls.model.objects.filter(
            low_stock_threshold__lt=LOW_STOCK_DISABLED,
            quantity__lte=F("low_stock_threshold"),
        ).order_by("quantity", "item_id")
        items = [cls.serialize(s) for s in queryset]
        return success_response({"items": items, "count": len(items)})

    @classmethod
    def stock_summary(cls) -> Dict[str, Any]:
        stocks = list(cls.model.objects.all())
        return success_response({
            "total_items": len(stocks),
            "low_stock_count": sum(1 for s in stocks if s.is_low_stock and s.quantity > 0),
            "out_of_stock_count": sum(1 for s in stocks if s.quantity == 0),
        })

    @classmethod
    def latest_arrivals(cls, limit: int = 5) -> Dict[str, Any]:
        limit = to_positive_id(limit, "limit")
        items = [cls.serialize(s) for s in cls.model.objects.order_by("-last_updated", "-id")[:limit]]
        return success_response({"items": items, "count": len(items)})

    # ==================== LEDGER INTEGRITY ====================

    @classmethod
    def replay(cls, item_id, part_category) -> Optional[int]:
        """Fold a key's transactions oldest-first; None if the key has none."""
        item_id, part_category = cls._clean_key(item_id, part_category)
        running = None
        for quantity_after in StockTransaction.objects.filter(
            item_id=item_id, part_category=part_category
        ).order_by("created_at", "id").values_list("quantity_after", flat=True):
            running = quantity_after
        return running

    @classmethod
    def verify_ledger(cls) -> List[Dict[str, Any]]:
        drift = []
        for stock in cls.model.objects.order_by("item_id", "part_category"):
            replayed = cls.replay(stock.item_id, stock.part_category)
            if replayed != stock.quantity:
                drift.append({
                    "item_id": stock.item_id,
                    "part_category": stock.part_category,
                    "quantity": stock.quantity,
                    "replayed_quantity": replayed,
                })
        return drift
