import uuid as uuid_lib

from django.db import models
from django.utils import timezone


# Thresholds at or above this value switch low-stock alerting off.
LOW_STOCK_DISABLED = 999999


def is_low_stock(quantity: int, threshold: int) -> bool:
    return threshold < LOW_STOCK_DISABLED and quantity <= threshold


class StockItem(models.Model):
    """
    Current quantity per (item, part category).
    Derived from the transaction log: quantity always equals the
    quantity_after of the newest StockTransaction for the key.
    """

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    item_id = models.PositiveIntegerField(db_index=True)
    part_category = models.CharField(max_length=50)
    quantity = models.PositiveIntegerField(default=0)
    low_stock_threshold = models.PositiveIntegerField(default=5)
    notes = models.TextField(null=True, blank=True)
    tracking_number = models.CharField(max_length=100, null=True, blank=True)
    last_updated = models.DateTimeField(default=timezone.now, db_index=True)
    updated_by = models.CharField(max_length=150, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-last_updated"]
        constraints = [
            models.UniqueConstraint(
                fields=["item_id", "part_category"], name="unique_stock_key"
            ),
        ]

    @property
    def is_low_stock(self) -> bool:
        return is_low_stock(self.quantity, self.low_stock_threshold)

    def __str__(self):
        return f"#{self.item_id} {self.part_category}: {self.quantity}"


class StockTransaction(models.Model):
    """Immutable ledger entry. Rows are only ever inserted."""

    class TransactionType(models.TextChoices):
        SET = "SET", "Set"
        ADD = "ADD", "Add"
        SUBTRACT = "SUBTRACT", "Subtract"

    class Source(models.TextChoices):
        QUICK_ADD = "QUICK_ADD", "Quick Add"
        UPDATE_MODAL = "UPDATE_MODAL", "Update"
        BULK_ENTRY = "BULK_ENTRY", "Bulk"
        ORDER_RECEIVED = "ORDER_RECEIVED", "Order"
        MANUAL = "MANUAL", "Manual"

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    stock = models.ForeignKey(
        StockItem, on_delete=models.PROTECT, related_name="transactions"
    )
    item_id = models.PositiveIntegerField()
    part_category = models.CharField(max_length=50)
    quantity = models.PositiveIntegerField()
    quantity_before = models.PositiveIntegerField()
    quantity_after = models.PositiveIntegerField()
    transaction_type = models.CharField(
        max_length=10, choices=TransactionType.choices, db_index=True
    )
    source = models.CharField(
        max_length=20, choices=Source.choices, default=Source.MANUAL, db_index=True
    )
    tracking_number = models.CharField(max_length=100, null=True, blank=True)
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    created_by = models.CharField(max_length=150, null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(
                fields=["item_id", "part_category", "created_at"],
                name="stock_txn_key_created_idx",
            ),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Stock transactions are append-only")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValueError("Stock transactions are append-only")

    @property
    def net_change(self) -> int:
        return self.quantity_after - self.quantity_before

    def __str__(self):
        return (
            f"{self.get_transaction_type_display()} #{self.item_id} {self.part_category}: "
            f"{self.quantity_before} → {self.quantity_after}"
        )


class DailyReportSummary(models.Model):
    """
    Precomputed fold of one local calendar day of StockTransaction rows.
    Dropped whenever a transaction for that day is written.
    """

    report_date = models.DateField(unique=True)
    total_transactions = models.PositiveIntegerField(default=0)
    total_added = models.PositiveIntegerField(default=0)
    total_subtracted = models.PositiveIntegerField(default=0)
    total_set = models.PositiveIntegerField(default=0)
    unique_items = models.PositiveIntegerField(default=0)
    unique_part_categories = models.PositiveIntegerField(default=0)
    by_source = models.JSONField(default=dict, blank=True)
    by_type = models.JSONField(default=dict, blank=True)
    generated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "daily report summaries"
        ordering = ["-report_date"]

    def __str__(self):
        return f"Report {self.report_date.isoformat()}"
