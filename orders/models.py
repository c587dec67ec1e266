import uuid as uuid_lib

from django.db import models
from django.db.models import Q
from django.utils import timezone


class WeekCycle(models.Model):
    id = models.CharField(max_length=10, primary_key=True, help_text="ISO week, e.g. 2024-W01")
    start_date = models.DateField()
    end_date = models.DateField()
    is_active = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-start_date"]
        constraints = [
            models.UniqueConstraint(
                fields=["is_active"],
                condition=Q(is_active=True),
                name="single_active_week_cycle",
            ),
        ]

    def __str__(self):
        return self.id


class OrderListItem(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Need to Order"
        ORDERED = "ORDERED", "Ordered"
        SHIPPING = "SHIPPING", "Shipping"
        RECEIVED = "RECEIVED", "Received"
        STOCK_ADDED = "STOCK_ADDED", "Stock Added"

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    item_id = models.PositiveIntegerField(db_index=True)
    part_category = models.CharField(max_length=50)
    quantity = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.PENDING, db_index=True
    )
    week_cycle = models.ForeignKey(
        WeekCycle, on_delete=models.CASCADE, related_name="items"
    )

    added_at = models.DateTimeField(default=timezone.now)
    added_by = models.CharField(max_length=150, null=True, blank=True)

    # ORDERED
    ordered_at = models.DateTimeField(null=True, blank=True)
    ordered_by = models.CharField(max_length=150, null=True, blank=True)
    tracking_number = models.CharField(max_length=100, null=True, blank=True)
    tracking_url = models.URLField(max_length=500, null=True, blank=True)

    # SHIPPING
    shipping_at = models.DateTimeField(null=True, blank=True)

    # RECEIVED
    received_at = models.DateTimeField(null=True, blank=True)

    # STOCK_ADDED
    stock_added_at = models.DateTimeField(null=True, blank=True)
    stock_added_by = models.CharField(max_length=150, null=True, blank=True)
    stock_quantity_added = models.PositiveIntegerField(null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-added_at"]

    @property
    def is_ordered(self) -> bool:
        return self.status != self.Status.PENDING

    def __str__(self):
        return f"#{self.item_id} {self.part_category} ({self.get_status_display()})"
