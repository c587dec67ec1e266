from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from unfold.admin import ModelAdmin, TabularInline
from unfold.decorators import display
from unfold.contrib.filters.admin import (
    RangeDateFilter,
    RangeDateTimeFilter,
    RangeNumericFilter,
)
from .models import StockItem, StockTransaction, DailyReportSummary


class StockTransactionInline(TabularInline):
    model = StockTransaction
    extra = 0
    fields = ('created_at', 'transaction_type', 'source', 'quantity_before', 'quantity_after', 'created_by')
    readonly_fields = fields
    ordering = ('-created_at', '-id')
    max_num = 0
    can_delete = False
    show_change_link = True


@admin.register(StockItem)
class StockItemAdmin(ModelAdmin):
    list_display = ['item_id', 'part_category', 'quantity', 'low_stock_badge',
                    'low_stock_threshold', 'last_updated', 'updated_by']
    list_filter = [
        'part_category',
        ('quantity', RangeNumericFilter),
        ('last_updated', RangeDateTimeFilter),
    ]
    search_fields = ['item_id', 'part_category', 'tracking_number', 'notes']
    list_filter_submit = True
    list_fullwidth = True
    inlines = [StockTransactionInline]
    # Quantities only change through the ledger service
    readonly_fields = ['uuid', 'item_id', 'part_category', 'quantity',
                       'last_updated', 'updated_by', 'created_at']

    fieldsets = (
        (_('Stock Key'), {
            'fields': ('uuid', 'item_id', 'part_category')
        }),
        (_('Quantity'), {
            'fields': ('quantity', 'low_stock_threshold')
        }),
        (_('Details'), {
            'fields': ('notes', 'tracking_number', 'last_updated', 'updated_by', 'created_at')
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @display(description=_("Low stock"), label={True: "danger", False: "success"})
    def low_stock_badge(self, obj):
        return obj.is_low_stock


@admin.register(StockTransaction)
class StockTransactionAdmin(ModelAdmin):
    list_display = ['created_at', 'item_id', 'part_category', 'type_badge', 'quantity',
                    'quantity_before', 'quantity_after', 'source', 'created_by']
    list_filter = [
        'transaction_type',
        'source',
        ('created_at', RangeDateTimeFilter),
    ]
    search_fields = ['item_id', 'part_category', 'tracking_number', 'notes', 'created_by']
    list_filter_submit = True
    list_fullwidth = True
    date_hierarchy = 'created_at'

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @display(description=_("Type"), label={
        StockTransaction.TransactionType.ADD: "success",
        StockTransaction.TransactionType.SUBTRACT: "danger",
        StockTransaction.TransactionType.SET: "info",
    })
    def type_badge(self, obj):
        return obj.transaction_type


@admin.register(DailyReportSummary)
class DailyReportSummaryAdmin(ModelAdmin):
    list_display = ['report_date', 'total_transactions', 'total_added',
                    'total_subtracted', 'total_set', 'unique_items', 'generated_at']
    list_filter = [('report_date', RangeDateFilter)]
    list_filter_submit = True
    readonly_fields = ['report_date', 'total_transactions', 'total_added', 'total_subtracted',
                       'total_set', 'unique_items', 'unique_part_categories',
                       'by_source', 'by_type', 'generated_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
