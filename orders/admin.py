from itertools import chain

from django.contrib import admin
from django.utils.translation import gettext_lazy as _
from unfold.admin import ModelAdmin, TabularInline
from unfold.decorators import display
from unfold.contrib.filters.admin import RangeDateFilter, RangeDateTimeFilter
from .models import WeekCycle, OrderListItem
from .workflow import STATE_FIELDS


STATUS_COLORS = {
    OrderListItem.Status.PENDING: "warning",
    OrderListItem.Status.ORDERED: "info",
    OrderListItem.Status.SHIPPING: "info",
    OrderListItem.Status.RECEIVED: "primary",
    OrderListItem.Status.STOCK_ADDED: "success",
}


class OrderListItemInline(TabularInline):
    model = OrderListItem
    extra = 0
    fields = ('item_id', 'part_category', 'quantity', 'status', 'tracking_number')
    readonly_fields = fields
    max_num = 0
    show_change_link = True


@admin.register(WeekCycle)
class WeekCycleAdmin(ModelAdmin):
    list_display = ['id', 'start_date', 'end_date', 'active_badge', 'items_count']
    list_filter = ['is_active', ('start_date', RangeDateFilter)]
    list_filter_submit = True
    readonly_fields = ['created_at']
    inlines = [OrderListItemInline]

    @display(description=_("Active"), label={True: "success", False: "info"})
    def active_badge(self, obj):
        return obj.is_active

    @display(description=_("Items"))
    def items_count(self, obj):
        return obj.items.count()


@admin.register(OrderListItem)
class OrderListItemAdmin(ModelAdmin):
    list_display = ['item_id', 'part_category', 'quantity', 'status_badge',
                    'week_cycle', 'tracking_number', 'added_at']
    list_filter = [
        'status',
        'part_category',
        'week_cycle',
        ('added_at', RangeDateTimeFilter),
    ]
    search_fields = ['item_id', 'part_category', 'tracking_number', 'added_by', 'ordered_by']
    list_filter_submit = True
    list_fullwidth = True
    # Status and the fields each status owns move only through the workflow service
    readonly_fields = ['uuid', 'status', *chain.from_iterable(STATE_FIELDS.values()), 'updated_at']
    # The stock key is fixed once the item exists
    locked_fields = ['item_id', 'part_category', 'week_cycle', 'added_at', 'added_by']

    fieldsets = (
        (_('Item'), {
            'fields': ('uuid', 'item_id', 'part_category', 'quantity', 'week_cycle', 'status')
        }),
        (_('Ordering'), {
            'fields': ('added_at', 'added_by', 'ordered_at', 'ordered_by', 'tracking_number', 'tracking_url')
        }),
        (_('Delivery'), {
            'fields': ('shipping_at', 'received_at', 'stock_added_at', 'stock_added_by', 'stock_quantity_added')
        }),
        (_('Timestamps'), {
            'fields': ('updated_at',)
        }),
    )

    @display(description=_("Status"), label=STATUS_COLORS)
    def status_badge(self, obj):
        return obj.status

    def get_readonly_fields(self, request, obj=None):
        readonly = list(self.readonly_fields)
        if obj is not None:
            readonly += self.locked_fields
            if obj.status == OrderListItem.Status.STOCK_ADDED:
                readonly.append('quantity')
        return readonly
