from django.urls import path
from . import views

app_name = "orders"

urlpatterns = [
    path("list/", views.OrderListView.as_view(), name="list"),
    path("list/summary/", views.OrderListSummaryView.as_view(), name="list-summary"),
    path("list/reset/", views.OrderListResetView.as_view(), name="list-reset"),
    path("status-summary/", views.OrderStatusSummaryView.as_view(), name="status-summary"),

    path("items/<int:order_item_id>/", views.OrderItemDetailView.as_view(), name="item-detail"),
    path("items/<int:order_item_id>/quantity/", views.OrderItemQuantityView.as_view(), name="item-quantity"),
    path("items/<int:order_item_id>/tracking/", views.OrderItemTrackingView.as_view(), name="item-tracking"),
    path("items/<int:order_item_id>/advance/", views.OrderItemAdvanceView.as_view(), name="item-advance"),
    path("items/<int:order_item_id>/mark-ordered/", views.OrderItemMarkOrderedView.as_view(), name="item-mark-ordered"),
    path("items/<int:order_item_id>/complete/", views.OrderItemCompleteView.as_view(), name="item-complete"),
    path("items/<int:order_item_id>/revert/", views.OrderItemRevertView.as_view(), name="item-revert"),
]
