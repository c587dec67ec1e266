from django.urls import path
from . import views

app_name = "stock"

urlpatterns = [
    path("items/", views.StockListView.as_view(), name="item-list"),
    path("items/low-stock/", views.LowStockView.as_view(), name="low-stock"),
    path("items/summary/", views.StockSummaryView.as_view(), name="summary"),
    path("items/latest/", views.LatestArrivalsView.as_view(), name="latest"),
    path("items/<int:item_id>/<str:part_category>/", views.StockDetailView.as_view(), name="item-detail"),

    path("mutate/", views.StockMutateView.as_view(), name="mutate"),

    path("transactions/", views.TransactionListView.as_view(), name="transaction-list"),
    path("transactions/<int:item_id>/<str:part_category>/", views.TransactionHistoryView.as_view(), name="transaction-history"),
    path("ledger/verify/", views.LedgerVerifyView.as_view(), name="ledger-verify"),

    path("reports/dates/", views.ReportDatesView.as_view(), name="report-dates"),
    path("reports/<str:report_date>/", views.DailyReportView.as_view(), name="report"),
    path("reports/<str:report_date>/rebuild/", views.DailyReportRebuildView.as_view(), name="report-rebuild"),
]
