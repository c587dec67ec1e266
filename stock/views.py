from supply_order.http import BaseApiView, handle_service_error
from stock.services import StockLedgerService, DailyReportService


def _truthy(value) -> bool:
    return str(value).lower() in ("1", "true", "yes")


# ==================== STOCK ====================

class StockListView(BaseApiView):

    def get(self, request):
        try:
            low_stock_only = _truthy(request.GET.get("low_stock", "false"))
            result = StockLedgerService.list_stock(low_stock_only=low_stock_only)
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class LowStockView(BaseApiView):

    def get(self, request):
        try:
            return self.success(StockLedgerService.low_stock_items())
        except Exception as e:
            return handle_service_error(e)


class StockSummaryView(BaseApiView):

    def get(self, request):
        try:
            return self.success(StockLedgerService.stock_summary())
        except Exception as e:
            return handle_service_error(e)


class LatestArrivalsView(BaseApiView):

    def get(self, request):
        try:
            result = StockLedgerService.latest_arrivals(request.GET.get("limit", 5))
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class StockDetailView(BaseApiView):

    def get(self, request, item_id, part_category):
        try:
            result = StockLedgerService.current_quantity(item_id, part_category)
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class StockMutateView(BaseApiView):

    def post(self, request):
        try:
            data = self.get_json_body(request)
            result = StockLedgerService.mutate(
                item_id=data.get("item_id"),
                part_category=data.get("part_category"),
                quantity=data.get("quantity"),
                mode=data.get("mode", "ADD"),
                source=data.get("source", "MANUAL"),
                low_stock_threshold=data.get("low_stock_threshold"),
                notes=data.get("notes"),
                user_id=self.get_user_id(request, data),
                tracking_number=data.get("tracking_number"),
            )
            return self.success(result, 201)
        except Exception as e:
            return handle_service_error(e)


# ==================== HISTORY ====================

class TransactionListView(BaseApiView):

    def get(self, request):
        try:
            result = StockLedgerService.all_history(request.GET.get("limit"))
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class TransactionHistoryView(BaseApiView):

    def get(self, request, item_id, part_category):
        try:
            result = StockLedgerService.history(
                item_id, part_category, request.GET.get("limit")
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class LedgerVerifyView(BaseApiView):

    def get(self, request):
        try:
            drift = StockLedgerService.verify_ledger()
            return self.success({"consistent": not drift, "drift": drift})
        except Exception as e:
            return handle_service_error(e)


# ==================== REPORTS ====================

class ReportDatesView(BaseApiView):

    def get(self, request):
        try:
            dates = DailyReportService.available_dates(request.GET.get("limit", 30))
            return self.success({"dates": dates, "count": len(dates)})
        except Exception as e:
            return handle_service_error(e)


class DailyReportView(BaseApiView):

    def get(self, request, report_date):
        try:
            return self.success({"report": DailyReportService.report(report_date)})
        except Exception as e:
            return handle_service_error(e)


class DailyReportRebuildView(BaseApiView):

    def post(self, request, report_date):
        try:
            return self.success({"summary": DailyReportService.rebuild(report_date)})
        except Exception as e:
            return handle_service_error(e)
