from supply_order.http import BaseApiView, handle_service_error
from orders.services import OrderListService, OrderWorkflowService


# ==================== ORDER LIST ====================

class OrderListView(BaseApiView):

    def get(self, request):
        try:
            return self.success(OrderListService.current_list())
        except Exception as e:
            return handle_service_error(e)

    def post(self, request):
        try:
            data = self.get_json_body(request)
            result = OrderListService.add_item(
                item_id=data.get("item_id"),
                part_category=data.get("part_category"),
                quantity=data.get("quantity"),
                user_id=self.get_user_id(request, data),
            )
            return self.success(result, 201)
        except Exception as e:
            return handle_service_error(e)


class OrderListSummaryView(BaseApiView):

    def get(self, request):
        try:
            return self.success(OrderListService.summary())
        except Exception as e:
            return handle_service_error(e)


class OrderListResetView(BaseApiView):

    def post(self, request):
        try:
            return self.success(OrderListService.reset_current_week())
        except Exception as e:
            return handle_service_error(e)


class OrderItemDetailView(BaseApiView):

    def delete(self, request, order_item_id):
        try:
            return self.success(OrderListService.remove_item(order_item_id))
        except Exception as e:
            return handle_service_error(e)


class OrderItemQuantityView(BaseApiView):

    def put(self, request, order_item_id):
        try:
            data = self.get_json_body(request)
            result = OrderListService.update_quantity(order_item_id, data.get("quantity"))
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class OrderItemTrackingView(BaseApiView):

    def put(self, request, order_item_id):
        try:
            data = self.get_json_body(request)
            result = OrderListService.update_tracking(
                order_item_id,
                tracking_number=data.get("tracking_number"),
                tracking_url=data.get("tracking_url"),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


# ==================== WORKFLOW ====================

class OrderItemAdvanceView(BaseApiView):

    def post(self, request, order_item_id):
        try:
            return self.success(OrderWorkflowService.advance(order_item_id))
        except Exception as e:
            return handle_service_error(e)


class OrderItemMarkOrderedView(BaseApiView):

    def post(self, request, order_item_id):
        try:
            data = self.get_json_body(request)
            result = OrderWorkflowService.mark_ordered(
                order_item_id,
                user_id=self.get_user_id(request, data),
                tracking_number=data.get("tracking_number"),
                tracking_url=data.get("tracking_url"),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class OrderItemCompleteView(BaseApiView):

    def post(self, request, order_item_id):
        try:
            data = self.get_json_body(request)
            result = OrderWorkflowService.complete_with_stock(
                order_item_id,
                data.get("quantity"),
                user_id=self.get_user_id(request, data),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class OrderItemRevertView(BaseApiView):

    def post(self, request, order_item_id):
        try:
            data = self.get_json_body(request)
            result = OrderWorkflowService.revert(
                order_item_id, user_id=self.get_user_id(request, data)
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class OrderStatusSummaryView(BaseApiView):

    def get(self, request):
        try:
            result = OrderWorkflowService.status_summary(request.GET.get("week_cycle_id"))
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)
