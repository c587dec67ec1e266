import json
import logging

from django.db import DatabaseError
from django.http import JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from stock.services import ValidationError, NotFoundError, BusinessRuleError

logger = logging.getLogger(__name__)


def error_response(message: str, code: str = "error", status: int = 400, details: dict = None):
    data = {"success": False, "error": {"code": code, "message": message}}
    if details:
        data["error"]["details"] = details
    return JsonResponse(data, status=status)


def handle_service_error(e: Exception):
    if isinstance(e, ValidationError):
        logger.warning("Rejected request: %s", e.message)
        return error_response(e.message, "validation_error", 400, {"field": e.field})
    elif isinstance(e, NotFoundError):
        logger.warning("Not found: %s", e.message)
        return error_response(e.message, "not_found", 404, e.details)
    elif isinstance(e, BusinessRuleError):
        logger.warning("Business rule violated: %s", e.message)
        return error_response(e.message, "business_rule", 409, e.details)
    elif isinstance(e, DatabaseError):
        logger.exception("Datastore failure")
        return error_response("Datastore unavailable", "dependency_failure", 503)
    else:
        logger.exception("Unhandled error")
        return error_response(str(e), "server_error", 500)


class BaseApiView(View):
    @method_decorator(csrf_exempt)
    def dispatch(self, request, *args, **kwargs):
        return super().dispatch(request, *args, **kwargs)

    def get_json_body(self, request):
        if not request.body:
            return {}
        try:
            data = json.loads(request.body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            raise ValidationError("Request body must be valid JSON", "body")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object", "body")
        return data

    def get_user_id(self, request, data: dict = None):
        if data and data.get("user_id"):
            return data["user_id"]
        if request.user.is_authenticated:
            return request.user.get_username()
        return None

    def success(self, data: dict, status: int = 200):
        return JsonResponse({"success": True, **data}, status=status)
