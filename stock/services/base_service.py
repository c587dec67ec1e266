from typing import Dict, Any, Optional, Tuple
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from django.db.models import Model
from django.utils import timezone


class ServiceError(Exception):
    def __init__(self, message: str, code: str = "ERROR", details: Dict = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ValidationError(ServiceError):
    def __init__(self, message: str, field: str = None, details: Dict = None):
        super().__init__(message, "VALIDATION_ERROR", details)
        self.field = field


class NotFoundError(ServiceError):
    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            f"{resource} not found: {identifier}",
            "NOT_FOUND",
            {"resource": resource, "identifier": str(identifier)}
        )


class BusinessRuleError(ServiceError):
    def __init__(self, message: str, rule: str = None):
        super().__init__(message, "BUSINESS_RULE_VIOLATION", {"rule": rule})


def success_response(data: Any = None, message: str = "Success") -> Dict:
    response = {"success": True, "message": message}
    if data is not None:
        if isinstance(data, dict):
            response.update(data)
        else:
            response["data"] = data
    return response


def to_int(value: Any, field: str, allow_negative: bool = False) -> int:
    """Coerce a whole-number quantity, rejecting bools, fractions and junk."""
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{field} must be a whole number", field)
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a whole number", field)
    if not number.is_finite() or number != number.to_integral_value():
        raise ValidationError(f"{field} must be a whole number", field)
    result = int(number)
    if result < 0 and not allow_negative:
        raise ValidationError(f"{field} cannot be negative", field)
    return result


def to_positive_id(value: Any, field: str) -> int:
    try:
        result = to_int(value, field)
    except ValidationError:
        raise ValidationError(f"Invalid {field}", field)
    if result <= 0:
        raise ValidationError(f"Invalid {field}", field)
    return result


def clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_date(value: Any, field: str = "date") -> date:
    if isinstance(value, datetime):
        return timezone.localtime(value).date() if timezone.is_aware(value) else value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"{field} must be a date in YYYY-MM-DD format", field)


def day_window(day: date) -> Tuple[datetime, datetime]:
    """Inclusive [00:00:00.000000, 23:59:59.999999] bounds of a local calendar day."""
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime.combine(day, time.min), tz)
    end = timezone.make_aware(datetime.combine(day, time.max), tz)
    return start, end


def isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None


class BaseService:
    model = None

    @classmethod
    def get_by_id(cls, id: int) -> Optional[Model]:
        try:
            return cls.model.objects.get(id=id)
        except (cls.model.DoesNotExist, ValueError, TypeError):
            return None

    @classmethod
    def get_or_404(cls, id: int) -> Model:
        obj = cls.get_by_id(id)
        if not obj:
            raise NotFoundError(cls.model._meta.verbose_name.capitalize(), id)
        return obj

    @classmethod
    def get_for_update(cls, id: int) -> Model:
        """Row-locked fetch; must be called inside transaction.atomic."""
        try:
            return cls.model.objects.select_for_update().get(id=id)
        except (cls.model.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(cls.model._meta.verbose_name.capitalize(), id)

    @classmethod
    def exists(cls, id: int) -> bool:
        return cls.model.objects.filter(id=id).exists()
