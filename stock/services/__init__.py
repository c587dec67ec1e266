"""
Stock Services - ledger and reporting business logic

Usage:
    from stock.services import StockLedgerService, DailyReportService, Mode

    # Receive 20 screens for item 10
    StockLedgerService.mutate(10, "SCREEN", 20, Mode.ADD, "MANUAL")

    # Report for a day
    DailyReportService.report("2024-05-01")
"""

# Base utilities
from stock.services.base_service import (
    ServiceError,
    ValidationError,
    NotFoundError,
    BusinessRuleError,
    success_response,
    to_int,
    to_positive_id,
    clean_text,
    parse_date,
    day_window,
    BaseService,
)

# Ledger & reports
from .report_service import DailyReportService
from .ledger_service import StockLedgerService, Mode


__all__ = [
    # Base
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "BusinessRuleError",
    "success_response",
    "to_int",
    "to_positive_id",
    "clean_text",
    "parse_date",
    "day_window",
    "BaseService",

    # Ledger & reports
    "StockLedgerService",
    "DailyReportService",
    "Mode",
]
