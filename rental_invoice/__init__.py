"""Rental order bookkeeping: totals, monthly reports and paginated invoice export."""

from __future__ import annotations

from .errors import EmptyOrder, ExportFailed, InvalidInput, InvoiceError, InvoiceTooLarge
from .export import export_invoice
from .models import (
    ExportConfig,
    LineItem,
    MonthlyReportRow,
    Order,
    PagePlacement,
    parse_line_item,
    parse_order,
)
from .pagination import plan_pages
from .reports import summarize_monthly
from .totals import order_total, recalculate, subtotal


def run(host: str = "0.0.0.0", port: int = 8080) -> None:
    from .server import run as _run

    _run(host, port)


__all__ = [
    "EmptyOrder",
    "ExportConfig",
    "ExportFailed",
    "InvalidInput",
    "InvoiceError",
    "InvoiceTooLarge",
    "LineItem",
    "MonthlyReportRow",
    "Order",
    "PagePlacement",
    "export_invoice",
    "order_total",
    "parse_line_item",
    "parse_order",
    "plan_pages",
    "recalculate",
    "run",
    "subtotal",
    "summarize_monthly",
]
