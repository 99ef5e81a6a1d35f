"""Exception hierarchy shared by the bookkeeping core and the export pipeline."""

from __future__ import annotations


class InvoiceError(Exception):
    """Base class for every error raised by this package."""


class InvalidInput(InvoiceError, ValueError):
    """Raised when a value falls outside its domain (quantity, days, rate, dates, config)."""


class ExportFailed(InvoiceError):
    """Raised when capture, drawing or saving of an invoice document fails."""


class InvoiceTooLarge(ExportFailed):
    def __init__(self, page_count: int, max_pages: int) -> None:
        super().__init__(f"Invoice would export {page_count} pages; maximum is {max_pages}.")
        self.page_count = page_count
        self.max_pages = max_pages


class EmptyOrder(InvoiceError):
    """Raised by callers whose policy refuses to export an order without items."""
