"""Value types for orders, reports and export, plus the JSON input layer."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple, Union

from dateutil import parser as dateutil_parser

from .errors import InvalidInput
from .totals import ZERO, subtotal, to_count, to_decimal

PAGE_UNITS = ("pt", "mm", "cm", "in")
HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


@dataclass(frozen=True)
class LineItem:
    car_type: str
    quantity: int
    daily_rate: Decimal
    days: int
    id: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return subtotal(self.quantity, self.daily_rate, self.days)


@dataclass(frozen=True)
class Order:
    id: str
    customer_name: str
    customer_phone: str
    order_date: Union[datetime, date]
    rental_start_date: date
    rental_end_date: date
    items: Tuple[LineItem, ...] = ()
    total_amount: Decimal = ZERO
    customer_address: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class MonthlyReportRow:
    year: int
    month: int
    order_count: int
    total_revenue: Decimal


@dataclass(frozen=True)
class PagePlacement:
    page_index: int
    vertical_offset: float
    slice_height: float


@dataclass(frozen=True)
class CaptureOptions:
    scale: float = 2.0
    use_cors: bool = True
    background_color: str = "#ffffff"


@dataclass(frozen=True)
class CaptureResult:
    width: int
    height: int
    image_data: bytes


@dataclass(frozen=True)
class ExportConfig:
    page_width: float = 210.0
    page_height: float = 297.0
    unit: str = "mm"
    scale: float = 2.0
    use_cors: bool = True
    background_color: str = "#ffffff"
    capture_width: int = 794
    max_pages: Optional[int] = None

    def __post_init__(self) -> None:
        if self.page_width <= 0 or self.page_height <= 0:
            raise InvalidInput("Page dimensions must be positive.")
        if self.unit not in PAGE_UNITS:
            raise InvalidInput(f"Unsupported page unit {self.unit!r}; expected one of {PAGE_UNITS}.")
        if self.scale <= 0:
            raise InvalidInput(f"Capture scale must be positive, got {self.scale}.")
        if self.capture_width <= 0:
            raise InvalidInput(f"Capture width must be positive, got {self.capture_width}.")
        if not HEX_COLOR.match(self.background_color):
            raise InvalidInput(f"Background color must look like '#rrggbb', got {self.background_color!r}.")
        if self.max_pages is not None and self.max_pages < 1:
            raise InvalidInput(f"max_pages must be at least 1, got {self.max_pages}.")

    @property
    def capture_options(self) -> CaptureOptions:
        return CaptureOptions(
            scale=self.scale,
            use_cors=self.use_cors,
            background_color=self.background_color,
        )


@dataclass(frozen=True)
class BusinessInfo:
    """Issuer details printed on the invoice header and payment block."""

    name: str = ""
    address_lines: Tuple[str, ...] = ()
    payment_lines: Tuple[str, ...] = ()


@dataclass
class InvoiceDocument:
    """The document region handed to a renderer; ``style`` is mutable layout state."""

    order: Order
    style: Dict[str, str] = field(default_factory=dict)


def _require_text(data: Dict[str, Any], name: str) -> str:
    value = data.get(name)
    if value is None or not str(value).strip():
        raise InvalidInput(f"'{name}' is required.")
    return str(value).strip()


def _optional_text(data: Dict[str, Any], name: str) -> Optional[str]:
    value = data.get(name)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_datetime(value: Any, name: str) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"'{name}' must be a date string.")
    try:
        return dateutil_parser.parse(value)
    except (ValueError, OverflowError) as exc:
        raise InvalidInput(f"'{name}' is not a valid date: {value!r}.") from exc


def parse_date(value: Any, name: str) -> date:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return parse_datetime(value, name).date()


def parse_line_item(data: Any) -> LineItem:
    if not isinstance(data, dict):
        raise InvalidInput("Each item must be an object.")
    rate = to_decimal(data.get("daily_rate"), "daily_rate")
    if rate < 0:
        raise InvalidInput(f"'daily_rate' must not be negative, got {rate}.")
    return LineItem(
        car_type=_require_text(data, "car_type"),
        quantity=to_count(data.get("quantity", 1), "quantity"),
        daily_rate=rate,
        days=to_count(data.get("days"), "days"),
        id=_optional_text(data, "id"),
    )


def parse_order(data: Any) -> Order:
    if not isinstance(data, dict):
        raise InvalidInput("Order must be an object.")

    raw_items = data.get("items")
    if raw_items is None:
        raw_items = data.get("order_items", [])
    if not isinstance(raw_items, list):
        raise InvalidInput("'items' must be an array.")

    raw_order_date = data.get("order_date")
    if raw_order_date is None:
        order_date: Union[datetime, date] = datetime.now(timezone.utc)
    else:
        order_date = parse_datetime(raw_order_date, "order_date")

    start = parse_date(data.get("rental_start_date"), "rental_start_date")
    end = parse_date(data.get("rental_end_date"), "rental_end_date")
    if end < start:
        raise InvalidInput("'rental_end_date' must not be before 'rental_start_date'.")

    total = to_decimal(data.get("total_amount", 0), "total_amount")
    if total < 0:
        raise InvalidInput("'total_amount' must not be negative.")

    return Order(
        id=_require_text(data, "id"),
        customer_name=_require_text(data, "customer_name"),
        customer_phone=_require_text(data, "customer_phone"),
        order_date=order_date,
        rental_start_date=start,
        rental_end_date=end,
        items=tuple(parse_line_item(item) for item in raw_items),
        total_amount=total,
        customer_address=_optional_text(data, "customer_address"),
        notes=_optional_text(data, "notes"),
    )

