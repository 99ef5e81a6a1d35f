"""Monthly revenue summaries over a collection of orders."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import InvalidInput
from .models import MonthlyReportRow, Order
from .totals import ZERO, round_money, to_decimal

MonthKey = Tuple[int, int]


def _calendar_date(value: object) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidInput(f"Expected a date, got {type(value).__name__}.")


def _next_month(key: MonthKey) -> MonthKey:
    year, month = key
    return (year + 1, 1) if month == 12 else (year, month + 1)


def summarize_monthly(
    orders: Iterable[Order],
    start: Optional[date] = None,
    end: Optional[date] = None,
    dense: bool = False,
) -> List[MonthlyReportRow]:
    """Group orders by the calendar month of ``order_date``.

    ``start`` and ``end`` are inclusive bounds on the order date. Revenue is the
    sum of each order's stored ``total_amount``; line items are not consulted.
    Months without orders are omitted unless ``dense`` is set, in which case
    every month from the first to the last bound (or order) gets a row.
    """
    if start is not None:
        start = _calendar_date(start)
    if end is not None:
        end = _calendar_date(end)
    if start is not None and end is not None and start > end:
        raise InvalidInput(f"Report start {start} is after end {end}.")

    counts: Dict[MonthKey, int] = {}
    revenue: Dict[MonthKey, Decimal] = {}
    for order in orders:
        day = _calendar_date(order.order_date)
        if start is not None and day < start:
            continue
        if end is not None and day > end:
            continue
        key = (day.year, day.month)
        counts[key] = counts.get(key, 0) + 1
        revenue[key] = revenue.get(key, ZERO) + to_decimal(order.total_amount, "total_amount")

    if dense:
        first = (start.year, start.month) if start is not None else min(counts, default=None)
        last = (end.year, end.month) if end is not None else max(counts, default=None)
        keys: List[MonthKey] = []
        if first is not None and last is not None:
            key = first
            while key <= last:
                keys.append(key)
                key = _next_month(key)
    else:
        keys = sorted(counts)

    return [
        MonthlyReportRow(
            year=year,
            month=month,
            order_count=counts.get((year, month), 0),
            total_revenue=round_money(revenue.get((year, month), ZERO), "total_revenue"),
        )
        for year, month in keys
    ]
