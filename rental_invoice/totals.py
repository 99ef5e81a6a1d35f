"""Line item subtotals and order totals.

Totals are always derived from the items; a stored ``total_amount`` is only
ever the output of :func:`order_total`, never an input to it.
"""

from __future__ import annotations

import dataclasses
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Iterable

from .errors import InvalidInput

if TYPE_CHECKING:
    from .models import LineItem, Order

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_money(value: Decimal, field: str = "amount") -> Decimal:
    try:
        return value.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise InvalidInput(f"'{field}' is too large to represent to the cent.") from exc


def to_decimal(value: Any, field: str = "value") -> Decimal:
    """Convert via ``str`` so binary float artifacts never reach the arithmetic."""
    if isinstance(value, bool):
        raise InvalidInput(f"'{field}' must be a number, got a boolean.")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise InvalidInput(f"'{field}' must be a number, got {value!r}.") from exc
    if not result.is_finite():
        raise InvalidInput(f"'{field}' must be finite, got {value!r}.")
    return result


def to_count(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise InvalidInput(f"'{field}' must be an integer, got a boolean.")
    if isinstance(value, int):
        count = value
    else:
        number = to_decimal(value, field)
        if number != number.to_integral_value():
            raise InvalidInput(f"'{field}' must be a whole number, got {value!r}.")
        count = int(number)
    if count < 1:
        raise InvalidInput(f"'{field}' must be at least 1, got {count}.")
    return count


def subtotal(quantity: Any, daily_rate: Any, days: Any) -> Decimal:
    qty = to_count(quantity, "quantity")
    day_count = to_count(days, "days")
    rate = to_decimal(daily_rate, "daily_rate")
    if rate < 0:
        raise InvalidInput(f"'daily_rate' must not be negative, got {rate}.")
    return round_money(rate * qty * day_count, "subtotal")


def order_total(items: Iterable["LineItem"]) -> Decimal:
    total = ZERO
    for item in items:
        total += subtotal(item.quantity, item.daily_rate, item.days)
    return round_money(total, "total_amount")


def total_is_consistent(order: "Order") -> bool:
    return to_decimal(order.total_amount, "total_amount") == order_total(order.items)


def recalculate(order: "Order") -> "Order":
    return dataclasses.replace(order, total_amount=order_total(order.items))


def add_item(order: "Order", item: "LineItem") -> "Order":
    return recalculate(dataclasses.replace(order, items=(*order.items, item)))


def _index_of(order: "Order", item_id: str) -> int:
    for index, item in enumerate(order.items):
        if item.id == item_id:
            return index
    raise KeyError(item_id)


def replace_item(order: "Order", item_id: str, item: "LineItem") -> "Order":
    """Swap the whole item identified by ``item_id``; the identity is preserved."""
    index = _index_of(order, item_id)
    items = list(order.items)
    items[index] = dataclasses.replace(item, id=item_id)
    return recalculate(dataclasses.replace(order, items=tuple(items)))


def remove_item(order: "Order", item_id: str) -> "Order":
    index = _index_of(order, item_id)
    items = order.items[:index] + order.items[index + 1 :]
    return recalculate(dataclasses.replace(order, items=items))
