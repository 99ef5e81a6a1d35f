from datetime import date, datetime
from decimal import Decimal
from typing import Any

from rental_invoice.models import LineItem, Order


def make_item(**overrides: Any) -> LineItem:
    values = {
        "car_type": "Toyota Avanza",
        "quantity": 2,
        "daily_rate": Decimal("150000"),
        "days": 3,
    }
    values.update(overrides)
    return LineItem(**values)


def make_order(**overrides: Any) -> Order:
    values = {
        "id": "3f2a9b7c-41d2-4e5f-9a10-77c1d2e3f4a5",
        "customer_name": "Budi Santoso",
        "customer_phone": "081234567890",
        "order_date": datetime(2026, 1, 15, 9, 30),
        "rental_start_date": date(2026, 1, 16),
        "rental_end_date": date(2026, 1, 19),
        "items": (),
        "total_amount": Decimal("0.00"),
    }
    values.update(overrides)
    return Order(**values)


def order_payload(**overrides: Any) -> dict:
    payload = {
        "id": "3f2a9b7c-41d2-4e5f-9a10-77c1d2e3f4a5",
        "customer_name": "Budi Santoso",
        "customer_phone": "081234567890",
        "order_date": "2026-01-15T09:30:00",
        "rental_start_date": "2026-01-16",
        "rental_end_date": "2026-01-19",
        "total_amount": 900000,
        "items": [
            {"id": "item-1", "car_type": "Toyota Avanza", "quantity": 2, "daily_rate": 150000, "days": 3},
        ],
    }
    payload.update(overrides)
    return payload
