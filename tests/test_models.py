import unittest
from datetime import date, datetime
from decimal import Decimal

from rental_invoice.errors import InvalidInput
from rental_invoice.models import ExportConfig, parse_line_item, parse_order
from tests.helpers import order_payload


class ParseOrderTests(unittest.TestCase):
    def test_parses_full_payload(self) -> None:
        order = parse_order(order_payload(customer_address="Jl. Kaliurang 5", notes="  "))

        self.assertEqual(order.customer_name, "Budi Santoso")
        self.assertEqual(order.order_date, datetime(2026, 1, 15, 9, 30))
        self.assertEqual(order.rental_start_date, date(2026, 1, 16))
        self.assertEqual(order.total_amount, Decimal("900000"))
        self.assertEqual(order.customer_address, "Jl. Kaliurang 5")
        self.assertIsNone(order.notes)
        self.assertEqual(len(order.items), 1)
        self.assertEqual(order.items[0].subtotal, Decimal("900000.00"))

    def test_accepts_nested_order_items_key(self) -> None:
        payload = order_payload()
        payload["order_items"] = payload.pop("items")

        self.assertEqual(len(parse_order(payload).items), 1)

    def test_missing_order_date_defaults_to_now(self) -> None:
        payload = order_payload()
        del payload["order_date"]

        self.assertIsInstance(parse_order(payload).order_date, datetime)

    def test_rejects_rental_end_before_start(self) -> None:
        with self.assertRaises(InvalidInput):
            parse_order(order_payload(rental_start_date="2026-01-20", rental_end_date="2026-01-19"))

    def test_rejects_missing_required_fields(self) -> None:
        for field in ("id", "customer_name", "customer_phone", "rental_start_date"):
            payload = order_payload()
            del payload[field]
            with self.subTest(field=field):
                with self.assertRaises(InvalidInput):
                    parse_order(payload)

    def test_rejects_bad_shapes(self) -> None:
        with self.assertRaises(InvalidInput):
            parse_order(["not", "an", "object"])
        with self.assertRaises(InvalidInput):
            parse_order(order_payload(items="bad"))
        with self.assertRaises(InvalidInput):
            parse_order(order_payload(order_date="not-a-date"))


class ParseLineItemTests(unittest.TestCase):
    def test_quantity_defaults_to_one(self) -> None:
        item = parse_line_item({"car_type": "Innova", "daily_rate": "350000", "days": 2})

        self.assertEqual(item.quantity, 1)
        self.assertEqual(item.subtotal, Decimal("700000.00"))

    def test_rejects_out_of_domain_fields(self) -> None:
        for overrides in ({"daily_rate": -5}, {"days": 0}, {"quantity": 0}, {"car_type": ""}):
            data = {"car_type": "Innova", "daily_rate": 1, "days": 1}
            data.update(overrides)
            with self.subTest(overrides=overrides):
                with self.assertRaises(InvalidInput):
                    parse_line_item(data)


class ExportConfigTests(unittest.TestCase):
    def test_defaults_are_a4_millimetres(self) -> None:
        config = ExportConfig()

        self.assertEqual((config.page_width, config.page_height, config.unit), (210.0, 297.0, "mm"))
        self.assertEqual(config.capture_options.scale, 2.0)

    def test_rejects_invalid_fields(self) -> None:
        for kwargs in (
            {"scale": 0},
            {"page_height": -1},
            {"unit": "px"},
            {"background_color": "white"},
            {"capture_width": 0},
            {"max_pages": 0},
        ):
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(InvalidInput):
                    ExportConfig(**kwargs)


if __name__ == "__main__":
    unittest.main()
