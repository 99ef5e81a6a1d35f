import unittest
from datetime import date, datetime
from decimal import Decimal

from rental_invoice.errors import InvalidInput
from rental_invoice.models import MonthlyReportRow
from rental_invoice.reports import summarize_monthly
from tests.helpers import make_item, make_order


def order_on(day: date, total: str, **overrides) -> object:
    return make_order(order_date=day, total_amount=Decimal(total), **overrides)


class MonthlyReportTests(unittest.TestCase):
    def setUp(self) -> None:
        self.orders = [
            order_on(datetime(2026, 1, 3, 10, 0), "500000"),
            order_on(date(2026, 2, 11), "700000"),
            order_on(datetime(2026, 1, 28, 23, 59), "300000"),
        ]

    def test_groups_by_month_and_sums_stored_totals(self) -> None:
        rows = summarize_monthly(self.orders)

        self.assertEqual(
            rows,
            [
                MonthlyReportRow(year=2026, month=1, order_count=2, total_revenue=Decimal("800000.00")),
                MonthlyReportRow(year=2026, month=2, order_count=1, total_revenue=Decimal("700000.00")),
            ],
        )

    def test_orders_rows_chronologically_across_years(self) -> None:
        orders = [order_on(date(2026, 1, 5), "1"), order_on(date(2025, 12, 31), "2")]

        rows = summarize_monthly(orders)

        self.assertEqual([(row.year, row.month) for row in rows], [(2025, 12), (2026, 1)])

    def test_uses_stored_total_not_line_items(self) -> None:
        order = order_on(date(2026, 3, 1), "10", items=(make_item(),))

        rows = summarize_monthly([order])

        self.assertEqual(rows[0].total_revenue, Decimal("10.00"))

    def test_range_bounds_are_inclusive(self) -> None:
        rows = summarize_monthly(self.orders, start=date(2026, 1, 28), end=date(2026, 2, 11))

        self.assertEqual(
            [(row.month, row.order_count, row.total_revenue) for row in rows],
            [(1, 1, Decimal("300000.00")), (2, 1, Decimal("700000.00"))],
        )

    def test_sparse_by_default_and_dense_on_request(self) -> None:
        orders = [order_on(date(2026, 1, 5), "100"), order_on(date(2026, 4, 5), "200")]

        self.assertEqual(len(summarize_monthly(orders)), 2)

        dense = summarize_monthly(orders, dense=True)
        self.assertEqual([row.month for row in dense], [1, 2, 3, 4])
        self.assertEqual(dense[1], MonthlyReportRow(2026, 2, 0, Decimal("0.00")))

    def test_dense_fill_spans_the_requested_range(self) -> None:
        rows = summarize_monthly(
            [order_on(date(2026, 1, 5), "100")],
            start=date(2025, 11, 1),
            end=date(2026, 2, 28),
            dense=True,
        )

        self.assertEqual(
            [(row.year, row.month, row.order_count) for row in rows],
            [(2025, 11, 0), (2025, 12, 0), (2026, 1, 1), (2026, 2, 0)],
        )

    def test_empty_input_yields_no_rows(self) -> None:
        self.assertEqual(summarize_monthly([]), [])
        self.assertEqual(summarize_monthly([], dense=True), [])

    def test_rejects_inverted_range(self) -> None:
        with self.assertRaises(InvalidInput):
            summarize_monthly(self.orders, start=date(2026, 2, 1), end=date(2026, 1, 1))

    def test_datetime_bounds_compare_by_calendar_date(self) -> None:
        rows = summarize_monthly(self.orders, start=datetime(2026, 1, 28, 12, 0), end=datetime(2026, 2, 11, 8, 0))

        self.assertEqual([(row.month, row.order_count) for row in rows], [(1, 1), (2, 1)])

    def test_rejects_inverted_range_mixing_date_and_datetime(self) -> None:
        with self.assertRaises(InvalidInput):
            summarize_monthly(self.orders, start=datetime(2026, 2, 1, 9, 0), end=date(2026, 1, 1))

    def test_does_not_mutate_input(self) -> None:
        before = list(self.orders)
        summarize_monthly(self.orders, dense=True)
        self.assertEqual(self.orders, before)


if __name__ == "__main__":
    unittest.main()
