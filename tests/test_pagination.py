import math
import unittest

from rental_invoice.errors import InvalidInput
from rental_invoice.pagination import page_count, plan_pages


class PaginationTests(unittest.TestCase):
    def test_short_image_fits_on_one_page(self) -> None:
        placements = plan_pages(794, 1000, 210, 297)

        self.assertEqual(len(placements), 1)
        self.assertEqual(placements[0].page_index, 0)
        self.assertEqual(placements[0].vertical_offset, 0.0)
        self.assertAlmostEqual(placements[0].slice_height, 1000 * 210 / 794)

    def test_a4_capture_spills_onto_second_page(self) -> None:
        placements = plan_pages(794, 2200, 210, 297)

        self.assertEqual([p.page_index for p in placements], [0, 1])
        self.assertEqual([p.vertical_offset for p in placements], [0.0, -297.0])
        for placement in placements:
            self.assertAlmostEqual(placement.slice_height, 581.86, places=2)

    def test_exact_multiple_does_not_add_trailing_page(self) -> None:
        self.assertEqual(len(plan_pages(210, 594, 210, 297)), 2)
        self.assertEqual(len(plan_pages(210, 297, 210, 297)), 1)

    def test_page_count_matches_ceiling_of_scaled_height(self) -> None:
        for height in range(298, 3000, 37):
            with self.subTest(height=height):
                placements = plan_pages(210, height, 210, 297)
                self.assertEqual(len(placements), math.ceil(height / 297))
                self.assertEqual(
                    [p.vertical_offset for p in placements],
                    [-297.0 * index for index in range(len(placements))],
                )

    def test_page_count_helper(self) -> None:
        self.assertEqual(page_count(794, 2200, 210, 297), 2)

    def test_rejects_non_positive_dimensions(self) -> None:
        for args in ((0, 100, 210, 297), (794, 0, 210, 297), (794, 100, -1, 297), (794, 100, 210, 0)):
            with self.subTest(args=args):
                with self.assertRaises(InvalidInput):
                    plan_pages(*args)


if __name__ == "__main__":
    unittest.main()
