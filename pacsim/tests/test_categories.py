from __future__ import annotations

import unittest

import pandas as pd

from pacsim.helpers.pac.categories import (
    CategoryLabel,
    area_band_labels,
    derive_area_band_column,
    derive_small_holding_column,
    derive_young_farmers_column,
    parse_category_label,
)
from pacsim.helpers.pac.constants import (
    AREA_BAND,
    ELIGIBLE_AREA,
    MISSING_CATEGORY_TEXT,
    SIZE_CLASS,
    SMALL_HOLDING,
    YOUNG_FARMER_PAYMENT,
    YOUNG_FARMERS,
)


class TestParseCategoryLabel(unittest.TestCase):
    def test_ordinal_prefix_is_stripped(self) -> None:
        self.assertEqual(parse_category_label("03 - 20 to < 30 ha"), CategoryLabel("20 to < 30 ha", 3))

    def test_code_prefix_sorts_but_stays_in_text(self) -> None:
        self.assertEqual(parse_category_label("11 Ile-de-France"), CategoryLabel("11 Ile-de-France", 11))

    def test_integer_and_single_digit_codes_sort_numerically(self) -> None:
        self.assertEqual(parse_category_label(2), CategoryLabel("2", 2))
        self.assertEqual(parse_category_label("1 - Micro"), CategoryLabel("1 - Micro", 1))
        labels = [parse_category_label(value) for value in (10, 2, 1, "Overseas")]
        ordered = [label.text for label in sorted(labels, key=lambda label: label.sort_key)]
        self.assertEqual(ordered, ["1", "2", "10", "Overseas"])

    def test_plain_and_missing_labels(self) -> None:
        self.assertEqual(parse_category_label("Dairy"), CategoryLabel("Dairy"))
        self.assertEqual(parse_category_label(None), CategoryLabel(MISSING_CATEGORY_TEXT))
        self.assertEqual(parse_category_label(float("nan")), CategoryLabel(MISSING_CATEGORY_TEXT))

    def test_typed_label_passes_through(self) -> None:
        label = CategoryLabel("Mountain", 4)
        self.assertIs(parse_category_label(label), label)

    def test_sort_key_orders_numeric_before_text(self) -> None:
        labels = [
            parse_category_label(value)
            for value in ("Overseas", "10 - Tenth", "02 - Second", "Alpine")
        ]
        ordered = [label.text for label in sorted(labels, key=lambda label: label.sort_key)]
        self.assertEqual(ordered, ["Second", "Tenth", "Alpine", "Overseas"])


class TestDerivedColumns(unittest.TestCase):
    def test_area_band_labels(self) -> None:
        labels = area_band_labels()
        self.assertEqual(len(labels), 27)
        self.assertEqual(labels[0], CategoryLabel("< 10 ha", 1))
        self.assertEqual(labels[20], CategoryLabel("200 to < 250 ha", 21))
        self.assertEqual(labels[-1], CategoryLabel("≥ 1000 ha", 27))

    def test_area_bands_are_half_open(self) -> None:
        chunk = pd.DataFrame({ELIGIBLE_AREA: [0.0, 9.99, 10.0, 999.0, 1000.0, float("nan")]})
        bands = derive_area_band_column(chunk)[AREA_BAND].tolist()
        self.assertEqual([band.ordinal for band in bands[:5]], [1, 1, 2, 26, 27])
        self.assertEqual(bands[5], CategoryLabel(MISSING_CATEGORY_TEXT))

    def test_small_holding_flag(self) -> None:
        chunk = pd.DataFrame({SIZE_CLASS: ["01 - < 2k", "05 - 15-25k", "06 - 25-50k", None]})
        flags = derive_small_holding_column(chunk)[SMALL_HOLDING].tolist()
        self.assertEqual(flags, [True, True, False, False])

    def test_young_farmers_from_payment(self) -> None:
        chunk = pd.DataFrame({YOUNG_FARMER_PAYMENT: [0.0, 4469.0, 9000.0, float("nan")]})
        counts = derive_young_farmers_column(chunk)[YOUNG_FARMERS].tolist()
        self.assertEqual(counts, [0, 1, 2, 0])


if __name__ == "__main__":
    unittest.main()
