#!/usr/bin/env python3
"""
test_coerce.py

Unit tests for timesheets/coerce.py

Tests:
- YYYYMMDD, spreadsheet serial and localized date formats
- Idempotence on ISO dates
- Invalid / blank dates -> None
- Numeric fallbacks (blank, junk, unit suffix, thousands separator, inf)
- String coercion of float-typed integer cells
"""

import unittest
import sys
from datetime import date, datetime
from pathlib import Path

# Add code directory to path
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "code"))

from timesheets.coerce import coerce_date, coerce_number, coerce_string, serial_to_iso


class TestCoerceDate(unittest.TestCase):

    def test_yyyymmdd(self):
        self.assertEqual(coerce_date("20250115"), "2025-01-15")

    def test_yyyymmdd_as_number(self):
        # Readers hand back integer-looking cells as int or float
        self.assertEqual(coerce_date(20250115), "2025-01-15")
        self.assertEqual(coerce_date(20250115.0), "2025-01-15")

    def test_impossible_yyyymmdd_is_none(self):
        self.assertIsNone(coerce_date("20251340"))

    def test_serial_day(self):
        self.assertEqual(coerce_date(45672), "2025-01-15")
        self.assertEqual(coerce_date("45672"), "2025-01-15")
        self.assertEqual(serial_to_iso(25569), "1970-01-01")

    def test_iso_is_idempotent(self):
        once = coerce_date("2025-01-15")
        self.assertEqual(once, "2025-01-15")
        self.assertEqual(coerce_date(once), once)

    def test_localized_formats(self):
        self.assertEqual(coerce_date("2025年1月5日"), "2025-01-05")
        self.assertEqual(coerce_date("2025/1/5"), "2025-01-05")

    def test_datetime_objects(self):
        self.assertEqual(coerce_date(datetime(2025, 1, 15, 9, 30)), "2025-01-15")
        self.assertEqual(coerce_date(date(2025, 1, 15)), "2025-01-15")

    def test_blank_and_garbage(self):
        self.assertIsNone(coerce_date(None))
        self.assertIsNone(coerce_date(float("nan")))
        self.assertIsNone(coerce_date(""))
        self.assertIsNone(coerce_date("   "))
        self.assertIsNone(coerce_date("not a date"))


class TestCoerceNumber(unittest.TestCase):

    def test_numbers_pass_through(self):
        self.assertEqual(coerce_number(7), 7.0)
        self.assertEqual(coerce_number(1.5), 1.5)
        self.assertEqual(coerce_number("8.5"), 8.5)

    def test_blank_and_junk_default_to_zero(self):
        self.assertEqual(coerce_number(None), 0.0)
        self.assertEqual(coerce_number(""), 0.0)
        self.assertEqual(coerce_number(float("nan")), 0.0)
        self.assertEqual(coerce_number("abc"), 0.0)

    def test_non_finite_is_zero(self):
        self.assertEqual(coerce_number(float("inf")), 0.0)
        self.assertEqual(coerce_number("nan"), 0.0)

    def test_unit_suffix_and_separators(self):
        self.assertEqual(coerce_number("8.5h"), 8.5)
        self.assertEqual(coerce_number(" 1,234.5 "), 1234.5)

    def test_negative_is_not_range_checked(self):
        self.assertEqual(coerce_number("-2"), -2.0)


class TestCoerceString(unittest.TestCase):

    def test_blank(self):
        self.assertEqual(coerce_string(None), "")
        self.assertEqual(coerce_string(float("nan")), "")

    def test_integral_float_renders_as_int(self):
        self.assertEqual(coerce_string(211.0), "211")
        self.assertEqual(coerce_string(211), "211")

    def test_trimmed(self):
        self.assertEqual(coerce_string("  ㈲三和工業 "), "㈲三和工業")
        self.assertEqual(coerce_string(1.5), "1.5")


if __name__ == "__main__":
    unittest.main(verbosity=2)
