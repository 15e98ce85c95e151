# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

import unittest
from datetime import date
from decimal import Decimal

from folio.core.dates import format_date, optional_date, parse_date
from folio.core.money import (
    format_money,
    format_quantity,
    optional_amount,
    parse_amount,
    quantize_money,
    resolve_currency,
    sum_money,
)


class TestMoney(unittest.TestCase):
    def test_parse_amount_accepts_numeric_inputs(self) -> None:
        cases = (
            (10, Decimal("10")),
            (0.1, Decimal("0.1")),
            ("1,234.50", Decimal("1234.50")),
            (" 7 ", Decimal("7")),
            (Decimal("2.005"), Decimal("2.005")),
        )
        for value, expected in cases:
            with self.subTest(value=value):
                self.assertEqual(parse_amount(value), expected)

    def test_parse_amount_rejects_non_numeric(self) -> None:
        for value in (None, True, "", "abc", "NaN", "Infinity", [1]):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    parse_amount(value, label="price")

    def test_optional_amount_blank_is_none(self) -> None:
        self.assertIsNone(optional_amount(None))
        self.assertIsNone(optional_amount("  "))
        self.assertEqual(optional_amount("3"), Decimal("3"))

    def test_quantize_is_round_half_even(self) -> None:
        self.assertEqual(quantize_money(Decimal("2.125")), Decimal("2.12"))
        self.assertEqual(quantize_money(Decimal("2.135")), Decimal("2.14"))

    def test_sum_money_rounds_once(self) -> None:
        values = [Decimal("0.005")] * 3
        self.assertEqual(sum_money(values), Decimal("0.02"))
        self.assertEqual(sum_money([]), Decimal("0.00"))

    def test_format_money(self) -> None:
        self.assertEqual(format_money(Decimal("1234.5"), "USD"), "$1,234.50")
        self.assertEqual(format_money(Decimal("-12"), "USD"), "-$12.00")
        self.assertEqual(format_money(Decimal("99"), "KES"), "KES 99.00")
        self.assertEqual(format_money(Decimal("1"), "chf"), "CHF 1.00")

    def test_resolve_currency_defaults(self) -> None:
        self.assertEqual(resolve_currency(None).code, "KES")
        self.assertEqual(resolve_currency("eur").symbol, "€")

    def test_quantity_and_percent_formatting(self) -> None:
        self.assertEqual(format_quantity(Decimal("2.500")), "2.5")
        self.assertEqual(format_quantity(Decimal("3")), "3")
        self.assertEqual(format_quantity(Decimal("0.0004")), "0")


class TestDates(unittest.TestCase):
    def test_parse_date_variants(self) -> None:
        self.assertEqual(parse_date("2025-01-15"), date(2025, 1, 15))
        self.assertEqual(parse_date("2025-01-15T10:30:00Z"), date(2025, 1, 15))
        self.assertEqual(parse_date(date(2024, 2, 29)), date(2024, 2, 29))

    def test_parse_date_rejects_garbage(self) -> None:
        for value in (None, "", "15/01/2025", 20250115):
            with self.subTest(value=value):
                with self.assertRaisesRegex(ValueError, "due_date"):
                    parse_date(value, label="due_date")

    def test_optional_date(self) -> None:
        self.assertIsNone(optional_date(""))
        self.assertIsNone(optional_date(None))
        self.assertEqual(optional_date("2025-12-01"), date(2025, 12, 1))

    def test_format_date_is_locale_independent(self) -> None:
        self.assertEqual(format_date(date(2025, 1, 5)), "05 Jan 2025")
        self.assertEqual(format_date(None), "")


if __name__ == "__main__":
    unittest.main()
