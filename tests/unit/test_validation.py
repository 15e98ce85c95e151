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

from folio.core.validation import optional_str, require_list, require_mapping


class TestValidation(unittest.TestCase):
    def test_require_mapping(self) -> None:
        self.assertEqual(require_mapping({"a": 1}, label="record"), {"a": 1})
        with self.assertRaisesRegex(ValueError, "record must be a mapping"):
            require_mapping([("a", 1)], label="record")

    def test_require_list_rejects_strings(self) -> None:
        self.assertEqual(require_list((1, 2), label="items"), [1, 2])
        for value in ("abc", b"abc", None, {"a": 1}):
            with self.subTest(value=value):
                with self.assertRaisesRegex(ValueError, "items must be a list"):
                    require_list(value, label="items")

    def test_optional_str(self) -> None:
        self.assertIsNone(optional_str(None, label="x"))
        self.assertIsNone(optional_str("   ", label="x"))
        self.assertEqual(optional_str("  LPO-9 ", label="x"), "LPO-9")
        self.assertEqual(optional_str(1042, label="x"), "1042")
        with self.assertRaisesRegex(ValueError, "x must be a string"):
            optional_str(True, label="x")
        with self.assertRaisesRegex(ValueError, "x must be a string"):
            optional_str(["a"], label="x")


if __name__ == "__main__":
    unittest.main()
