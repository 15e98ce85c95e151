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

from folio.core.errors import ValidationError
from folio.core.models import DocumentKind
from folio.documents import build
from folio.documents.kinds import POLICIES, BreakPolicy, policy_for, resolve_kind
from folio.render.columns import column_widths, columns_for, item_cells
from tests.test_support import flat_invoice_record, make_item, statement_record


class TestKindPolicies(unittest.TestCase):
    def test_every_kind_has_a_policy(self) -> None:
        self.assertEqual(set(POLICIES), set(DocumentKind))

    def test_break_policies(self) -> None:
        self.assertIs(POLICIES[DocumentKind.BILL_OF_QUANTITIES].section_break, BreakPolicy.ALWAYS)
        self.assertIs(POLICIES[DocumentKind.STATEMENT].section_break, BreakPolicy.NEVER)
        self.assertIs(POLICIES[DocumentKind.QUOTATION].section_break, BreakPolicy.PREFERRED)

    def test_resolve_kind_normalizes(self) -> None:
        self.assertIs(resolve_kind("Bill_Of_Quantities"), DocumentKind.BILL_OF_QUANTITIES)
        self.assertIs(resolve_kind(DocumentKind.STATEMENT), DocumentKind.STATEMENT)
        with self.assertRaisesRegex(ValidationError, "expected one of"):
            resolve_kind("receipt")

    def test_policy_for_applies_overrides(self) -> None:
        policy = policy_for("quotation", {DocumentKind.QUOTATION: BreakPolicy.ALWAYS})
        self.assertIs(policy.section_break, BreakPolicy.ALWAYS)
        self.assertIs(POLICIES[DocumentKind.QUOTATION].section_break, BreakPolicy.PREFERRED)
        self.assertIs(policy_for("quotation", {}).section_break, BreakPolicy.PREFERRED)

    def test_signature_block_kinds(self) -> None:
        self.assertTrue(POLICIES[DocumentKind.DELIVERY_NOTE].signature_block)
        self.assertTrue(POLICIES[DocumentKind.BILL_OF_QUANTITIES].signature_block)
        self.assertFalse(POLICIES[DocumentKind.FLAT_INVOICE].signature_block)


class TestColumns(unittest.TestCase):
    def test_optional_columns_dropped_when_unused(self) -> None:
        doc = build(flat_invoice_record(2), "flat-invoice")
        keys = [column.key for column in columns_for(doc, policy_for(doc.kind))]
        self.assertEqual(keys, ["index", "description", "unit", "quantity", "unit_price", "amount"])

    def test_tax_and_discount_columns_when_used(self) -> None:
        record = flat_invoice_record(0)
        record["items"] = [make_item(tax_percentage=16), make_item(discount_amount=5)]
        doc = build(record, "flat-invoice")
        keys = [column.key for column in columns_for(doc, policy_for(doc.kind))]
        self.assertIn("discount", keys)
        self.assertIn("tax", keys)

    def test_delivery_note_has_no_price_columns(self) -> None:
        doc = build(flat_invoice_record(1), "delivery-note")
        keys = [column.key for column in columns_for(doc, policy_for(doc.kind))]
        self.assertEqual(keys, ["index", "description", "unit", "quantity"])

    def test_statement_columns(self) -> None:
        doc = build(statement_record(), "statement")
        keys = [column.key for column in columns_for(doc, policy_for(doc.kind))]
        self.assertEqual(keys, ["date", "reference", "description", "debit", "credit", "balance"])

    def test_column_widths_fill_total(self) -> None:
        doc = build(flat_invoice_record(1), "flat-invoice")
        columns = columns_for(doc, policy_for(doc.kind))
        widths = column_widths(columns, 1001)
        self.assertEqual(sum(widths), 1001)
        self.assertEqual(len(widths), len(columns))
        self.assertEqual(column_widths((), 100), ())

    def test_item_cells_are_preformatted(self) -> None:
        doc = build(flat_invoice_record(1, currency="USD"), "flat-invoice")
        columns = columns_for(doc, policy_for(doc.kind))
        cells = item_cells(doc.sections[0].items[0], 1, columns, "USD")
        self.assertEqual(cells, ("1", "Item 1", "bag", "1", "$100.00", "$100.00"))


if __name__ == "__main__":
    unittest.main()
