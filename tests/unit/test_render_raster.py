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

from folio.core.models import DocumentKind
from folio.documents import build
from folio.documents.kinds import policy_for
from folio.render.chrome import footer_text, meta_lines
from folio.render.service import make_renderer, prepare
from folio.render.surface import slice_surface
from tests.test_support import (
    flat_invoice_record,
    make_config,
    make_item,
    sectioned_record,
    tall_description,
)


class TestChrome(unittest.TestCase):
    def test_meta_lines(self) -> None:
        doc = build(flat_invoice_record(1, lpo_number="LPO-5"), "flat-invoice")
        self.assertEqual(
            meta_lines(doc),
            (
                "No: INV-0001",
                "Date: 15 Jan 2025",
                "Due: 14 Feb 2025",
                "LPO: LPO-5",
                "Currency: KES",
            ),
        )

    def test_footer_text(self) -> None:
        doc = build(sectioned_record(1, 1), "quotation")
        self.assertEqual(footer_text(doc, policy_for(doc.kind)), "Acme Builders Ltd | Quotation QT-0042")

    def test_chrome_bands_span_content_width(self) -> None:
        config = make_config()
        prepared = prepare(build(sectioned_record(1, 1), "quotation"), config)
        chrome = prepared.chrome

        self.assertEqual(chrome.header.width, config.geometry.content_width_px)
        self.assertEqual(chrome.footer.width, config.geometry.content_width_px)
        self.assertGreater(chrome.header_height, chrome.column_titles_height)
        self.assertLess(
            chrome.header_height + chrome.footer_height, config.geometry.content_height_px
        )


class TestRasterRenderer(unittest.TestCase):
    def setUp(self) -> None:
        self.config = make_config()
        self.geometry = self.config.geometry

    def test_page_surface_matches_page_size(self) -> None:
        prepared = prepare(build(sectioned_record(2, 3), "quotation"), self.config)
        page = prepared.plan.pages[0]
        with make_renderer(prepared, self.config) as renderer:
            surface = renderer.render(page)

        self.assertEqual(surface.image.size, (self.geometry.page_width_px, self.geometry.page_height_px))
        self.assertEqual(surface.page_number, 1)
        self.assertEqual(surface.block_indices, page.block_indices)
        self.assertEqual(
            surface.content_top, self.geometry.margin_px + prepared.chrome.header_height
        )
        self.assertEqual(len(surface.boundaries), len(page.placements))
        self.assertEqual(surface.boundaries[-1], page.content_height)

    def test_without_boundary_tracking(self) -> None:
        prepared = prepare(build(flat_invoice_record(2), "flat-invoice"), self.config)
        with make_renderer(prepared, self.config) as renderer:
            surface = renderer.render(prepared.plan.pages[0], track_boundaries=False)
        self.assertIsNone(surface.boundaries)

    def test_rendering_is_repeatable(self) -> None:
        prepared = prepare(build(flat_invoice_record(3), "flat-invoice"), self.config)
        page = prepared.plan.pages[0]
        with make_renderer(prepared, self.config) as renderer:
            first = renderer.render(page)
            second = renderer.render(page)
        self.assertEqual(first.image.tobytes(), second.image.tobytes())
        self.assertIsNot(first.image, second.image)

    def test_overflowed_page_draws_tall_surface_with_line_boundaries(self) -> None:
        record = flat_invoice_record(0)
        record["items"] = [make_item(tall_description(200), quantity=1, unit_price="1")]
        prepared = prepare(build(record, "flat-invoice"), self.config)
        overflow_page = next(page for page in prepared.plan.pages if page.has_overflow)
        with make_renderer(prepared, self.config) as renderer:
            surface = renderer.render(overflow_page)

        self.assertGreater(surface.height, self.geometry.page_height_px)
        self.assertGreater(len(surface.boundaries), len(overflow_page.placements))
        self.assertEqual(surface.boundaries[-1], overflow_page.content_height)

    def test_placeholder_page_keeps_full_page_height(self) -> None:
        record = sectioned_record(1, 2, number="BOQ-9", signature_image="missing.png")
        with self.assertLogs("folio.render.measure", level="WARNING"):
            prepared = prepare(build(record, DocumentKind.BILL_OF_QUANTITIES), self.config)
        page = next(page for page in prepared.plan.pages if page.has_overflow)
        with make_renderer(prepared, self.config) as renderer:
            surface = renderer.render(page)
        slices = slice_surface(surface, self.geometry.page_height_px)

        self.assertEqual(surface.height, self.geometry.page_height_px)
        for piece in slices:
            self.assertEqual(piece.height, self.geometry.page_height_px)
        self.assertEqual(
            surface.content_bottom,
            self.geometry.page_height_px - self.geometry.margin_px - prepared.chrome.footer_height,
        )


if __name__ == "__main__":
    unittest.main()
