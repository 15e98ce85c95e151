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

import io
import unittest
from unittest import mock

from PIL import Image
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from folio.core.errors import RenderError, RenderTimeoutError
from folio.documents import build
from folio.render.browser import CSS_DPI, BrowserRenderer
from folio.render.chrome import footer_text
from folio.render.geometry import MM_PER_INCH
from folio.render.service import make_renderer, prepare
from folio.render.surface import CUT_BOUNDARY, slice_surface
from tests.test_support import (
    flat_invoice_record,
    make_config,
    make_item,
    playwright_ready,
    sectioned_record,
    tall_description,
)


def _browser(record, kind, *, dpi=72):
    config = make_config(backend="browser", dpi=dpi)
    prepared = prepare(build(record, kind), config)
    renderer = make_renderer(prepared, config)
    return prepared, renderer


def _css_png(renderer: BrowserRenderer, height: int) -> bytes:
    width = int(round(renderer.geometry.page_width_mm / MM_PER_INCH * CSS_DPI))
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), "white").save(buffer, format="PNG")
    return buffer.getvalue()


class TestBrowserMarkup(unittest.TestCase):
    def test_make_renderer_selects_browser(self) -> None:
        _prepared, renderer = _browser(flat_invoice_record(2), "flat-invoice")
        self.assertIsInstance(renderer, BrowserRenderer)
        self.assertEqual(renderer.name, "browser")

    def test_scale_follows_dpi(self) -> None:
        _prepared, renderer = _browser(flat_invoice_record(1), "flat-invoice", dpi=192)
        self.assertAlmostEqual(renderer.scale, 2.0)

    def test_page_html_tags_every_block(self) -> None:
        prepared, renderer = _browser(sectioned_record(2, 3), "quotation")
        page = prepared.plan.pages[0]
        html = renderer.page_html(page)

        for index in page.block_indices:
            self.assertIn(f'data-block="{index}"', html)
        self.assertIn(footer_text(prepared.doc, prepared.policy), html)
        self.assertIn('id="content"', html)
        self.assertIn("QUOTATION", html)

    def test_page_html_escapes_record_text(self) -> None:
        record = flat_invoice_record(0)
        record["items"] = [make_item("<b>Bolts & nuts</b>")]
        prepared, renderer = _browser(record, "flat-invoice")
        html = renderer.page_html(prepared.plan.pages[0])

        self.assertIn("&lt;b&gt;Bolts &amp; nuts&lt;/b&gt;", html)
        self.assertNotIn("<b>Bolts", html)

    def test_overflowed_blocks_are_marked_for_line_tracking(self) -> None:
        record = flat_invoice_record(0)
        record["items"] = [make_item(tall_description(200), quantity=1, unit_price="1")]
        prepared, renderer = _browser(record, "flat-invoice")
        overflow_page = next(page for page in prepared.plan.pages if page.has_overflow)
        tall = next(p for p in overflow_page.placements if p.overflowed)

        html = renderer.page_html(overflow_page)
        self.assertIn(f'data-block="{tall.block.index}" data-overflow', html)

        plain, plain_renderer = _browser(flat_invoice_record(2), "flat-invoice")
        self.assertNotIn("data-overflow", plain_renderer.page_html(plain.plan.pages[0]))


class TestBrowserCapture(unittest.TestCase):
    def _with_fake_page(self, renderer: BrowserRenderer) -> mock.MagicMock:
        fake = mock.MagicMock()
        renderer._page = fake
        return fake

    def test_capture_maps_layout_to_device_pixels(self) -> None:
        prepared, renderer = _browser(flat_invoice_record(3), "flat-invoice")
        page = prepared.plan.pages[0]
        fake = self._with_fake_page(renderer)
        fake.screenshot.return_value = _css_png(renderer, 1123)
        fake.evaluate.return_value = {
            "contentTop": 200.0,
            "contentBottom": 1000.0,
            "boundaries": [40.0, 80.0, 120.0],
        }

        surface = renderer.render(page)

        fake.set_content.assert_called_once()
        self.assertEqual(surface.image.width, renderer.geometry.page_width_px)
        self.assertEqual(surface.page_number, 1)
        self.assertEqual(surface.block_indices, page.block_indices)
        self.assertAlmostEqual(surface.content_top, 150, delta=1)
        self.assertAlmostEqual(surface.content_bottom, 750, delta=1)
        self.assertEqual(len(surface.boundaries), 3)
        self.assertEqual(list(surface.boundaries), sorted(surface.boundaries))

    def test_line_boundaries_let_tall_rows_slice_between_lines(self) -> None:
        record = flat_invoice_record(0)
        record["items"] = [make_item(tall_description(200), quantity=1, unit_price="1")]
        prepared, renderer = _browser(record, "flat-invoice")
        overflow_page = next(page for page in prepared.plan.pages if page.has_overflow)
        fake = self._with_fake_page(renderer)
        fake.screenshot.return_value = _css_png(renderer, 4300)
        fake.evaluate.return_value = {
            "contentTop": 200.0,
            "contentBottom": 4200.0,
            "boundaries": [20.0 * (line + 1) for line in range(200)],
        }

        surface = renderer.render(overflow_page)
        slices = slice_surface(surface, renderer.geometry.page_height_px)

        self.assertEqual(len(surface.boundaries), 200)
        self.assertEqual(surface.boundaries[-1], surface.content_length)
        self.assertGreater(len(slices), 1)
        self.assertEqual({piece.cut_mode for piece in slices}, {CUT_BOUNDARY})
        for piece in slices:
            self.assertEqual(piece.height, renderer.geometry.page_height_px)

    def test_capture_without_boundaries(self) -> None:
        prepared, renderer = _browser(flat_invoice_record(1), "flat-invoice")
        fake = self._with_fake_page(renderer)
        fake.screenshot.return_value = _css_png(renderer, 1123)
        fake.evaluate.return_value = {"contentTop": 0, "contentBottom": 900, "boundaries": [10]}

        surface = renderer.render(prepared.plan.pages[0], track_boundaries=False)
        self.assertIsNone(surface.boundaries)

    def test_playwright_timeout_becomes_render_timeout(self) -> None:
        prepared, renderer = _browser(flat_invoice_record(1), "flat-invoice")
        fake = self._with_fake_page(renderer)
        fake.set_content.side_effect = PlaywrightTimeoutError("load timed out")

        with self.assertRaises(RenderTimeoutError) as ctx:
            renderer.render(prepared.plan.pages[0])
        self.assertEqual(ctx.exception.page_index, 0)
        self.assertEqual(ctx.exception.document_number, "INV-0001")

    def test_playwright_error_becomes_render_error(self) -> None:
        prepared, renderer = _browser(flat_invoice_record(1), "flat-invoice")
        fake = self._with_fake_page(renderer)
        fake.screenshot.side_effect = PlaywrightError("target closed")

        with self.assertRaises(RenderError) as ctx:
            renderer.render(prepared.plan.pages[0])
        self.assertNotIsInstance(ctx.exception, RenderTimeoutError)
        self.assertIn("target closed", ctx.exception.message)

    def test_close_releases_session(self) -> None:
        _prepared, renderer = _browser(flat_invoice_record(1), "flat-invoice")
        fake = self._with_fake_page(renderer)
        renderer.close()
        fake.close.assert_called_once()
        self.assertIsNone(renderer._page)


@unittest.skipUnless(playwright_ready(), "Chromium for Playwright is not installed")
class TestBrowserLive(unittest.TestCase):
    def test_real_capture(self) -> None:
        prepared, renderer = _browser(sectioned_record(2, 3), "quotation")
        with renderer:
            surface = renderer.render(prepared.plan.pages[0])

        self.assertEqual(surface.image.width, renderer.geometry.page_width_px)
        self.assertGreater(surface.content_bottom, surface.content_top)
        self.assertEqual(len(surface.boundaries), len(prepared.plan.pages[0].placements))


if __name__ == "__main__":
    unittest.main()
