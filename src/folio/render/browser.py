#!/usr/bin/env python3
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

"""Headless-browser renderer: Jinja2 page markup captured with Playwright."""

from __future__ import annotations

import io
import logging
from pathlib import Path

from PIL import Image
from playwright.sync_api import Browser, Playwright, sync_playwright
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page as BrowserPage
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from ..core.errors import RenderError, RenderTimeoutError
from ..core.models import DocumentModel
from ..documents.kinds import KindPolicy
from .chrome import footer_text, meta_lines
from .columns import Column
from .geometry import MM_PER_INCH, Geometry
from .measure import resolve_image_path
from .planner import Page, Placement
from .spec import TableSpec, TypographySpec
from .surface import CUT_WHOLE, RasterSurface
from .templating import DEFAULT_PAGE_TEMPLATE, image_data_uri, render_template

logger = logging.getLogger(__name__)

CSS_DPI = 96.0

_LAYOUT_SCRIPT = """
() => {
  const content = document.getElementById('content');
  const rect = content.getBoundingClientRect();
  const top = rect.top + window.scrollY;
  const offset = (box) => box.bottom + window.scrollY - top;
  const boundaries = [];
  for (const el of content.querySelectorAll('[data-block]')) {
    const bottom = offset(el.getBoundingClientRect());
    if (el.hasAttribute('data-overflow')) {
      const lines = new Set();
      const walker = document.createTreeWalker(el, NodeFilter.SHOW_TEXT);
      while (walker.nextNode()) {
        const range = document.createRange();
        range.selectNodeContents(walker.currentNode);
        for (const box of range.getClientRects()) {
          const line = offset(box);
          if (box.height > 0 && line < bottom) lines.add(line);
        }
      }
      boundaries.push(...Array.from(lines).sort((a, b) => a - b));
    }
    boundaries.push(bottom);
  }
  return {
    contentTop: top,
    contentBottom: rect.bottom + window.scrollY,
    boundaries: boundaries,
  };
}
"""


class BrowserRenderer:
    """Owns one Chromium session for the lifetime of a single document render.

    Playwright's sync API is bound to the thread that started it, so ``open``,
    ``render`` and ``close`` must all run on the same worker thread.
    """

    name = "browser"

    def __init__(
        self,
        *,
        doc: DocumentModel,
        policy: KindPolicy,
        columns: tuple[Column, ...],
        geometry: Geometry,
        typography: TypographySpec,
        table: TableSpec,
        timeout_seconds: float,
        asset_root: str | Path | None = None,
        template_path: str | Path | None = None,
    ) -> None:
        self.doc = doc
        self.policy = policy
        self.columns = columns
        self.geometry = geometry
        self.typography = typography
        self.table = table
        self.timeout_ms = max(1.0, timeout_seconds * 1000.0)
        self.asset_root = Path(asset_root) if asset_root else None
        self.template_path = Path(template_path) if template_path else DEFAULT_PAGE_TEMPLATE
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._page: BrowserPage | None = None

    @property
    def scale(self) -> float:
        return self.geometry.dpi / CSS_DPI

    def open(self) -> None:
        if self._page is not None:
            return
        css_width = int(round(self.geometry.page_width_mm / MM_PER_INCH * CSS_DPI))
        css_height = int(round(self.geometry.page_height_mm / MM_PER_INCH * CSS_DPI))
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch()
            self._page = self._browser.new_page(
                viewport={"width": css_width, "height": css_height},
                device_scale_factor=self.scale,
            )
        except PlaywrightError as exc:
            self.close()
            raise RenderError(
                f"unable to start headless browser: {exc}",
                document_number=self.doc.metadata.number,
            ) from exc

    def close(self) -> None:
        page, browser, playwright = self._page, self._browser, self._playwright
        self._page = self._browser = self._playwright = None
        if page is not None:
            page.close()
        if browser is not None:
            browser.close()
        if playwright is not None:
            playwright.stop()

    def __enter__(self) -> BrowserRenderer:
        self.open()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def page_html(self, page: Page) -> str:
        return render_template(self.template_path, self._context(page))

    def render(
        self,
        page: Page,
        geometry: Geometry | None = None,
        *,
        track_boundaries: bool = True,
    ) -> RasterSurface:
        geometry = geometry or self.geometry
        self.open()
        browser_page = self._page
        if browser_page is None:
            raise RenderError("browser session is not open", page_index=page.number - 1)
        html = self.page_html(page)
        try:
            browser_page.set_content(html, wait_until="load", timeout=self.timeout_ms)
            layout = browser_page.evaluate(_LAYOUT_SCRIPT)
            png = browser_page.screenshot(full_page=True, type="png", timeout=self.timeout_ms)
        except PlaywrightTimeoutError as exc:
            raise RenderTimeoutError(
                f"browser capture timed out after {self.timeout_ms / 1000.0:g}s",
                document_number=self.doc.metadata.number,
                page_index=page.number - 1,
            ) from exc
        except PlaywrightError as exc:
            raise RenderError(
                f"browser capture failed: {exc}",
                document_number=self.doc.metadata.number,
                page_index=page.number - 1,
            ) from exc

        with Image.open(io.BytesIO(png)) as captured:
            image = captured.convert("RGB")
        if image.width != geometry.page_width_px:
            ratio = geometry.page_width_px / image.width
            image = image.resize((geometry.page_width_px, max(1, int(round(image.height * ratio)))))
        scale = image.width / (geometry.page_width_mm / MM_PER_INCH * CSS_DPI)
        content_top = int(round(layout["contentTop"] * scale))
        content_bottom = min(image.height, int(round(layout["contentBottom"] * scale)))
        boundaries = None
        if track_boundaries:
            boundaries = tuple(sorted({int(round(value * scale)) for value in layout["boundaries"]}))
        logger.debug(
            "page %d captured at %dx%d px", page.number, image.width, image.height
        )
        return RasterSurface(
            image=image,
            page_number=page.number,
            content_top=content_top,
            content_bottom=content_bottom,
            boundaries=boundaries,
            block_indices=page.block_indices,
            cut_mode=CUT_WHOLE,
        )

    def _context(self, page: Page) -> dict[str, object]:
        meta = self.doc.metadata
        weight_sum = sum(column.weight for column in self.columns) or 1.0
        party_lines = [line for line in meta.counterparty.lines() if line]
        if meta.project_title:
            party_lines.append(f"Project: {meta.project_title}")
        return {
            "title": self.policy.title,
            "number": meta.number,
            "issuer_lines": list(meta.issuer.lines()),
            "meta_lines": list(meta_lines(self.doc)),
            "counterparty_label": self.policy.counterparty_label,
            "party_lines": party_lines,
            "footer_text": footer_text(self.doc, self.policy),
            "columns": [
                {
                    "title": column.title,
                    "align": column.align,
                    "percent": round(column.weight * 100.0 / weight_sum, 3),
                }
                for column in self.columns
            ],
            "blocks": [self._block_context(placement) for placement in page.placements],
            "page_width_mm": self.geometry.page_width_mm,
            "page_height_mm": self.geometry.page_height_mm,
            "margin_mm": self.geometry.margin_mm,
            "font_family": "Helvetica, Arial, sans-serif",
            "body_size_pt": self.typography.body_size_pt,
            "heading_size_pt": self.typography.heading_size_pt,
            "title_size_pt": self.typography.title_size_pt,
            "line_spacing": self.typography.line_spacing,
            "padding_pt": self.table.cell_padding_pt,
            "gap_pt": self.table.block_gap_pt,
            "signature_height_mm": self.table.signature_height_mm,
            "placeholder_height_mm": self.table.placeholder_height_mm,
        }

    def _block_context(self, placement: Placement) -> dict[str, object]:
        block = placement.block
        image_uri = None
        if block.image and not placement.measured.placeholder:
            image_uri = image_data_uri(resolve_image_path(block.image, self.asset_root))
        return {
            "index": block.index,
            "type": block.type.value,
            "title": block.title,
            "text": block.text,
            "cells": list(block.cells),
            "lines": [
                {"label": line.label, "value": line.value, "emphasis": line.emphasis}
                for line in block.lines
            ],
            "placeholder": placement.measured.placeholder,
            "overflowed": placement.overflowed,
            "image_uri": image_uri,
        }


__all__ = ["BrowserRenderer"]
