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

"""Pillow raster compositor: draws planned pages onto a render-scoped canvas."""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image, ImageDraw

from .blocks import SUMMARY_TYPES, BlockType
from .chrome import ChromeTemplate
from .columns import Column
from .geometry import Geometry
from .measure import LayoutMetrics, MeasuredBlock, resolve_image_path
from .planner import Page
from .spec import TableSpec
from .surface import CUT_WHOLE, RasterSurface
from .text import FontSet, aligned_x, text_width

logger = logging.getLogger(__name__)


class RasterRenderer:
    name = "raster"

    def __init__(
        self,
        *,
        geometry: Geometry,
        columns: tuple[Column, ...],
        metrics: LayoutMetrics,
        fonts: FontSet,
        chrome: ChromeTemplate,
        table: TableSpec,
        asset_root: str | Path | None = None,
    ) -> None:
        self.geometry = geometry
        self.columns = columns
        self.metrics = metrics
        self.fonts = fonts
        self.chrome = chrome
        self.table = table
        self.asset_root = Path(asset_root) if asset_root else None
        self._canvas: Image.Image | None = None

    def open(self) -> None:
        if self._canvas is None:
            size = (self.geometry.page_width_px, self.geometry.page_height_px)
            self._canvas = Image.new("RGB", size, "white")

    def close(self) -> None:
        if self._canvas is not None:
            self._canvas.close()
            self._canvas = None

    def __enter__(self) -> RasterRenderer:
        self.open()
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def render(
        self,
        page: Page,
        geometry: Geometry | None = None,
        *,
        track_boundaries: bool = True,
    ) -> RasterSurface:
        geometry = geometry or self.geometry
        self.open()
        margin = geometry.margin_px
        width = geometry.page_width_px
        content_top = margin + self.chrome.header_height
        needed = page.content_height
        page_bottom = geometry.page_height_px - margin - self.chrome.footer_height

        if page.has_overflow or content_top + needed > page_bottom:
            height = max(
                geometry.page_height_px,
                content_top + needed + self.chrome.footer_height + margin,
            )
            canvas = Image.new("RGB", (width, height), "white")
            logger.debug("page %d: drawing on a %dpx tall canvas", page.number, height)
        else:
            height = geometry.page_height_px
            canvas = self._canvas
            canvas.paste("white", (0, 0, width, height))

        draw = ImageDraw.Draw(canvas)
        content_bottom = height - margin - self.chrome.footer_height
        canvas.paste(self.chrome.header, (margin, margin))
        canvas.paste(self.chrome.footer, (margin, content_bottom))

        boundaries: list[int] = []
        y = content_top
        for placement in page.placements:
            self._draw_block(canvas, draw, placement.measured, margin, y)
            offset = y - content_top
            if track_boundaries:
                if placement.overflowed:
                    boundaries.extend(offset + b for b in placement.measured.boundaries)
                boundaries.append(offset + placement.height)
            y += placement.height

        image = canvas.copy() if canvas is self._canvas else canvas
        return RasterSurface(
            image=image,
            page_number=page.number,
            content_top=content_top,
            content_bottom=content_bottom,
            boundaries=tuple(boundaries) if track_boundaries else None,
            block_indices=page.block_indices,
            cut_mode=CUT_WHOLE,
        )

    def _draw_block(
        self,
        canvas: Image.Image,
        draw: ImageDraw.ImageDraw,
        measured: MeasuredBlock,
        left: int,
        top: int,
    ) -> None:
        block = measured.block
        m = self.metrics
        t = self.table
        right = left + m.content_width
        if measured.placeholder:
            draw.rectangle(
                (left, top, right - 1, top + measured.height - 1), outline=t.rule_color
            )
            draw.text(
                (left + m.padding, top + m.padding),
                f"[{block.type.value} unavailable]",
                font=self.fonts.body,
                fill=t.muted_color,
            )
            return

        if block.type is BlockType.ROW:
            x = left
            for column, col_width, lines in zip(self.columns, m.column_widths, measured.wrapped):
                for step, line in enumerate(lines):
                    tx = aligned_x(self.fonts.body, line, x, col_width, column.align, m.padding)
                    ty = top + m.padding + step * m.body_line
                    draw.text((tx, ty), line, font=self.fonts.body, fill=t.text_color)
                x += col_width
            bottom = top + measured.height - 1
            draw.line((left, bottom, right - 1, bottom), fill=t.rule_color, width=1)
            return

        if block.type is BlockType.SECTION_HEADER:
            y = top + m.gap
            draw.rectangle((left, y, right - 1, top + measured.height - 1), fill=t.shade_color)
            y += m.padding
            for line in measured.wrapped[0] if measured.wrapped else (block.title,):
                draw.text((left + m.padding, y), line, font=self.fonts.heading, fill=t.text_color)
                y += m.heading_line
            return

        if block.type is BlockType.SUBSECTION_HEADER:
            y = top + m.padding
            for line in measured.wrapped[0] if measured.wrapped else (block.title,):
                draw.text((left + 2 * m.padding, y), line, font=self.fonts.bold, fill=t.text_color)
                y += m.body_line
            return

        if block.type in SUMMARY_TYPES:
            y = top + m.padding
            if block.type is BlockType.GRAND_TOTAL:
                y += m.gap
                draw.line((left, top + m.gap, right - 1, top + m.gap), fill=t.text_color, width=2)
            label_right = left + (m.content_width * 3) // 4
            for line in block.lines:
                font = self.fonts.bold if line.emphasis else self.fonts.body
                draw.text(
                    (label_right - m.padding - text_width(font, line.label), y),
                    line.label,
                    font=font,
                    fill=t.text_color,
                )
                draw.text(
                    (right - m.padding - text_width(font, line.value), y),
                    line.value,
                    font=font,
                    fill=t.text_color,
                )
                y += m.body_line
            return

        if block.type is BlockType.FREE_TEXT:
            y = top + m.band_gap + m.padding
            draw.text((left + m.padding, y), block.title, font=self.fonts.bold, fill=t.text_color)
            y += m.body_line
            for line in measured.wrapped[0] if measured.wrapped else ():
                draw.text((left + m.padding, y), line, font=self.fonts.body, fill=t.text_color)
                y += m.body_line
            value_right = left + m.content_width // 2
            for line in block.lines:
                font = self.fonts.bold if line.emphasis else self.fonts.body
                draw.text((left + m.padding, y), line.label, font=font, fill=t.text_color)
                draw.text(
                    (value_right - text_width(font, line.value), y),
                    line.value,
                    font=font,
                    fill=t.text_color,
                )
                y += m.body_line
            return

        if block.type is BlockType.SIGNATURE_BLOCK:
            self._draw_signature(canvas, draw, measured, left, top)

    def _draw_signature(
        self,
        canvas: Image.Image,
        draw: ImageDraw.ImageDraw,
        measured: MeasuredBlock,
        left: int,
        top: int,
    ) -> None:
        m = self.metrics
        t = self.table
        block = measured.block
        roles = block.lines or ()
        slot = m.content_width // max(1, len(roles))
        area = measured.height - m.band_gap - 2 * m.padding - 2 * m.body_line
        for position, role in enumerate(roles):
            x = left + position * slot + m.padding
            y = top + m.band_gap + m.padding
            label = f"{block.title.upper()}: ({role.label.upper()})"
            draw.text((x, y), label, font=self.fonts.bold, fill=t.text_color)
            y += m.body_line
            if measured.image_size is not None and block.image:
                path = resolve_image_path(block.image, self.asset_root)
                with Image.open(path) as source:
                    stamp = source.convert("RGB").resize(measured.image_size)
                canvas.paste(stamp, (x, y + area - measured.image_size[1]))
            line_y = y + area - 1
            draw.line((x, line_y, x + slot - 3 * m.padding, line_y), fill=t.text_color, width=1)
            y += area
            draw.text((x, y), "Date: ______________", font=self.fonts.body, fill=t.muted_color)


__all__ = ["RasterRenderer"]
