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

"""Measure block heights in device pixels with Pillow font metrics."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from ..core.errors import MeasurementError
from .blocks import SUMMARY_TYPES, Block, BlockType
from .columns import Column, column_widths
from .geometry import Geometry
from .spec import TableSpec
from .text import FontSet, wrap_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutMetrics:
    content_width: int
    padding: int
    gap: int
    band_gap: int
    body_line: int
    heading_line: int
    title_line: int
    column_widths: tuple[int, ...]
    signature_height: int
    placeholder_height: int


@dataclass(frozen=True)
class MeasuredBlock:
    block: Block
    height: int
    boundaries: tuple[int, ...] = ()
    wrapped: tuple[tuple[str, ...], ...] = ()
    placeholder: bool = False
    image_size: tuple[int, int] | None = None

    @property
    def index(self) -> int:
        return self.block.index


def layout_metrics(
    geometry: Geometry,
    fonts: FontSet,
    table: TableSpec,
    columns: tuple[Column, ...],
) -> LayoutMetrics:
    return LayoutMetrics(
        content_width=geometry.content_width_px,
        padding=geometry.pt_to_px(table.cell_padding_pt),
        gap=geometry.pt_to_px(table.block_gap_pt),
        band_gap=geometry.pt_to_px(table.band_gap_pt),
        body_line=fonts.line_height(fonts.body),
        heading_line=fonts.line_height(fonts.heading),
        title_line=fonts.line_height(fonts.title),
        column_widths=column_widths(columns, geometry.content_width_px),
        signature_height=geometry.mm_to_px(table.signature_height_mm),
        placeholder_height=geometry.mm_to_px(table.placeholder_height_mm),
    )


class BlockMeasurer:
    def __init__(
        self,
        metrics: LayoutMetrics,
        fonts: FontSet,
        *,
        asset_root: str | Path | None = None,
        document_number: str = "",
    ) -> None:
        self.metrics = metrics
        self.fonts = fonts
        self.asset_root = Path(asset_root) if asset_root else None
        self.document_number = document_number

    def measure(self, block: Block) -> MeasuredBlock:
        try:
            return self._measure(block)
        except MeasurementError as exc:
            logger.warning(
                "document %s: block %d (%s) could not be measured: %s; using placeholder height",
                self.document_number,
                block.index,
                block.type.value,
                exc.message,
            )
            return MeasuredBlock(
                block=block,
                height=self.metrics.placeholder_height,
                placeholder=True,
            )

    def measure_all(self, blocks: Sequence[Block]) -> tuple[MeasuredBlock, ...]:
        return tuple(self.measure(block) for block in blocks)

    def _measure(self, block: Block) -> MeasuredBlock:
        m = self.metrics
        if block.type is BlockType.ROW:
            wrapped = tuple(
                wrap_text(self.fonts.body, cell, width - 2 * m.padding)
                for cell, width in zip(block.cells, m.column_widths)
            )
            line_count = max((len(lines) for lines in wrapped), default=1)
            return MeasuredBlock(
                block=block,
                height=line_count * m.body_line + 2 * m.padding,
                boundaries=_line_boundaries(m.padding, m.body_line, line_count),
                wrapped=wrapped,
            )
        if block.type is BlockType.SECTION_HEADER:
            lines = wrap_text(self.fonts.heading, block.title, m.content_width - 2 * m.padding)
            return MeasuredBlock(
                block=block,
                height=m.gap + len(lines) * m.heading_line + 2 * m.padding,
                wrapped=(lines,),
            )
        if block.type is BlockType.SUBSECTION_HEADER:
            lines = wrap_text(self.fonts.bold, block.title, m.content_width - 2 * m.padding)
            return MeasuredBlock(
                block=block,
                height=len(lines) * m.body_line + 2 * m.padding,
                wrapped=(lines,),
            )
        if block.type in SUMMARY_TYPES:
            count = max(1, len(block.lines))
            top = m.gap if block.type is BlockType.GRAND_TOTAL else 0
            return MeasuredBlock(
                block=block,
                height=top + count * m.body_line + 2 * m.padding,
                boundaries=_line_boundaries(top + m.padding, m.body_line, count),
            )
        if block.type is BlockType.FREE_TEXT:
            text_lines = (
                wrap_text(self.fonts.body, block.text, m.content_width - 2 * m.padding)
                if block.text
                else ()
            )
            count = 1 + len(text_lines) + len(block.lines)
            return MeasuredBlock(
                block=block,
                height=m.band_gap + count * m.body_line + 2 * m.padding,
                boundaries=_line_boundaries(m.band_gap + m.padding, m.body_line, count),
                wrapped=(text_lines,),
            )
        if block.type is BlockType.SIGNATURE_BLOCK:
            return self._measure_signature(block)
        raise MeasurementError(
            f"unsupported block type: {block.type}",
            document_number=self.document_number,
            block_index=block.index,
        )

    def _measure_signature(self, block: Block) -> MeasuredBlock:
        m = self.metrics
        image_size = None
        area = m.signature_height
        if block.image:
            slot_width = m.content_width // max(1, len(block.lines)) - 2 * m.padding
            image_size = self._image_size(block, slot_width)
            area = max(area, image_size[1])
        return MeasuredBlock(
            block=block,
            height=m.band_gap + 2 * m.padding + 2 * m.body_line + area,
            image_size=image_size,
        )

    def _image_size(self, block: Block, max_width: int) -> tuple[int, int]:
        path = resolve_image_path(block.image or "", self.asset_root)
        if not path.is_file():
            raise MeasurementError(
                f"signature image not found: {block.image}",
                document_number=self.document_number,
                block_index=block.index,
            )
        try:
            with Image.open(path) as image:
                width, height = image.size
        except OSError as exc:
            raise MeasurementError(
                f"signature image unreadable: {block.image}",
                document_number=self.document_number,
                block_index=block.index,
            ) from exc
        if width <= 0 or height <= 0:
            raise MeasurementError(
                f"signature image is empty: {block.image}",
                document_number=self.document_number,
                block_index=block.index,
            )
        target_h = self.metrics.signature_height
        target_w = max(1, int(width * target_h / height))
        if target_w > max_width > 0:
            target_h = max(1, int(height * max_width / width))
            target_w = max_width
        return target_w, target_h


def resolve_image_path(reference: str, asset_root: Path | None) -> Path:
    path = Path(reference).expanduser()
    if not path.is_absolute() and asset_root is not None:
        path = asset_root / path
    return path


def _line_boundaries(top: int, line_height: int, count: int) -> tuple[int, ...]:
    return tuple(top + line_height * step for step in range(1, count))


__all__ = [
    "BlockMeasurer",
    "LayoutMetrics",
    "MeasuredBlock",
    "layout_metrics",
    "resolve_image_path",
]
