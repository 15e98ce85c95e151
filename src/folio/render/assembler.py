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

"""Concatenate rendered surfaces into one PDF artifact."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path

from fpdf import FPDF
from fpdf.errors import FPDFException

from ..core.errors import OutputError, RenderError
from .geometry import Geometry
from .surface import RasterSurface

logger = logging.getLogger(__name__)

PAGE_LABEL_FONT = "helvetica"
PAGE_LABEL_SIZE_PT = 8
PAGE_LABEL_WIDTH_MM = 40.0


@dataclass(frozen=True)
class Artifact:
    data: bytes
    page_count: int
    page_blocks: tuple[tuple[int, ...], ...] = ()


def assemble(
    surfaces: Sequence[RasterSurface],
    *,
    geometry: Geometry,
    title: str,
    author: str = "",
    created: date | datetime | None = None,
    page_labels: bool = True,
) -> Artifact:
    """Build the PDF; any failure aborts the whole artifact."""
    if not surfaces:
        raise RenderError("no pages to assemble")
    pdf = FPDF(unit="mm", format=(geometry.page_width_mm, geometry.page_height_mm))
    pdf.set_auto_page_break(False)
    pdf.set_margins(0, 0, 0)
    pdf.set_title(title)
    if author:
        pdf.set_author(author)
    pdf.set_creator("folio")
    if created is not None:
        pdf.set_creation_date(_as_datetime(created))

    total = len(surfaces)
    for page_index, surface in enumerate(surfaces):
        try:
            pdf.add_page()
            pdf.image(
                surface.image,
                x=0,
                y=0,
                w=geometry.page_width_mm,
                h=geometry.page_width_mm * surface.image.height / surface.image.width,
            )
            if page_labels:
                _stamp_label(pdf, geometry, f"Page {page_index + 1} / {total}")
        except (FPDFException, OSError, ValueError) as exc:
            raise RenderError(
                f"failed to assemble page: {exc}", page_index=page_index
            ) from exc

    try:
        data = bytes(pdf.output())
    except (FPDFException, OSError, ValueError) as exc:
        raise RenderError(f"failed to write PDF: {exc}") from exc
    logger.debug("assembled %d pages (%d bytes)", total, len(data))
    return Artifact(
        data=data,
        page_count=total,
        page_blocks=tuple(surface.block_indices for surface in surfaces),
    )


def write_artifact(artifact: Artifact, path: str | Path) -> Path:
    """Write via a temporary sibling file so the target is never partial."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
        )
    except OSError as exc:
        raise OutputError(f"unable to write {target}: {exc}") from exc
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(artifact.data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, target)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise OutputError(f"unable to write {target}: {exc}") from exc
    return target


def _stamp_label(pdf: FPDF, geometry: Geometry, label: str) -> None:
    pdf.set_font(PAGE_LABEL_FONT, size=PAGE_LABEL_SIZE_PT)
    pdf.set_text_color(100, 100, 100)
    line_h = PAGE_LABEL_SIZE_PT * 0.3528 * 1.2
    x = geometry.page_width_mm - geometry.margin_mm - PAGE_LABEL_WIDTH_MM
    y = geometry.page_height_mm - geometry.margin_mm - line_h
    pdf.set_xy(x, y)
    pdf.cell(PAGE_LABEL_WIDTH_MM, line_h, label, align="R")


def _as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


__all__ = ["Artifact", "assemble", "write_artifact"]
