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

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from PIL import Image

logger = logging.getLogger(__name__)

CUT_WHOLE = "whole"
CUT_BOUNDARY = "boundary"
CUT_FIXED = "fixed"


@dataclass(frozen=True)
class RasterSurface:
    """A rendered page image plus where its content band sits.

    ``boundaries`` are pixel offsets from ``content_top`` at which the content
    may be cut; ``None`` means the renderer did not track them.
    """

    image: Image.Image
    page_number: int
    content_top: int
    content_bottom: int
    boundaries: tuple[int, ...] | None
    block_indices: tuple[int, ...] = ()
    cut_mode: str = CUT_WHOLE

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def content_length(self) -> int:
        return self.content_bottom - self.content_top

    @property
    def footer_height(self) -> int:
        return self.image.height - self.content_bottom


def slice_surface(surface: RasterSurface, page_height: int) -> list[RasterSurface]:
    """Cut a surface taller than ``page_height`` into page-sized slices.

    Cuts land on recorded boundaries; without them (or when no boundary fits a
    window) slicing falls back to fixed windows. Every slice gets copies of
    the source header and footer bands.
    """
    if surface.height <= page_height:
        return [surface]

    window = page_height - surface.content_top - surface.footer_height
    if window <= 0:
        raise ValueError("page height leaves no room for content between chrome bands")

    content_length = surface.content_length
    boundaries = sorted(set(surface.boundaries)) if surface.boundaries is not None else None
    if boundaries is None:
        logger.warning(
            "page %d: no block boundaries recorded; slicing at fixed %dpx windows",
            surface.page_number,
            window,
        )

    cuts: list[tuple[int, int, str]] = []
    start = 0
    while start < content_length:
        limit = start + window
        if limit >= content_length:
            end = content_length
            mode = CUT_FIXED if boundaries is None else CUT_BOUNDARY
        else:
            fitting = [b for b in boundaries or () if start < b <= limit]
            if fitting:
                end = fitting[-1]
                mode = CUT_BOUNDARY
            else:
                end = limit
                mode = CUT_FIXED
                if boundaries is not None:
                    logger.warning(
                        "page %d: no boundary within %dpx of offset %d; cutting at fixed height",
                        surface.page_number,
                        window,
                        start,
                    )
        cuts.append((start, end, mode))
        start = end

    header = surface.image.crop((0, 0, surface.image.width, surface.content_top))
    footer = surface.image.crop(
        (0, surface.content_bottom, surface.image.width, surface.image.height)
    )
    slices: list[RasterSurface] = []
    for start, end, mode in cuts:
        page = Image.new(surface.image.mode, (surface.image.width, page_height), "white")
        page.paste(header, (0, 0))
        content = surface.image.crop(
            (0, surface.content_top + start, surface.image.width, surface.content_top + end)
        )
        page.paste(content, (0, surface.content_top))
        page.paste(footer, (0, page_height - surface.footer_height))
        slice_boundaries = (
            tuple(b - start for b in boundaries if start < b <= end)
            if boundaries is not None
            else None
        )
        slices.append(
            replace(
                surface,
                image=page,
                content_bottom=page_height - surface.footer_height,
                boundaries=slice_boundaries,
                cut_mode=mode,
            )
        )
    return slices


__all__ = [
    "CUT_BOUNDARY",
    "CUT_FIXED",
    "CUT_WHOLE",
    "RasterSurface",
    "slice_surface",
]
