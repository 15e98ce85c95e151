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

from dataclasses import dataclass

MM_PER_INCH = 25.4
PT_PER_INCH = 72.0

PAPER_SIZES_MM: dict[str, tuple[float, float]] = {
    "A4": (210.0, 297.0),
    "LETTER": (215.9, 279.4),
}
DEFAULT_MARGIN_MM = 15.0
DEFAULT_DPI = 150


@dataclass(frozen=True)
class Geometry:
    """Physical page geometry; every layout decision works in device pixels."""

    page_width_mm: float
    page_height_mm: float
    margin_mm: float = DEFAULT_MARGIN_MM
    dpi: int = DEFAULT_DPI

    def __post_init__(self) -> None:
        if self.page_width_mm <= 0 or self.page_height_mm <= 0:
            raise ValueError("page dimensions must be positive")
        if self.margin_mm < 0:
            raise ValueError("margin_mm must be non-negative")
        if 2 * self.margin_mm >= min(self.page_width_mm, self.page_height_mm):
            raise ValueError("margin_mm leaves no printable area")
        if isinstance(self.dpi, bool) or not isinstance(self.dpi, int) or self.dpi <= 0:
            raise ValueError("dpi must be a positive int")

    def mm_to_px(self, value_mm: float) -> int:
        return int(round(value_mm / MM_PER_INCH * self.dpi))

    def pt_to_px(self, value_pt: float) -> int:
        return max(1, int(round(value_pt / PT_PER_INCH * self.dpi)))

    @property
    def page_width_px(self) -> int:
        return self.mm_to_px(self.page_width_mm)

    @property
    def page_height_px(self) -> int:
        return self.mm_to_px(self.page_height_mm)

    @property
    def margin_px(self) -> int:
        return self.mm_to_px(self.margin_mm)

    @property
    def content_width_px(self) -> int:
        return self.page_width_px - 2 * self.margin_px

    @property
    def content_height_px(self) -> int:
        return self.page_height_px - 2 * self.margin_px


def paper_dimensions(size: str) -> tuple[float, float]:
    key = size.strip().upper()
    if key not in PAPER_SIZES_MM:
        raise ValueError(f"unknown paper size: {size}")
    return PAPER_SIZES_MM[key]


def geometry_for(
    size: str = "A4",
    *,
    width_mm: float | None = None,
    height_mm: float | None = None,
    margin_mm: float = DEFAULT_MARGIN_MM,
    dpi: int = DEFAULT_DPI,
) -> Geometry:
    if width_mm and height_mm:
        return Geometry(float(width_mm), float(height_mm), margin_mm=margin_mm, dpi=dpi)
    page_w, page_h = paper_dimensions(size)
    return Geometry(page_w, page_h, margin_mm=margin_mm, dpi=dpi)


__all__ = [
    "DEFAULT_DPI",
    "DEFAULT_MARGIN_MM",
    "Geometry",
    "PAPER_SIZES_MM",
    "geometry_for",
    "paper_dimensions",
]
