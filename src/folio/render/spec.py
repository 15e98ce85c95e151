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

from dataclasses import dataclass, field


@dataclass(frozen=True)
class TypographySpec:
    font_path: str | None = None
    bold_font_path: str | None = None
    body_size_pt: float = 9.0
    heading_size_pt: float = 11.0
    title_size_pt: float = 18.0
    line_spacing: float = 1.25


@dataclass(frozen=True)
class TableSpec:
    cell_padding_pt: float = 3.0
    block_gap_pt: float = 2.0
    band_gap_pt: float = 6.0
    signature_height_mm: float = 18.0
    placeholder_height_mm: float = 30.0
    text_color: tuple[int, int, int] = (20, 20, 20)
    muted_color: tuple[int, int, int] = (100, 100, 100)
    rule_color: tuple[int, int, int] = (170, 170, 170)
    shade_color: tuple[int, int, int] = (238, 238, 238)


@dataclass(frozen=True)
class RenderSpec:
    """Everything a render needs besides the document and page geometry."""

    backend: str = "raster"
    page_timeout_seconds: float = 30.0
    retries: int = 0
    page_labels: bool = True
    typography: TypographySpec = field(default_factory=TypographySpec)
    table: TableSpec = field(default_factory=TableSpec)
    asset_root: str | None = None


__all__ = ["RenderSpec", "TableSpec", "TypographySpec"]
