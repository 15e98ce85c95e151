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

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from PIL import ImageFont

from .geometry import Geometry
from .spec import TypographySpec

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


@dataclass(frozen=True)
class FontSet:
    body: Font
    bold: Font
    heading: Font
    title: Font
    line_spacing: float = 1.25

    def line_height(self, font: Font) -> int:
        return font_line_height(font, self.line_spacing)


def _load_font(path: str | None, size_px: int) -> Font:
    if path:
        return ImageFont.truetype(path, size_px)
    return ImageFont.load_default(size=size_px)


def load_fonts(typography: TypographySpec, geometry: Geometry) -> FontSet:
    body_px = geometry.pt_to_px(typography.body_size_pt)
    heading_px = geometry.pt_to_px(typography.heading_size_pt)
    title_px = geometry.pt_to_px(typography.title_size_pt)
    bold_path = typography.bold_font_path or typography.font_path
    return FontSet(
        body=_load_font(typography.font_path, body_px),
        bold=_load_font(bold_path, body_px),
        heading=_load_font(bold_path, heading_px),
        title=_load_font(bold_path, title_px),
        line_spacing=typography.line_spacing,
    )


def text_width(font: Font, text: str) -> int:
    if not text:
        return 0
    return int(math.ceil(font.getlength(text)))


def font_line_height(font: Font, multiplier: float = 1.25) -> int:
    size = getattr(font, "size", None)
    if size:
        return max(1, int(math.ceil(float(size) * multiplier)))
    _left, top, _right, bottom = font.getbbox("Ag")
    return max(1, int(math.ceil((bottom - top) * multiplier)))


def wrap_lines_to_width(
    measure: Callable[[str], float],
    lines: Sequence[str],
    max_width: float,
) -> list[str]:
    """Greedy word wrap; words wider than ``max_width`` are split per character."""
    wrapped: list[str] = []
    for line in lines:
        if not line:
            wrapped.append("")
            continue
        words = line.split(" ")
        current = ""
        for word in words:
            candidate = word if not current else f"{current} {word}"
            if measure(candidate) <= max_width:
                current = candidate
                continue
            if current:
                wrapped.append(current)
                current = ""
            if measure(word) <= max_width:
                current = word
                continue
            parts: list[str] = []
            chunk = ""
            for ch in word:
                next_chunk = f"{chunk}{ch}"
                if chunk and measure(next_chunk) > max_width:
                    parts.append(chunk)
                    chunk = ch
                else:
                    chunk = next_chunk
            if chunk:
                parts.append(chunk)
            wrapped.extend(parts[:-1])
            current = parts[-1] if parts else ""
        if current:
            wrapped.append(current)
    return wrapped


def aligned_x(font: Font, text: str, left: int, width: int, align: str, padding: int = 0) -> int:
    if align == "right":
        return left + width - padding - text_width(font, text)
    if align == "center":
        return left + (width - text_width(font, text)) // 2
    return left + padding


def wrap_text(font: Font, text: str, max_width: int) -> tuple[str, ...]:
    if not text:
        return ("",)
    lines = wrap_lines_to_width(font.getlength, text.splitlines() or [""], max(1, max_width))
    return tuple(lines) or ("",)


__all__ = [
    "Font",
    "FontSet",
    "aligned_x",
    "font_line_height",
    "load_fonts",
    "text_width",
    "wrap_lines_to_width",
    "wrap_text",
]
