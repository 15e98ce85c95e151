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

"""Header and footer bands drawn once per render and pasted on every page."""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image, ImageDraw

from ..core.dates import format_date
from ..core.models import DocumentModel
from ..documents.kinds import KindPolicy
from .columns import Column
from .measure import LayoutMetrics
from .spec import TableSpec
from .text import FontSet, aligned_x, text_width


@dataclass(frozen=True)
class ChromeTemplate:
    header: Image.Image
    footer: Image.Image
    column_titles_height: int

    @property
    def header_height(self) -> int:
        return self.header.height

    @property
    def footer_height(self) -> int:
        return self.footer.height


def meta_lines(doc: DocumentModel) -> tuple[str, ...]:
    meta = doc.metadata
    lines = [f"No: {meta.number}", f"Date: {format_date(meta.issue_date)}"]
    if meta.due_date:
        lines.append(f"Due: {format_date(meta.due_date)}")
    if meta.valid_until:
        lines.append(f"Valid until: {format_date(meta.valid_until)}")
    if meta.lpo_reference:
        lines.append(f"LPO: {meta.lpo_reference}")
    lines.append(f"Currency: {meta.currency}")
    return tuple(lines)


def footer_text(doc: DocumentModel, policy: KindPolicy) -> str:
    issuer = doc.metadata.issuer.name
    label = f"{policy.title} {doc.metadata.number}"
    return f"{issuer} | {label}" if issuer else label


def build_chrome(
    doc: DocumentModel,
    policy: KindPolicy,
    columns: tuple[Column, ...],
    metrics: LayoutMetrics,
    fonts: FontSet,
    table: TableSpec,
) -> ChromeTemplate:
    width = metrics.content_width
    issuer_lines = doc.metadata.issuer.lines()
    right_lines = meta_lines(doc)
    left_height = (
        (metrics.heading_line if issuer_lines and issuer_lines[0] else 0)
        + max(0, len(issuer_lines) - 1) * metrics.body_line
    )
    right_height = metrics.title_line + len(right_lines) * metrics.body_line
    top_height = max(left_height, right_height)

    party_lines = [line for line in doc.metadata.counterparty.lines() if line]
    if doc.metadata.project_title:
        party_lines.append(f"Project: {doc.metadata.project_title}")
    party_height = metrics.body_line * (1 + len(party_lines))
    titles_height = metrics.body_line + 2 * metrics.padding
    header_height = top_height + metrics.band_gap + party_height + metrics.band_gap + titles_height

    header = Image.new("RGB", (width, header_height), "white")
    draw = ImageDraw.Draw(header)
    y = 0
    for position, line in enumerate(issuer_lines):
        font = fonts.heading if position == 0 else fonts.body
        draw.text((0, y), line, font=font, fill=table.text_color)
        y += metrics.heading_line if position == 0 else metrics.body_line

    title = policy.title.upper()
    draw.text(
        (width - text_width(fonts.title, title), 0), title, font=fonts.title, fill=table.text_color
    )
    y = metrics.title_line
    for line in right_lines:
        draw.text(
            (width - text_width(fonts.body, line), y), line, font=fonts.body, fill=table.muted_color
        )
        y += metrics.body_line

    y = top_height + metrics.band_gap
    draw.text((0, y), f"{policy.counterparty_label}:", font=fonts.bold, fill=table.text_color)
    y += metrics.body_line
    for line in party_lines:
        draw.text((0, y), line, font=fonts.body, fill=table.text_color)
        y += metrics.body_line

    y = header_height - titles_height
    draw.rectangle((0, y, width - 1, header_height - 1), fill=table.shade_color)
    x = 0
    for column, col_width in zip(columns, metrics.column_widths):
        tx = aligned_x(fonts.bold, column.title, x, col_width, column.align, metrics.padding)
        draw.text((tx, y + metrics.padding), column.title, font=fonts.bold, fill=table.text_color)
        x += col_width

    footer_height = metrics.gap + metrics.body_line + metrics.padding
    footer = Image.new("RGB", (width, footer_height), "white")
    fdraw = ImageDraw.Draw(footer)
    fdraw.line((0, 0, width - 1, 0), fill=table.rule_color, width=1)
    fdraw.text(
        (0, metrics.gap),
        footer_text(doc, policy),
        font=fonts.body,
        fill=table.muted_color,
    )
    return ChromeTemplate(header=header, footer=footer, column_titles_height=titles_height)


__all__ = ["ChromeTemplate", "build_chrome", "footer_text", "meta_lines"]
