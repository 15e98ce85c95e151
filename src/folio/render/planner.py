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

"""Assign measured blocks to pages without splitting any block."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..core.errors import LayoutError
from ..documents.kinds import BreakPolicy
from .blocks import Block, BlockType
from .measure import MeasuredBlock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    measured: MeasuredBlock
    overflowed: bool = False

    @property
    def block(self) -> Block:
        return self.measured.block

    @property
    def height(self) -> int:
        return self.measured.height


@dataclass(frozen=True)
class Page:
    number: int
    placements: tuple[Placement, ...]
    repeated_header: bool = False
    repeated_column_titles: bool = False

    @property
    def block_indices(self) -> tuple[int, ...]:
        return tuple(placement.block.index for placement in self.placements)

    @property
    def has_overflow(self) -> bool:
        return any(placement.overflowed for placement in self.placements)

    @property
    def content_height(self) -> int:
        return sum(placement.height for placement in self.placements)


@dataclass(frozen=True)
class PagePlan:
    pages: tuple[Page, ...]
    capacity: int

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def block_indices(self) -> tuple[tuple[int, ...], ...]:
        return tuple(page.block_indices for page in self.pages)


def plan(
    blocks: Sequence[MeasuredBlock],
    page_height: int,
    header_height: int,
    footer_height: int,
    *,
    document_number: str = "",
) -> PagePlan:
    """Greedy pagination with lookahead for headers and keep-with-next chains.

    ``page_height`` is the printable height (page minus both margins); the
    chrome bands are subtracted to get the capacity of every page.
    """
    capacity = page_height - header_height - footer_height
    if capacity <= 0:
        raise LayoutError(
            f"no room for content: page {page_height}px, header {header_height}px, "
            f"footer {footer_height}px",
            document_number=document_number or None,
        )

    pages: list[list[Placement]] = [[]]
    remaining = capacity

    for position, measured in enumerate(blocks):
        block = measured.block
        if pages[-1] and _should_break(blocks, position, remaining, capacity):
            pages.append([])
            remaining = capacity

        overflowed = measured.placeholder
        if measured.height > capacity:
            overflowed = True
            logger.warning(
                "document %s: block %d (%s) is %dpx, taller than a page (%dpx); placed as overflow",
                document_number,
                block.index,
                block.type.value,
                measured.height,
                capacity,
            )
        pages[-1].append(Placement(measured=measured, overflowed=overflowed))
        remaining -= measured.height

    if not pages[-1] and len(pages) > 1:
        pages.pop()
    return PagePlan(
        pages=tuple(
            Page(
                number=number,
                placements=tuple(placements),
                repeated_header=number > 1,
                repeated_column_titles=number > 1,
            )
            for number, placements in enumerate(pages, start=1)
        ),
        capacity=capacity,
    )


def _should_break(
    blocks: Sequence[MeasuredBlock],
    position: int,
    remaining: int,
    capacity: int,
) -> bool:
    measured = blocks[position]
    block = measured.block
    if block.break_before is BreakPolicy.ALWAYS:
        return True
    if block.break_before is BreakPolicy.PREFERRED and block.type is BlockType.SECTION_HEADER:
        section = _group_height(blocks, position)
        if remaining < section <= capacity:
            return True
    if block.keep_with_next:
        chain = _chain_height(blocks, position)
        if remaining < chain <= capacity:
            return True
    return measured.height > remaining


def _group_height(blocks: Sequence[MeasuredBlock], position: int) -> int:
    group = blocks[position].block.group
    total = 0
    for measured in blocks[position:]:
        if measured.block.group != group:
            break
        total += measured.height
    return total


def _chain_height(blocks: Sequence[MeasuredBlock], position: int) -> int:
    total = 0
    for measured in blocks[position:]:
        total += measured.height
        if not measured.block.keep_with_next:
            break
    return total


__all__ = ["Page", "PagePlan", "Placement", "plan"]
