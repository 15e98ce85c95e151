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

"""Decompose a Document Model into the atomic blocks the planner schedules."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ..core.models import DocumentModel, LineItem, Section
from ..core.money import ZERO, format_money, format_quantity
from ..documents.kinds import BreakPolicy, KindPolicy, policy_for
from .columns import Column, columns_for, entry_cells, is_statement, item_cells


class BlockType(str, Enum):
    ROW = "row"
    SECTION_HEADER = "section-header"
    SUBSECTION_HEADER = "subsection-header"
    SUBSECTION_SUBTOTAL = "subsection-subtotal"
    SECTION_TOTAL = "section-total"
    GRAND_TOTAL = "grand-total"
    FREE_TEXT = "free-text"
    SIGNATURE_BLOCK = "signature-block"


SUMMARY_TYPES = frozenset(
    {BlockType.SUBSECTION_SUBTOTAL, BlockType.SECTION_TOTAL, BlockType.GRAND_TOTAL}
)


@dataclass(frozen=True)
class SummaryLine:
    label: str
    value: str
    emphasis: bool = False


@dataclass(frozen=True)
class Block:
    type: BlockType
    index: int
    title: str = ""
    text: str = ""
    cells: tuple[str, ...] = ()
    lines: tuple[SummaryLine, ...] = ()
    keep_together: bool = True
    break_before: BreakPolicy = BreakPolicy.NEVER
    keep_with_next: bool = False
    group: int | None = None
    image: str | None = None


class _Emitter:
    def __init__(self) -> None:
        self.blocks: list[Block] = []

    def emit(self, block_type: BlockType, **fields: object) -> None:
        self.blocks.append(Block(type=block_type, index=len(self.blocks), **fields))


def decompose(
    doc: DocumentModel,
    policy: KindPolicy | None = None,
    *,
    columns: tuple[Column, ...] | None = None,
) -> tuple[Block, ...]:
    """Return the ordered blocks for ``doc``.

    Pure: the same model and policy always yield equal blocks.
    """
    policy = policy or policy_for(doc.kind)
    columns = columns if columns is not None else columns_for(doc, policy)
    currency = doc.metadata.currency
    out = _Emitter()

    for section_index, section in enumerate(doc.sections):
        out.emit(
            BlockType.SECTION_HEADER,
            title=_section_title(section, section_index, policy),
            break_before=BreakPolicy.NEVER if section_index == 0 else policy.section_break,
            keep_with_next=True,
            group=section_index,
        )
        if is_statement(doc):
            rows = [entry_cells(entry, columns, currency) for entry in doc.entries]
            _emit_rows(out, rows, section_index, chain_last=True)
        else:
            _emit_section_body(out, section, section_index, columns, currency)
        out.emit(
            BlockType.SECTION_TOTAL,
            title=section.title,
            lines=_section_total_lines(doc, section, policy),
            group=section_index,
        )

    out.emit(BlockType.GRAND_TOTAL, lines=_grand_total_lines(doc, policy))

    if doc.aging is not None:
        out.emit(
            BlockType.FREE_TEXT,
            title="Aging Summary",
            lines=tuple(
                SummaryLine(label, format_money(amount, currency))
                for label, amount in doc.aging.buckets()
            )
            + (SummaryLine("Total outstanding", format_money(doc.aging.total, currency), True),),
        )
    if doc.notes:
        out.emit(BlockType.FREE_TEXT, title="Notes", text=doc.notes)
    if doc.terms:
        out.emit(BlockType.FREE_TEXT, title="Terms and Conditions", text=doc.terms)
    if policy.signature_block:
        out.emit(
            BlockType.SIGNATURE_BLOCK,
            title="Signed",
            lines=tuple(SummaryLine(role, "") for role in policy.signature_roles),
            image=doc.signature_image,
        )
    return tuple(out.blocks)


def _emit_section_body(
    out: _Emitter,
    section: Section,
    section_index: int,
    columns: tuple[Column, ...],
    currency: str,
) -> None:
    ordinal = 1
    rows = []
    for item in section.items:
        rows.append(item_cells(item, ordinal, columns, currency))
        ordinal += 1
    _emit_rows(out, rows, section_index, chain_last=not section.subsections)

    for sub_index, subsection in enumerate(section.subsections):
        last = sub_index == len(section.subsections) - 1
        out.emit(
            BlockType.SUBSECTION_HEADER,
            title=subsection.title,
            keep_with_next=True,
            group=section_index,
        )
        rows = []
        for item in subsection.items:
            rows.append(item_cells(item, ordinal, columns, currency))
            ordinal += 1
        _emit_rows(out, rows, section_index, chain_last=True)
        out.emit(
            BlockType.SUBSECTION_SUBTOTAL,
            title=subsection.title,
            lines=(
                SummaryLine(
                    f"Subtotal: {subsection.title}",
                    _amount_or_quantity(subsection.subtotal, subsection.items, currency),
                ),
            ),
            keep_with_next=last,
            group=section_index,
        )


def _emit_rows(
    out: _Emitter,
    rows: list[tuple[str, ...]],
    section_index: int,
    *,
    chain_last: bool,
) -> None:
    for position, cells in enumerate(rows):
        out.emit(
            BlockType.ROW,
            cells=cells,
            keep_with_next=chain_last and position == len(rows) - 1,
            group=section_index,
        )


def _section_title(section: Section, section_index: int, policy: KindPolicy) -> str:
    if not policy.section_letters:
        return section.title
    return f"{_section_letter(section_index)}. {section.title.upper()}"


def _section_letter(index: int) -> str:
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def _amount_or_quantity(amount: Decimal, items: tuple[LineItem, ...], currency: str) -> str:
    # Unpriced items (delivery notes) sum quantities instead.
    if any(item.unit_price for item in items) or amount:
        return format_money(amount, currency)
    return format_quantity(sum((item.quantity for item in items), Decimal(0)))


def _section_total_lines(
    doc: DocumentModel,
    section: Section,
    policy: KindPolicy,
) -> tuple[SummaryLine, ...]:
    currency = doc.metadata.currency
    if is_statement(doc):
        debits = sum((entry.debit for entry in doc.entries), ZERO)
        credits = sum((entry.credit for entry in doc.entries), ZERO)
        return (
            SummaryLine("Total debits", format_money(debits, currency)),
            SummaryLine("Total credits", format_money(credits, currency)),
        )
    if not policy.show_prices:
        quantity = sum((item.quantity for item in section.all_items()), Decimal(0))
        return (SummaryLine(f"Total quantity: {section.title}", format_quantity(quantity), True),)
    lines: list[SummaryLine] = []
    if section.labor_cost:
        lines.append(SummaryLine("Items", format_money(section.items_total, currency)))
        lines.append(SummaryLine("Labour", format_money(section.labor_cost, currency)))
    lines.append(
        SummaryLine(f"Section total: {section.title}", format_money(section.total, currency), True)
    )
    return tuple(lines)


def _grand_total_lines(doc: DocumentModel, policy: KindPolicy) -> tuple[SummaryLine, ...]:
    currency = doc.metadata.currency
    totals = doc.totals
    if is_statement(doc):
        return (SummaryLine("Closing balance", format_money(totals.grand_total, currency), True),)
    if not policy.show_prices:
        quantity = sum((item.quantity for item in doc.all_items()), Decimal(0))
        return (
            SummaryLine("Total items", str(len(doc.all_items()))),
            SummaryLine("Total quantity", format_quantity(quantity), True),
        )
    lines = [SummaryLine("Subtotal", format_money(totals.subtotal, currency))]
    if totals.tax_total:
        lines.append(SummaryLine("Tax", format_money(totals.tax_total, currency)))
    lines.append(SummaryLine("Total", format_money(totals.grand_total, currency), True))
    if totals.paid_amount is not None:
        lines.append(SummaryLine("Paid", format_money(totals.paid_amount, currency)))
    if totals.balance_due is not None:
        lines.append(SummaryLine("Balance due", format_money(totals.balance_due, currency), True))
    return tuple(lines)


__all__ = [
    "Block",
    "BlockType",
    "SUMMARY_TYPES",
    "SummaryLine",
    "decompose",
]
