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

"""Table column sets per document kind."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.dates import format_date
from ..core.models import DocumentKind, DocumentModel, LineItem, StatementEntry
from ..core.money import format_money, format_quantity
from ..documents.kinds import KindPolicy

PRICE_COLUMNS = frozenset({"unit_price", "discount", "tax", "amount"})


@dataclass(frozen=True)
class Column:
    key: str
    title: str
    weight: float
    align: str = "left"


COLUMN_CATALOG: dict[str, Column] = {
    "index": Column("index", "#", 0.5, "center"),
    "description": Column("description", "Description", 4.0),
    "unit": Column("unit", "Unit", 0.8, "center"),
    "quantity": Column("quantity", "Qty", 0.9, "right"),
    "unit_price": Column("unit_price", "Unit Price", 1.5, "right"),
    "discount": Column("discount", "Discount", 1.2, "right"),
    "tax": Column("tax", "Tax", 1.2, "right"),
    "amount": Column("amount", "Amount", 1.6, "right"),
    "date": Column("date", "Date", 1.2),
    "reference": Column("reference", "Reference", 1.4),
    "debit": Column("debit", "Debit", 1.4, "right"),
    "credit": Column("credit", "Credit", 1.4, "right"),
    "balance": Column("balance", "Balance", 1.5, "right"),
}


def columns_for(doc: DocumentModel, policy: KindPolicy) -> tuple[Column, ...]:
    """Resolve the visible columns: optional ones only when some item uses them."""
    items = doc.all_items()
    has_discount = any(item.discount_amount != 0 for item in items)
    has_tax = any(item.tax_amount != 0 for item in items)
    columns: list[Column] = []
    for key in policy.columns:
        if key in PRICE_COLUMNS and not policy.show_prices:
            continue
        if key == "discount" and not has_discount:
            continue
        if key == "tax" and not has_tax:
            continue
        columns.append(COLUMN_CATALOG[key])
    return tuple(columns)


def column_widths(columns: tuple[Column, ...], total_width: int) -> tuple[int, ...]:
    """Split ``total_width`` pixels by weight; the last column absorbs rounding."""
    if not columns:
        return ()
    weight_sum = sum(column.weight for column in columns)
    widths = [int(total_width * column.weight / weight_sum) for column in columns[:-1]]
    widths.append(total_width - sum(widths))
    return tuple(widths)


def item_cells(
    item: LineItem,
    ordinal: int,
    columns: tuple[Column, ...],
    currency: str,
) -> tuple[str, ...]:
    values = {
        "index": str(ordinal),
        "description": item.description,
        "unit": item.unit or "",
        "quantity": format_quantity(item.quantity),
        "unit_price": format_money(item.unit_price, currency),
        "discount": format_money(item.discount_amount, currency) if item.discount_amount else "",
        "tax": format_money(item.tax_amount, currency) if item.tax_amount else "",
        "amount": format_money(item.line_total, currency),
    }
    return tuple(values.get(column.key, "") for column in columns)


def entry_cells(
    entry: StatementEntry,
    columns: tuple[Column, ...],
    currency: str,
) -> tuple[str, ...]:
    values = {
        "date": format_date(entry.entry_date),
        "reference": entry.reference,
        "description": entry.description,
        "debit": format_money(entry.debit, currency) if entry.debit else "",
        "credit": format_money(entry.credit, currency) if entry.credit else "",
        "balance": format_money(entry.balance, currency),
    }
    return tuple(values.get(column.key, "") for column in columns)


def is_statement(doc: DocumentModel) -> bool:
    return doc.kind is DocumentKind.STATEMENT


__all__ = [
    "COLUMN_CATALOG",
    "Column",
    "PRICE_COLUMNS",
    "column_widths",
    "columns_for",
    "entry_cells",
    "is_statement",
    "item_cells",
]
