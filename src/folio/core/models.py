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
from datetime import date
from decimal import Decimal
from enum import Enum

from .money import ZERO


class DocumentKind(str, Enum):
    FLAT_INVOICE = "flat-invoice"
    SECTIONED_INVOICE = "sectioned-invoice"
    QUOTATION = "quotation"
    PROFORMA_INVOICE = "proforma-invoice"
    BILL_OF_QUANTITIES = "bill-of-quantities"
    DELIVERY_NOTE = "delivery-note"
    STATEMENT = "statement"


@dataclass(frozen=True)
class Party:
    name: str
    address: tuple[str, ...] = ()
    phone: str | None = None
    email: str | None = None
    tax_id: str | None = None

    def lines(self) -> tuple[str, ...]:
        contact = tuple(value for value in (self.phone, self.email) if value)
        tax = (f"PIN: {self.tax_id}",) if self.tax_id else ()
        return (self.name, *self.address, *contact, *tax)


@dataclass(frozen=True)
class DocumentMetadata:
    issuer: Party
    counterparty: Party
    number: str
    issue_date: date
    currency: str
    due_date: date | None = None
    valid_until: date | None = None
    lpo_reference: str | None = None
    project_title: str | None = None


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal
    unit: str | None = None
    tax_rate: Decimal = ZERO
    tax_amount: Decimal = ZERO
    discount_amount: Decimal = ZERO


@dataclass(frozen=True)
class Subsection:
    title: str
    items: tuple[LineItem, ...]

    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self.items), ZERO)


@dataclass(frozen=True)
class Section:
    title: str
    items: tuple[LineItem, ...] = ()
    subsections: tuple[Subsection, ...] = ()
    labor_cost: Decimal = ZERO

    def all_items(self) -> tuple[LineItem, ...]:
        nested = tuple(item for sub in self.subsections for item in sub.items)
        return self.items + nested

    @property
    def items_total(self) -> Decimal:
        return sum((item.line_total for item in self.all_items()), ZERO)

    @property
    def total(self) -> Decimal:
        return self.items_total + self.labor_cost


@dataclass(frozen=True)
class StatementEntry:
    entry_date: date
    reference: str
    description: str
    debit: Decimal
    credit: Decimal
    balance: Decimal


@dataclass(frozen=True)
class AgingSummary:
    current: Decimal = ZERO
    days_1_30: Decimal = ZERO
    days_31_60: Decimal = ZERO
    days_61_90: Decimal = ZERO
    over_90: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.current + self.days_1_30 + self.days_31_60 + self.days_61_90 + self.over_90

    def buckets(self) -> tuple[tuple[str, Decimal], ...]:
        return (
            ("Current", self.current),
            ("1-30 days", self.days_1_30),
            ("31-60 days", self.days_31_60),
            ("61-90 days", self.days_61_90),
            ("Over 90 days", self.over_90),
        )


@dataclass(frozen=True)
class Totals:
    subtotal: Decimal
    tax_total: Decimal
    grand_total: Decimal
    paid_amount: Decimal | None = None
    balance_due: Decimal | None = None
    running_balances: tuple[Decimal, ...] = ()


@dataclass(frozen=True)
class DocumentModel:
    kind: DocumentKind
    metadata: DocumentMetadata
    sections: tuple[Section, ...]
    totals: Totals
    entries: tuple[StatementEntry, ...] = ()
    aging: AgingSummary | None = None
    notes: str | None = None
    terms: str | None = None
    signature_image: str | None = None
    warnings: tuple[str, ...] = field(default=())

    def all_items(self) -> tuple[LineItem, ...]:
        return tuple(item for section in self.sections for item in section.all_items())


__all__ = [
    "AgingSummary",
    "DocumentKind",
    "DocumentMetadata",
    "DocumentModel",
    "LineItem",
    "Party",
    "Section",
    "StatementEntry",
    "Subsection",
    "Totals",
]
