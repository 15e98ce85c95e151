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

from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum

from ..core.errors import ValidationError
from ..core.models import DocumentKind


class BreakPolicy(str, Enum):
    NEVER = "never"
    PREFERRED = "preferred"
    ALWAYS = "always"


@dataclass(frozen=True)
class KindPolicy:
    """Composition rules for one document kind.

    ``columns`` lists the candidate column keys in display order; optional
    columns (discount, tax) are dropped later when no item uses them.
    """

    kind: DocumentKind
    title: str
    section_break: BreakPolicy
    columns: tuple[str, ...]
    counterparty_label: str = "Bill To"
    show_prices: bool = True
    section_letters: bool = False
    signature_roles: tuple[str, ...] = ()

    @property
    def signature_block(self) -> bool:
        return bool(self.signature_roles)


_PRICED_COLUMNS = ("index", "description", "unit", "quantity", "unit_price", "discount", "tax", "amount")
_DELIVERY_COLUMNS = ("index", "description", "unit", "quantity")
_STATEMENT_COLUMNS = ("date", "reference", "description", "debit", "credit", "balance")

POLICIES: dict[DocumentKind, KindPolicy] = {
    DocumentKind.FLAT_INVOICE: KindPolicy(
        kind=DocumentKind.FLAT_INVOICE,
        title="Invoice",
        section_break=BreakPolicy.PREFERRED,
        columns=_PRICED_COLUMNS,
    ),
    DocumentKind.SECTIONED_INVOICE: KindPolicy(
        kind=DocumentKind.SECTIONED_INVOICE,
        title="Invoice",
        section_break=BreakPolicy.PREFERRED,
        columns=_PRICED_COLUMNS,
        section_letters=True,
    ),
    DocumentKind.QUOTATION: KindPolicy(
        kind=DocumentKind.QUOTATION,
        title="Quotation",
        section_break=BreakPolicy.PREFERRED,
        columns=_PRICED_COLUMNS,
        counterparty_label="Quote For",
        section_letters=True,
    ),
    DocumentKind.PROFORMA_INVOICE: KindPolicy(
        kind=DocumentKind.PROFORMA_INVOICE,
        title="Proforma Invoice",
        section_break=BreakPolicy.PREFERRED,
        columns=_PRICED_COLUMNS,
        section_letters=True,
    ),
    DocumentKind.BILL_OF_QUANTITIES: KindPolicy(
        kind=DocumentKind.BILL_OF_QUANTITIES,
        title="Bill of Quantities",
        section_break=BreakPolicy.ALWAYS,
        columns=("index", "description", "unit", "quantity", "unit_price", "amount"),
        counterparty_label="Client",
        section_letters=True,
        signature_roles=("Contractor", "Employer"),
    ),
    DocumentKind.DELIVERY_NOTE: KindPolicy(
        kind=DocumentKind.DELIVERY_NOTE,
        title="Delivery Note",
        section_break=BreakPolicy.PREFERRED,
        columns=_DELIVERY_COLUMNS,
        counterparty_label="Deliver To",
        show_prices=False,
        signature_roles=("Delivered By", "Received By"),
    ),
    DocumentKind.STATEMENT: KindPolicy(
        kind=DocumentKind.STATEMENT,
        title="Customer Statement",
        section_break=BreakPolicy.NEVER,
        columns=_STATEMENT_COLUMNS,
        counterparty_label="Customer",
    ),
}


def resolve_kind(value: DocumentKind | str) -> DocumentKind:
    if isinstance(value, DocumentKind):
        return value
    normalized = str(value).strip().lower().replace("_", "-")
    try:
        return DocumentKind(normalized)
    except ValueError:
        known = ", ".join(kind.value for kind in DocumentKind)
        raise ValidationError(f"unknown document kind: {value!r} (expected one of {known})") from None


def policy_for(
    kind: DocumentKind | str,
    section_breaks: Mapping[DocumentKind, BreakPolicy] | None = None,
) -> KindPolicy:
    resolved = resolve_kind(kind)
    policy = POLICIES[resolved]
    if section_breaks and resolved in section_breaks:
        policy = replace(policy, section_break=section_breaks[resolved])
    return policy


__all__ = [
    "BreakPolicy",
    "KindPolicy",
    "POLICIES",
    "policy_for",
    "resolve_kind",
]
