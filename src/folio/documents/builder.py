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

"""Build immutable Document Models from raw records."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal

from ..core.dates import optional_date, parse_date
from ..core.errors import ValidationError
from ..core.models import (
    DocumentKind,
    DocumentMetadata,
    DocumentModel,
    LineItem,
    Party,
    Section,
    Subsection,
    Totals,
)
from ..core.money import (
    DEFAULT_CURRENCY,
    ZERO,
    optional_amount,
    parse_amount,
    quantize_money,
    sum_money,
)
from ..core.validation import optional_str, require_list, require_mapping
from .common import document_number, first_present, parse_party
from .kinds import POLICIES, resolve_kind
from .statement import build_statement

logger = logging.getLogger(__name__)

FLAT_SECTION_TITLE = "Items"
_HUNDRED = Decimal(100)


def build(
    raw_record: Mapping[str, object],
    kind: DocumentKind | str,
    *,
    issuer: Party | None = None,
    currency: str | None = None,
) -> DocumentModel:
    """Validate ``raw_record`` and return the Document Model for ``kind``.

    ``issuer`` and ``currency`` are fallbacks used when the record does not
    carry its own values.
    """
    resolved = resolve_kind(kind)
    try:
        record = require_mapping(raw_record, label="record")
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc
    if resolved is DocumentKind.STATEMENT:
        return build_statement(record, issuer=issuer, currency=currency)

    number = document_number(
        record, "number", "document_number", "invoice_number", "quotation_number"
    )
    policy = POLICIES[resolved]
    warnings: list[str] = []
    metadata = _metadata(record, number=number, issuer=issuer, currency=currency)
    sections = _sections(
        record,
        number=number,
        prices_required=policy.show_prices,
        warnings=warnings,
    )
    totals = _totals(record, sections, number=number, warnings=warnings)
    try:
        notes = optional_str(record.get("notes"), label="notes")
        terms = optional_str(
            first_present(record, "terms_and_conditions", "terms"), label="terms"
        )
        signature_image = optional_str(record.get("signature_image"), label="signature_image")
    except ValueError as exc:
        raise ValidationError(str(exc), document_number=number) from exc
    return DocumentModel(
        kind=resolved,
        metadata=metadata,
        sections=sections,
        totals=totals,
        notes=notes,
        terms=terms,
        signature_image=signature_image,
        warnings=tuple(warnings),
    )


def _metadata(
    record: Mapping[str, object],
    *,
    number: str,
    issuer: Party | None,
    currency: str | None,
) -> DocumentMetadata:
    try:
        raw_currency = optional_str(record.get("currency"), label="currency")
        return DocumentMetadata(
            issuer=parse_party(
                first_present(record, "issuer", "company"), label="issuer", default=issuer
            ),
            counterparty=parse_party(
                first_present(record, "customer", "counterparty", "client"),
                label="customer",
            ),
            number=number,
            issue_date=parse_date(
                first_present(record, "date", "issue_date", "invoice_date", "quotation_date"),
                label="date",
            ),
            currency=(raw_currency or currency or DEFAULT_CURRENCY).upper(),
            due_date=optional_date(record.get("due_date"), label="due_date"),
            valid_until=optional_date(record.get("valid_until"), label="valid_until"),
            lpo_reference=optional_str(
                first_present(record, "lpo_number", "lpo_reference"), label="lpo_number"
            ),
            project_title=optional_str(record.get("project_title"), label="project_title"),
        )
    except ValueError as exc:
        raise ValidationError(str(exc), document_number=number) from exc


def _sections(
    record: Mapping[str, object],
    *,
    number: str,
    prices_required: bool,
    warnings: list[str],
) -> tuple[Section, ...]:
    raw_sections = record.get("sections")
    try:
        if raw_sections is not None:
            entries = require_list(raw_sections, label="sections")
        else:
            entries = require_list(record.get("items", []), label="items")
    except ValueError as exc:
        raise ValidationError(str(exc), document_number=number) from exc

    if raw_sections is not None:
        sections = tuple(
            _section(
                raw,
                section_index=index,
                number=number,
                prices_required=prices_required,
                warnings=warnings,
            )
            for index, raw in enumerate(entries)
        )
    else:
        sections = _group_flat_items(
            entries,
            number=number,
            prices_required=prices_required,
            warnings=warnings,
        )
    if not sections:
        raise ValidationError("document has no sections or items", document_number=number)
    return sections


def _section(
    raw: object,
    *,
    section_index: int,
    number: str,
    prices_required: bool,
    warnings: list[str],
) -> Section:
    label = f"sections[{section_index}]"
    try:
        section = require_mapping(raw, label=label)
        title = optional_str(first_present(section, "title", "name"), label=f"{label}.title")
        labor_cost = optional_amount(
            first_present(section, "labor_cost", "labour_cost"), label=f"{label}.labor_cost"
        )
        raw_items = require_list(section.get("items", []), label=f"{label}.items")
        raw_subsections = require_list(
            section.get("subsections", []), label=f"{label}.subsections"
        )
    except ValueError as exc:
        raise ValidationError(
            str(exc), document_number=number, section_index=section_index
        ) from exc

    items = tuple(
        _line_item(
            raw_item,
            label=f"{label}.items[{item_index}]",
            number=number,
            section_index=section_index,
            item_index=item_index,
            prices_required=prices_required,
            warnings=warnings,
        )
        for item_index, raw_item in enumerate(raw_items)
    )
    subsections: list[Subsection] = []
    offset = len(items)
    for sub_index, raw_sub in enumerate(raw_subsections):
        sub_label = f"{label}.subsections[{sub_index}]"
        try:
            sub = require_mapping(raw_sub, label=sub_label)
            sub_title = optional_str(
                first_present(sub, "title", "name"), label=f"{sub_label}.title"
            )
            sub_items_raw = require_list(sub.get("items", []), label=f"{sub_label}.items")
        except ValueError as exc:
            raise ValidationError(
                str(exc), document_number=number, section_index=section_index
            ) from exc
        sub_items = tuple(
            _line_item(
                raw_item,
                label=f"{sub_label}.items[{item_index}]",
                number=number,
                section_index=section_index,
                item_index=offset + item_index,
                prices_required=prices_required,
                warnings=warnings,
            )
            for item_index, raw_item in enumerate(sub_items_raw)
        )
        offset += len(sub_items)
        subsections.append(Subsection(title=sub_title or f"Part {sub_index + 1}", items=sub_items))

    return Section(
        title=title or f"Section {section_index + 1}",
        items=items,
        subsections=tuple(subsections),
        labor_cost=quantize_money(labor_cost) if labor_cost is not None else ZERO,
    )


def _group_flat_items(
    entries: list[object],
    *,
    number: str,
    prices_required: bool,
    warnings: list[str],
) -> tuple[Section, ...]:
    """Group flat items by ``section_name`` in first-appearance order."""
    groups: dict[str | None, list[LineItem]] = {}
    labor: dict[str | None, Decimal] = {}
    for item_index, raw_item in enumerate(entries):
        label = f"items[{item_index}]"
        try:
            item_map = require_mapping(raw_item, label=label)
            name = optional_str(item_map.get("section_name"), label=f"{label}.section_name")
        except ValueError as exc:
            raise ValidationError(
                str(exc), document_number=number, item_index=item_index
            ) from exc
        if name not in groups:
            groups[name] = []
            try:
                labor_cost = optional_amount(
                    item_map.get("section_labor_cost"), label=f"{label}.section_labor_cost"
                )
            except ValueError as exc:
                raise ValidationError(
                    str(exc),
                    document_number=number,
                    section_index=len(groups) - 1,
                    item_index=item_index,
                ) from exc
            labor[name] = quantize_money(labor_cost) if labor_cost is not None else ZERO
        groups[name].append(
            _line_item(
                item_map,
                label=label,
                number=number,
                section_index=list(groups).index(name),
                item_index=item_index,
                prices_required=prices_required,
                warnings=warnings,
            )
        )
    return tuple(
        Section(
            title=name or FLAT_SECTION_TITLE,
            items=tuple(items),
            labor_cost=labor[name],
        )
        for name, items in groups.items()
    )


def _line_item(
    raw: object,
    *,
    label: str,
    number: str,
    section_index: int,
    item_index: int,
    prices_required: bool,
    warnings: list[str],
) -> LineItem:
    try:
        item = require_mapping(raw, label=label)
        description = optional_str(
            first_present(item, "description", "name", "product_name"),
            label=f"{label}.description",
        )
        quantity = parse_amount(
            first_present(item, "quantity", "quantity_delivered"), label=f"{label}.quantity"
        )
        raw_price = first_present(item, "unit_price", "rate")
        if raw_price is None and not prices_required:
            unit_price = ZERO
        else:
            unit_price = parse_amount(raw_price, label=f"{label}.unit_price")
        discount = optional_amount(
            first_present(item, "discount_amount", "discount_before_vat"),
            label=f"{label}.discount_amount",
        )
        tax_rate = optional_amount(
            first_present(item, "tax_percentage", "tax_rate"), label=f"{label}.tax_percentage"
        )
        explicit_tax = optional_amount(item.get("tax_amount"), label=f"{label}.tax_amount")
        supplied_total = optional_amount(item.get("line_total"), label=f"{label}.line_total")
        unit = optional_str(
            first_present(item, "unit_of_measure", "unit", "unit_abbreviation"),
            label=f"{label}.unit",
        )
    except ValueError as exc:
        raise ValidationError(
            str(exc),
            document_number=number,
            section_index=section_index,
            item_index=item_index,
        ) from exc

    discount = discount if discount is not None else ZERO
    tax_rate = tax_rate if tax_rate is not None else ZERO
    net = quantity * unit_price - discount
    if explicit_tax is not None:
        tax = quantize_money(explicit_tax)
    else:
        tax = quantize_money(net * tax_rate / _HUNDRED)
    line_total = quantize_money(net + tax)

    if supplied_total is not None and quantize_money(supplied_total) != line_total:
        message = (
            f"{label}: supplied line total {quantize_money(supplied_total)} "
            f"differs from computed {line_total}"
        )
        logger.warning("document %s: %s", number, message)
        warnings.append(message)

    return LineItem(
        description=description or "",
        quantity=quantity,
        unit_price=unit_price,
        line_total=line_total,
        unit=unit,
        tax_rate=tax_rate,
        tax_amount=tax,
        discount_amount=quantize_money(discount),
    )


def _totals(
    record: Mapping[str, object],
    sections: tuple[Section, ...],
    *,
    number: str,
    warnings: list[str],
) -> Totals:
    computed_grand = sum_money(section.total for section in sections)
    tax_total = sum_money(item.tax_amount for section in sections for item in section.all_items())
    nested = record.get("totals")
    supplied = nested if isinstance(nested, Mapping) else {}

    def _amount(nested_key: str, flat_key: str) -> Decimal | None:
        value = supplied.get(nested_key)
        if value is None:
            value = record.get(flat_key)
        try:
            amount = optional_amount(value, label=flat_key)
        except ValueError as exc:
            raise ValidationError(str(exc), document_number=number) from exc
        return quantize_money(amount) if amount is not None else None

    supplied_grand = _amount("grand_total", "total_amount")
    supplied_subtotal = _amount("subtotal", "subtotal")
    supplied_tax = _amount("tax_total", "tax_amount")
    paid = _amount("paid_amount", "paid_amount")
    balance = _amount("balance_due", "balance_due")

    grand_total = computed_grand
    if supplied_grand is not None:
        if supplied_grand != computed_grand:
            message = (
                f"supplied grand total {supplied_grand} differs from "
                f"sum of section totals {computed_grand}"
            )
            logger.warning("document %s: %s", number, message)
            warnings.append(message)
        grand_total = supplied_grand

    if balance is None and paid is not None:
        balance = quantize_money(grand_total - paid)

    return Totals(
        subtotal=(
            supplied_subtotal
            if supplied_subtotal is not None
            else quantize_money(computed_grand - tax_total)
        ),
        tax_total=supplied_tax if supplied_tax is not None else tax_total,
        grand_total=grand_total,
        paid_amount=paid,
        balance_due=balance,
    )


__all__ = ["FLAT_SECTION_TITLE", "build"]
