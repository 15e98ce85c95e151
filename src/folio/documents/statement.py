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

"""Customer statements: merged debit/credit stream with running balance."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ..core.dates import format_date, optional_date, parse_date
from ..core.errors import ValidationError
from ..core.models import (
    AgingSummary,
    DocumentKind,
    DocumentMetadata,
    DocumentModel,
    Party,
    Section,
    StatementEntry,
    Totals,
)
from ..core.money import DEFAULT_CURRENCY, ZERO, optional_amount, parse_amount, quantize_money
from ..core.validation import optional_str, require_list, require_mapping
from .common import first_present, parse_party

logger = logging.getLogger(__name__)

STATEMENT_SECTION_TITLE = "Account activity"
DEFAULT_STATEMENT_TERMS = (
    "Please remit payment for any outstanding amounts. "
    "Contact us if you have any questions about this statement."
)


@dataclass(frozen=True)
class _Transaction:
    entry_date: date
    reference: str
    description: str
    debit: Decimal
    credit: Decimal


def build_statement(
    record: Mapping[str, object],
    *,
    issuer: Party | None = None,
    currency: str | None = None,
) -> DocumentModel:
    """Merge invoices (debits) and payments (credits) into a statement.

    Entries are ordered by date; ties keep insertion order, invoices before
    payments. The final running balance is the statement grand total.
    """
    try:
        statement_date = parse_date(
            first_present(record, "statement_date", "date"), label="statement_date"
        )
        customer_raw = first_present(record, "customer", "counterparty", "client")
        customer = parse_party(customer_raw, label="customer")
        number = optional_str(first_present(record, "number", "document_number"), label="number")
        if not number:
            number = _default_number(customer_raw, customer, statement_date)
        raw_currency = optional_str(record.get("currency"), label="currency")
        metadata = DocumentMetadata(
            issuer=parse_party(
                first_present(record, "issuer", "company"), label="issuer", default=issuer
            ),
            counterparty=customer,
            number=number,
            issue_date=statement_date,
            currency=(raw_currency or currency or DEFAULT_CURRENCY).upper(),
        )
        invoices = require_list(record.get("invoices", []), label="invoices")
        payments = require_list(record.get("payments", []), label="payments")
        notes = optional_str(record.get("notes"), label="notes")
        terms = optional_str(first_present(record, "terms_and_conditions", "terms"), label="terms")
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc

    transactions = [
        *(_invoice_transaction(raw, index, number) for index, raw in enumerate(invoices)),
        *(_payment_transaction(raw, index, number) for index, raw in enumerate(payments)),
    ]
    # list.sort is stable: equal dates keep insertion order.
    transactions.sort(key=lambda txn: txn.entry_date)

    entries: list[StatementEntry] = []
    balance = ZERO
    for txn in transactions:
        balance = balance + txn.debit - txn.credit
        entries.append(
            StatementEntry(
                entry_date=txn.entry_date,
                reference=txn.reference,
                description=txn.description,
                debit=txn.debit,
                credit=txn.credit,
                balance=balance,
            )
        )
    final_balance = entries[-1].balance if entries else ZERO
    aging = compute_aging(invoices, statement_date, number=number)
    logger.debug(
        "statement %s: %d entries, final balance %s", number, len(entries), final_balance
    )

    return DocumentModel(
        kind=DocumentKind.STATEMENT,
        metadata=metadata,
        sections=(Section(title=STATEMENT_SECTION_TITLE),),
        totals=Totals(
            subtotal=final_balance,
            tax_total=ZERO,
            grand_total=final_balance,
            running_balances=tuple(entry.balance for entry in entries),
        ),
        entries=tuple(entries),
        aging=aging,
        notes=notes or f"Statement of account as of {format_date(statement_date)}.",
        terms=terms or DEFAULT_STATEMENT_TERMS,
    )


def compute_aging(
    invoices: list[object],
    statement_date: date,
    *,
    number: str | None = None,
) -> AgingSummary:
    """Bucket outstanding invoice amounts by days past due at ``statement_date``."""
    buckets = [ZERO] * 5
    for index, raw in enumerate(invoices):
        label = f"invoices[{index}]"
        try:
            invoice = require_mapping(raw, label=label)
            total = parse_amount(invoice.get("total_amount"), label=f"{label}.total_amount")
            paid = optional_amount(invoice.get("paid_amount"), label=f"{label}.paid_amount")
            due = optional_date(invoice.get("due_date"), label=f"{label}.due_date")
        except ValueError as exc:
            raise ValidationError(str(exc), document_number=number, item_index=index) from exc
        outstanding = quantize_money(total - (paid or ZERO))
        if outstanding <= 0:
            continue
        days_overdue = (statement_date - due).days if due is not None else 0
        buckets[_bucket_index(days_overdue)] += outstanding
    return AgingSummary(*buckets)


def _bucket_index(days_overdue: int) -> int:
    if days_overdue <= 0:
        return 0
    if days_overdue <= 30:
        return 1
    if days_overdue <= 60:
        return 2
    if days_overdue <= 90:
        return 3
    return 4


def _invoice_transaction(raw: object, index: int, number: str) -> _Transaction:
    label = f"invoices[{index}]"
    try:
        invoice = require_mapping(raw, label=label)
        reference = optional_str(
            first_present(invoice, "number", "invoice_number"), label=f"{label}.number"
        )
        entry_date = parse_date(
            first_present(invoice, "date", "invoice_date"), label=f"{label}.date"
        )
        amount = parse_amount(invoice.get("total_amount"), label=f"{label}.total_amount")
    except ValueError as exc:
        raise ValidationError(
            str(exc), document_number=number, section_index=0, item_index=index
        ) from exc
    reference = reference or f"INV-{index + 1}"
    return _Transaction(
        entry_date=entry_date,
        reference=reference,
        description=f"Invoice {reference}",
        debit=quantize_money(amount),
        credit=ZERO,
    )


def _payment_transaction(raw: object, index: int, number: str) -> _Transaction:
    label = f"payments[{index}]"
    try:
        payment = require_mapping(raw, label=label)
        reference = optional_str(
            first_present(payment, "number", "payment_number", "id"), label=f"{label}.number"
        )
        entry_date = parse_date(
            first_present(payment, "date", "payment_date"), label=f"{label}.date"
        )
        amount = parse_amount(payment.get("amount"), label=f"{label}.amount")
        method = optional_str(first_present(payment, "method", "payment_method"), label=f"{label}.method")
    except ValueError as exc:
        raise ValidationError(
            str(exc), document_number=number, section_index=0, item_index=index
        ) from exc
    return _Transaction(
        entry_date=entry_date,
        reference=reference or "PMT",
        description=f"Payment - {method or 'Cash'}",
        debit=ZERO,
        credit=quantize_money(amount),
    )


def _default_number(customer_raw: object, customer: Party, statement_date: date) -> str:
    code = None
    if isinstance(customer_raw, Mapping):
        code = optional_str(first_present(customer_raw, "customer_code", "id"), label="customer_code")
    key = code or customer.name.replace(" ", "-").upper() or "CUSTOMER"
    return f"STMT-{key}-{statement_date.isoformat()}"


__all__ = ["DEFAULT_STATEMENT_TERMS", "STATEMENT_SECTION_TITLE", "build_statement", "compute_aging"]
