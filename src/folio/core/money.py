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

from dataclasses import dataclass
from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation
from typing import Iterable

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


@dataclass(frozen=True)
class Currency:
    code: str
    symbol: str
    name: str


SUPPORTED_CURRENCIES: dict[str, Currency] = {
    "KES": Currency(code="KES", symbol="KES ", name="Kenyan Shilling"),
    "USD": Currency(code="USD", symbol="$", name="US Dollar"),
    "EUR": Currency(code="EUR", symbol="€", name="Euro"),
    "GBP": Currency(code="GBP", symbol="£", name="British Pound"),
}
DEFAULT_CURRENCY = "KES"


def parse_amount(value: object, *, label: str = "amount") -> Decimal:
    """Strictly convert a numeric value to Decimal.

    Strings are parsed as decimal literals, floats go through ``str`` to avoid
    binary float artifacts. Booleans, NaN and infinities are rejected.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{label} must be numeric")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            raise ValueError(f"{label} must be numeric")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"{label} must be numeric") from None
    else:
        raise ValueError(f"{label} must be numeric")
    if not result.is_finite():
        raise ValueError(f"{label} must be finite")
    return result


def optional_amount(value: object, *, label: str = "amount") -> Decimal | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_amount(value, label=label)


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_EVEN)


def sum_money(values: Iterable[Decimal]) -> Decimal:
    """Accumulate in full precision and round once at the end."""
    total = Decimal("0")
    for value in values:
        total += value
    return quantize_money(total)


def resolve_currency(code: str | None) -> Currency:
    normalized = (code or DEFAULT_CURRENCY).strip().upper()
    known = SUPPORTED_CURRENCIES.get(normalized)
    if known is not None:
        return known
    return Currency(code=normalized, symbol=f"{normalized} ", name=normalized)


def format_money(value: Decimal, currency: str | None = None) -> str:
    cur = resolve_currency(currency)
    amount = quantize_money(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}{cur.symbol}{abs(amount):,.2f}"


def format_quantity(value: Decimal) -> str:
    """Quantity with up to three decimals and no trailing zeros."""
    text = f"{value.quantize(Decimal('0.001'), rounding=ROUND_HALF_EVEN):f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


__all__ = [
    "CENT",
    "Currency",
    "DEFAULT_CURRENCY",
    "SUPPORTED_CURRENCIES",
    "ZERO",
    "format_money",
    "format_quantity",
    "optional_amount",
    "parse_amount",
    "quantize_money",
    "resolve_currency",
    "sum_money",
]
