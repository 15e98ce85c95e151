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

from ..core.errors import ValidationError
from ..core.models import Party
from ..core.validation import optional_str, require_mapping


def first_present(record: Mapping[str, object], *keys: str) -> object:
    """Return the first value under ``keys`` that is not None."""
    for key in keys:
        value = record.get(key)
        if value is not None:
            return value
    return None


def document_number(record: Mapping[str, object], *keys: str) -> str:
    try:
        number = optional_str(first_present(record, *keys), label=keys[0])
    except ValueError:
        number = None
    if not number:
        raise ValidationError(f"{keys[0]} must be a non-empty string")
    return number


def parse_party(value: object, *, label: str, default: Party | None = None) -> Party:
    if value is None:
        return default if default is not None else Party(name="")
    raw = require_mapping(value, label=label)
    name = optional_str(first_present(raw, "name", "company_name"), label=f"{label}.name")
    address: list[str] = []
    raw_address = first_present(raw, "address", "address_lines")
    if isinstance(raw_address, (list, tuple)):
        address.extend(str(line).strip() for line in raw_address if str(line).strip())
    elif raw_address is not None:
        text = optional_str(raw_address, label=f"{label}.address")
        if text:
            address.extend(line.strip() for line in text.splitlines() if line.strip())
    locality = [
        optional_str(raw.get(key), label=f"{label}.{key}") for key in ("city", "country")
    ]
    locality_line = ", ".join(part for part in locality if part)
    if locality_line:
        address.append(locality_line)
    return Party(
        name=name or (default.name if default is not None else ""),
        address=tuple(address),
        phone=optional_str(raw.get("phone"), label=f"{label}.phone"),
        email=optional_str(raw.get("email"), label=f"{label}.email"),
        tax_id=optional_str(first_present(raw, "tax_id", "pin", "tax_number"), label=f"{label}.tax_id"),
    )


__all__ = ["document_number", "first_present", "parse_party"]
