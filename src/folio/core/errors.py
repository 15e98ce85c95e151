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


class FolioError(Exception):
    """Base error carrying where in a document the failure happened."""

    kind = "error"

    def __init__(
        self,
        message: str,
        *,
        document_number: str | None = None,
        page_index: int | None = None,
        block_index: int | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.document_number = document_number
        self.page_index = page_index
        self.block_index = block_index

    def context(self) -> dict[str, object]:
        details: dict[str, object] = {}
        if self.document_number:
            details["document_number"] = self.document_number
        if self.page_index is not None:
            details["page_index"] = self.page_index
        if self.block_index is not None:
            details["block_index"] = self.block_index
        return details

    def __str__(self) -> str:
        details = self.context()
        if not details:
            return self.message
        suffix = ", ".join(f"{key}={value}" for key, value in details.items())
        return f"{self.message} ({suffix})"


class ValidationError(FolioError, ValueError):
    kind = "validation"

    def __init__(
        self,
        message: str,
        *,
        document_number: str | None = None,
        section_index: int | None = None,
        item_index: int | None = None,
    ) -> None:
        super().__init__(message, document_number=document_number)
        self.section_index = section_index
        self.item_index = item_index

    def context(self) -> dict[str, object]:
        details = super().context()
        if self.section_index is not None:
            details["section_index"] = self.section_index
        if self.item_index is not None:
            details["item_index"] = self.item_index
        return details


class MeasurementError(FolioError):
    kind = "measurement"


class LayoutError(FolioError):
    kind = "layout"


class RenderError(FolioError, RuntimeError):
    kind = "render"


class OutputError(RenderError):
    kind = "output"


class RenderTimeoutError(RenderError):
    kind = "timeout"


__all__ = [
    "FolioError",
    "LayoutError",
    "MeasurementError",
    "OutputError",
    "RenderError",
    "RenderTimeoutError",
    "ValidationError",
]
