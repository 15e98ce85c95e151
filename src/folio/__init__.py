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

"""Paginated business-document rendering engine."""

from __future__ import annotations

from .core.errors import (
    FolioError as FolioError,
    LayoutError as LayoutError,
    MeasurementError as MeasurementError,
    OutputError as OutputError,
    RenderError as RenderError,
    RenderTimeoutError as RenderTimeoutError,
    ValidationError as ValidationError,
)
from .core.models import DocumentKind as DocumentKind, DocumentModel as DocumentModel
from .documents.builder import build as build
from .render.service import RenderResult as RenderResult, render_document as render_document, run as run

__all__ = [
    "DocumentKind",
    "DocumentModel",
    "FolioError",
    "LayoutError",
    "MeasurementError",
    "OutputError",
    "RenderError",
    "RenderResult",
    "RenderTimeoutError",
    "ValidationError",
    "build",
    "render_document",
    "run",
]
