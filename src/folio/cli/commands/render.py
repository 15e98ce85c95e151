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

from pathlib import Path

import typer

from ...core.models import DocumentKind
from ...render.service import run
from ..core.common import _backend_callback, _ctx_value, _load_config, _load_record, _run_cli
from ..ui import console

_RENDER_HELP = (
    "Render a document record (JSON) to a paginated PDF.\n\n"
    "Examples:\n"
    "  folio render invoice.json --kind sectioned-invoice -o invoice.pdf\n"
    "  folio --paper letter render statement.json --kind statement\n"
    "  folio render boq.json --kind bill-of-quantities --backend browser\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_RENDER_HELP)(render)


def render(
    ctx: typer.Context,
    input_path: Path = typer.Argument(
        ...,
        metavar="INPUT",
        exists=True,
        dir_okay=False,
        readable=True,
        help="Document record as JSON.",
    ),
    kind: DocumentKind | None = typer.Option(
        None,
        "--kind",
        "-k",
        help="Document kind (defaults to the record's `kind` field).",
        rich_help_panel="Inputs",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output PDF path (defaults to <INPUT>.pdf).",
        rich_help_panel="Outputs",
    ),
    backend: str | None = typer.Option(
        None,
        "--backend",
        help="Rendering backend override (raster/browser).",
        callback=_backend_callback,
        rich_help_panel="Outputs",
    ),
) -> None:
    quiet_value = bool(_ctx_value(ctx, "quiet"))
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> int:
        config = _load_config(ctx, backend=backend)
        record = _load_record(input_path)
        output_path = output or input_path.with_suffix(".pdf")
        result = run(record, kind, config=config, output=output_path)
        for warning in result.warnings:
            console.print(f"[yellow]Warning:[/yellow] {warning}", highlight=False)
        if not result.ok:
            location = ""
            if result.failing_page_index is not None:
                location = f" on page {result.failing_page_index + 1}"
            raise RuntimeError(f"{result.error_kind} error{location}: {result.message}")
        if not quiet_value:
            console.print(f"{result.output_path} ({result.page_count} pages)")
        return 0

    _run_cli(_run, debug=debug_value)
