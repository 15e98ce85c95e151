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
from rich.table import Table

from ...core.models import DocumentKind
from ...documents.builder import build
from ...render.service import prepare
from ..core.common import _ctx_value, _load_config, _load_record, _run_cli
from ..ui import console

_PLAN_HELP = (
    "Show how a document record would be paginated, without rendering it.\n\n"
    "Examples:\n"
    "  folio plan invoice.json --kind sectioned-invoice\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_PLAN_HELP)(plan)


def plan(
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
) -> None:
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        config = _load_config(ctx)
        record = _load_record(input_path)
        kind_value = kind or record.get("kind")
        if kind_value is None:
            raise ValueError("--kind is required when the record has no `kind` field")
        doc = build(
            record,
            kind_value,
            issuer=config.document.issuer,
            currency=config.document.currency,
        )
        prepared = prepare(doc, config)
        page_plan = prepared.plan

        table = Table(
            title=f"{prepared.policy.title} {doc.metadata.number}",
            caption=f"{page_plan.page_count} pages, {page_plan.capacity}px usable per page",
        )
        table.add_column("Page", justify="right", style="accent")
        table.add_column("Block", justify="right")
        table.add_column("Type")
        table.add_column("Height", justify="right")
        table.add_column("Notes", style="muted")
        for page in page_plan.pages:
            for position, placement in enumerate(page.placements):
                notes = []
                if placement.measured.placeholder:
                    notes.append("placeholder")
                if placement.overflowed:
                    notes.append("overflow")
                table.add_row(
                    str(page.number) if position == 0 else "",
                    str(placement.block.index),
                    placement.block.type.value,
                    str(placement.height),
                    ", ".join(notes),
                )
            table.add_section()
        console.print(table)
        for warning in doc.warnings:
            console.print(f"[yellow]Warning:[/yellow] {warning}", highlight=False)

    _run_cli(_run, debug=debug_value)
