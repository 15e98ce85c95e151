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

import typer
from rich.table import Table

from ...documents.kinds import POLICIES, policy_for
from ..core.common import _ctx_value, _load_config, _run_cli
from ..ui import console


def register(app: typer.Typer) -> None:
    app.command(help="List document kinds and their layout policies.")(kinds)


def kinds(ctx: typer.Context) -> None:
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        config = _load_config(ctx)
        table = Table(title="Document kinds")
        table.add_column("Kind", style="accent")
        table.add_column("Title")
        table.add_column("Section break")
        table.add_column("Columns")
        table.add_column("Prices")
        for kind in POLICIES:
            policy = policy_for(kind, config.section_breaks)
            table.add_row(
                kind.value,
                policy.title,
                policy.section_break.value,
                ", ".join(policy.columns),
                "yes" if policy.show_prices else "no",
            )
        console.print(table)

    _run_cli(_run, debug=debug_value)
