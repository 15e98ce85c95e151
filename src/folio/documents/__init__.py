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

from .builder import FLAT_SECTION_TITLE, build
from .kinds import POLICIES, BreakPolicy, KindPolicy, policy_for, resolve_kind
from .statement import build_statement, compute_aging

__all__ = [
    "BreakPolicy",
    "FLAT_SECTION_TITLE",
    "KindPolicy",
    "POLICIES",
    "build",
    "build_statement",
    "compute_aging",
    "policy_for",
    "resolve_kind",
]
