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

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

from ..core.models import DocumentKind, Party
from ..core.money import DEFAULT_CURRENCY
from ..documents.kinds import BreakPolicy
from ..render.geometry import DEFAULT_DPI, DEFAULT_MARGIN_MM, Geometry, geometry_for
from ..render.spec import RenderSpec, TableSpec, TypographySpec
from .installer import DEFAULT_PAPER_SIZE, resolve_config_path

BACKENDS = ("raster", "browser")


@dataclass(frozen=True)
class DocumentDefaults:
    currency: str = DEFAULT_CURRENCY
    issuer: Party | None = None


@dataclass(frozen=True)
class AppConfig:
    paper_size: str
    geometry: Geometry
    render: RenderSpec = field(default_factory=RenderSpec)
    document: DocumentDefaults = field(default_factory=DocumentDefaults)
    section_breaks: dict[DocumentKind, BreakPolicy] = field(default_factory=dict)
    source: Path | None = None


def load_app_config(
    path: str | Path | None = None,
    *,
    paper_size: str | None = None,
    backend: str | None = None,
) -> AppConfig:
    config_path = resolve_config_path(path, paper_size=paper_size)
    data = _load_toml(config_path)
    page_cfg = _get_dict(data, "page")
    render_cfg = _get_dict(data, "render")
    resolved_paper = (
        paper_size
        or _parse_optional_str(page_cfg.get("size"), field="page.size")
        or DEFAULT_PAPER_SIZE
    ).strip().upper()
    dpi = _parse_positive_int(render_cfg.get("dpi"), field="render.dpi", default=DEFAULT_DPI)
    geometry = _parse_geometry(page_cfg, paper_size=resolved_paper, dpi=dpi, override=bool(paper_size))
    config = AppConfig(
        paper_size=resolved_paper,
        geometry=geometry,
        render=_parse_render(render_cfg, _get_dict(data, "typography"), base_dir=config_path.parent),
        document=_parse_document(_get_dict(data, "document")),
        section_breaks=_parse_policies(_get_dict(data, "policies")),
        source=config_path,
    )
    if backend:
        config = apply_backend(config, backend)
    return config


def apply_backend(config: AppConfig, backend: str) -> AppConfig:
    normalized = _parse_backend(backend, field="backend")
    return replace(config, render=replace(config.render, backend=normalized))


def _parse_geometry(
    cfg: dict[str, object],
    *,
    paper_size: str,
    dpi: int,
    override: bool,
) -> Geometry:
    margin = _parse_positive_float(
        cfg.get("margin_mm"), field="page.margin_mm", default=DEFAULT_MARGIN_MM
    )
    width = None if override else _parse_optional_float(cfg.get("width_mm"), field="page.width_mm")
    height = (
        None if override else _parse_optional_float(cfg.get("height_mm"), field="page.height_mm")
    )
    try:
        return geometry_for(paper_size, width_mm=width, height_mm=height, margin_mm=margin, dpi=dpi)
    except ValueError as exc:
        raise ValueError(f"page: {exc}") from exc


def _parse_render(
    cfg: dict[str, object],
    typography_cfg: dict[str, object],
    *,
    base_dir: Path,
) -> RenderSpec:
    defaults = RenderSpec()
    asset_dir = _parse_optional_str(cfg.get("asset_dir"), field="render.asset_dir")
    return RenderSpec(
        backend=_parse_backend(cfg.get("backend", defaults.backend), field="render.backend"),
        page_timeout_seconds=_parse_positive_float(
            cfg.get("page_timeout_seconds"),
            field="render.page_timeout_seconds",
            default=defaults.page_timeout_seconds,
        ),
        retries=_parse_non_negative_int(cfg.get("retries"), field="render.retries", default=0),
        page_labels=_parse_bool(cfg.get("page_labels"), field="render.page_labels", default=True),
        typography=_parse_typography(typography_cfg, base_dir=base_dir),
        table=TableSpec(),
        asset_root=str(_resolve_relative(asset_dir, base_dir)) if asset_dir else None,
    )


def _parse_typography(cfg: dict[str, object], *, base_dir: Path) -> TypographySpec:
    defaults = TypographySpec()
    font_path = _parse_optional_str(cfg.get("font_path"), field="typography.font_path")
    bold_path = _parse_optional_str(cfg.get("bold_font_path"), field="typography.bold_font_path")
    return TypographySpec(
        font_path=str(_resolve_relative(font_path, base_dir)) if font_path else None,
        bold_font_path=str(_resolve_relative(bold_path, base_dir)) if bold_path else None,
        body_size_pt=_parse_positive_float(
            cfg.get("body_size_pt"), field="typography.body_size_pt", default=defaults.body_size_pt
        ),
        heading_size_pt=_parse_positive_float(
            cfg.get("heading_size_pt"),
            field="typography.heading_size_pt",
            default=defaults.heading_size_pt,
        ),
        title_size_pt=_parse_positive_float(
            cfg.get("title_size_pt"),
            field="typography.title_size_pt",
            default=defaults.title_size_pt,
        ),
        line_spacing=_parse_positive_float(
            cfg.get("line_spacing"), field="typography.line_spacing", default=defaults.line_spacing
        ),
    )


def _parse_document(cfg: dict[str, object]) -> DocumentDefaults:
    currency = _parse_optional_str(cfg.get("currency"), field="document.currency")
    issuer_name = _parse_optional_str(cfg.get("issuer_name"), field="document.issuer_name")
    issuer = None
    if issuer_name:
        address = cfg.get("issuer_address", [])
        if isinstance(address, str):
            address = [address]
        if not isinstance(address, list) or not all(isinstance(line, str) for line in address):
            raise ValueError("document.issuer_address must be a string or list of strings")
        issuer = Party(
            name=issuer_name,
            address=tuple(line.strip() for line in address if line.strip()),
            phone=_parse_optional_str(cfg.get("issuer_phone"), field="document.issuer_phone"),
            email=_parse_optional_str(cfg.get("issuer_email"), field="document.issuer_email"),
            tax_id=_parse_optional_str(cfg.get("issuer_tax_id"), field="document.issuer_tax_id"),
        )
    return DocumentDefaults(
        currency=(currency or DEFAULT_CURRENCY).upper(),
        issuer=issuer,
    )


def _parse_policies(cfg: dict[str, object]) -> dict[DocumentKind, BreakPolicy]:
    overrides: dict[DocumentKind, BreakPolicy] = {}
    for key, value in cfg.items():
        try:
            kind = DocumentKind(str(key).strip().lower())
        except ValueError:
            raise ValueError(f"policies.{key}: unknown document kind") from None
        if not isinstance(value, dict):
            raise ValueError(f"policies.{key} must be a table")
        raw = value.get("section_break")
        if raw is None:
            continue
        field_name = f"policies.{key}.section_break"
        if not isinstance(raw, str):
            raise ValueError(f"{field_name} must be 'never', 'preferred', or 'always'")
        try:
            overrides[kind] = BreakPolicy(raw.strip().lower())
        except ValueError:
            raise ValueError(f"{field_name} must be 'never', 'preferred', or 'always'") from None
    return overrides


def _resolve_relative(value: str, base_dir: Path) -> Path:
    path = Path(value).expanduser()
    if path.is_absolute():
        return path
    return base_dir / path


def _load_toml(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_dict(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if isinstance(value, dict):
        return value
    return {}


def _parse_backend(value: object, *, field: str) -> str:
    if not isinstance(value, str) or value.strip().lower() not in BACKENDS:
        raise ValueError(f"{field} must be one of: {', '.join(BACKENDS)}")
    return value.strip().lower()


def _parse_optional_str(value: object, *, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    normalized = value.strip()
    return normalized or None


def _parse_bool(value: object, *, field: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"{field} must be a boolean")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"{field} must be a boolean")
    raise ValueError(f"{field} must be a boolean")


def _parse_int_strict(value: object, *, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{field} must be an integer")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError(f"{field} must be an integer")
        try:
            return int(text)
        except ValueError as exc:
            raise ValueError(f"{field} must be an integer") from exc
    raise ValueError(f"{field} must be an integer")


def _parse_positive_int(value: object, *, field: str, default: int) -> int:
    if value is None:
        return default
    parsed = _parse_int_strict(value, field=field)
    if parsed <= 0:
        raise ValueError(f"{field} must be a positive integer")
    return parsed


def _parse_non_negative_int(value: object, *, field: str, default: int) -> int:
    if value is None:
        return default
    parsed = _parse_int_strict(value, field=field)
    if parsed < 0:
        raise ValueError(f"{field} must be a non-negative integer")
    return parsed


def _parse_optional_float(value: object, *, field: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as exc:
            raise ValueError(f"{field} must be a number") from exc
    raise ValueError(f"{field} must be a number")


def _parse_positive_float(value: object, *, field: str, default: float) -> float:
    parsed = _parse_optional_float(value, field=field)
    if parsed is None:
        return default
    if parsed <= 0:
        raise ValueError(f"{field} must be positive")
    return parsed


__all__ = [
    "AppConfig",
    "BACKENDS",
    "DocumentDefaults",
    "apply_backend",
    "load_app_config",
]
