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

"""Run the full pipeline: build, decompose, measure, plan, render, assemble."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from ..config.loader import BACKENDS, AppConfig, load_app_config
from ..core.errors import FolioError, RenderError, RenderTimeoutError, ValidationError
from ..core.models import DocumentKind, DocumentModel
from ..documents.builder import build
from ..documents.kinds import KindPolicy, policy_for
from .assembler import Artifact, assemble, write_artifact
from .blocks import Block, decompose
from .browser import BrowserRenderer
from .chrome import ChromeTemplate, build_chrome
from .columns import Column, columns_for
from .geometry import Geometry
from .measure import BlockMeasurer, LayoutMetrics, MeasuredBlock, layout_metrics
from .planner import Page, PagePlan, plan
from .raster import RasterRenderer
from .surface import RasterSurface, slice_surface
from .text import FontSet, load_fonts

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    name: str

    def open(self) -> None: ...

    def close(self) -> None: ...

    def render(
        self,
        page: Page,
        geometry: Geometry | None = None,
        *,
        track_boundaries: bool = True,
    ) -> RasterSurface: ...


@dataclass(frozen=True)
class PreparedDocument:
    doc: DocumentModel
    policy: KindPolicy
    columns: tuple[Column, ...]
    fonts: FontSet
    metrics: LayoutMetrics
    chrome: ChromeTemplate
    blocks: tuple[Block, ...]
    measured: tuple[MeasuredBlock, ...]
    plan: PagePlan


@dataclass(frozen=True)
class RenderResult:
    ok: bool
    page_count: int = 0
    error_kind: str | None = None
    message: str | None = None
    failing_page_index: int | None = None
    document_number: str | None = None
    warnings: tuple[str, ...] = ()
    artifact: Artifact | None = None
    output_path: Path | None = None


def prepare(doc: DocumentModel, config: AppConfig) -> PreparedDocument:
    """Everything up to and including the page plan; no drawing happens here."""
    geometry = config.geometry
    spec = config.render
    policy = policy_for(doc.kind, config.section_breaks)
    columns = columns_for(doc, policy)
    fonts = load_fonts(spec.typography, geometry)
    metrics = layout_metrics(geometry, fonts, spec.table, columns)
    chrome = build_chrome(doc, policy, columns, metrics, fonts, spec.table)
    blocks = decompose(doc, policy, columns=columns)
    measurer = BlockMeasurer(
        metrics,
        fonts,
        asset_root=spec.asset_root,
        document_number=doc.metadata.number,
    )
    measured = measurer.measure_all(blocks)
    page_plan = plan(
        measured,
        geometry.content_height_px,
        chrome.header_height,
        chrome.footer_height,
        document_number=doc.metadata.number,
    )
    logger.info(
        "document %s: %d blocks planned onto %d pages",
        doc.metadata.number,
        len(blocks),
        page_plan.page_count,
    )
    return PreparedDocument(
        doc=doc,
        policy=policy,
        columns=columns,
        fonts=fonts,
        metrics=metrics,
        chrome=chrome,
        blocks=blocks,
        measured=measured,
        plan=page_plan,
    )


def make_renderer(prepared: PreparedDocument, config: AppConfig) -> Renderer:
    spec = config.render
    if spec.backend == "browser":
        return BrowserRenderer(
            doc=prepared.doc,
            policy=prepared.policy,
            columns=prepared.columns,
            geometry=config.geometry,
            typography=spec.typography,
            table=spec.table,
            timeout_seconds=spec.page_timeout_seconds,
            asset_root=spec.asset_root,
        )
    if spec.backend == "raster":
        return RasterRenderer(
            geometry=config.geometry,
            columns=prepared.columns,
            metrics=prepared.metrics,
            fonts=prepared.fonts,
            chrome=prepared.chrome,
            table=spec.table,
            asset_root=spec.asset_root,
        )
    raise ValueError(f"unknown render backend: {spec.backend} (expected one of {', '.join(BACKENDS)})")


class _RenderWorker:
    """A single-thread executor plus the renderer that lives on its thread."""

    def __init__(
        self,
        factory: Callable[[], Renderer],
        *,
        timeout_seconds: float,
        document_number: str,
    ) -> None:
        self._factory = factory
        self._timeout = timeout_seconds
        self._document_number = document_number
        self._executor: ThreadPoolExecutor | None = None
        self._renderer: Renderer | None = None
        self._stuck = False

    def __enter__(self) -> _RenderWorker:
        self._start()
        return self

    def __exit__(self, *_exc: object) -> None:
        self._stop()

    def restart(self) -> None:
        self._stop()
        self._start()

    def render(self, page: Page, *, track_boundaries: bool) -> RasterSurface:
        return self._call(
            lambda renderer: renderer.render(page, track_boundaries=track_boundaries),
            page_index=page.number - 1,
        )

    def _start(self) -> None:
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="folio-render")
        self._renderer = self._factory()
        self._stuck = False
        try:
            self._call(lambda renderer: renderer.open(), page_index=None)
        except BaseException:
            self._stop()
            raise

    def _stop(self) -> None:
        executor, renderer = self._executor, self._renderer
        self._executor = None
        self._renderer = None
        if executor is None:
            return
        try:
            if renderer is not None and not self._stuck:
                executor.submit(renderer.close).result(timeout=self._timeout)
        except FutureTimeoutError:
            self._stuck = True
            logger.warning(
                "document %s: %s renderer did not close within %gs; abandoning its thread",
                self._document_number,
                renderer.name,
                self._timeout,
            )
        finally:
            # A stuck capture cannot be interrupted; abandon its thread.
            executor.shutdown(wait=not self._stuck, cancel_futures=True)

    def _call(self, action: Callable[[Renderer], Any], *, page_index: int | None) -> Any:
        if self._executor is None or self._renderer is None:
            raise RenderError("render worker is not running", document_number=self._document_number)
        renderer = self._renderer
        future = self._executor.submit(action, renderer)
        try:
            return future.result(timeout=self._timeout)
        except FutureTimeoutError as exc:
            self._stuck = True
            raise RenderTimeoutError(
                f"page capture exceeded {self._timeout:g}s",
                document_number=self._document_number,
                page_index=page_index,
            ) from exc
        except RenderTimeoutError:
            raise
        except RenderError as exc:
            if exc.page_index is None:
                exc.page_index = page_index
            if exc.document_number is None:
                exc.document_number = self._document_number
            raise
        except (OSError, ValueError, RuntimeError) as exc:
            raise RenderError(
                f"{renderer.name} renderer failed: {exc}",
                document_number=self._document_number,
                page_index=page_index,
            ) from exc


def _capture(worker: _RenderWorker, page: Page, *, document_number: str) -> RasterSurface:
    try:
        return worker.render(page, track_boundaries=True)
    except RenderTimeoutError:
        if not page.has_overflow:
            raise
        logger.warning(
            "document %s: page %d timed out; retrying once without boundary tracking",
            document_number,
            page.number,
        )
        worker.restart()
        return worker.render(page, track_boundaries=False)


def _render_once(doc: DocumentModel, config: AppConfig) -> Artifact:
    prepared = prepare(doc, config)
    number = doc.metadata.number
    surfaces: list[RasterSurface] = []
    with ExitStack() as stack:
        worker = stack.enter_context(
            _RenderWorker(
                lambda: make_renderer(prepared, config),
                timeout_seconds=config.render.page_timeout_seconds,
                document_number=number,
            )
        )
        for page in prepared.plan.pages:
            surface = _capture(worker, page, document_number=number)
            surfaces.extend(slice_surface(surface, config.geometry.page_height_px))
    try:
        return assemble(
            surfaces,
            geometry=config.geometry,
            title=f"{prepared.policy.title} {number}",
            author=doc.metadata.issuer.name,
            created=doc.metadata.issue_date,
            page_labels=config.render.page_labels,
        )
    except RenderError as exc:
        exc.document_number = exc.document_number or number
        raise


def render_document(doc: DocumentModel, config: AppConfig | None = None) -> Artifact:
    """Render ``doc`` to a PDF artifact, restarting the pipeline on failure.

    ``render.retries`` extra attempts are made for render errors; validation
    errors are never retried.
    """
    config = config or load_app_config()
    attempts = 1 + max(0, config.render.retries)
    for attempt in range(1, attempts + 1):
        try:
            return _render_once(doc, config)
        except RenderError as exc:
            if attempt >= attempts:
                raise
            logger.warning(
                "document %s: render attempt %d/%d failed (%s); restarting",
                doc.metadata.number,
                attempt,
                attempts,
                exc,
            )
    raise RenderError("render did not run", document_number=doc.metadata.number)


def run(
    record: DocumentModel | Mapping[str, object],
    kind: DocumentKind | str | None = None,
    *,
    config: AppConfig | None = None,
    output: str | Path | None = None,
) -> RenderResult:
    """Build and render, reporting the outcome as a :class:`RenderResult`."""
    config = config or load_app_config()
    doc: DocumentModel | None = None
    try:
        if isinstance(record, DocumentModel):
            doc = record
        else:
            if kind is None and isinstance(record, Mapping):
                kind = record.get("kind")
            if kind is None:
                raise ValidationError("kind is required when rendering a raw record")
            doc = build(
                record,
                kind,
                issuer=config.document.issuer,
                currency=config.document.currency,
            )
        artifact = render_document(doc, config)
        written = write_artifact(artifact, output) if output is not None else None
    except FolioError as exc:
        logger.error("render failed: %s", exc)
        return RenderResult(
            ok=False,
            error_kind=exc.kind,
            message=exc.message,
            failing_page_index=exc.page_index,
            document_number=exc.document_number or (doc.metadata.number if doc else None),
        )
    return RenderResult(
        ok=True,
        page_count=artifact.page_count,
        document_number=doc.metadata.number,
        warnings=doc.warnings,
        artifact=artifact,
        output_path=written,
    )


__all__ = [
    "BACKENDS",
    "PreparedDocument",
    "RenderResult",
    "Renderer",
    "make_renderer",
    "prepare",
    "render_document",
    "run",
]
