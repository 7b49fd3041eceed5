"""Download and render flag variants for every sovereign state.

Every failure here is per flag or per variant: the pipeline records a
diagnostic for the affected code and carries on with the others.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from geofacts.domain.reconciliation.diagnostics import Diagnostic, DiagnosticKind
from geofacts.errors import FlagTransformError, ImageDecodeFailure, ImageTooSmall

from .transform import DEFAULT_BORDER_WIDTH, VARIANTS, decode_image, encode_png, render_variant

if TYPE_CHECKING:
    from collections.abc import Iterable

    from geofacts.domain.model import CanonicalEntity
    from geofacts.domain.ports import FlagImageSource
    from geofacts.domain.reconciliation.diagnostics import DiagnosticsReport

    from .transform import FlagVariant

log = getLogger(__name__)

FLAGS_DATASET = "flags"


@dataclass(frozen=True, slots=True)
class RenderedFlag:
    code: str
    variants: dict[str, bytes] = field(default_factory=dict["str", "bytes"])


@dataclass(slots=True, kw_only=True)
class FlagPipeline:
    source: FlagImageSource
    diagnostics: DiagnosticsReport
    max_concurrency: int = 4
    border_width: int = DEFAULT_BORDER_WIDTH
    variants: tuple[FlagVariant, ...] = VARIANTS

    async def run(self, entities: Iterable[CanonicalEntity]) -> list[RenderedFlag]:
        """Render every variant for ``entities``; failed flags are left out."""

        semaphore = asyncio.Semaphore(self.max_concurrency)
        targets = list(entities)
        results = await asyncio.gather(*(self._one(entity, semaphore) for entity in targets))
        rendered = [flag for flag in results if flag is not None]
        log.info("Rendered flags for %d of %d sovereign states", len(rendered), len(targets))
        return rendered

    def render(self, code: str, data: bytes, *, name: str | None = None) -> RenderedFlag:
        """Render every variant of one flag.

        A variant that cannot be rendered is skipped with a diagnostic; when no
        variant renders, the first failure is raised for the whole flag.
        """

        image = decode_image(data, code=code)
        variants: dict[str, bytes] = {}
        failures: list[tuple[FlagVariant, FlagTransformError]] = []
        for variant in self.variants:
            try:
                rendered = render_variant(
                    image, variant, border_width=self.border_width, code=code
                )
            except FlagTransformError as exc:
                failures.append((variant, exc))
                continue
            variants[variant.name] = encode_png(rendered)

        if failures and not variants:
            raise failures[0][1]
        for variant, exc in failures:
            self.diagnostics.record(
                Diagnostic(
                    kind=_diagnostic_kind(exc),
                    dataset=FLAGS_DATASET,
                    reason=f"variant {variant.name}: {exc}",
                    raw_name=name,
                    raw_code=code,
                )
            )
        return RenderedFlag(code=code, variants=variants)

    async def _one(
        self, entity: CanonicalEntity, semaphore: asyncio.Semaphore
    ) -> RenderedFlag | None:
        async with semaphore:
            try:
                data = await self.source.fetch(entity)
                return await asyncio.to_thread(
                    self.render, entity.code, data, name=entity.name
                )
            except FlagTransformError as exc:
                kind = _diagnostic_kind(exc)
                reason = str(exc)
            except Exception as exc:
                log.exception("Flag for %s failed unexpectedly", entity)
                kind = DiagnosticKind.FLAG_UNAVAILABLE
                reason = f"{type(exc).__name__}: {exc}"

        self.diagnostics.record(
            Diagnostic(
                kind=kind,
                dataset=FLAGS_DATASET,
                reason=reason,
                raw_name=entity.name,
                raw_code=entity.code,
            )
        )
        return None


def _diagnostic_kind(exc: FlagTransformError) -> DiagnosticKind:
    if isinstance(exc, ImageDecodeFailure):
        return DiagnosticKind.IMAGE_DECODE_FAILURE
    if isinstance(exc, ImageTooSmall):
        return DiagnosticKind.IMAGE_TOO_SMALL
    return DiagnosticKind.FLAG_UNAVAILABLE
