"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from geofacts.adapters.http_resilience import default_client_factory
from geofacts.adapters.json_export import JsonExporter
from geofacts.adapters.un import UnMembersExtractor
from geofacts.adapters.wikipedia import (
    CallingCodesExtractor,
    CapitalsExtractor,
    CurrenciesExtractor,
    EmojisExtractor,
    GalleryFlagSource,
    LanguagesExtractor,
    RegionsExtractor,
    SovereignStatesExtractor,
)
from geofacts.config import get_sources_config, get_storage_config
from geofacts.domain.model import OPTIONAL_SOURCES, REQUIRED_SOURCES, SourceId
from geofacts.domain.reconciliation import (
    AliasTable,
    Diagnostic,
    DiagnosticKind,
    DiagnosticsReport,
    ReconciliationEngine,
    SourceSnapshot,
    assemble,
)
from geofacts.errors import OptionalSourceUnavailable, SourceUnavailable
from geofacts.flags import FlagPipeline
from geofacts.flags.transform import DEFAULT_BORDER_WIDTH

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from geofacts.adapters.http_resilience import ClientFactory, ResilientClient
    from geofacts.config import SourcesConfig, StorageConfig
    from geofacts.domain.model import RawRecord
    from geofacts.domain.ports import SourceExtractor
    from geofacts.domain.reconciliation import (
        AggregationResult,
        AttributeAggregator,
        DatasetViews,
    )
    from geofacts.flags import RenderedFlag

log = getLogger(__name__)

_SOURCE_ORDER = tuple(SourceId)


@dataclass(frozen=True, slots=True)
class CollectResult:
    views: DatasetViews
    diagnostics: DiagnosticsReport
    aggregations: tuple[AggregationResult, ...]
    flags: tuple[RenderedFlag, ...]
    written: tuple[Path, ...]


def build_extractors(
    sources: SourcesConfig,
    *,
    wikipedia: ResilientClient,
    un: ResilientClient,
) -> dict[SourceId, SourceExtractor]:
    urls = sources.urls
    return {
        SourceId.UN_MEMBERS: UnMembersExtractor(client=un, url=urls.un_members),
        SourceId.SOVEREIGN_STATES: SovereignStatesExtractor(
            client=wikipedia, url=urls.sovereign_states
        ),
        SourceId.REGIONS: RegionsExtractor(client=wikipedia, url=urls.regions),
        SourceId.CAPITALS: CapitalsExtractor(client=wikipedia, url=urls.capitals),
        SourceId.CURRENCIES: CurrenciesExtractor(client=wikipedia, url=urls.currencies),
        SourceId.CALLING_CODES: CallingCodesExtractor(client=wikipedia, url=urls.calling_codes),
        SourceId.LANGUAGES: LanguagesExtractor(
            client=wikipedia, url=urls.language_zones, codes_url=urls.language_codes
        ),
        SourceId.EMOJIS: EmojisExtractor(client=wikipedia, url=urls.emojis),
    }


async def fetch_required(
    extractors: Mapping[SourceId, SourceExtractor],
) -> dict[SourceId, list[RawRecord]]:
    """Fetch every required source concurrently; the first failure aborts the rest."""

    required = [source_id for source_id in _SOURCE_ORDER if source_id in REQUIRED_SOURCES]
    for source_id in required:
        if source_id not in extractors:
            raise SourceUnavailable(source_id, "no extractor configured")

    tasks: dict[SourceId, asyncio.Task[list[RawRecord]]] = {}
    try:
        async with asyncio.TaskGroup() as group:
            for source_id in required:
                tasks[source_id] = group.create_task(
                    _fetch_required(source_id, extractors[source_id])
                )
    except ExceptionGroup as errors:
        unavailable = [error for error in errors.exceptions if isinstance(error, SourceUnavailable)]
        if unavailable:
            raise unavailable[0] from errors
        raise
    return {source_id: task.result() for source_id, task in tasks.items()}


async def _fetch_required(source_id: SourceId, extractor: SourceExtractor) -> list[RawRecord]:
    try:
        records = await extractor.extract()
    except (httpx.HTTPError, ValueError) as exc:
        raise SourceUnavailable(source_id, str(exc) or type(exc).__name__) from exc
    if not records:
        raise SourceUnavailable(source_id, "source returned no records")
    return records


async def aggregate_optional(
    extractors: Mapping[SourceId, SourceExtractor],
    aggregator: AttributeAggregator,
    *,
    max_concurrency: int,
) -> list[AggregationResult]:
    """Fetch and aggregate optional sources; failures only become diagnostics."""

    semaphore = asyncio.Semaphore(max_concurrency)
    pending = [
        _aggregate_optional(source_id, extractor, aggregator, semaphore)
        for source_id in OPTIONAL_SOURCES
        if (extractor := extractors.get(source_id)) is not None
    ]
    results = await asyncio.gather(*pending)
    return [result for result in results if result is not None]


async def _aggregate_optional(
    source_id: SourceId,
    extractor: SourceExtractor,
    aggregator: AttributeAggregator,
    semaphore: asyncio.Semaphore,
) -> AggregationResult | None:
    async with semaphore:
        try:
            records = await extractor.extract()
        except (httpx.HTTPError, ValueError) as exc:
            reason = str(exc) or type(exc).__name__
        except Exception as exc:
            log.exception("Optional source %s failed unexpectedly", source_id)
            reason = f"{type(exc).__name__}: {exc}"
        else:
            return aggregator.aggregate(source_id, records)

    error = OptionalSourceUnavailable(source_id, reason)
    aggregator.diagnostics.record(
        Diagnostic(
            kind=DiagnosticKind.OPTIONAL_SOURCE_UNAVAILABLE,
            dataset=source_id,
            reason=str(error),
        )
    )
    return None


async def collect_async(
    *,
    aliases: AliasTable,
    sources: SourcesConfig,
    output_dir: Path,
    border_width: int = DEFAULT_BORDER_WIDTH,
    with_flags: bool = True,
    client_factory: ClientFactory = default_client_factory,
) -> CollectResult:
    diagnostics = DiagnosticsReport()
    engine = ReconciliationEngine(aliases=aliases, diagnostics=diagnostics)
    flags: list[RenderedFlag] = []

    async with client_factory(sources.wikipedia) as wikipedia, client_factory(sources.un) as un:
        extractors = build_extractors(sources, wikipedia=wikipedia, un=un)
        required = await fetch_required(extractors)
        forest = engine.build_forest(SourceSnapshot(dict(required)))
        aggregations = await aggregate_optional(
            extractors,
            engine.aggregator(forest),
            max_concurrency=sources.max_concurrency,
        )
        views = assemble(forest.entities)
        if with_flags:
            pipeline = FlagPipeline(
                source=GalleryFlagSource(client=wikipedia, url=sources.urls.flags),
                diagnostics=diagnostics,
                max_concurrency=sources.max_concurrency,
                border_width=border_width,
            )
            flags = await pipeline.run(views.sovereign_states.values())

    exporter = JsonExporter(output_dir)
    written = [
        *exporter.write_views(views),
        *exporter.write_flags(flags),
        exporter.write_diagnostics(diagnostics),
    ]
    return CollectResult(
        views=views,
        diagnostics=diagnostics,
        aggregations=tuple(aggregations),
        flags=tuple(flags),
        written=tuple(written),
    )


def collect(
    *,
    output_dir: Path | None = None,
    aliases_path: Path | None = None,
    max_concurrency: int | None = None,
    border_width: int = DEFAULT_BORDER_WIDTH,
    with_flags: bool = True,
    client_factory: ClientFactory = default_client_factory,
) -> CollectResult:
    """Run one full collection: fetch, reconcile, export."""

    storage: StorageConfig = get_storage_config(output_dir=output_dir)
    sources = get_sources_config(
        storage=storage, aliases_path=aliases_path, max_concurrency=max_concurrency
    )
    aliases = AliasTable.load(sources.aliases_path)
    target = storage.output_path()
    log.info(
        "Starting collection: output=%s, aliases=%s, max_concurrency=%d, flags=%s",
        target,
        sources.aliases_path,
        sources.max_concurrency,
        with_flags,
    )

    result = asyncio.run(
        collect_async(
            aliases=aliases,
            sources=sources,
            output_dir=target,
            border_width=border_width,
            with_flags=with_flags,
            client_factory=client_factory,
        )
    )

    counts = result.diagnostics.counts()
    log.info(
        "Finished collection: regions=%d, sovereign_states=%d, flags=%d, diagnostics=%d",
        len(result.views.regions),
        len(result.views.sovereign_states),
        len(result.flags),
        sum(counts.values()),
    )
    return result
