"""Reconciliation engine: composes the stages in their required order.

The graph builder runs and validates first; aggregation passes only ever see a
valid forest; the assembler runs last and seals the entity set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from geofacts.domain.model import OPTIONAL_SOURCES, SourceId

from .aggregate import AttributeAggregator
from .assemble import assemble
from .diagnostics import DiagnosticsReport
from .graph import SovereigntyGraphBuilder

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from geofacts.domain.model import RawRecord

    from .aggregate import AggregationResult
    from .aliases import AliasTable
    from .assemble import DatasetViews
    from .graph import SovereigntyForest

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SourceSnapshot:
    """Records of every source for one run; ``None`` marks a source that failed."""

    records: Mapping[SourceId, Sequence[RawRecord] | None] = field(
        default_factory=dict["SourceId", "Sequence[RawRecord] | None"]
    )

    def get(self, source_id: SourceId) -> Sequence[RawRecord] | None:
        return self.records.get(source_id)


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    views: DatasetViews
    diagnostics: DiagnosticsReport
    aggregations: tuple[AggregationResult, ...] = ()


@dataclass(slots=True, kw_only=True)
class ReconciliationEngine:
    aliases: AliasTable
    diagnostics: DiagnosticsReport = field(default_factory=DiagnosticsReport)

    def build_forest(self, snapshot: SourceSnapshot) -> SovereigntyForest:
        builder = SovereigntyGraphBuilder(aliases=self.aliases, diagnostics=self.diagnostics)
        return builder.build(
            un_members=snapshot.get(SourceId.UN_MEMBERS),
            sovereign_states=snapshot.get(SourceId.SOVEREIGN_STATES),
            regions=snapshot.get(SourceId.REGIONS),
        )

    def aggregator(self, forest: SovereigntyForest) -> AttributeAggregator:
        return AttributeAggregator(
            entities=forest.entities,
            matcher=forest.matcher,
            diagnostics=self.diagnostics,
        )

    def reconcile(self, snapshot: SourceSnapshot) -> ReconciliationResult:
        """Run every stage synchronously over an already fetched snapshot."""

        forest = self.build_forest(snapshot)
        aggregator = self.aggregator(forest)
        aggregations: list[AggregationResult] = []
        for source_id in OPTIONAL_SOURCES:
            records = snapshot.get(source_id)
            if records is None:
                log.info("No records for optional source %s", source_id)
                continue
            aggregations.append(aggregator.aggregate(source_id, records))
        views = assemble(forest.entities)
        return ReconciliationResult(
            views=views,
            diagnostics=self.diagnostics,
            aggregations=tuple(aggregations),
        )
