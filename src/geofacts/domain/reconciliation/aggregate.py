"""Attribute aggregation onto the canonical entity set.

Responsibilities of this stage:
- match every record of one auxiliary dataset to a canonical code
- extract typed slot values and write them without overwriting
- report ambiguous, unresolved, unknown and conflicting records as diagnostics

Aggregation never creates entities; the sovereignty forest is authoritative for
which entities exist. One aggregator call handles one dataset, and different
datasets own disjoint slots, so calls may run concurrently.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from geofacts.domain.model import SLOT_BY_SOURCE, SlotWrite, SourceId

from .contracts import Resolved
from .diagnostics import Diagnostic, DiagnosticKind
from .extract import extract_slot_values

if TYPE_CHECKING:
    from collections.abc import Iterable

    from geofacts.domain.model import EntitySet, RawRecord

    from .diagnostics import DiagnosticsReport
    from .resolve import EntityMatcher

log = getLogger(__name__)


@dataclass(slots=True)
class AggregationResult:
    """Summary of one dataset's aggregation pass."""

    dataset: SourceId
    received: int = 0
    written: int = 0
    unchanged: int = 0
    conflicts: int = 0
    skipped: int = 0


@dataclass(slots=True, kw_only=True)
class AttributeAggregator:
    entities: EntitySet
    matcher: EntityMatcher
    diagnostics: DiagnosticsReport

    def aggregate(self, dataset: SourceId | str, records: Iterable[RawRecord]) -> AggregationResult:
        dataset = SourceId(dataset)
        slot = SLOT_BY_SOURCE.get(dataset)
        if slot is None:
            raise ValueError(f"Dataset {dataset} does not feed an attribute slot")

        result = AggregationResult(dataset=dataset)
        for record in records:
            result.received += 1
            match = self.matcher.match_record(record)
            if not isinstance(match, Resolved):
                self.diagnostics.record(Diagnostic.for_failed_match(record, match))
                result.skipped += 1
                continue
            if match.code not in self.entities:
                self.diagnostics.record(
                    Diagnostic.for_record(
                        DiagnosticKind.UNKNOWN_ENTITY,
                        record,
                        reason=f"resolved code {match.code!r} is not in the sovereignty forest",
                    )
                )
                result.skipped += 1
                continue
            try:
                values = extract_slot_values(dataset, record)
            except ValueError as exc:
                self.diagnostics.record(
                    Diagnostic.for_record(
                        DiagnosticKind.INVALID_ATTRIBUTES,
                        record,
                        reason=str(exc).splitlines()[0],
                    )
                )
                result.skipped += 1
                continue

            for value in values:
                write = self.entities.fill_slot(match.code, slot, value)
                if write.outcome is SlotWrite.WRITTEN:
                    result.written += 1
                elif write.outcome is SlotWrite.UNCHANGED:
                    result.unchanged += 1
                else:
                    result.conflicts += 1
                    self.diagnostics.record(
                        Diagnostic.for_record(
                            DiagnosticKind.ATTRIBUTE_CONFLICT,
                            record,
                            reason=(
                                f"{slot} of {match.code} already holds {write.existing!s}, "
                                f"ignoring {value!s}"
                            ),
                            candidates=(match.code,),
                        )
                    )

        log.info(
            "Aggregated %s: received=%d written=%d unchanged=%d conflicts=%d skipped=%d",
            dataset,
            result.received,
            result.written,
            result.unchanged,
            result.conflicts,
            result.skipped,
        )
        return result
