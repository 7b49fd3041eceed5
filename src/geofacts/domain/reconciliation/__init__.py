"""Cross-source reconciliation of country and territory records.

Stage order:
1) build and validate the sovereignty forest from the required sources
2) aggregate optional dataset attributes onto the forest entities
3) seal the entity set and project the output views
"""

from .aggregate import AggregationResult, AttributeAggregator
from .aliases import AliasIndex, AliasTable
from .assemble import DatasetViews, assemble
from .contracts import Ambiguous, MatchKind, MatchResult, MatchStatus, Resolved, Unresolved
from .diagnostics import Diagnostic, DiagnosticKind, DiagnosticsReport
from .engine import ReconciliationEngine, ReconciliationResult, SourceSnapshot
from .extract import extract_slot_values, region_from_record
from .graph import (
    SovereigntyForest,
    SovereigntyGraphBuilder,
    find_forest_problems,
    validate_forest,
)
from .normalize import normalize_name, normalized_names
from .resolve import EntityMatcher

__all__ = [
    "AggregationResult",
    "AliasIndex",
    "AliasTable",
    "Ambiguous",
    "AttributeAggregator",
    "DatasetViews",
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticsReport",
    "EntityMatcher",
    "MatchKind",
    "MatchResult",
    "MatchStatus",
    "ReconciliationEngine",
    "ReconciliationResult",
    "Resolved",
    "SourceSnapshot",
    "SovereigntyForest",
    "SovereigntyGraphBuilder",
    "Unresolved",
    "assemble",
    "extract_slot_values",
    "find_forest_problems",
    "normalize_name",
    "normalized_names",
    "region_from_record",
    "validate_forest",
]
