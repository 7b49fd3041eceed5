from __future__ import annotations

import json
from typing import TYPE_CHECKING

from geofacts.adapters.json_export import JsonExporter, diagnostics_document, view_documents
from geofacts.domain.model import SourceId
from geofacts.domain.reconciliation import (
    Diagnostic,
    DiagnosticKind,
    DiagnosticsReport,
    ReconciliationEngine,
)
from geofacts.flags import RenderedFlag
from tests.support.records import nordic_snapshot, record

if TYPE_CHECKING:
    from pathlib import Path

    from geofacts.domain.reconciliation import DatasetViews


def _views(engine: ReconciliationEngine) -> DatasetViews:
    snapshot = nordic_snapshot(
        capitals=[
            record(SourceId.CAPITALS, "Finland", capital="Helsinki", endonyms=["Helsingfors"])
        ],
        currencies=[
            record(SourceId.CURRENCIES, "Norway", currency_code="NOK", currency_name="Krone")
        ],
        calling_codes=[record(SourceId.CALLING_CODES, "Sweden", calling_code="+46")],
        languages=[
            record(
                SourceId.LANGUAGES,
                "Finland",
                languages=[{"name": "Finnish", "iso639_1": "fi", "iso639_3": "fin"}],
            )
        ],
        emojis=[record(SourceId.EMOJIS, "DK", raw_code="DK", emoji="🇩🇰")],
    )
    return engine.reconcile(snapshot).views


def test_view_documents_cover_every_view(engine: ReconciliationEngine) -> None:
    documents = {name: json.loads(data) for name, data in view_documents(_views(engine)).items()}

    assert sorted(documents) == [
        "calling_codes.json",
        "capitals.json",
        "currencies.json",
        "emojis.json",
        "languages.json",
        "regions.json",
        "sovereign_states.json",
    ]
    assert list(documents["regions.json"]) == ["ax", "dk", "fi", "gl", "no", "se", "sj"]
    assert documents["regions.json"]["ax"] == {
        "name": "Åland",
        "state_name": "Åland Islands",
        "un_member": False,
        "sovereignty": "fi",
        "iso_3166_1": {"a2": "AX", "a3": "ALA", "num": 248},
        "iso_3166_2": "ISO 3166-2:AX",
        "tld": [".ax"],
    }
    assert list(documents["sovereign_states.json"]) == ["dk", "fi", "no", "se"]
    assert documents["capitals.json"] == {"fi": {"name": "Helsinki", "endonyms": ["Helsingfors"]}}
    assert documents["currencies.json"]["no"][0]["code"] == "NOK"
    assert documents["calling_codes.json"] == {"se": "+46"}
    assert documents["languages.json"]["fi"][0]["iso639_3"] == "fin"
    assert documents["emojis.json"] == {"dk": "🇩🇰"}


def test_exporter_writes_views_flags_and_diagnostics(
    engine: ReconciliationEngine, tmp_path: Path
) -> None:
    exporter = JsonExporter(tmp_path / "out")
    report = DiagnosticsReport()
    report.record(
        Diagnostic(
            kind=DiagnosticKind.MATCH_AMBIGUOUS,
            dataset="currencies",
            reason="multiple_alias_matches",
            raw_name="Danish Realm",
            candidates=("dk", "gl"),
        )
    )

    views = exporter.write_views(_views(engine))
    flags = exporter.write_flags([RenderedFlag("fi", {"round": b"png-a", "round_bl": b"png-b"})])
    diagnostics = exporter.write_diagnostics(report)

    assert len(views) == 7
    assert (tmp_path / "out" / "flags" / "fi" / "round_bl.png").read_bytes() == b"png-b"
    assert len(flags) == 2
    assert json.loads(diagnostics.read_text(encoding="utf-8")) == [
        {
            "kind": "match_ambiguous",
            "dataset": "currencies",
            "reason": "multiple_alias_matches",
            "raw_name": "Danish Realm",
            "raw_code": None,
            "candidates": ["dk", "gl"],
        }
    ]


def test_empty_report_serializes_to_empty_list() -> None:
    assert json.loads(diagnostics_document(DiagnosticsReport())) == []
