from __future__ import annotations

import pytest

from geofacts.domain.model import CanonicalEntity, Iso3166_1, SourceId
from geofacts.domain.reconciliation import (
    AliasTable,
    DiagnosticKind,
    DiagnosticsReport,
    SovereigntyForest,
    SovereigntyGraphBuilder,
    find_forest_problems,
    validate_forest,
)
from geofacts.errors import ForestInvalid, SourceUnavailable
from tests.support.records import (
    ALIASES,
    REGIONS,
    alias_table,
    region,
    required_records,
    sovereign_state,
    un_member,
)


def _builder(diagnostics: DiagnosticsReport | None = None) -> SovereigntyGraphBuilder:
    return SovereigntyGraphBuilder(
        aliases=alias_table(),
        diagnostics=diagnostics if diagnostics is not None else DiagnosticsReport(),
    )


def _build(builder: SovereigntyGraphBuilder, **overrides: object) -> SovereigntyForest:
    records = {source.value: value for source, value in required_records().items()}
    records.update(overrides)
    return builder.build(**records)  # type: ignore[arg-type]


def _entity(
    code: str, *, sovereignty: str | None = None, un_member: bool = False
) -> CanonicalEntity:
    return CanonicalEntity(
        name=code.upper(),
        state_name=code.upper(),
        iso_3166_1=Iso3166_1(a2=code.upper(), a3=f"{code.upper()}X", num=1),
        sovereignty=sovereignty,
        un_member=un_member,
    )


def test_dependent_territory_points_at_its_sovereign() -> None:
    forest = _build(_builder())

    aland = forest.entities.get("ax")
    assert aland is not None
    assert aland.sovereignty == "fi"
    assert not aland.un_member
    assert not aland.is_root

    finland = forest.entities.get("fi")
    assert finland is not None
    assert finland.is_root
    assert finland.un_member


def test_every_region_becomes_exactly_one_entity() -> None:
    forest = _build(_builder())

    assert forest.entities.codes() == ("ax", "dk", "fi", "gl", "no", "se", "sj")
    assert {entity.code for entity in forest.entities.roots()} == {"dk", "fi", "no", "se"}


def test_region_fields_are_carried_onto_entities() -> None:
    forest = _build(_builder())

    greenland = forest.entities.get("gl")
    assert greenland is not None
    assert greenland.iso_3166_1 == Iso3166_1(a2="GL", a3="GRL", num=304)
    assert greenland.iso_3166_2 == "ISO 3166-2:GL"
    assert greenland.tld == (".gl",)
    assert greenland.sovereignty == "dk"


def test_forest_matcher_knows_every_entity() -> None:
    forest = _build(_builder())

    assert forest.matcher.known_codes == frozenset(forest.entities.codes())


def test_membership_comes_from_un_list_not_sovereign_states_flag() -> None:
    records = required_records()
    un_members = [item for item in records[SourceId.UN_MEMBERS] if item.raw_name != "Sweden"]

    forest = _build(_builder(), un_members=un_members)

    sweden = forest.entities.get("se")
    assert sweden is not None
    assert sweden.is_root
    assert not sweden.un_member


@pytest.mark.parametrize("missing", ["un_members", "sovereign_states", "regions"])
def test_missing_required_source_is_fatal(missing: str) -> None:
    with pytest.raises(SourceUnavailable) as excinfo:
        _build(_builder(), **{missing: None})

    assert excinfo.value.source_id == missing


def test_empty_required_source_is_fatal() -> None:
    with pytest.raises(SourceUnavailable, match="no records"):
        _build(_builder(), regions=[])


def test_unresolvable_sovereignty_excludes_region_with_diagnostic() -> None:
    diagnostics = DiagnosticsReport()
    atlantis = region("Atlantis", "at", "ATL", 999, "Poseidon")
    regions = [*required_records()[SourceId.REGIONS], atlantis]

    forest = _build(_builder(diagnostics), regions=regions)

    assert "at" not in forest.entities
    (diagnostic,) = diagnostics.of_kind(DiagnosticKind.SOVEREIGNTY_UNRESOLVED)
    assert diagnostic.raw_name == "Atlantis"
    assert "Poseidon" in diagnostic.reason


def test_missing_sovereignty_text_excludes_region() -> None:
    diagnostics = DiagnosticsReport()
    regions = [*required_records()[SourceId.REGIONS], region("Nowhere", "nw", "NWH", 1, None)]

    forest = _build(_builder(diagnostics), regions=regions)

    assert "nw" not in forest.entities
    assert diagnostics.of_kind(DiagnosticKind.SOVEREIGNTY_UNRESOLVED)[0].reason == (
        "missing sovereignty"
    )


def test_malformed_region_becomes_diagnostic() -> None:
    diagnostics = DiagnosticsReport()
    regions = [*required_records()[SourceId.REGIONS], region("Broken", "bx", "B1", 5, "Finland")]

    forest = _build(_builder(diagnostics), regions=regions)

    assert "bx" not in forest.entities
    assert len(diagnostics.of_kind(DiagnosticKind.INVALID_REGION)) == 1


def test_unmatched_sovereign_state_becomes_diagnostic() -> None:
    diagnostics = DiagnosticsReport()
    states = [
        *required_records()[SourceId.SOVEREIGN_STATES],
        sovereign_state("Atlantis", "Kingdom of Atlantis"),
    ]

    _build(_builder(diagnostics), sovereign_states=states)

    (diagnostic,) = diagnostics.of_kind(DiagnosticKind.MATCH_UNRESOLVED)
    assert diagnostic.dataset == SourceId.SOVEREIGN_STATES
    assert diagnostic.raw_name == "Kingdom of Atlantis"


def test_duplicate_region_codes_are_fatal() -> None:
    regions = [
        *required_records()[SourceId.REGIONS],
        region("Suomi", "fi", "FIN", 246, "UN member state"),
    ]

    with pytest.raises(ForestInvalid) as excinfo:
        _build(_builder(), regions=regions)

    assert any("duplicate code 'fi'" in problem for problem in excinfo.value.problems)


def test_find_forest_problems_accepts_valid_forest() -> None:
    entities = [_entity("fi", un_member=True), _entity("ax", sovereignty="fi")]

    assert find_forest_problems(entities) == []


def test_find_forest_problems_reports_dangling_reference() -> None:
    problems = find_forest_problems([_entity("ax", sovereignty="zz")])

    assert problems == ["'ax' references missing sovereign 'zz'"]


def test_find_forest_problems_reports_multi_hop_chain() -> None:
    entities = [_entity("fi"), _entity("ax", sovereignty="fi"), _entity("xx", sovereignty="ax")]

    assert find_forest_problems(entities) == ["'xx' references non-root sovereign 'ax'"]


def test_find_forest_problems_reports_cycles() -> None:
    entities = [_entity("aa", sovereignty="bb"), _entity("bb", sovereignty="aa")]

    problems = find_forest_problems(entities)

    assert any(problem.startswith("sovereignty cycle") for problem in problems)


def test_find_forest_problems_reports_self_reference() -> None:
    problems = find_forest_problems([_entity("aa", sovereignty="aa")])

    assert "'aa' references itself as sovereign" in problems


def test_find_forest_problems_reports_dependent_un_member() -> None:
    entities = [_entity("fi", un_member=True), _entity("ax", sovereignty="fi", un_member=True)]

    assert find_forest_problems(entities) == ["'ax' is a UN member but depends on 'fi'"]


def test_validate_forest_raises_with_every_problem() -> None:
    entities = [_entity("ax", sovereignty="zz"), _entity("gl", sovereignty="yy")]

    with pytest.raises(ForestInvalid) as excinfo:
        validate_forest(entities, problems=["duplicate code 'fi'"])

    assert len(excinfo.value.problems) == 3


def test_dependents_of_a_dropped_root_are_excluded_not_fatal() -> None:
    diagnostics = DiagnosticsReport()
    regions = [
        region(*row) if row[1] != "fi" else region(*row[:4], "", row[5]) for row in REGIONS
    ]

    forest = _build(_builder(diagnostics), regions=regions)

    assert forest.entities.codes() == ("dk", "gl", "no", "se", "sj")
    unresolved = diagnostics.of_kind(DiagnosticKind.SOVEREIGNTY_UNRESOLVED)
    assert [item.raw_name for item in unresolved] == ["Finland", "Åland"]
    assert unresolved[1].candidates == ("fi",)


def test_sovereign_known_only_from_aliases_does_not_become_a_target() -> None:
    diagnostics = DiagnosticsReport()
    builder = SovereigntyGraphBuilder(
        aliases=AliasTable.from_mapping({**ALIASES, "at": ["Atlantis"]}),
        diagnostics=diagnostics,
    )
    states = [
        *required_records()[SourceId.SOVEREIGN_STATES],
        sovereign_state("Atlantis", "Kingdom of Atlantis"),
    ]
    regions = [
        *required_records()[SourceId.REGIONS],
        region("Poseidonia", "pd", "PSD", 998, "Atlantis"),
    ]

    forest = _build(builder, sovereign_states=states, regions=regions)

    assert "pd" not in forest.entities
    (unmatched,) = diagnostics.of_kind(DiagnosticKind.MATCH_UNRESOLVED)
    assert unmatched.candidates == ("at",)
    (unresolved,) = diagnostics.of_kind(DiagnosticKind.SOVEREIGNTY_UNRESOLVED)
    assert unresolved.raw_name == "Poseidonia"


def test_unmatched_un_members_are_reported(caplog: pytest.LogCaptureFixture) -> None:
    diagnostics = DiagnosticsReport()
    un_members = [*required_records()[SourceId.UN_MEMBERS], un_member("Atlantis")]

    with caplog.at_level("WARNING"):
        forest = _build(_builder(diagnostics), un_members=un_members)

    assert len(forest.entities) == len(REGIONS)
    (diagnostic,) = diagnostics.of_kind(DiagnosticKind.UN_MEMBER_UNMATCHED)
    assert diagnostic.raw_name == "Atlantis"
    assert diagnostic.dataset == SourceId.UN_MEMBERS
    assert "Matched 4 of 5 UN members" in caplog.text
    assert "unmatched: Atlantis" in caplog.text
