from __future__ import annotations

import pytest

from geofacts.domain.model import SourceId
from geofacts.domain.reconciliation import (
    Ambiguous,
    EntityMatcher,
    MatchKind,
    Resolved,
    Unresolved,
    region_from_record,
)
from tests.support.records import REGIONS, alias_table, record, region


def _matcher() -> EntityMatcher:
    entities = [region_from_record(region(*row))[0] for row in REGIONS]
    return EntityMatcher.build(alias_table(), entities)


def test_known_raw_code_wins_over_name() -> None:
    result = _matcher().match("Sweden", " FI ")

    assert result == Resolved(code="fi", match_kind=MatchKind.CODE, matched_key="fi")


def test_unknown_raw_code_falls_back_to_name_lookup() -> None:
    result = _matcher().match("Suomi", "zz")

    assert isinstance(result, Resolved)
    assert result.code == "fi"
    assert result.match_kind is MatchKind.NAME
    assert result.matched_key == "suomi"


def test_entity_names_are_indexed_alongside_aliases() -> None:
    result = _matcher().match("Kingdom of Norway")

    assert isinstance(result, Resolved)
    assert result.code == "no"


def test_annotated_names_still_match() -> None:
    result = _matcher().match("Åland Islands[note 2]")

    assert isinstance(result, Resolved)
    assert result.code == "ax"


def test_shared_alias_is_ambiguous_and_never_tie_broken() -> None:
    result = _matcher().match("Danish Realm")

    assert isinstance(result, Ambiguous)
    assert result.candidates == ("dk", "gl")
    assert result.matched_keys == ("danish realm",)


def test_names_pointing_at_different_codes_are_ambiguous() -> None:
    result = _matcher().match("Finland", alternate_names=["Sverige"])

    assert isinstance(result, Ambiguous)
    assert result.candidates == ("fi", "se")


def test_unknown_name_is_unresolved() -> None:
    assert _matcher().match("Atlantis") == Unresolved()


@pytest.mark.parametrize("raw_name", [None, "", "(disputed)"])
def test_empty_name_is_unresolved(raw_name: str | None) -> None:
    assert _matcher().match(raw_name) == Unresolved(reason="empty_name")


def test_match_record_offers_alternate_names() -> None:
    raw = record(
        SourceId.CAPITALS, "Republic of Atlantis", alternate_names=["Ahvenanmaa"], capital="x"
    )

    result = _matcher().match_record(raw)

    assert isinstance(result, Resolved)
    assert result.code == "ax"


def test_ambiguous_requires_two_candidates() -> None:
    with pytest.raises(ValueError, match="at least two"):
        Ambiguous(candidates=("fi",))
