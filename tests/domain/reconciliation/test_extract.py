from __future__ import annotations

import pytest

from geofacts.domain.model import CallingCode, Capital, Currency, FlagEmoji, Language, SourceId
from geofacts.domain.reconciliation import extract_slot_values, region_from_record
from tests.support.records import record, region


def test_capital_endonyms_are_deduplicated_and_exclude_the_capital() -> None:
    raw = record(
        SourceId.CAPITALS,
        "Finland",
        capital="Helsinki",
        endonyms=["Helsinki", "Helsingfors", "Helsingfors"],
    )

    assert extract_slot_values(SourceId.CAPITALS, raw) == (
        Capital(name="Helsinki", endonyms=("Helsingfors",)),
    )


def test_currency_code_is_upper_cased() -> None:
    raw = record(
        SourceId.CURRENCIES,
        "Finland",
        currency_code=" eur ",
        currency_name="Euro",
        symbol="€",
        fraction_name="Cent",
        fraction_basic=100,
    )

    assert extract_slot_values(SourceId.CURRENCIES, raw) == (
        Currency(code="EUR", name="Euro", symbol="€", fraction_name="Cent", fraction_basic=100),
    )


def test_currency_without_iso_code_is_rejected() -> None:
    raw = record(SourceId.CURRENCIES, "Finland", currency_code="Euro", currency_name="Euro")

    with pytest.raises(ValueError, match="currency_code"):
        extract_slot_values(SourceId.CURRENCIES, raw)


@pytest.mark.parametrize(
    ("raw_value", "expected"), [(358, "+358"), ("45", "+45"), ("+1 684", "+1 684")]
)
def test_calling_codes_are_prefixed(raw_value: int | str, expected: str) -> None:
    raw = record(SourceId.CALLING_CODES, "Finland", calling_code=raw_value)

    assert extract_slot_values(SourceId.CALLING_CODES, raw) == (CallingCode(expected),)


def test_malformed_calling_code_is_rejected() -> None:
    raw = record(SourceId.CALLING_CODES, "Finland", calling_code="none")

    with pytest.raises(ValueError, match="calling code"):
        extract_slot_values(SourceId.CALLING_CODES, raw)


def test_languages_yield_one_value_per_entry() -> None:
    raw = record(
        SourceId.LANGUAGES,
        "Finland",
        languages=[
            {"name": "Finnish", "iso639_1": "fi", "iso639_3": "fin"},
            {"name": "Sami", "iso639_3": "", "official": False},
        ],
    )

    assert extract_slot_values(SourceId.LANGUAGES, raw) == (
        Language(name="Finnish", iso639_1="fi", iso639_3="fin"),
        Language(name="Sami", official=False),
    )


def test_languages_require_at_least_one_entry() -> None:
    raw = record(SourceId.LANGUAGES, "Finland", languages=[])

    with pytest.raises(ValueError, match="languages"):
        extract_slot_values(SourceId.LANGUAGES, raw)


def test_emoji_value() -> None:
    raw = record(SourceId.EMOJIS, "fi", raw_code="fi", emoji="🇫🇮")

    assert extract_slot_values(SourceId.EMOJIS, raw) == (FlagEmoji("🇫🇮"),)


def test_datasets_without_slot_are_rejected() -> None:
    with pytest.raises(ValueError, match="no attribute slot"):
        extract_slot_values(SourceId.REGIONS, record(SourceId.REGIONS, "Finland"))


def test_region_record_becomes_draft_entity() -> None:
    entity, payload = region_from_record(
        region("Åland", "ax", "ALA", 248, "Finland", "Åland Islands")
    )

    assert entity.code == "ax"
    assert entity.name == "Åland"
    assert entity.state_name == "Åland Islands"
    assert entity.sovereignty is None
    assert entity.tld == (".ax",)
    assert payload.sovereignty == "Finland"


def test_region_state_name_defaults_to_raw_name() -> None:
    entity, _ = region_from_record(region("Sweden", "se", "SWE", 752, "UN member state"))

    assert entity.state_name == "Sweden"


@pytest.mark.parametrize(
    "override",
    [{"a3": "SW"}, {"num": 1000}, {"iso_3166_2": "SE"}, {"tld": ["se"]}],
)
def test_malformed_region_codes_are_rejected(override: dict[str, object]) -> None:
    base = region("Sweden", "se", "SWE", 752, "UN member state")
    raw = record(SourceId.REGIONS, base.raw_name, raw_code="se", **{**base.attributes, **override})

    with pytest.raises(ValueError):
        region_from_record(raw)
