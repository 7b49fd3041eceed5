from __future__ import annotations

import asyncio

import pytest

from geofacts.adapters.wikipedia import (
    LanguagesExtractor,
    PageExtractor,
    parse_html,
    parse_language_codes,
)
from geofacts.domain.ports import SourceExtractor
from tests.support.pages import FakeWeb, language_codes_page, language_zones_page

CODES_URL = "https://example.test/iso639"
ZONES_URL = "https://example.test/official-languages"

CODES = [("Finnish", "fi", "fin"), ("Swedish", "sv", "swe")]


def test_language_codes_are_indexed_by_short_and_long_name() -> None:
    known = parse_language_codes(parse_html(language_codes_page(CODES)))

    assert known["finnish"] == known["finnish language"]
    assert known["swedish"].iso639_1 == "sv"
    assert known["swedish"].iso639_3 == "swe"


def test_languages_extractor_joins_both_pages() -> None:
    web = FakeWeb(
        {
            CODES_URL: language_codes_page(CODES),
            ZONES_URL: language_zones_page(
                [
                    ("Finland", ["Finnish", "Swedish"], ["Sami"]),
                    ("Åland", ["Swedish"], []),
                    ("Atlantis", ["Atlantean"], []),
                ]
            ),
        }
    )
    extractor = LanguagesExtractor(client=web.client(), url=ZONES_URL, codes_url=CODES_URL)

    finland, aland = asyncio.run(extractor.extract())

    assert finland.raw_name == "Finland"
    assert finland.attributes["languages"] == [
        {"name": "Finnish", "iso639_1": "fi", "iso639_3": "fin", "official": True},
        {"name": "Swedish", "iso639_1": "sv", "iso639_3": "swe", "official": True},
    ]
    assert aland.raw_name == "Åland"
    assert set(web.requested) == {CODES_URL, ZONES_URL}


def test_regional_languages_are_not_official() -> None:
    extractor = LanguagesExtractor(client=FakeWeb().client(), url=ZONES_URL, codes_url=CODES_URL)
    known = parse_language_codes(parse_html(language_codes_page(CODES)))

    (sweden,) = extractor.parse_zones(
        parse_html(language_zones_page([("Sweden", ["Swedish"], ["Finnish"])])), known
    )

    assert [entry["official"] for entry in sweden.attributes["languages"]] == [True, False]


def test_languages_extractor_is_a_two_page_source_extractor() -> None:
    extractor = LanguagesExtractor(client=FakeWeb().client(), url=ZONES_URL, codes_url=CODES_URL)

    assert isinstance(extractor, SourceExtractor)
    assert not isinstance(extractor, PageExtractor)


def test_page_extractor_requires_a_parser() -> None:
    with pytest.raises(TypeError):
        PageExtractor(client=FakeWeb().client(), url=ZONES_URL)  # type: ignore[abstract]
