"""Languages extractor joining two pages.

The ISO 639 code table gives names and codes; the official languages table gives
the languages of each country as free-form cells. Only names present in the
code table are kept.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from geofacts.domain.model import RawRecord, SourceId

from .tables import WIKI_PREFIX, link_text, link_title, parse_html, select_rows

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

    from geofacts.adapters.http_resilience import ResilientClient
    from geofacts.domain.model import RawValue

log = getLogger(__name__)

ISO639_2_PREFIX = "https://www.loc.gov/standards/iso639-2/"
_MIN_WORD_LENGTH = 3


@dataclass(frozen=True, slots=True)
class IsoLanguage:
    name: str
    iso639_1: str | None
    iso639_3: str | None


@dataclass(slots=True, kw_only=True)
class LanguagesExtractor:
    """``url`` is the official-languages page; ``codes_url`` the ISO 639 table."""

    source_id: ClassVar[SourceId] = SourceId.LANGUAGES

    client: ResilientClient
    url: str
    codes_url: str

    async def extract(self) -> list[RawRecord]:
        codes_markup = await self.client.get_text(self.codes_url)
        zones_markup = await self.client.get_text(self.url)
        known = parse_language_codes(parse_html(codes_markup))
        records = self.parse_zones(parse_html(zones_markup), known)
        log.info(
            "Extracted %d language records (%d known languages)", len(records), len(known)
        )
        return records

    def parse_zones(
        self, soup: BeautifulSoup, known: dict[str, IsoLanguage]
    ) -> list[RawRecord]:
        records: list[RawRecord] = []
        for row in select_rows(soup, header_count=6, min_cells=3):
            country = link_text(row.cell(0))
            if country is None:
                continue
            entries: dict[str, RawValue] = {}
            for cell, official in ((row.cell(1), True), (row.cell(2), False)):
                for language in _known_languages(cell, known):
                    entries.setdefault(
                        language.name,
                        {
                            "name": language.name,
                            "iso639_1": language.iso639_1,
                            "iso639_3": language.iso639_3,
                            "official": official,
                        },
                    )
            if not entries:
                log.debug("No known languages for %s", country)
                continue
            title = link_title(row.cell(0))
            records.append(
                RawRecord(
                    source_id=self.source_id,
                    raw_name=country,
                    attributes={
                        "languages": list(entries.values()),
                        "alternate_names": [title] if title and title != country else [],
                    },
                )
            )
        return records


def parse_language_codes(soup: BeautifulSoup) -> dict[str, IsoLanguage]:
    """Casefolded language name (short and long) -> ISO 639 codes."""

    known: dict[str, IsoLanguage] = {}
    for row in select_rows(soup, header_count=6, min_cells=5):
        short_name = link_text(row.cell(0))
        long_name = link_title(row.cell(0))
        if short_name is None:
            continue
        language = IsoLanguage(
            name=short_name,
            iso639_1=link_text(row.cell(1), prefix=ISO639_2_PREFIX) or _code(row.cell(1)),
            iso639_3=_code(row.cell(4)),
        )
        for name in (short_name, long_name):
            if name:
                known.setdefault(name.casefold(), language)
    return known


def _code(cell: Tag | None) -> str | None:
    if cell is None:
        return None
    code = cell.find("code")
    if code is None:
        return None
    bold = code.find("b")
    text = (bold or code).get_text(strip=True)
    return text or None


def _known_languages(cell: Tag | None, known: dict[str, IsoLanguage]) -> list[IsoLanguage]:
    if cell is None or not known:
        return []
    candidates: list[str] = []
    for link in cell.find_all("a", href=True):
        if str(link["href"]).startswith(WIKI_PREFIX):
            candidates.append(link.get_text(strip=True))
            title = link.get("title")
            if isinstance(title, str):
                candidates.append(title)
    for item in cell.find_all("li"):
        candidates.append(item.get_text(strip=True))
    for text in cell.stripped_strings:
        for word in text.split():
            letters = "".join(char for char in word if char.isalpha())
            if len(letters) >= _MIN_WORD_LENGTH:
                candidates.append(letters)

    found: dict[str, IsoLanguage] = {}
    for candidate in candidates:
        language = known.get(candidate.casefold())
        if language is not None:
            found.setdefault(language.name, language)
    return list(found.values())
