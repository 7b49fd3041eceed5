"""Extractors for the optional single-table attribute pages."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from geofacts.domain.model import RawRecord, SourceId

from .pages import PageExtractor
from .tables import cell_texts, first_text, link_text, link_title, select_rows

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

    from geofacts.domain.model import RawValue

log = getLogger(__name__)


def _country(cell: Tag | None) -> tuple[str | None, list[RawValue]]:
    """Country link text plus its title as an alternate name."""

    text = link_text(cell)
    title = link_title(cell)
    if text is None:
        return title, []
    return text, [title] if title and title != text else []


@dataclass(slots=True, kw_only=True)
class CapitalsExtractor(PageExtractor):
    source_id: ClassVar[SourceId] = SourceId.CAPITALS

    def parse(self, soup: BeautifulSoup) -> list[RawRecord]:
        records: list[RawRecord] = []
        for row in select_rows(soup, header_count=5, min_cells=4):
            country, alternates = _country(row.cell(0))
            capital = link_text(row.cell(1))
            if country is None or capital is None:
                log.debug("Skipping capitals row without country or capital link")
                continue
            endonym_cell = row.cell(3)
            endonyms: list[RawValue] = (
                [
                    text
                    for span in endonym_cell.select("span[lang]")
                    if (text := span.get_text(strip=True)) and text != capital
                ]
                if endonym_cell is not None
                else []
            )
            records.append(
                RawRecord(
                    source_id=self.source_id,
                    raw_name=country,
                    attributes={
                        "capital": capital,
                        "endonyms": endonyms,
                        "alternate_names": alternates,
                    },
                )
            )
        return records


@dataclass(slots=True, kw_only=True)
class CurrenciesExtractor(PageExtractor):
    """Circulating currencies; rows continuing a row-spanned country have five cells."""

    source_id: ClassVar[SourceId] = SourceId.CURRENCIES

    def parse(self, soup: BeautifulSoup) -> list[RawRecord]:
        records: list[RawRecord] = []
        country_cell: Tag | None = None
        for row in select_rows(soup, header_count=6, min_cells=5):
            if len(row.cells) >= 6:  # noqa: PLR2004
                country_cell, *cells = row.cells[:6]
            elif country_cell is not None:
                cells = list(row.cells[:5])
            else:
                continue
            country, alternates = _country(country_cell)
            name_cell, symbol_cell, code_cell, fraction_cell, basic_cell = cells
            code = first_text(code_cell, length=3)
            if country is None or code is None:
                log.debug("Skipping currency row without country or ISO 4217 code")
                continue
            symbol = first_text(symbol_cell)
            records.append(
                RawRecord(
                    source_id=self.source_id,
                    raw_name=country,
                    attributes={
                        "currency_code": code,
                        "currency_name": link_text(name_cell) or first_text(name_cell),
                        "symbol": symbol.split(" ")[0] if symbol else None,
                        "fraction_name": link_text(fraction_cell),
                        "fraction_basic": _first_int(cell_texts(basic_cell)),
                        "alternate_names": alternates,
                    },
                )
            )
        return records


@dataclass(slots=True, kw_only=True)
class CallingCodesExtractor(PageExtractor):
    source_id: ClassVar[SourceId] = SourceId.CALLING_CODES

    def parse(self, soup: BeautifulSoup) -> list[RawRecord]:
        records: list[RawRecord] = []
        for row in select_rows(soup, header_count=5, min_cells=2):
            code = link_text(row.cell(1))
            names = cell_texts(row.cell(0))[:2]
            if code is None or not names:
                continue
            records.append(
                RawRecord(
                    source_id=self.source_id,
                    raw_name=names[0],
                    attributes={"calling_code": code, "alternate_names": names[1:]},
                )
            )
        return records


@dataclass(slots=True, kw_only=True)
class EmojisExtractor(PageExtractor):
    """Regional indicator table: the flag link title is the emoji itself."""

    source_id: ClassVar[SourceId] = SourceId.EMOJIS

    def parse(self, soup: BeautifulSoup) -> list[RawRecord]:
        records: list[RawRecord] = []
        for row in select_rows(soup, header_count=4, min_cells=2):
            emoji = link_title(row.cell(0))
            code = first_text(row.cell(1), length=2)
            if emoji is None or code is None:
                continue
            records.append(
                RawRecord(
                    source_id=self.source_id,
                    raw_name=code,
                    raw_code=code,
                    attributes={"emoji": emoji},
                )
            )
        return records


def _first_int(texts: list[str]) -> int | None:
    for text in texts:
        try:
            return int(text.replace(",", ""))
        except ValueError:
            continue
    return None
