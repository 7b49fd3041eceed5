"""Extractors for the required sovereign-states and ISO 3166 regions pages."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from geofacts.domain.model import RawRecord, SourceId

from .pages import PageExtractor
from .tables import cell_texts, first_text, link_text, link_title, select_rows

if TYPE_CHECKING:
    from bs4 import BeautifulSoup, Tag

log = getLogger(__name__)

UN_MEMBER_TEXT = "un member"
_MEMBER_STATE_TEXT = "un member state"
_MEMBER_STATE_MAX_LEN = 25


@dataclass(slots=True, kw_only=True)
class SovereignStatesExtractor(PageExtractor):
    """List of sovereign states: link title is the long name, link text the short one."""

    source_id: ClassVar[SourceId] = SourceId.SOVEREIGN_STATES

    def parse(self, soup: BeautifulSoup) -> list[RawRecord]:
        records: list[RawRecord] = []
        for row in select_rows(soup, header_count=4, min_cells=3):
            name_cell = row.cell(0)
            long_name = link_title(name_cell)
            short_name = link_text(name_cell)
            if long_name is None or short_name is None:
                log.debug("Skipping sovereign state row without a name link")
                continue
            member = any(
                _MEMBER_STATE_TEXT in text.lower() and len(text) < _MEMBER_STATE_MAX_LEN
                for text in cell_texts(row.cell(1))
            )
            disputed = not any("none" in text.lower() for text in cell_texts(row.cell(2)))
            records.append(
                RawRecord(
                    source_id=self.source_id,
                    raw_name=short_name,
                    attributes={
                        "long_name": long_name,
                        "un_member_state": member,
                        "disputed": disputed,
                    },
                )
            )
        return records


@dataclass(slots=True, kw_only=True)
class RegionsExtractor(PageExtractor):
    """ISO 3166 country codes table, the join target for every other source."""

    source_id: ClassVar[SourceId] = SourceId.REGIONS

    def parse(self, soup: BeautifulSoup) -> list[RawRecord]:
        records: list[RawRecord] = []
        for row in select_rows(soup, header_count=9, cell_count=8):
            name = link_title(row.cell(0)) or link_text(row.cell(0))
            if name is None:
                log.debug("Skipping ISO 3166 row without a name link")
                continue
            a2 = _span_text(row.cell(3))
            records.append(
                RawRecord(
                    source_id=self.source_id,
                    raw_name=name,
                    raw_code=a2,
                    attributes={
                        "state_name": link_text(row.cell(1), prefix=""),
                        "sovereignty": sovereignty_text(row.cell(2)),
                        "a2": a2,
                        "a3": _span_text(row.cell(4)),
                        "num": _span_text(row.cell(5)),
                        "iso_3166_2": link_text(row.cell(6), prefix=""),
                        "tld": [text for text in cell_texts(row.cell(7)) if text.startswith(".")],
                    },
                )
            )
        return records


def sovereignty_text(cell: Tag | None) -> str | None:
    """The UN member marker, the ``#``-linked sovereign name, or the raw cell text."""

    texts = cell_texts(cell)
    if any(UN_MEMBER_TEXT in text.lower() for text in texts):
        return "UN member"
    return link_text(cell, prefix="#") or (" ".join(texts) or None)


def _span_text(cell: Tag | None) -> str | None:
    if cell is None:
        return None
    span = cell.select_one("a > span")
    if span is not None:
        text = span.get_text(strip=True)
        if text:
            return text
    return first_text(cell)
