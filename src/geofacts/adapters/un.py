"""UN member states page extractor."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from geofacts.adapters.wikipedia.pages import PageExtractor
from geofacts.domain.model import RawRecord, SourceId

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

log = getLogger(__name__)

MEMBER_SELECTOR = ".country div > h2"


@dataclass(slots=True, kw_only=True)
class UnMembersExtractor(PageExtractor):
    source_id: ClassVar[SourceId] = SourceId.UN_MEMBERS

    def parse(self, soup: BeautifulSoup) -> list[RawRecord]:
        records = [
            RawRecord(source_id=self.source_id, raw_name=name)
            for heading in soup.select(MEMBER_SELECTOR)
            if (name := heading.get_text(strip=True))
        ]
        if not records:
            log.warning("No UN member headings matched %r", MEMBER_SELECTOR)
        return records
