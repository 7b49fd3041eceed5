"""Shared fetch-then-parse flow of the page extractors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from .tables import parse_html

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

    from geofacts.adapters.http_resilience import ResilientClient
    from geofacts.domain.model import RawRecord, SourceId

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class PageExtractor(ABC):
    """Fetches one HTML page and turns it into raw records."""

    source_id: ClassVar[SourceId]

    client: ResilientClient
    url: str

    async def extract(self) -> list[RawRecord]:
        markup = await self.client.get_text(self.url)
        records = self.parse(parse_html(markup))
        log.info("Extracted %d %s records from %s", len(records), self.source_id, self.url)
        return records

    @abstractmethod
    def parse(self, soup: BeautifulSoup) -> list[RawRecord]: ...
