"""Flag gallery lookup and image download."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from geofacts.errors import FlagUnavailable

from .tables import parse_html

if TYPE_CHECKING:
    from bs4 import BeautifulSoup

    from geofacts.adapters.http_resilience import ResilientClient
    from geofacts.domain.model import CanonicalEntity

log = getLogger(__name__)


def find_flag_url(soup: BeautifulSoup, names: tuple[str, ...]) -> str | None:
    """Image source whose ``alt`` equals one of ``names``, else starts with the first."""

    for name in names:
        urls = [str(img["src"]) for img in soup.find_all("img", alt=name, src=True)]
        if urls:
            if len(urls) > 1:
                log.warning("Found %d flag images for %s, using the first one", len(urls), name)
            return urls[0]
    if names:
        prefix = names[0]
        for img in soup.find_all("img", src=True):
            alt = img.get("alt")
            if isinstance(alt, str) and alt.startswith(prefix):
                return str(img["src"])
    return None


def absolute_url(src: str) -> str:
    return f"https:{src}" if src.startswith("//") else src


@dataclass(slots=True, kw_only=True)
class GalleryFlagSource:
    """Looks flags up in a gallery page fetched once, then downloads each image."""

    client: ResilientClient
    url: str
    _soup: BeautifulSoup | None = field(default=None, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def fetch(self, entity: CanonicalEntity) -> bytes:
        soup = await self._gallery()
        src = find_flag_url(soup, entity.names)
        if src is None:
            raise FlagUnavailable(entity.code, f"Flag for {entity.name} not found in gallery")
        url = absolute_url(src)
        try:
            data = await self.client.get_bytes(url)
        except httpx.HTTPError as exc:
            raise FlagUnavailable(entity.code, f"Flag download from {url} failed: {exc}") from exc
        if not data:
            raise FlagUnavailable(entity.code, f"Flag download from {url} returned no bytes")
        return data

    async def _gallery(self) -> BeautifulSoup:
        async with self._lock:
            if self._soup is None:
                try:
                    markup = await self.client.get_text(self.url)
                except httpx.HTTPError as exc:
                    raise FlagUnavailable(
                        None, f"Flag gallery {self.url} unavailable: {exc}"
                    ) from exc
                self._soup = parse_html(markup)
            return self._soup
