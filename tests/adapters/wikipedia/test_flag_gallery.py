from __future__ import annotations

import asyncio

import pytest

from geofacts.adapters.wikipedia import GalleryFlagSource, absolute_url, find_flag_url, parse_html
from geofacts.domain.model import CanonicalEntity, Iso3166_1
from geofacts.domain.ports import FlagImageSource
from geofacts.errors import FlagUnavailable
from tests.support.pages import FakeWeb, flags_gallery_page

GALLERY_URL = "https://example.test/gallery"

IMAGES = {
    "Finland": "//upload.example.test/fi.png",
    "Denmark (Dannebrog)": "//upload.example.test/dk.png",
    "Kingdom of Sweden": "https://upload.example.test/se.png",
}


def _entity(name: str, state_name: str, a2: str, a3: str) -> CanonicalEntity:
    return CanonicalEntity(
        name=name, state_name=state_name, iso_3166_1=Iso3166_1(a2, a3, 1), un_member=True
    )


def test_find_flag_url_prefers_exact_alt_then_prefix() -> None:
    soup = parse_html(flags_gallery_page(IMAGES))

    assert find_flag_url(soup, ("Finland",)) == "//upload.example.test/fi.png"
    assert find_flag_url(soup, ("Sweden", "Kingdom of Sweden")) == IMAGES["Kingdom of Sweden"]
    assert find_flag_url(soup, ("Denmark", "Kingdom of Denmark")) == IMAGES["Denmark (Dannebrog)"]
    assert find_flag_url(soup, ("Norway",)) is None


def test_absolute_url_adds_scheme_to_protocol_relative_sources() -> None:
    assert absolute_url("//upload.example.test/fi.png") == "https://upload.example.test/fi.png"
    assert absolute_url("https://a.test/x.png") == "https://a.test/x.png"


def test_gallery_source_downloads_image_once_per_entity() -> None:
    web = FakeWeb(
        {
            GALLERY_URL: flags_gallery_page(IMAGES),
            "https://upload.example.test/fi.png": b"\x89PNG fake",
        }
    )
    source = GalleryFlagSource(client=web.client(), url=GALLERY_URL)
    assert isinstance(source, FlagImageSource)

    async def fetch_twice() -> list[bytes]:
        entity = _entity("Finland", "Republic of Finland", "FI", "FIN")
        return [await source.fetch(entity), await source.fetch(entity)]

    assert asyncio.run(fetch_twice()) == [b"\x89PNG fake", b"\x89PNG fake"]
    assert web.requested.count(GALLERY_URL) == 1


def test_gallery_source_reports_missing_flag() -> None:
    source = GalleryFlagSource(
        client=FakeWeb({GALLERY_URL: flags_gallery_page(IMAGES)}).client(), url=GALLERY_URL
    )

    with pytest.raises(FlagUnavailable, match="not found") as excinfo:
        asyncio.run(source.fetch(_entity("Norway", "Kingdom of Norway", "NO", "NOR")))

    assert excinfo.value.code == "no"


def test_gallery_source_reports_failed_download() -> None:
    web = FakeWeb(
        {GALLERY_URL: flags_gallery_page(IMAGES)},
        failing={"https://upload.example.test/fi.png": 503},
    )
    source = GalleryFlagSource(client=web.client(), url=GALLERY_URL)

    with pytest.raises(FlagUnavailable, match="failed"):
        asyncio.run(source.fetch(_entity("Finland", "Republic of Finland", "FI", "FIN")))


def test_gallery_source_reports_unavailable_gallery() -> None:
    source = GalleryFlagSource(client=FakeWeb().client(), url=GALLERY_URL)

    with pytest.raises(FlagUnavailable, match="gallery"):
        asyncio.run(source.fetch(_entity("Finland", "Republic of Finland", "FI", "FIN")))
