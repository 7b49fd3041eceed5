"""Ports for fetching raw source records and flag images."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from geofacts.domain.model import CanonicalEntity, RawRecord, SourceId


@runtime_checkable
class SourceExtractor(Protocol):
    """Produces the flat candidate records of one source."""

    @property
    def source_id(self) -> SourceId: ...

    async def extract(self) -> list[RawRecord]: ...


@runtime_checkable
class FlagImageSource(Protocol):
    """Provides raw image bytes for a sovereign state's flag."""

    async def fetch(self, entity: CanonicalEntity) -> bytes: ...


__all__ = ["FlagImageSource", "SourceExtractor"]
