"""Output assembler: pure projections over the final entity set."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

from geofacts.domain.model import Slot

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from geofacts.domain.model import (
        CallingCode,
        CanonicalEntity,
        Capital,
        Currency,
        EntitySet,
        FlagEmoji,
        Language,
    )


@dataclass(frozen=True, slots=True)
class DatasetViews:
    regions: Mapping[str, CanonicalEntity]
    sovereign_states: Mapping[str, CanonicalEntity]
    capitals: Mapping[str, Capital]
    currencies: Mapping[str, tuple[Currency, ...]]
    calling_codes: Mapping[str, CallingCode]
    languages: Mapping[str, tuple[Language, ...]]
    emojis: Mapping[str, FlagEmoji]

    def items(self) -> Iterator[tuple[str, Mapping[str, object]]]:
        for item in fields(self):
            yield item.name, getattr(self, item.name)


def assemble(entities: EntitySet) -> DatasetViews:
    """Seal ``entities`` and project every output view, ordered by code."""

    entities.seal()
    regions = {entity.code: entity for entity in sorted(entities, key=lambda e: e.code)}
    return DatasetViews(
        regions=regions,
        sovereign_states={code: entity for code, entity in regions.items() if entity.un_member},
        capitals=_slot_view(regions, Slot.CAPITAL),
        currencies=_slot_view(regions, Slot.CURRENCIES),
        calling_codes=_slot_view(regions, Slot.CALLING_CODE),
        languages=_slot_view(regions, Slot.LANGUAGES),
        emojis=_slot_view(regions, Slot.FLAG_EMOJI),
    )


def _slot_view[T](regions: Mapping[str, CanonicalEntity], slot: Slot) -> dict[str, T]:
    view: dict[str, T] = {}
    for code, entity in regions.items():
        if entity.has_slot_value(slot):
            view[code] = entity.slot_value(slot)  # type: ignore[assignment]
    return view
