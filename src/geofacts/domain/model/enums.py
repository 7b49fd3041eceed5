"""Enumerations shared across the domain model."""

from __future__ import annotations

from enum import StrEnum


class SourceId(StrEnum):
    UN_MEMBERS = "un_members"
    SOVEREIGN_STATES = "sovereign_states"
    REGIONS = "regions"
    CAPITALS = "capitals"
    CURRENCIES = "currencies"
    CALLING_CODES = "calling_codes"
    LANGUAGES = "languages"
    EMOJIS = "emojis"

    @property
    def required(self) -> bool:
        return self in REQUIRED_SOURCES


REQUIRED_SOURCES = frozenset(
    {SourceId.UN_MEMBERS, SourceId.SOVEREIGN_STATES, SourceId.REGIONS}
)
OPTIONAL_SOURCES = tuple(source for source in SourceId if source not in REQUIRED_SOURCES)


class Slot(StrEnum):
    """Attribute slots filled on canonical entities by the aggregator."""

    CAPITAL = "capital"
    CURRENCIES = "currencies"
    CALLING_CODE = "calling_code"
    LANGUAGES = "languages"
    FLAG_EMOJI = "flag_emoji"

    @property
    def is_collection(self) -> bool:
        return self in (Slot.CURRENCIES, Slot.LANGUAGES)


SLOT_BY_SOURCE: dict[SourceId, Slot] = {
    SourceId.CAPITALS: Slot.CAPITAL,
    SourceId.CURRENCIES: Slot.CURRENCIES,
    SourceId.CALLING_CODES: Slot.CALLING_CODE,
    SourceId.LANGUAGES: Slot.LANGUAGES,
    SourceId.EMOJIS: Slot.FLAG_EMOJI,
}
