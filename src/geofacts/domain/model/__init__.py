"""Domain model for reconciled country and territory data."""

from __future__ import annotations

from .entity import (
    CODE_PATTERN,
    CanonicalEntity,
    EntitySet,
    EntitySetSealedError,
    Iso3166_1,
    SlotWrite,
    SlotWriteResult,
    normalize_code,
)
from .enums import OPTIONAL_SOURCES, REQUIRED_SOURCES, SLOT_BY_SOURCE, Slot, SourceId
from .records import RawRecord, RawValue
from .values import CallingCode, Capital, Currency, FlagEmoji, Language, SlotValue

__all__ = [
    "CODE_PATTERN",
    "OPTIONAL_SOURCES",
    "REQUIRED_SOURCES",
    "SLOT_BY_SOURCE",
    "CallingCode",
    "CanonicalEntity",
    "Capital",
    "Currency",
    "EntitySet",
    "EntitySetSealedError",
    "FlagEmoji",
    "Iso3166_1",
    "Language",
    "RawRecord",
    "RawValue",
    "Slot",
    "SlotValue",
    "SlotWrite",
    "SlotWriteResult",
    "SourceId",
    "normalize_code",
]
