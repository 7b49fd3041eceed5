"""Typed attribute values stored in canonical entity slots."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Capital:
    name: str
    endonyms: tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.endonyms:
            return f"{self.name} ({', '.join(self.endonyms)})"
        return self.name


@dataclass(frozen=True, slots=True)
class Currency:
    code: str
    name: str
    symbol: str | None = None
    fraction_name: str | None = None
    fraction_basic: int | None = None

    @property
    def key(self) -> str:
        return self.code


@dataclass(frozen=True, slots=True)
class CallingCode:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Language:
    name: str
    iso639_1: str | None = None
    iso639_3: str | None = None
    official: bool = True

    @property
    def key(self) -> str:
        return self.iso639_3 or self.name.casefold()


@dataclass(frozen=True, slots=True)
class FlagEmoji:
    value: str

    def __str__(self) -> str:
        return self.value


type SlotValue = Capital | CallingCode | FlagEmoji | tuple[Currency, ...] | tuple[Language, ...]
type CollectionItem = Currency | Language
