"""Canonical entities and the code-keyed set that owns them.

Lifecycle:
- the sovereignty graph builder creates every entity in one pass
- the aggregator fills attribute slots through :meth:`EntitySet.fill_slot`
- the output assembler seals the set and its entities; any write afterwards
  raises, whether through ``fill_slot`` or by setting an entity attribute
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from .enums import Slot

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .values import (
        CallingCode,
        Capital,
        CollectionItem,
        Currency,
        FlagEmoji,
        Language,
        SlotValue,
    )

CODE_PATTERN: Final = re.compile(r"^[a-z]{2}$")
_A2_PATTERN: Final = re.compile(r"^[A-Z]{2}$")
_A3_PATTERN: Final = re.compile(r"^[A-Z]{3}$")


def normalize_code(raw_code: str | None) -> str | None:
    """Format-normalize a two-letter code; ``None`` when it cannot be one."""

    if raw_code is None:
        return None
    code = raw_code.strip().lower()
    return code if CODE_PATTERN.match(code) else None


@dataclass(frozen=True, slots=True)
class Iso3166_1:  # noqa: N801
    a2: str
    a3: str
    num: int

    def __post_init__(self) -> None:
        if not _A2_PATTERN.match(self.a2):
            raise ValueError(f"Expected 2 upper-case letters for a2, got {self.a2!r}")
        if not _A3_PATTERN.match(self.a3):
            raise ValueError(f"Expected 3 upper-case letters for a3, got {self.a3!r}")
        if not 0 <= self.num <= 999:
            raise ValueError(f"Expected 3 digit number for num, got {self.num}")

    def __str__(self) -> str:
        return self.a2


@dataclass(kw_only=True)
class CanonicalEntity:
    """A reconciled country or territory keyed by its alpha-2 code."""

    name: str
    state_name: str
    iso_3166_1: Iso3166_1
    un_member: bool = False
    sovereignty: str | None = None
    iso_3166_2: str | None = None
    tld: tuple[str, ...] = ()
    capital: Capital | None = None
    currencies: tuple[Currency, ...] = ()
    calling_code: CallingCode | None = None
    languages: tuple[Language, ...] = ()
    flag_emoji: FlagEmoji | None = None
    _sealed: bool = field(default=False, init=False, repr=False, compare=False)

    def __setattr__(self, name: str, value: object) -> None:
        if getattr(self, "_sealed", False):
            raise EntitySetSealedError(f"{self} is sealed; refusing to set {name}")
        object.__setattr__(self, name, value)

    @property
    def code(self) -> str:
        return self.iso_3166_1.a2.lower()

    @property
    def is_root(self) -> bool:
        return self.sovereignty is None

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(name for name in (self.name, self.state_name) if name))

    def slot_value(self, slot: Slot) -> SlotValue | None:
        value: SlotValue | None = getattr(self, slot.value)
        return value

    def has_slot_value(self, slot: Slot) -> bool:
        value = self.slot_value(slot)
        return bool(value) if slot.is_collection else value is not None

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"


class SlotWrite(StrEnum):
    """Outcome of offering a value to an attribute slot."""

    WRITTEN = "written"
    UNCHANGED = "unchanged"
    CONFLICT = "conflict"


@dataclass(slots=True, frozen=True)
class SlotWriteResult:
    outcome: SlotWrite
    existing: SlotValue | CollectionItem | None = None


class EntitySetSealedError(RuntimeError):
    """Raised when an entity set or one of its entities is written after sealing."""


@dataclass(slots=True)
class EntitySet:
    """Code-keyed canonical entities with slot-level write protection."""

    _entities: dict[str, CanonicalEntity] = field(
        default_factory=dict["str", "CanonicalEntity"], repr=False
    )
    _slot_locks: dict[tuple[str, Slot], threading.Lock] = field(
        default_factory=dict["tuple[str, Slot]", "threading.Lock"], repr=False
    )
    _registry_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _sealed: bool = False

    @classmethod
    def of(cls, entities: dict[str, CanonicalEntity]) -> EntitySet:
        entity_set = cls()
        entity_set._entities = dict(sorted(entities.items()))  # noqa: SLF001
        return entity_set

    @property
    def sealed(self) -> bool:
        return self._sealed

    def seal(self) -> None:
        for entity in self._entities.values():
            object.__setattr__(entity, "_sealed", True)
        self._sealed = True

    def __contains__(self, code: object) -> bool:
        return code in self._entities

    def __iter__(self) -> Iterator[CanonicalEntity]:
        return iter(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)

    def get(self, code: str) -> CanonicalEntity | None:
        return self._entities.get(code)

    def codes(self) -> tuple[str, ...]:
        return tuple(self._entities)

    def roots(self) -> tuple[CanonicalEntity, ...]:
        return tuple(entity for entity in self if entity.is_root)

    def fill_slot(
        self, code: str, slot: Slot, value: Capital | CallingCode | FlagEmoji | CollectionItem
    ) -> SlotWriteResult:
        """Write ``value`` into ``slot`` of entity ``code`` unless it would overwrite.

        Collection slots accept one item per key; a second item for an existing key
        only conflicts when it differs.
        """

        if self._sealed:
            raise EntitySetSealedError(f"Entity set is sealed; refusing to write {slot} of {code}")
        entity = self._entities[code]
        with self._lock_for(code, slot):
            if slot.is_collection:
                return _fill_collection(entity, slot, value)  # type: ignore[arg-type]
            existing = entity.slot_value(slot)
            if existing is None:
                setattr(entity, slot.value, value)
                return SlotWriteResult(SlotWrite.WRITTEN)
            if existing == value:
                return SlotWriteResult(SlotWrite.UNCHANGED, existing)
            return SlotWriteResult(SlotWrite.CONFLICT, existing)

    def _lock_for(self, code: str, slot: Slot) -> threading.Lock:
        key = (code, slot)
        with self._registry_lock:
            lock = self._slot_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._slot_locks[key] = lock
            return lock


def _fill_collection(entity: CanonicalEntity, slot: Slot, item: CollectionItem) -> SlotWriteResult:
    items: tuple[CollectionItem, ...] = getattr(entity, slot.value)
    for existing in items:
        if existing.key != item.key:
            continue
        if existing == item:
            return SlotWriteResult(SlotWrite.UNCHANGED, existing)
        return SlotWriteResult(SlotWrite.CONFLICT, existing)
    setattr(entity, slot.value, (*items, item))
    return SlotWriteResult(SlotWrite.WRITTEN)
