"""Alias table seed data and the normalized lookup index built from it."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from geofacts.config.errors import ConfigurationError, MissingConfigurationError
from geofacts.domain.model import normalize_code

from .normalize import normalize_name

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from pathlib import Path

    from geofacts.domain.model import CanonicalEntity

log = getLogger(__name__)

_ALIAS_DOCUMENT = TypeAdapter(dict[str, list[str]])


@dataclass(frozen=True, slots=True)
class AliasTable:
    """Known name variants per canonical code. Read-only during a run."""

    entries: Mapping[str, frozenset[str]] = field(default_factory=dict["str", "frozenset[str]"])

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> AliasTable:
        entries: dict[str, frozenset[str]] = {}
        for raw_code, names in mapping.items():
            code = normalize_code(raw_code)
            if code is None:
                raise ConfigurationError(f"Alias table key {raw_code!r} is not a two-letter code")
            cleaned = {name.strip() for name in names if name.strip()}
            entries[code] = entries.get(code, frozenset()) | cleaned
        return cls(entries=dict(sorted(entries.items())))

    @classmethod
    def load(cls, path: Path) -> AliasTable:
        """Read a JSON document of the form ``{"fi": ["Finland", "Suomi"]}``."""

        try:
            document = _ALIAS_DOCUMENT.validate_json(path.read_bytes())
        except FileNotFoundError as exc:
            raise MissingConfigurationError(f"Alias table not found at {path}") from exc
        except ValidationError as exc:
            raise ConfigurationError(f"Alias table at {path} is malformed: {exc}") from exc
        table = cls.from_mapping(document)
        log.info("Loaded %d alias entries from %s", len(table), path)
        return table

    def __len__(self) -> int:
        return len(self.entries)

    def names_for(self, code: str) -> frozenset[str]:
        return self.entries.get(code, frozenset())


@dataclass(frozen=True, slots=True)
class AliasIndex:
    """Normalized name key -> every code whose alias set contains that key."""

    codes_by_key: Mapping[str, frozenset[str]]

    @classmethod
    def build(
        cls,
        aliases: AliasTable,
        entities: Iterable[CanonicalEntity] = (),
    ) -> AliasIndex:
        collected: defaultdict[str, set[str]] = defaultdict(set)
        for code, names in aliases.entries.items():
            for name in names:
                _add(collected, normalize_name(name), code)
        for entity in entities:
            for name in entity.names:
                _add(collected, normalize_name(name), entity.code)
        return cls(codes_by_key={key: frozenset(codes) for key, codes in collected.items()})

    def lookup(self, key: str) -> frozenset[str]:
        if not key:
            return frozenset()
        return self.codes_by_key.get(key, frozenset())


def _add(collected: defaultdict[str, set[str]], key: str, code: str) -> None:
    if key:
        collected[key].add(code)
