"""Entity matcher: raw record -> canonical code.

Matching policy:
- a raw code that format-normalizes to a known canonical code wins outright
- otherwise every offered name is normalized and looked up in the alias index
- exactly one code -> ``Resolved``; several -> ``Ambiguous``; none -> ``Unresolved``

``Ambiguous`` is never narrowed down by a tie-break; callers drop the record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from geofacts.domain.model import normalize_code

from .aliases import AliasIndex
from .contracts import Ambiguous, MatchKind, Resolved, Unresolved
from .normalize import normalized_names

if TYPE_CHECKING:
    from collections.abc import Iterable

    from geofacts.domain.model import CanonicalEntity, RawRecord

    from .aliases import AliasTable
    from .contracts import MatchResult

ALTERNATE_NAMES_ATTRIBUTE = "alternate_names"


@dataclass(frozen=True, slots=True)
class EntityMatcher:
    index: AliasIndex
    known_codes: frozenset[str]

    @classmethod
    def build(cls, aliases: AliasTable, entities: Iterable[CanonicalEntity]) -> EntityMatcher:
        entity_list = tuple(entities)
        return cls(
            index=AliasIndex.build(aliases, entity_list),
            known_codes=frozenset(entity.code for entity in entity_list),
        )

    def match(
        self,
        raw_name: str | None,
        raw_code: str | None = None,
        *,
        alternate_names: Iterable[str] = (),
    ) -> MatchResult:
        code = normalize_code(raw_code)
        if code is not None and code in self.known_codes:
            return Resolved(code=code, match_kind=MatchKind.CODE, matched_key=code)

        keys = normalized_names((raw_name, *alternate_names))
        if not keys:
            return Unresolved(reason="empty_name")

        codes: set[str] = set()
        matched: list[str] = []
        for key in keys:
            hits = self.index.lookup(key)
            if hits:
                matched.append(key)
                codes.update(hits)

        if not codes:
            return Unresolved()
        if len(codes) == 1:
            return Resolved(code=codes.pop(), match_kind=MatchKind.NAME, matched_key=matched[0])
        return Ambiguous(candidates=tuple(sorted(codes)), matched_keys=tuple(matched))

    def match_record(self, record: RawRecord) -> MatchResult:
        return self.match(
            record.raw_name,
            record.raw_code,
            alternate_names=record.texts(ALTERNATE_NAMES_ATTRIBUTE),
        )
