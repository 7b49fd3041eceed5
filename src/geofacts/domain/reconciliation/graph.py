"""Sovereignty graph builder.

The builder is the only place canonical entities are created. It runs once per
collection, before any attribute aggregation, in three steps:

1) root candidates from the sovereign-states list, flagged ``un_member`` when one
   of their names matches the UN members list
2) one entity per regions entry; the scraped sovereignty text either marks the
   entry as a root or names the root candidate it depends on. Entries whose
   sovereign did not itself become a root are dropped with a diagnostic
3) validation of the resulting forest; any violation is fatal
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Final

from geofacts.domain.model import CODE_PATTERN, EntitySet, SourceId, normalize_code
from geofacts.errors import ForestInvalid, SourceUnavailable

from .contracts import Ambiguous, Resolved
from .diagnostics import Diagnostic, DiagnosticKind
from .extract import SovereignStatePayload, region_from_record
from .normalize import normalize_name, normalized_names
from .resolve import EntityMatcher

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from geofacts.domain.model import CanonicalEntity, RawRecord

    from .aliases import AliasTable
    from .diagnostics import DiagnosticsReport

log = getLogger(__name__)

UN_MEMBER_MARKER: Final[str] = "un member"


@dataclass(frozen=True, slots=True)
class RootCandidate:
    """A sovereign state as listed by the sovereign-states source."""

    name: str
    long_name: str | None
    un_member: bool
    listed_as_member: bool | None = None
    disputed: bool = False

    @property
    def keys(self) -> tuple[str, ...]:
        return normalized_names((self.name, self.long_name))


@dataclass(frozen=True, slots=True)
class SovereigntyForest:
    """Validated output of the builder: the entity set plus its matcher."""

    entities: EntitySet
    matcher: EntityMatcher


@dataclass(slots=True, kw_only=True)
class SovereigntyGraphBuilder:
    aliases: AliasTable
    diagnostics: DiagnosticsReport

    def build(
        self,
        *,
        un_members: Sequence[RawRecord] | None,
        sovereign_states: Sequence[RawRecord] | None,
        regions: Sequence[RawRecord] | None,
    ) -> SovereigntyForest:
        un_records = _require(SourceId.UN_MEMBERS, un_members)
        state_records = _require(SourceId.SOVEREIGN_STATES, sovereign_states)
        region_records = _require(SourceId.REGIONS, regions)

        un_keys, un_codes = _un_member_keys(un_records)
        candidates = [
            candidate
            for record in state_records
            if (candidate := self._root_candidate(record, un_keys)) is not None
        ]

        drafts, problems = self._region_drafts(region_records)
        matcher = EntityMatcher.build(self.aliases, (entity for entity, _ in drafts.values()))
        candidates_by_code = self._resolve_candidates(
            candidates, matcher, un_codes, region_codes=frozenset(drafts)
        )
        self._report_unmatched_un_members(un_records, candidates, candidates_by_code)
        candidate_codes_by_key = _codes_by_key(candidates_by_code)

        targets: dict[str, str] = {}
        for code, (entity, record) in drafts.items():
            target = self._sovereignty_target(
                entity,
                record,
                matcher=matcher,
                candidates_by_code=candidates_by_code,
                candidate_codes_by_key=candidate_codes_by_key,
            )
            if target is not None:
                targets[code] = target
        roots = frozenset(code for code, target in targets.items() if target == code)

        entities: dict[str, CanonicalEntity] = {}
        for code, target in targets.items():
            entity, record = drafts[code]
            if target == code:
                candidate = candidates_by_code.get(code)
                entity.un_member = candidate is not None and candidate.un_member
                if candidate is None:
                    log.debug("Root region %s has no sovereign-states entry", entity)
            elif target not in roots:
                self._sovereignty_unresolved(
                    record,
                    f"sovereign {target!r} did not become a root region",
                    candidates=(target,),
                )
                continue
            else:
                entity.sovereignty = target
                log.debug("Region %s sovereignty set to %s", entity, target)
            entities[code] = entity

        validate_forest(entities.values(), problems=problems)
        entity_set = EntitySet.of(entities)
        log.info(
            "Built sovereignty forest: %d regions, %d roots, %d UN members",
            len(entity_set),
            len(entity_set.roots()),
            sum(1 for entity in entity_set if entity.un_member),
        )
        return SovereigntyForest(
            entities=entity_set,
            matcher=EntityMatcher.build(self.aliases, entity_set),
        )

    def _root_candidate(self, record: RawRecord, un_keys: frozenset[str]) -> RootCandidate | None:
        try:
            payload = SovereignStatePayload.model_validate(record.attributes)
        except ValueError as exc:
            self.diagnostics.record(
                Diagnostic.for_record(
                    DiagnosticKind.INVALID_ATTRIBUTES, record, reason=_first_line(exc)
                )
            )
            return None
        name = record.raw_name.split(",")[0].strip() or record.raw_name.strip()
        long_name = payload.long_name or record.raw_name.strip()
        member = any(key in un_keys for key in normalized_names((name, long_name)))
        if payload.un_member_state is not None and payload.un_member_state != member:
            log.debug(
                "Data inconsistency for %s: sovereign-states source says un_member=%s, "
                "UN members list says %s",
                long_name,
                payload.un_member_state,
                member,
            )
        if member and payload.disputed:
            log.info("%s is a UN member state but has a dispute", long_name)
        return RootCandidate(
            name=name,
            long_name=long_name,
            un_member=member,
            listed_as_member=payload.un_member_state,
            disputed=payload.disputed,
        )

    def _region_drafts(
        self, records: Sequence[RawRecord]
    ) -> tuple[dict[str, tuple[CanonicalEntity, RawRecord]], list[str]]:
        drafts: dict[str, tuple[CanonicalEntity, RawRecord]] = {}
        problems: list[str] = []
        for record in records:
            try:
                entity, _payload = region_from_record(record)
            except ValueError as exc:
                self.diagnostics.record(
                    Diagnostic.for_record(
                        DiagnosticKind.INVALID_REGION,
                        record,
                        reason=_first_line(exc),
                    )
                )
                continue
            existing = drafts.get(entity.code)
            if existing is not None:
                problems.append(
                    f"duplicate code {entity.code!r} for {existing[0].name!r} and {entity.name!r}"
                )
                continue
            drafts[entity.code] = (entity, record)
        return drafts, problems

    def _resolve_candidates(
        self,
        candidates: Iterable[RootCandidate],
        matcher: EntityMatcher,
        un_codes: frozenset[str],
        *,
        region_codes: frozenset[str],
    ) -> dict[str, RootCandidate]:
        resolved: dict[str, RootCandidate] = {}
        for candidate in candidates:
            result = matcher.match(
                candidate.name,
                alternate_names=tuple(name for name in (candidate.long_name,) if name),
            )
            if not isinstance(result, Resolved):
                self.diagnostics.record(
                    Diagnostic(
                        kind=(
                            DiagnosticKind.MATCH_AMBIGUOUS
                            if isinstance(result, Ambiguous)
                            else DiagnosticKind.MATCH_UNRESOLVED
                        ),
                        dataset=SourceId.SOVEREIGN_STATES,
                        reason="sovereign state has no unique region entry",
                        raw_name=candidate.long_name,
                        candidates=getattr(result, "candidates", ()),
                    )
                )
                continue
            if result.code not in region_codes:
                self.diagnostics.record(
                    Diagnostic(
                        kind=DiagnosticKind.MATCH_UNRESOLVED,
                        dataset=SourceId.SOVEREIGN_STATES,
                        reason=f"sovereign state resolves to {result.code!r} which has no region",
                        raw_name=candidate.long_name,
                        candidates=(result.code,),
                    )
                )
                continue
            if result.code in resolved:
                log.debug(
                    "%s resolves to %s which is already taken by %s, skipping",
                    candidate.long_name,
                    result.code,
                    resolved[result.code].long_name,
                )
                continue
            if result.code in un_codes and not candidate.un_member:
                candidate = RootCandidate(
                    name=candidate.name,
                    long_name=candidate.long_name,
                    un_member=True,
                    listed_as_member=candidate.listed_as_member,
                    disputed=candidate.disputed,
                )
            resolved[result.code] = candidate
        return resolved

    def _report_unmatched_un_members(
        self,
        records: Sequence[RawRecord],
        candidates: Iterable[RootCandidate],
        candidates_by_code: dict[str, RootCandidate],
    ) -> None:
        """Flag UN members that no sovereign-states entry accounts for."""

        candidate_keys = {key for candidate in candidates for key in candidate.keys}
        unmatched = [
            record
            for record in records
            if candidate_keys.isdisjoint(_un_record_keys(record))
            and normalize_code(record.raw_code) not in candidates_by_code
        ]
        if not unmatched:
            return
        log.warning(
            "Matched %d of %d UN members to sovereign states; unmatched: %s",
            len(records) - len(unmatched),
            len(records),
            ", ".join(record.raw_name for record in unmatched),
        )
        for record in unmatched:
            self.diagnostics.record(
                Diagnostic.for_record(
                    DiagnosticKind.UN_MEMBER_UNMATCHED,
                    record,
                    reason="UN member matches no sovereign state",
                )
            )

    def _sovereignty_target(
        self,
        entity: CanonicalEntity,
        record: RawRecord,
        *,
        matcher: EntityMatcher,
        candidates_by_code: dict[str, RootCandidate],
        candidate_codes_by_key: dict[str, frozenset[str]],
    ) -> str | None:
        """Return the root code for ``entity`` (its own code when it is a root)."""

        text = record.text("sovereignty")
        if text is None:
            self._sovereignty_unresolved(record, "missing sovereignty")
            return None

        key = normalize_name(text)
        if UN_MEMBER_MARKER in key:
            return entity.code
        if key in normalized_names(entity.names):
            return entity.code

        codes = candidate_codes_by_key.get(key)
        if codes is None:
            result = matcher.match(text)
            if isinstance(result, Resolved) and result.code in candidates_by_code:
                codes = frozenset({result.code})
            elif isinstance(result, Ambiguous):
                codes = frozenset(result.candidates) & frozenset(candidates_by_code)

        if not codes:
            self._sovereignty_unresolved(record, f"{text!r} names no sovereign state")
            return None
        if len(codes) > 1:
            self._sovereignty_unresolved(
                record,
                f"{text!r} names several sovereign states",
                candidates=tuple(sorted(codes)),
            )
            return None
        return next(iter(codes))

    def _sovereignty_unresolved(
        self, record: RawRecord, reason: str, *, candidates: tuple[str, ...] = ()
    ) -> None:
        self.diagnostics.record(
            Diagnostic.for_record(
                DiagnosticKind.SOVEREIGNTY_UNRESOLVED,
                record,
                reason=reason,
                candidates=candidates,
            )
        )


def find_forest_problems(entities: Iterable[CanonicalEntity]) -> list[str]:
    """Return every invariant violation of the sovereignty forest."""

    problems: list[str] = []
    by_code: dict[str, CanonicalEntity] = {}
    for entity in entities:
        code = entity.code
        if not CODE_PATTERN.match(code):
            problems.append(f"malformed code {code!r} for {entity.name!r}")
        if code in by_code:
            problems.append(f"duplicate code {code!r}")
            continue
        by_code[code] = entity

    for code, entity in by_code.items():
        target = entity.sovereignty
        if target is None:
            continue
        if target == code:
            problems.append(f"{code!r} references itself as sovereign")
        elif target not in by_code:
            problems.append(f"{code!r} references missing sovereign {target!r}")
        elif not by_code[target].is_root:
            problems.append(f"{code!r} references non-root sovereign {target!r}")
        if entity.un_member:
            problems.append(f"{code!r} is a UN member but depends on {target!r}")

    problems.extend(_cycles(by_code))
    return problems


def validate_forest(
    entities: Iterable[CanonicalEntity], *, problems: Sequence[str] = ()
) -> None:
    """Raise :class:`ForestInvalid` if the forest breaks any invariant."""

    found = [*problems, *find_forest_problems(entities)]
    if found:
        for problem in found:
            log.error("Sovereignty forest: %s", problem)
        raise ForestInvalid(found)


def _cycles(by_code: dict[str, CanonicalEntity]) -> list[str]:
    problems: list[str] = []
    reported: set[str] = set()
    for start in by_code:
        seen: list[str] = []
        code: str | None = start
        while code is not None and code in by_code:
            if code in seen:
                cycle = seen[seen.index(code) :]
                if not reported.intersection(cycle):
                    problems.append(f"sovereignty cycle {' -> '.join([*cycle, code])}")
                    reported.update(cycle)
                break
            seen.append(code)
            code = by_code[code].sovereignty
            if code == seen[-1]:
                break
    return problems


def _require(source_id: SourceId, records: Sequence[RawRecord] | None) -> Sequence[RawRecord]:
    if records is None:
        raise SourceUnavailable(source_id, "source missing")
    if not records:
        raise SourceUnavailable(source_id, "source returned no records")
    return records


def _un_member_keys(records: Iterable[RawRecord]) -> tuple[frozenset[str], frozenset[str]]:
    keys: set[str] = set()
    codes: set[str] = set()
    for record in records:
        keys.update(_un_record_keys(record))
        code = normalize_code(record.raw_code)
        if code is not None:
            codes.add(code)
    return frozenset(keys), frozenset(codes)


def _un_record_keys(record: RawRecord) -> tuple[str, ...]:
    return normalized_names((record.raw_name, *record.texts("alternate_names")))


def _codes_by_key(candidates_by_code: dict[str, RootCandidate]) -> dict[str, frozenset[str]]:
    collected: dict[str, set[str]] = {}
    for code, candidate in candidates_by_code.items():
        for key in candidate.keys:
            collected.setdefault(key, set()).add(code)
    return {key: frozenset(codes) for key, codes in collected.items()}


def _first_line(exc: Exception) -> str:
    return str(exc).splitlines()[0] if str(exc) else type(exc).__name__
