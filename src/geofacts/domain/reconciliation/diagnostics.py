"""Structured, non-fatal diagnostics collected during a run.

Every recoverable event (ambiguous or unresolved match, slot conflict, optional
source failure, flag failure) becomes one :class:`Diagnostic`. Diagnostics are
logged as warnings and never change the exit status.
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from .contracts import Ambiguous

if TYPE_CHECKING:
    from collections.abc import Iterator

    from geofacts.domain.model import RawRecord

    from .contracts import MatchResult

log = getLogger(__name__)


class DiagnosticKind(StrEnum):
    MATCH_AMBIGUOUS = "match_ambiguous"
    MATCH_UNRESOLVED = "match_unresolved"
    UNKNOWN_ENTITY = "unknown_entity"
    ATTRIBUTE_CONFLICT = "attribute_conflict"
    INVALID_ATTRIBUTES = "invalid_attributes"
    INVALID_REGION = "invalid_region"
    SOVEREIGNTY_UNRESOLVED = "sovereignty_unresolved"
    UN_MEMBER_UNMATCHED = "un_member_unmatched"
    OPTIONAL_SOURCE_UNAVAILABLE = "optional_source_unavailable"
    FLAG_UNAVAILABLE = "flag_unavailable"
    IMAGE_DECODE_FAILURE = "image_decode_failure"
    IMAGE_TOO_SMALL = "image_too_small"


@dataclass(frozen=True, slots=True, kw_only=True)
class Diagnostic:
    kind: DiagnosticKind
    dataset: str
    reason: str
    raw_name: str | None = None
    raw_code: str | None = None
    candidates: tuple[str, ...] = ()

    @classmethod
    def for_record(
        cls,
        kind: DiagnosticKind,
        record: RawRecord,
        *,
        reason: str,
        candidates: tuple[str, ...] = (),
    ) -> Diagnostic:
        return cls(
            kind=kind,
            dataset=record.source_id,
            reason=reason,
            raw_name=record.raw_name,
            raw_code=record.raw_code,
            candidates=candidates,
        )

    @classmethod
    def for_failed_match(cls, record: RawRecord, result: MatchResult) -> Diagnostic:
        if isinstance(result, Ambiguous):
            return cls.for_record(
                DiagnosticKind.MATCH_AMBIGUOUS,
                record,
                reason=result.reason,
                candidates=result.candidates,
            )
        return cls.for_record(
            DiagnosticKind.MATCH_UNRESOLVED,
            record,
            reason=getattr(result, "reason", "unresolved"),
        )

    def __str__(self) -> str:
        subject = self.raw_name or "-"
        if self.raw_code:
            subject = f"{subject} [{self.raw_code}]"
        text = f"{self.dataset}: {self.kind} for {subject}: {self.reason}"
        if self.candidates:
            text = f"{text} (candidates: {', '.join(self.candidates)})"
        return text


@dataclass(slots=True)
class DiagnosticsReport:
    """Thread-safe accumulator of diagnostics for one run."""

    _items: list[Diagnostic] = field(default_factory=list["Diagnostic"])
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record(self, diagnostic: Diagnostic) -> None:
        log.warning("%s", diagnostic)
        with self._lock:
            self._items.append(diagnostic)

    def __iter__(self) -> Iterator[Diagnostic]:
        with self._lock:
            return iter(tuple(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def of_kind(self, kind: DiagnosticKind) -> tuple[Diagnostic, ...]:
        return tuple(item for item in self if item.kind is kind)

    def for_dataset(self, dataset: str) -> tuple[Diagnostic, ...]:
        return tuple(item for item in self if item.dataset == dataset)

    def counts(self) -> Counter[DiagnosticKind]:
        return Counter(item.kind for item in self)
