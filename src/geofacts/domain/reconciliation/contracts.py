"""Match outcomes produced by the entity matcher.

This module intentionally holds only the outcome dataclasses and enums; the
matching algorithm lives in ``resolve``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Literal


class MatchStatus(StrEnum):
    RESOLVED = "resolved"
    AMBIGUOUS = "ambiguous"
    UNRESOLVED = "unresolved"


class MatchKind(StrEnum):
    """How a record was matched against canonical codes."""

    CODE = "code"
    NAME = "name"


@dataclass(frozen=True, slots=True, kw_only=True)
class Resolved:
    """Record resolved to exactly one canonical code."""

    code: str
    match_kind: MatchKind
    matched_key: str | None = None
    status: Literal[MatchStatus.RESOLVED] = MatchStatus.RESOLVED


@dataclass(frozen=True, slots=True, kw_only=True)
class Ambiguous:
    """Record matched the alias sets of several canonical codes."""

    candidates: tuple[str, ...]
    matched_keys: tuple[str, ...] = ()
    reason: str = "multiple_alias_matches"
    status: Literal[MatchStatus.AMBIGUOUS] = MatchStatus.AMBIGUOUS

    def __post_init__(self) -> None:
        if len(self.candidates) < 2:  # noqa: PLR2004
            raise ValueError("Ambiguous match must include at least two candidates")


@dataclass(frozen=True, slots=True, kw_only=True)
class Unresolved:
    """Record matched nothing."""

    reason: str = "no_alias_match"
    status: Literal[MatchStatus.UNRESOLVED] = MatchStatus.UNRESOLVED


type MatchResult = Resolved | Ambiguous | Unresolved
