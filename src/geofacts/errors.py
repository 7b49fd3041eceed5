"""Error taxonomy for a collection run.

Fatal errors abort the run before any output view exists. Recoverable errors are
turned into diagnostics by the stage that catches them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence


class GeofactsError(RuntimeError):
    """Base class for all domain errors."""

    fatal: bool = False


class SourceUnavailable(GeofactsError):
    """A required source could not be fetched or parsed."""

    fatal = True

    def __init__(self, source_id: str, reason: str) -> None:
        super().__init__(f"Required source {source_id!r} unavailable: {reason}")
        self.source_id = source_id
        self.reason = reason


class OptionalSourceUnavailable(GeofactsError):
    """An optional source failed; its attribute views stay empty."""

    def __init__(self, source_id: str, reason: str) -> None:
        super().__init__(f"Optional source {source_id!r} unavailable: {reason}")
        self.source_id = source_id
        self.reason = reason


class ForestInvalid(GeofactsError):
    """The sovereignty forest violates one or more structural invariants."""

    fatal = True

    def __init__(self, problems: Sequence[str]) -> None:
        joined = "; ".join(problems)
        super().__init__(f"Sovereignty forest invalid: {joined}")
        self.problems = tuple(problems)


class FlagTransformError(GeofactsError):
    """A single flag (or variant) could not be produced."""

    def __init__(self, code: str | None, message: str) -> None:
        super().__init__(message)
        self.code = code


class ImageDecodeFailure(FlagTransformError):
    """Flag bytes are not a decodable image."""


class ImageTooSmall(FlagTransformError):
    """Flag image is below the minimum usable resolution."""


class FlagUnavailable(FlagTransformError):
    """No flag image could be located or downloaded."""
