"""Raw records as produced by source extractors.

Records are ephemeral: they are consumed once by the graph builder or the
aggregator and never stored on canonical entities.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

type RawValue = str | int | float | bool | None | list[RawValue] | dict[str, RawValue]


@dataclass(frozen=True, slots=True, kw_only=True)
class RawRecord:
    """One row extracted from one source."""

    source_id: str
    raw_name: str
    raw_code: str | None = None
    attributes: Mapping[str, RawValue] = field(default_factory=dict["str", "RawValue"])

    def text(self, name: str) -> str | None:
        """Return a string attribute, or ``None`` when absent or not textual."""

        value = self.attributes.get(name)
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return None

    def texts(self, name: str) -> tuple[str, ...]:
        """Return a list attribute of strings, skipping blanks and non-strings."""

        value = self.attributes.get(name)
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return ()
        return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())
