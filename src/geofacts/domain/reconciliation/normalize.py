"""Name normalization for cross-source matching.

Responsibilities of this stage:
- derive one deterministic lookup key from a raw, possibly annotated name
- never fail; degenerate input yields an empty key that matches nothing
"""

from __future__ import annotations

import re
import unicodedata
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Iterable

_BRACKETED: Final = re.compile(r"\([^()]*\)|\[[^\[\]]*\]|\{[^{}]*\}")
# letters that NFKD leaves intact
_FOLD_TABLE: Final = str.maketrans(
    {"ø": "o", "æ": "ae", "œ": "oe", "đ": "d", "ł": "l", "ı": "i", "þ": "th", "ð": "d"}
)


def normalize_name(raw_name: str | None) -> str:
    """Return the matching key for ``raw_name``."""

    if not raw_name:
        return ""
    text = _strip_annotations(raw_name)
    text = unicodedata.normalize("NFKD", text)
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = text.casefold().translate(_FOLD_TABLE)
    text = "".join(" " if _is_separator(ch) else ch for ch in text)
    return " ".join(text.split())


def normalized_names(names: Iterable[str | None]) -> tuple[str, ...]:
    """Normalize ``names``, dropping empty keys and duplicates in first-seen order."""

    keys = (normalize_name(name) for name in names)
    return tuple(dict.fromkeys(key for key in keys if key))


def _strip_annotations(text: str) -> str:
    previous = None
    while previous != text:
        previous = text
        text = _BRACKETED.sub(" ", text)
    return text


def _is_separator(ch: str) -> bool:
    return unicodedata.category(ch)[0] in {"P", "S", "Z", "C"}
