"""Domain port definitions for adapters."""

from __future__ import annotations

from .sources import FlagImageSource, SourceExtractor

__all__ = ["FlagImageSource", "SourceExtractor"]
