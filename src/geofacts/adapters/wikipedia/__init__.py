"""Wikipedia page extractors."""

from .attributes import (
    CallingCodesExtractor,
    CapitalsExtractor,
    CurrenciesExtractor,
    EmojisExtractor,
)
from .flags import GalleryFlagSource, absolute_url, find_flag_url
from .languages import LanguagesExtractor, parse_language_codes
from .pages import PageExtractor
from .states import RegionsExtractor, SovereignStatesExtractor, sovereignty_text
from .tables import (
    TableLayoutError,
    TableRow,
    cell_texts,
    first_text,
    link_text,
    link_title,
    parse_html,
    select_rows,
)

__all__ = [
    "CallingCodesExtractor",
    "CapitalsExtractor",
    "CurrenciesExtractor",
    "EmojisExtractor",
    "GalleryFlagSource",
    "LanguagesExtractor",
    "PageExtractor",
    "RegionsExtractor",
    "SovereignStatesExtractor",
    "TableLayoutError",
    "TableRow",
    "absolute_url",
    "cell_texts",
    "find_flag_url",
    "first_text",
    "link_text",
    "link_title",
    "parse_html",
    "parse_language_codes",
    "select_rows",
    "sovereignty_text",
]
