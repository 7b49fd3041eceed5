"""HTML table walking for scraped reference pages.

Wikipedia list pages hold several tables per page and column layouts drift over
time. Tables are therefore picked by their header cell count and rows by their
data cell count rather than by position.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

if TYPE_CHECKING:
    from collections.abc import Iterator

log = getLogger(__name__)

WIKI_PREFIX = "/wiki/"


class TableLayoutError(ValueError):
    """A page does not contain any table of the expected layout."""


@dataclass(frozen=True, slots=True)
class TableRow:
    table_index: int
    cells: tuple[Tag, ...]

    def cell(self, index: int) -> Tag | None:
        return self.cells[index] if index < len(self.cells) else None


def parse_html(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


def select_rows(
    soup: BeautifulSoup,
    *,
    header_count: int,
    cell_count: int | None = None,
    min_cells: int | None = None,
) -> Iterator[TableRow]:
    """Yield data rows of every table with exactly ``header_count`` header cells.

    ``cell_count`` keeps rows with exactly that many ``td`` cells; ``min_cells``
    keeps rows with at least that many. Without either, every row with a cell
    is kept. Raises :class:`TableLayoutError` if no table matches.
    """

    tables = soup.find_all("table")
    if not tables:
        raise TableLayoutError("Document does not contain any tables")

    matched = 0
    for index, table in enumerate(tables):
        headers = len(table.find_all("th"))
        if headers != header_count:
            log.debug(
                "Skipping table %d with %d header cells (need %d)", index, headers, header_count
            )
            continue
        matched += 1
        for row in table.find_all("tr"):
            cells = tuple(row.find_all("td"))
            if not cells:
                continue
            if cell_count is not None and len(cells) != cell_count:
                continue
            if min_cells is not None and len(cells) < min_cells:
                continue
            yield TableRow(table_index=index, cells=cells)

    if not matched:
        raise TableLayoutError(f"No table with {header_count} header cells")


def _links(cell: Tag, prefix: str) -> Iterator[Tag]:
    for link in cell.find_all("a", href=True):
        if str(link["href"]).startswith(prefix):
            yield link


def link_title(cell: Tag | None, prefix: str = WIKI_PREFIX) -> str | None:
    """Title attribute of the first link in ``cell`` whose href starts with ``prefix``."""

    if cell is None:
        return None
    for link in _links(cell, prefix):
        title = link.get("title")
        if isinstance(title, str) and title.strip():
            return title.strip()
    return None


def link_text(cell: Tag | None, prefix: str = WIKI_PREFIX) -> str | None:
    """First non-blank text of the first matching link in ``cell``."""

    if cell is None:
        return None
    for link in _links(cell, prefix):
        text = next(link.stripped_strings, None)
        if text:
            return text
    return None


def cell_texts(cell: Tag | None) -> list[str]:
    if cell is None:
        return []
    return list(cell.stripped_strings)


def first_text(cell: Tag | None, *, length: int | None = None) -> str | None:
    """First stripped text fragment in ``cell``, optionally of exact ``length``."""

    for text in cell_texts(cell):
        if length is None or len(text) == length:
            return text
    return None
