"""Tokenize an uploaded CSV into a header row and data rows.

This is the only place that touches raw bytes.  Anything that prevents
the file from being split into a header plus rows surfaces as
:class:`ParseError` with the original exception chained.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Union

from trade_journal.core.errors import ParseError

logger = logging.getLogger(__name__)

TableSource = Union[str, bytes, Path, IO[str]]


@dataclass
class Table:
    """Header plus data rows, each row keyed by header name."""

    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def head(self, n: int) -> "Table":
        return Table(headers=list(self.headers), rows=self.rows[:n])


def _load_text(source: TableSource) -> str:
    if isinstance(source, Path):
        try:
            return source.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(f"Cannot read {source}: {exc}", cause=exc) from exc
    if isinstance(source, bytes):
        try:
            return source.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise ParseError(f"File is not valid UTF-8: {exc}", cause=exc) from exc
    if isinstance(source, str):
        return source.lstrip("\ufeff")
    try:
        return source.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ParseError(f"Cannot read stream: {exc}", cause=exc) from exc


def read_table(
    source: TableSource,
    *,
    preview: int | None = None,
    delimiter: str = ",",
) -> Table:
    """Parse CSV content into a :class:`Table`.

    Parameters
    ----------
    source : str | bytes | Path | text stream
        CSV content.  A ``str`` is treated as the content itself, use a
        :class:`~pathlib.Path` to read from disk.
    preview : int | None
        Stop after this many data rows.
    delimiter : str
        Field separator.

    Raises
    ------
    ParseError
        On undecodable input, malformed quoting, or rows carrying more
        non-empty cells than there are headers.
    """
    text = _load_text(source)
    reader = csv.reader(io.StringIO(text), delimiter=delimiter, strict=True)
    table = Table()
    header_seen = False

    try:
        for raw in reader:
            cells = [c.strip() for c in raw]
            if not any(cells):
                continue
            if not header_seen:
                table.headers = cells
                header_seen = True
                continue
            if preview is not None and len(table.rows) >= preview:
                break

            width = len(table.headers)
            if len(cells) > width:
                if any(cells[width:]):
                    raise ParseError(
                        f"Line {reader.line_num}: expected {width} fields, "
                        f"found {len(cells)}"
                    )
                cells = cells[:width]
            elif len(cells) < width:
                cells.extend([""] * (width - len(cells)))
            table.rows.append(dict(zip(table.headers, cells)))
    except csv.Error as exc:
        raise ParseError(
            f"Line {reader.line_num}: malformed CSV: {exc}", cause=exc
        ) from exc

    logger.debug(
        "Read table: %d columns, %d rows", len(table.headers), len(table.rows)
    )
    return table
