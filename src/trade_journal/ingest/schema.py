"""Column schema detection for uploaded trade files.

Looks at the header row and a handful of preview rows and proposes how
the file's columns map onto the canonical trade fields::

    report = detect_schema(read_table(path, preview=5))
    report.suggested_mapping   # {"symbol": "Scrip", "quantity": "Qty", ...}
    report.confidence_score    # 0.83

Matching is a static alias table plus a pure containment test.  The first
header (in column order) that satisfies the test for a field wins; there
is no scoring between candidates, so the same header row always produces
the same mapping.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any

from trade_journal.core.enums import ColumnType
from trade_journal.core.numbers import try_parse_number

from .reader import Table, TableSource, read_table

logger = logging.getLogger(__name__)

CANONICAL_FIELDS: tuple[str, ...] = (
    "symbol",
    "trade_type",
    "quantity",
    "price",
    "amount",
    "trade_datetime",
)

# Canonical field -> normalized aliases, in priority order
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "symbol": (
        "symbol", "ticker", "tradingsymbol", "scrip", "script",
        "stock", "instrument", "security",
    ),
    "trade_type": (
        "tradetype", "type", "side", "buysell", "transactiontype", "action",
    ),
    "quantity": ("quantity", "qty", "shares", "volume", "units"),
    "price": ("price", "rate", "avgprice", "executionprice"),
    "amount": ("amount", "value", "total", "netamount", "consideration"),
    "trade_datetime": (
        "datetime", "date", "timestamp", "tradedate", "time",
    ),
}

# Optional columns the normalizer understands.  Not counted in confidence.
AUXILIARY_ALIASES: dict[str, tuple[str, ...]] = {
    "trade_time": ("tradetime", "executiontime", "time"),
    "commission": ("commission", "brokerage", "fees", "fee", "charges"),
}

# Prefix templates: YYYY-MM-DD, DD/MM/YYYY, DD-MM-YYYY
DATE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^\d{4}-\d{2}-\d{2}"),
    re.compile(r"^\d{2}/\d{2}/\d{4}"),
    re.compile(r"^\d{2}-\d{2}-\d{4}"),
)

_NON_ALNUM = re.compile(r"[^0-9a-z]")


@dataclass
class ColumnProfile:
    """Inferred description of one source column."""

    name: str
    inferred_type: ColumnType
    sample_values: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "inferred_type": self.inferred_type.value,
            "sample_values": list(self.sample_values),
        }


@dataclass
class SchemaReport:
    """Detection result, shown to the user for review before import."""

    columns: list[ColumnProfile] = field(default_factory=list)
    suggested_mapping: dict[str, str] = field(default_factory=dict)
    confidence_score: float = 0.0

    @property
    def missing_fields(self) -> list[str]:
        return [f for f in CANONICAL_FIELDS if f not in self.suggested_mapping]

    def to_dict(self) -> dict[str, Any]:
        return {
            "columns": [c.to_dict() for c in self.columns],
            "suggested_mapping": dict(self.suggested_mapping),
            "confidence_score": self.confidence_score,
        }


# ---------------------------------------------------------------------- #
# Pure helpers                                                             #
# ---------------------------------------------------------------------- #

def normalize_header(header: str) -> str:
    """Lower-case and drop everything that is not a letter or digit."""
    return _NON_ALNUM.sub("", header.lower())


def header_matches(header: str, aliases: tuple[str, ...]) -> bool:
    """True if the normalized header contains an alias or vice versa."""
    normalized = normalize_header(header)
    if not normalized:
        return False
    for alias in aliases:
        if alias in normalized:
            return True
        if normalized in alias:
            return True
    return False


def infer_column_type(values: list[str]) -> ColumnType:
    """Classify sample values.

    Date wins over number: ``2024-01-05`` style values would otherwise
    pass as arithmetic-looking strings in some exports.
    """
    if not values:
        return ColumnType.STRING
    if any(p.match(v) for v in values for p in DATE_PATTERNS):
        return ColumnType.DATE
    if all(try_parse_number(v) is not None for v in values):
        return ColumnType.NUMBER
    return ColumnType.STRING


def suggest_mapping(
    headers: list[str],
    *,
    include_auxiliary: bool = True,
) -> dict[str, str]:
    """Map canonical (and optionally auxiliary) fields to source headers."""
    mapping: dict[str, str] = {}
    for name, aliases in FIELD_ALIASES.items():
        match = _first_match(headers, aliases)
        if match is not None:
            mapping[name] = match

    if include_auxiliary:
        for name, aliases in AUXILIARY_ALIASES.items():
            candidates = headers
            if name == "trade_time" and "trade_datetime" in mapping:
                candidates = [h for h in headers if h != mapping["trade_datetime"]]
            match = _first_match(candidates, aliases)
            if match is not None:
                mapping[name] = match
    return mapping


def confidence_score(mapping: dict[str, str]) -> float:
    """Fraction of canonical fields that received a column, 2 decimals."""
    matched = sum(1 for f in CANONICAL_FIELDS if f in mapping)
    return round(matched / len(CANONICAL_FIELDS), 2)


def _first_match(headers: list[str], aliases: tuple[str, ...]) -> str | None:
    for header in headers:
        if header_matches(header, aliases):
            return header
    return None


# ---------------------------------------------------------------------- #
# Entry points                                                             #
# ---------------------------------------------------------------------- #

def detect_schema(
    table: Table,
    *,
    sample_rows: int = 5,
    type_sample_size: int = 3,
) -> SchemaReport:
    """Build a :class:`SchemaReport` from a header plus preview rows."""
    if not table.headers:
        return SchemaReport()

    preview = table.rows[:sample_rows]
    columns: list[ColumnProfile] = []
    for header in table.headers:
        values = [row.get(header, "") for row in preview]
        samples = [v for v in values if v != ""][:type_sample_size]
        columns.append(
            ColumnProfile(
                name=header,
                inferred_type=infer_column_type(samples),
                sample_values=samples,
            )
        )

    mapping = suggest_mapping(table.headers)
    report = SchemaReport(
        columns=columns,
        suggested_mapping=mapping,
        confidence_score=confidence_score(mapping),
    )
    logger.info(
        "Schema detected: %d columns, confidence %.2f, missing=%s",
        len(columns),
        report.confidence_score,
        report.missing_fields,
    )
    return report


def detect_schema_from_source(
    source: TableSource,
    *,
    sample_rows: int = 5,
    type_sample_size: int = 3,
    delimiter: str = ",",
) -> SchemaReport:
    """Read a preview of *source* and detect its schema.

    Raises :class:`~trade_journal.core.errors.ParseError` if the file
    cannot be tokenized.
    """
    table = read_table(source, preview=sample_rows, delimiter=delimiter)
    return detect_schema(
        table, sample_rows=sample_rows, type_sample_size=type_sample_size
    )
