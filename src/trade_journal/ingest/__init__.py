"""Trade file ingest: tokenizing, schema detection and row validation.

read_table         CSV -> header + rows (ParseError on failure)
detect_schema      Column types, suggested mapping, confidence score
parse_and_validate Mapped rows -> RawTradeRow, fail-fast per batch
TradeImporter      End-to-end: file -> matched trades and open positions
"""

from .normalizer import (
    RowResult,
    decode_row,
    decode_rows,
    parse_and_validate,
    parse_and_validate_source,
    parse_trade_datetime,
)
from .pipeline import ImportResult, TradeImporter
from .reader import Table, read_table
from .schema import (
    AUXILIARY_ALIASES,
    CANONICAL_FIELDS,
    FIELD_ALIASES,
    ColumnProfile,
    SchemaReport,
    detect_schema,
    detect_schema_from_source,
)

__all__ = [
    "Table",
    "read_table",
    "CANONICAL_FIELDS",
    "FIELD_ALIASES",
    "AUXILIARY_ALIASES",
    "ColumnProfile",
    "SchemaReport",
    "detect_schema",
    "detect_schema_from_source",
    "RowResult",
    "decode_row",
    "decode_rows",
    "parse_and_validate",
    "parse_and_validate_source",
    "parse_trade_datetime",
    "ImportResult",
    "TradeImporter",
]
