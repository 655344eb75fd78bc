"""File -> schema -> rows -> matched trades, in one call.

Usage::

    importer = TradeImporter(load_settings("configs/journal.toml"))
    result = importer.import_source(Path("tradebook.csv"))
    result.summary()
    # {"total_trades": 42, "matched_trades": 18, "open_positions": 3, ...}

If no mapping is supplied the detector's suggestion is used as-is, which
is what the CLI does.  Interactive callers should show
``importer.detect(...)`` to the user first and pass the confirmed mapping.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from trade_journal.core.config import Settings
from trade_journal.core.models import MatchResult, RawTradeRow
from trade_journal.core.numbers import round_half_up
from trade_journal.matching.matcher import TradeMatcher
from trade_journal.observability.logger import get_logger, new_run_id

from .normalizer import parse_and_validate
from .reader import TableSource, read_table
from .schema import SchemaReport, detect_schema

log = get_logger(__name__)


@dataclass
class ImportResult:
    schema: SchemaReport
    mapping: dict[str, str]
    rows: list[RawTradeRow] = field(default_factory=list)
    match: MatchResult = field(default_factory=MatchResult)

    def summary(self) -> dict[str, Any]:
        return {
            "total_trades": len(self.rows),
            "matched_trades": self.match.total_matched,
            "open_positions": self.match.total_unmatched,
            "net_profit": round_half_up(self.match.net_profit),
        }


class TradeImporter:
    """Runs the full ingest pipeline with one set of settings."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._matcher = TradeMatcher()

    def detect(self, source: TableSource) -> SchemaReport:
        cfg = self._settings.ingest
        table = read_table(source, preview=cfg.sample_rows, delimiter=cfg.delimiter)
        report = detect_schema(
            table,
            sample_rows=cfg.sample_rows,
            type_sample_size=cfg.type_sample_size,
        )
        log.info(
            "schema_detected",
            columns=len(report.columns),
            confidence=report.confidence_score,
            missing=report.missing_fields,
        )
        return report

    def import_source(
        self,
        source: TableSource,
        mapping: dict[str, str] | None = None,
    ) -> ImportResult:
        """Parse, validate and match *source*.

        Raises ``ParseError`` / ``RowValidationError`` unchanged; nothing
        is returned for a file with a bad row.
        """
        run_id = new_run_id()
        cfg = self._settings.ingest
        table = read_table(source, delimiter=cfg.delimiter)
        schema = detect_schema(
            table,
            sample_rows=cfg.sample_rows,
            type_sample_size=cfg.type_sample_size,
        )
        effective = dict(mapping) if mapping is not None else dict(schema.suggested_mapping)
        log.info(
            "import_started",
            run_id=run_id,
            rows=len(table),
            mapping=effective,
            user_mapping=mapping is not None,
        )

        rows = parse_and_validate(table, effective, tz=cfg.timezone)
        match = self._matcher.match(rows)
        result = ImportResult(schema=schema, mapping=effective, rows=rows, match=match)
        log.info("import_finished", run_id=run_id, **result.summary())
        return result
