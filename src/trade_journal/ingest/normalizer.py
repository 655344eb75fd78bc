"""Row normalization: mapped spreadsheet cells -> :class:`RawTradeRow`.

Each row goes through a pydantic model and comes back as a tagged
:class:`RowResult` holding either a row or a :class:`RowValidationError`.
:func:`parse_and_validate` is the batch entry point and is all-or-nothing:
the first failing row aborts the import and nothing is returned.

Trade type policy
-----------------
``BUY`` / ``B`` map to BUY and ``SELL`` / ``S`` to SELL (case-insensitive).
Any other non-empty token is treated as SELL and a ``trade_type_fallback``
warning is logged.  Callers that cannot accept this should check
:attr:`RowResult.side_fallback` via :func:`decode_rows` before importing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator

from trade_journal.core.enums import TradeSide
from trade_journal.core.errors import RowValidationError
from trade_journal.core.models import RawTradeRow
from trade_journal.core.numbers import parse_number, try_parse_number

from .reader import Table, TableSource, read_table

logger = logging.getLogger(__name__)

_BUY_TOKENS = frozenset({"BUY", "B"})
_SELL_TOKENS = frozenset({"SELL", "S"})

# DD-MM-YYYY or DD/MM/YYYY with an optional HH:MM[:SS]
_DAY_FIRST = re.compile(
    r"^(\d{2})([-/])(\d{2})\2(\d{4})"
    r"(?:[ T](\d{1,2}):(\d{2})(?::(\d{2}))?)?$"
)
_BARE_TIME = re.compile(r"^\d{1,2}:\d{2}(:\d{2})?$")


def parse_trade_datetime(value: str, tz: str = "UTC") -> datetime:
    """Parse an upload timestamp into an aware UTC datetime.

    Day-first ``DD-MM-YYYY`` / ``DD/MM/YYYY`` are tried before ISO-8601.
    Naive values are interpreted in *tz*.
    """
    text = value.strip()
    if not text:
        raise ValueError("missing date")

    m = _DAY_FIRST.match(text)
    try:
        if m:
            day, _, month, year, hh, mm, ss = m.groups()
            parsed = datetime(
                int(year), int(month), int(day),
                int(hh or 0), int(mm or 0), int(ss or 0),
            )
        else:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError(f"invalid date: {value!r}") from exc

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=ZoneInfo(tz))
    return parsed.astimezone(timezone.utc)


class TradeRowInput(BaseModel):
    """Validation schema for one projected row."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    trade_type: TradeSide
    quantity: Decimal
    price: Decimal
    amount: Decimal | None = None
    trade_datetime: datetime
    commission: Decimal = Decimal("0")

    @field_validator("symbol", mode="before")
    @classmethod
    def _symbol(cls, v: Any) -> str:
        text = str(v).strip() if v is not None else ""
        if not text:
            raise ValueError("missing symbol")
        return text.upper()

    @field_validator("trade_type", mode="before")
    @classmethod
    def _trade_type(cls, v: Any) -> TradeSide:
        token = str(v).strip().upper() if v is not None else ""
        if not token:
            raise ValueError("missing trade type")
        if token in _BUY_TOKENS:
            return TradeSide.BUY
        if token not in _SELL_TOKENS:
            logger.warning("trade_type_fallback: %r treated as SELL", v)
        return TradeSide.SELL

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity(cls, v: Any) -> Decimal:
        if v is None or v == "":
            raise ValueError("missing quantity")
        qty = abs(parse_number(v))
        if qty == 0:
            raise ValueError("quantity must be greater than zero")
        return qty

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, v: Any) -> Decimal:
        if v is None or v == "":
            raise ValueError("missing price")
        price = parse_number(v)
        if price <= 0:
            raise ValueError("price must be greater than zero")
        return price

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> Decimal | None:
        parsed = try_parse_number(v) if v is not None else None
        if parsed is None or parsed == 0:
            return None  # RawTradeRow falls back to quantity * price
        return abs(parsed)

    @field_validator("trade_datetime", mode="before")
    @classmethod
    def _trade_datetime(cls, v: Any, info: ValidationInfo) -> datetime:
        if isinstance(v, datetime):
            return v
        tz = (info.context or {}).get("tz", "UTC")
        return parse_trade_datetime("" if v is None else str(v), tz)

    @field_validator("commission", mode="before")
    @classmethod
    def _commission(cls, v: Any) -> Decimal:
        parsed = try_parse_number(v) if v is not None else None
        return abs(parsed) if parsed is not None else Decimal("0")


@dataclass(frozen=True)
class RowResult:
    """Outcome of decoding one row: exactly one of ``row`` / ``error``."""

    row_number: int
    row: RawTradeRow | None = None
    error: RowValidationError | None = None
    side_fallback: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def project_row(raw: dict[str, str], mapping: dict[str, str]) -> dict[str, Any]:
    """Pick mapped source columns out of *raw* under canonical names.

    A separate ``trade_time`` column is appended to the date cell when it
    holds a bare ``HH:MM[:SS]`` value.
    """
    projected: dict[str, Any] = {
        target: raw.get(source) for target, source in mapping.items()
    }
    date_col = mapping.get("trade_datetime")
    time_col = mapping.get("trade_time")
    if date_col and time_col and time_col != date_col:
        date_val = (raw.get(date_col) or "").strip()
        time_val = (raw.get(time_col) or "").strip()
        if date_val and _BARE_TIME.match(time_val):
            projected["trade_datetime"] = f"{date_val} {time_val}"
    projected.pop("trade_time", None)
    return projected


def decode_row(
    raw: dict[str, str],
    mapping: dict[str, str],
    *,
    row_number: int,
    tz: str = "UTC",
) -> RowResult:
    """Validate one row without raising."""
    data = project_row(raw, mapping)
    try:
        parsed = TradeRowInput.model_validate(data, context={"tz": tz})
    except ValidationError as exc:
        err = exc.errors()[0]
        field = str(err["loc"][0]) if err.get("loc") else "row"
        message = err["msg"].removeprefix("Value error, ")
        return RowResult(
            row_number=row_number,
            error=RowValidationError(row_number, field, message),
        )

    token = str(data.get("trade_type", "")).strip().upper()
    row = RawTradeRow(
        symbol=parsed.symbol,
        side=parsed.trade_type,
        quantity=parsed.quantity,
        price=parsed.price,
        amount=parsed.amount,
        timestamp=parsed.trade_datetime,
        commission=parsed.commission,
        row_number=row_number,
    )
    return RowResult(
        row_number=row_number,
        row=row,
        side_fallback=token not in _BUY_TOKENS and token not in _SELL_TOKENS,
    )


def decode_rows(
    table: Table,
    mapping: dict[str, str],
    *,
    tz: str = "UTC",
) -> list[RowResult]:
    """Decode every row, collecting errors instead of stopping."""
    return [
        decode_row(raw, mapping, row_number=i, tz=tz)
        for i, raw in enumerate(table.rows, start=1)
    ]


def parse_and_validate(
    table: Table,
    mapping: dict[str, str],
    *,
    tz: str = "UTC",
) -> list[RawTradeRow]:
    """Normalize every row of *table* or fail on the first bad one.

    Raises
    ------
    RowValidationError
        With the 1-based row number and the offending canonical field.
    """
    rows: list[RawTradeRow] = []
    fallbacks = 0
    for i, raw in enumerate(table.rows, start=1):
        result = decode_row(raw, mapping, row_number=i, tz=tz)
        if result.error is not None:
            logger.warning("Row validation failed: %s", result.error)
            raise result.error
        rows.append(result.row)
        fallbacks += result.side_fallback

    if fallbacks:
        logger.warning("%d row(s) used the SELL fallback for trade_type", fallbacks)
    return rows


def parse_and_validate_source(
    source: TableSource,
    mapping: dict[str, str],
    *,
    tz: str = "UTC",
    delimiter: str = ",",
) -> list[RawTradeRow]:
    """Read the full file and normalize it."""
    return parse_and_validate(read_table(source, delimiter=delimiter), mapping, tz=tz)
