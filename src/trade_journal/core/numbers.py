"""Explicit numeric parsing for spreadsheet cells.

Broker exports are full of ``"1,234.50"`` style values.  Everything that
turns a cell into a number goes through :func:`parse_number` so the rules
are in one place:

* surrounding whitespace is ignored
* group separators (``,``, ``_`` and any unicode whitespace) are
  stripped
* the result must be finite; ``NaN`` / ``Infinity`` are rejected
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

_GROUP_SEPARATORS = re.compile(r"[,_\s]")


def parse_number(value: Any) -> Decimal:
    """Parse *value* into a finite :class:`Decimal`.

    Raises
    ------
    ValueError
        If the value is empty, not numeric, or not finite.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        cleaned = _GROUP_SEPARATORS.sub("", value.strip())
        if not cleaned:
            raise ValueError("Empty numeric value")
        try:
            result = Decimal(cleaned)
        except InvalidOperation as exc:
            raise ValueError(f"Not a number: {value!r}") from exc
    else:
        raise ValueError(f"Not a number: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Not a finite number: {value!r}")
    return result


def try_parse_number(value: Any) -> Decimal | None:
    """Like :func:`parse_number` but returns ``None`` instead of raising."""
    try:
        return parse_number(value)
    except ValueError:
        return None


def round_half_up(value: Decimal | float | int, places: int = 2) -> float:
    """Round at the reporting boundary and hand back a JSON-friendly float."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
