"""Enumerations used across the trade journal."""

from enum import Enum


class TradeSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class Direction(str, Enum):
    LONG = "long"    # BUY lot opened, SELL closed it
    SHORT = "short"  # SELL lot opened, BUY closed it


class ColumnType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"


class RiskStatus(str, Enum):
    GREEN = "green"
    AMBER = "amber"
    RED = "red"


class EmotionalZone(str, Enum):
    EUPHORIC = "euphoric"
    CONFIDENT = "confident"
    NEUTRAL = "neutral"
    ANXIOUS = "anxious"
    FEARFUL = "fearful"


class PositionAction(str, Enum):
    """Actions accepted by :meth:`OpenPositionBook.apply`."""

    MARK_INVESTMENT = "markInvestment"
    CLOSE = "closePosition"
    REOPEN = "reopenPosition"
    UPDATE_NOTES = "updateNotes"
    DELETE = "deletePosition"
