"""Open position bookkeeping."""

from .book import DEFAULT_CLOSE_REASON, OpenPositionBook

__all__ = ["OpenPositionBook", "DEFAULT_CLOSE_REASON"]
