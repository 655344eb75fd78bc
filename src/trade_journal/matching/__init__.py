"""FIFO trade matching."""

from .matcher import TradeMatcher, match_trades

__all__ = ["TradeMatcher", "match_trades"]
