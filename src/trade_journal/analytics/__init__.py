"""Trade analytics: performance, per-symbol and behavioural breakdowns.

All functions take matched trades and return derived, read-only reports
that are recomputed on demand.

summarize          Win rate, P&L, drawdown, Sharpe-like ratio, month buckets
analyze_symbols    Per-symbol stats with top / worst / most-traded lists
analyze_patterns   Hour-of-day, weekday and monthly breakdowns
daily_overview     One day's P&L and risk status
"""

from .patterns import analyze_patterns, classify_zone
from .performance import PerformanceReport, summarize
from .risk import DailyOverview, daily_overview
from .symbols import SymbolAnalysis, SymbolStats, analyze_symbols

__all__ = [
    "PerformanceReport",
    "summarize",
    "SymbolAnalysis",
    "SymbolStats",
    "analyze_symbols",
    "analyze_patterns",
    "classify_zone",
    "DailyOverview",
    "daily_overview",
]
