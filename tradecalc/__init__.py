"""Trading analytics: equity statistics, risk sizing, risk curves, journaling, backtesting and charts."""

__version__ = "1.0.0"