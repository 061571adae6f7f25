"""CapJournal - a trading-capital journal with derived P&L analytics."""

__version__ = "0.1.0"
