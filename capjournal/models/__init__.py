"""Data models for CapJournal."""

from capjournal.models.entry import AppConfig, TradeEntry
from capjournal.models.calculated import CalculatedDay
from capjournal.models.summary import GlobalStats, PeriodSummary

__all__ = [
    "AppConfig",
    "TradeEntry",
    "CalculatedDay",
    "PeriodSummary",
    "GlobalStats",
]
