"""Derivation pipeline: calculated days, period summaries and global stats."""

from capjournal.engine.derivation import process_entries
from capjournal.engine.periods import calculate_period_summaries
from capjournal.engine.pipeline import Snapshot, build_snapshot
from capjournal.engine.stats import calculate_global_stats

__all__ = [
    "process_entries",
    "calculate_period_summaries",
    "calculate_global_stats",
    "Snapshot",
    "build_snapshot",
]
