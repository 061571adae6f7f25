"""Full pipeline run over a journal."""

from pydantic import BaseModel

from capjournal.engine.derivation import process_entries
from capjournal.engine.periods import calculate_period_summaries
from capjournal.engine.stats import calculate_global_stats
from capjournal.models import AppConfig, CalculatedDay, GlobalStats, PeriodSummary, TradeEntry


class Snapshot(BaseModel):
    """Everything derived from one state of the journal."""

    days: list[CalculatedDay]
    weekly: list[PeriodSummary]
    monthly: list[PeriodSummary]
    quarterly: list[PeriodSummary]
    yearly: list[PeriodSummary]
    stats: GlobalStats

    model_config = {"frozen": True}

    def summaries(self, period: str) -> list[PeriodSummary]:
        return {
            "week": self.weekly,
            "month": self.monthly,
            "quarter": self.quarterly,
            "year": self.yearly,
        }[period]


def build_snapshot(entries: list[TradeEntry], config: AppConfig) -> Snapshot:
    """Run derivation, aggregation and statistics in sequence."""
    days = process_entries(entries, config)
    weekly = calculate_period_summaries(days, "week_id")
    monthly = calculate_period_summaries(days, "month_id")
    return Snapshot(
        days=days,
        weekly=weekly,
        monthly=monthly,
        quarterly=calculate_period_summaries(days, "quarter_id"),
        yearly=calculate_period_summaries(days, "year_id"),
        stats=calculate_global_stats(days, weekly, monthly),
    )
