"""Period aggregation of calculated days."""

from collections import defaultdict
from typing import Literal

from capjournal.engine.derivation import percent_of
from capjournal.models import CalculatedDay, PeriodSummary

PeriodKey = Literal["week_id", "month_id", "quarter_id", "year_id"]

PERIOD_KEYS: dict[str, PeriodKey] = {
    "week": "week_id",
    "month": "month_id",
    "quarter": "quarter_id",
    "year": "year_id",
}


def group_by_period(
    days: list[CalculatedDay], period_key: PeriodKey
) -> dict[str, list[CalculatedDay]]:
    """Group days by a period identifier, each group in ascending date order."""
    groups: dict[str, list[CalculatedDay]] = defaultdict(list)
    for day in days:
        groups[getattr(day, period_key)].append(day)
    return {key: sorted(group, key=lambda d: d.date) for key, group in groups.items()}


def summarize_period(period_id: str, days: list[CalculatedDay]) -> PeriodSummary:
    """Build the summary for one period.

    Args:
        period_id: Identifier shared by every day in the group.
        days: Non-empty list of days in ascending date order.

    Returns:
        The period summary.
    """
    pl_dollar = sum(d.pl_daily_dollar for d in days)
    start_capital = days[0].initial_capital_daily
    wins = sum(1 for d in days if d.pl_daily_dollar > 0)

    return PeriodSummary(
        period_id=period_id,
        label=period_id,
        pl_dollar=pl_dollar,
        pl_percent=percent_of(pl_dollar, start_capital),
        win_rate=wins / len(days) * 100,
        day_count=len(days),
        total_operations=sum(d.trade_count for d in days),
        total_deposits=sum(d.deposit for d in days),
        total_withdrawals=sum(d.withdrawal for d in days),
        start_capital=start_capital,
        end_capital=days[-1].final_capital,
    )


def calculate_period_summaries(
    days: list[CalculatedDay], period_key: PeriodKey
) -> list[PeriodSummary]:
    """Summarize calculated days per week, month, quarter or year.

    Args:
        days: Calculated days in any order.
        period_key: Name of the period identifier field to group by.

    Returns:
        One summary per period, most recent period first.
    """
    groups = group_by_period(days, period_key)
    ordered = sorted(groups.items(), key=lambda item: item[1][0].date, reverse=True)
    return [summarize_period(key, group) for key, group in ordered]
