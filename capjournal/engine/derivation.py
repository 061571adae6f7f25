"""Derivation engine: raw journal entries to calculated days.

The engine is a pure fold over the entries sorted by date. Each step
receives the running state from the previous day and returns the day's
calculated record together with the next state, so the same input always
yields the same output.
"""

from datetime import date, timedelta
from typing import Iterable

from pydantic import BaseModel

from capjournal.models import AppConfig, CalculatedDay, TradeEntry


def percent_of(value: float, base: float) -> float:
    """Return value as a percentage of base, or 0 when base is zero."""
    if base == 0:
        return 0.0
    return value / base * 100


def week_label(day: date) -> str:
    """Label the Monday-Friday span of the week containing day.

    Weekends belong to the week of the preceding Monday.
    """
    monday = day - timedelta(days=day.weekday())
    friday = monday + timedelta(days=4)
    return f"Week {monday:%d/%m/%Y} - {friday:%d/%m/%Y}"


def month_key(day: date) -> str:
    return f"{day:%Y-%m}"


def quarter_key(day: date) -> str:
    return f"{day.year:04d}-Q{(day.month - 1) // 3 + 1}"


def year_key(day: date) -> str:
    return f"{day.year:04d}"


def sort_entries(entries: Iterable[TradeEntry]) -> list[TradeEntry]:
    """Sort entries chronologically (oldest first)."""
    return sorted(entries, key=lambda e: e.date)


def month_start_capitals(
    sorted_entries: list[TradeEntry], config: AppConfig
) -> dict[str, float]:
    """Resolve the start capital of every month present in the entries.

    An explicit value in ``config.monthly_start_capitals`` wins. Otherwise
    the month starts from the closing capital of the most recent earlier
    month with entries, or from ``config.total_initial_capital`` for the
    first month.

    Args:
        sorted_entries: Entries in ascending date order.
        config: Journal configuration.

    Returns:
        Mapping of YYYY-MM to start capital.
    """
    month_ends: dict[str, float] = {}
    for entry in sorted_entries:
        month_ends[month_key(entry.date)] = entry.final_capital

    starts: dict[str, float] = {}
    last_close = config.total_initial_capital
    for month in sorted(month_ends):
        override = config.monthly_start_capitals.get(month)
        starts[month] = override if override is not None else last_close
        last_close = month_ends[month]
    return starts


class FoldState(BaseModel):
    """Running totals carried from one chronological day to the next."""

    prev_close: float
    total_pl: float = 0.0
    week_id: str = ""
    week_pl: float = 0.0
    week_start_capital: float = 0.0
    month_id: str = ""
    month_pl: float = 0.0
    net_invested: float

    model_config = {"frozen": True}

    @classmethod
    def initial(cls, config: AppConfig) -> "FoldState":
        return cls(
            prev_close=config.total_initial_capital,
            net_invested=config.total_initial_capital,
        )


def step(
    state: FoldState,
    entry: TradeEntry,
    month_starts: dict[str, float],
) -> tuple[CalculatedDay, FoldState]:
    """Calculate one day and advance the running state.

    Args:
        state: State after the previous chronological day.
        entry: The entry for this day.
        month_starts: Start capital per month from month_start_capitals().

    Returns:
        The calculated day and the state to carry into the next day.
    """
    deposit = entry.deposit
    withdrawal = entry.withdrawal

    if entry.initial_capital is not None:
        initial_daily = entry.initial_capital
    else:
        initial_daily = state.prev_close + deposit - withdrawal

    net_invested = state.net_invested + deposit - withdrawal

    pl_daily = entry.final_capital - initial_daily

    week_id = week_label(entry.date)
    if week_id != state.week_id:
        week_pl = 0.0
        week_start = initial_daily
    else:
        week_pl = state.week_pl
        week_start = state.week_start_capital
    week_pl += pl_daily

    month_id = month_key(entry.date)
    month_pl = state.month_pl if month_id == state.month_id else 0.0
    month_pl += pl_daily
    month_start = month_starts[month_id]

    total_pl = state.total_pl + pl_daily

    day = CalculatedDay(
        id=entry.id,
        date=entry.date,
        final_capital=entry.final_capital,
        initial_capital_daily=initial_daily,
        deposit=deposit,
        withdrawal=withdrawal,
        trade_count=entry.trade_count,
        notes=entry.notes,
        initial_capital=entry.initial_capital,
        pl_daily_dollar=pl_daily,
        pl_daily_percent=percent_of(pl_daily, initial_daily),
        pl_week_to_date_dollar=week_pl,
        pl_week_to_date_percent=percent_of(week_pl, week_start),
        initial_capital_monthly=month_start,
        pl_month_to_date_dollar=month_pl,
        pl_month_to_date_percent=percent_of(month_pl, month_start),
        initial_capital_total=net_invested,
        pl_total_to_date_dollar=total_pl,
        pl_total_to_date_percent=percent_of(total_pl, net_invested),
        week_id=week_id,
        month_id=month_id,
        quarter_id=quarter_key(entry.date),
        year_id=year_key(entry.date),
    )

    next_state = FoldState(
        prev_close=entry.final_capital,
        total_pl=total_pl,
        week_id=week_id,
        week_pl=week_pl,
        week_start_capital=week_start,
        month_id=month_id,
        month_pl=month_pl,
        net_invested=net_invested,
    )
    return day, next_state


def process_entries(
    entries: Iterable[TradeEntry], config: AppConfig
) -> list[CalculatedDay]:
    """Derive the calculated-day series for a journal.

    Args:
        entries: Journal entries in any order.
        config: Journal configuration.

    Returns:
        Calculated days, newest first.
    """
    ordered = sort_entries(entries)
    month_starts = month_start_capitals(ordered, config)

    state = FoldState.initial(config)
    calculated: list[CalculatedDay] = []
    for entry in ordered:
        day, state = step(state, entry, month_starts)
        calculated.append(day)

    calculated.reverse()
    return calculated
