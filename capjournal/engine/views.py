"""Presentation-ready views derived from the calculated series.

Capital curve points, calendar heatmap grids, note filtering and the
cash-flow report shown by the ``curve``, ``calendar``, ``notes`` and
``funds`` commands.
"""

import calendar
from datetime import date
from datetime import date as date_type
from typing import Literal, Optional

from pydantic import BaseModel

from capjournal.engine.derivation import percent_of
from capjournal.engine.periods import PERIOD_KEYS, group_by_period
from capjournal.models import CalculatedDay, PeriodSummary

CurveView = Literal["daily", "weekly", "monthly", "quarterly", "yearly"]
Outcome = Literal["win", "loss", "flat", "empty"]

CURVE_VIEWS: tuple[str, ...] = ("daily", "weekly", "monthly", "quarterly", "yearly")

_VIEW_PERIODS = {
    "weekly": PERIOD_KEYS["week"],
    "monthly": PERIOD_KEYS["month"],
    "quarterly": PERIOD_KEYS["quarter"],
    "yearly": PERIOD_KEYS["year"],
}


class CurvePoint(BaseModel):
    """One point of the capital curve."""

    date: date_type
    label: str
    final_capital: float
    change_dollar: float
    change_percent: float
    deposits: float = 0.0
    withdrawals: float = 0.0

    model_config = {"frozen": True}


class CalendarCell(BaseModel):
    """One day cell of the calendar heatmap."""

    day: int
    date: date_type
    pl_dollar: Optional[float] = None
    outcome: Outcome = "empty"

    model_config = {"frozen": True}


def capital_curve(days: list[CalculatedDay], view: CurveView = "daily") -> list[CurvePoint]:
    """Build the closing-capital curve for a granularity.

    Aggregated views keep the last day of each period. Weekly and monthly
    changes are that day's week/month-to-date P&L; quarterly and yearly
    changes are measured against the previous point's capital.

    Args:
        days: Calculated days in any order.
        view: Granularity of the curve.

    Returns:
        Points in ascending date order.
    """
    chronological = sorted(days, key=lambda d: d.date)

    if view == "daily":
        return [
            CurvePoint(
                date=d.date,
                label=d.date.isoformat(),
                final_capital=d.final_capital,
                change_dollar=d.pl_daily_dollar,
                change_percent=d.pl_daily_percent,
                deposits=d.deposit,
                withdrawals=d.withdrawal,
            )
            for d in chronological
        ]

    groups = group_by_period(chronological, _VIEW_PERIODS[view])
    ordered = sorted(groups.items(), key=lambda item: item[1][-1].date)

    points: list[CurvePoint] = []
    prev_capital: Optional[float] = None
    for key, group in ordered:
        last = group[-1]
        if view == "weekly":
            change, change_pct = last.pl_week_to_date_dollar, last.pl_week_to_date_percent
        elif view == "monthly":
            change, change_pct = last.pl_month_to_date_dollar, last.pl_month_to_date_percent
        else:
            base = prev_capital if prev_capital is not None else last.initial_capital_total
            change = last.final_capital - base
            change_pct = percent_of(change, base)
        points.append(
            CurvePoint(
                date=last.date,
                label=key,
                final_capital=last.final_capital,
                change_dollar=change,
                change_percent=change_pct,
                deposits=sum(d.deposit for d in group),
                withdrawals=sum(d.withdrawal for d in group),
            )
        )
        prev_capital = last.final_capital
    return points


def _outcome(pl: float) -> Outcome:
    if pl > 0:
        return "win"
    if pl < 0:
        return "loss"
    return "flat"


def calendar_month(
    days: list[CalculatedDay], year: int, month: int
) -> list[list[Optional[CalendarCell]]]:
    """Lay out a month as Monday-first weeks of heatmap cells.

    Padding slots before the first and after the last day are None.
    """
    by_date = {d.date: d for d in days}
    weeks: list[list[Optional[CalendarCell]]] = []
    for week in calendar.Calendar(firstweekday=calendar.MONDAY).monthdayscalendar(year, month):
        row: list[Optional[CalendarCell]] = []
        for day_num in week:
            if day_num == 0:
                row.append(None)
                continue
            current = date(year, month, day_num)
            entry = by_date.get(current)
            if entry is None:
                row.append(CalendarCell(day=day_num, date=current))
            else:
                row.append(
                    CalendarCell(
                        day=day_num,
                        date=current,
                        pl_dollar=entry.pl_daily_dollar,
                        outcome=_outcome(entry.pl_daily_dollar),
                    )
                )
        weeks.append(row)
    return weeks


def filter_notes(
    days: list[CalculatedDay],
    search: Optional[str] = None,
    outcome: Literal["all", "winners", "losers"] = "all",
    weekday: Optional[int] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    newest_first: bool = True,
) -> list[CalculatedDay]:
    """Select days that carry journal notes.

    Args:
        days: Calculated days.
        search: Case-insensitive substring to look for in the notes.
        outcome: "winners" keeps days with P&L >= 0, "losers" days below 0.
        weekday: 0 for Monday through 6 for Sunday.
        start: Inclusive lower date bound.
        end: Inclusive upper date bound.
        newest_first: Sort order of the result.

    Returns:
        Matching days.
    """
    needle = search.lower() if search else None
    selected = []
    for day in days:
        if not day.notes.strip():
            continue
        is_win = day.pl_daily_dollar >= 0
        if outcome == "winners" and not is_win:
            continue
        if outcome == "losers" and is_win:
            continue
        if weekday is not None and day.date.weekday() != weekday:
            continue
        if start and day.date < start:
            continue
        if end and day.date > end:
            continue
        if needle and needle not in day.notes.lower():
            continue
        selected.append(day)
    return sorted(selected, key=lambda d: d.date, reverse=newest_first)


class CashFlowReport(BaseModel):
    """Deposits and withdrawals across a set of periods."""

    total_deposits: float
    total_withdrawals: float
    net: float
    deposit_count: int
    withdrawal_count: int
    avg_deposit: float
    avg_withdrawal: float
    active_periods: list[PeriodSummary]

    model_config = {"frozen": True}


def cash_flow_report(summaries: list[PeriodSummary]) -> CashFlowReport:
    """Summarize cash movements over period summaries.

    Averages are taken over the periods that actually had a deposit
    (or withdrawal), not over every period.
    """
    total_deposits = sum(s.total_deposits for s in summaries)
    total_withdrawals = sum(s.total_withdrawals for s in summaries)
    deposit_count = sum(1 for s in summaries if s.total_deposits > 0)
    withdrawal_count = sum(1 for s in summaries if s.total_withdrawals > 0)

    return CashFlowReport(
        total_deposits=total_deposits,
        total_withdrawals=total_withdrawals,
        net=total_deposits - total_withdrawals,
        deposit_count=deposit_count,
        withdrawal_count=withdrawal_count,
        avg_deposit=total_deposits / deposit_count if deposit_count else 0.0,
        avg_withdrawal=total_withdrawals / withdrawal_count if withdrawal_count else 0.0,
        active_periods=[
            s for s in summaries if s.total_deposits > 0 or s.total_withdrawals > 0
        ],
    )
