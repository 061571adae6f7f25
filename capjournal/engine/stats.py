"""Global statistics over the calculated-day series."""

from capjournal.models import CalculatedDay, GlobalStats, PeriodSummary

DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30.44
DAYS_PER_YEAR = 365.25


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def calculate_streaks(chronological: list[CalculatedDay]) -> tuple[int, int]:
    """Return the longest winning and losing streaks.

    A positive day extends the winning streak and resets the losing one,
    a negative day does the opposite, and a flat day resets both.

    Args:
        chronological: Days in ascending date order.

    Returns:
        Tuple of (max consecutive wins, max consecutive losses).
    """
    max_wins = max_losses = 0
    wins = losses = 0
    for day in chronological:
        if day.pl_daily_dollar > 0:
            wins += 1
            losses = 0
            max_wins = max(max_wins, wins)
        elif day.pl_daily_dollar < 0:
            losses += 1
            wins = 0
            max_losses = max(max_losses, losses)
        else:
            wins = losses = 0
    return max_wins, max_losses


def _period_averages(summaries: list[PeriodSummary]) -> tuple[float, float, float, float]:
    winning = [s for s in summaries if s.pl_dollar > 0]
    losing = [s for s in summaries if s.pl_dollar <= 0]
    return (
        _mean([s.pl_dollar for s in winning]),
        _mean([s.pl_percent for s in winning]),
        _mean([s.pl_dollar for s in losing]),
        _mean([s.pl_percent for s in losing]),
    )


def calculate_global_stats(
    days: list[CalculatedDay],
    weekly: list[PeriodSummary],
    monthly: list[PeriodSummary],
) -> GlobalStats:
    """Build the portfolio snapshot.

    Args:
        days: Calculated days, newest first (as returned by process_entries).
        weekly: Weekly summaries.
        monthly: Monthly summaries.

    Returns:
        GlobalStats. An empty journal yields an all-zero snapshot.
    """
    if not days:
        return GlobalStats()

    chronological = sorted(days, key=lambda d: d.date)
    newest = chronological[-1]

    total_deposits = sum(d.deposit for d in days)
    total_withdrawals = sum(d.withdrawal for d in days)

    span_days = (chronological[-1].date - chronological[0].date).days + 1

    max_wins, max_losses = calculate_streaks(chronological)

    total_trades = sum(d.trade_count for d in days)
    max_trades = max(d.trade_count for d in days)

    winners = [d for d in days if d.pl_daily_dollar > 0]
    losers = [d for d in days if d.pl_daily_dollar <= 0]

    daily_dollars = [d.pl_daily_dollar for d in days]
    daily_percents = [d.pl_daily_percent for d in days]

    win_week_d, win_week_p, loss_week_d, loss_week_p = _period_averages(weekly)
    win_month_d, win_month_p, loss_month_d, loss_month_p = _period_averages(monthly)

    return GlobalStats(
        current_capital=newest.final_capital,
        total_initial_capital=newest.initial_capital_total,
        total_pl_dollar=newest.pl_total_to_date_dollar,
        total_pl_percent=newest.pl_total_to_date_percent,
        total_deposits=total_deposits,
        total_withdrawals=total_withdrawals,
        net_cash_flow=total_deposits - total_withdrawals,
        start_date=chronological[0].date,
        duration_weeks=span_days / DAYS_PER_WEEK,
        duration_months=span_days / DAYS_PER_MONTH,
        duration_years=span_days / DAYS_PER_YEAR,
        max_consecutive_wins=max_wins,
        max_consecutive_losses=max_losses,
        winning_days=len(winners),
        losing_days=len(losers),
        win_rate=len(winners) / len(days) * 100,
        total_trades=total_trades,
        avg_trades_per_day=total_trades / len(days),
        avg_trades_per_week=total_trades / len(weekly) if weekly else 0.0,
        avg_trades_per_month=total_trades / len(monthly) if monthly else 0.0,
        max_trades_per_day=max_trades,
        avg_win_daily_dollar=_mean([d.pl_daily_dollar for d in winners]),
        avg_win_daily_percent=_mean([d.pl_daily_percent for d in winners]),
        avg_loss_daily_dollar=_mean([d.pl_daily_dollar for d in losers]),
        avg_loss_daily_percent=_mean([d.pl_daily_percent for d in losers]),
        avg_win_weekly_dollar=win_week_d,
        avg_win_weekly_percent=win_week_p,
        avg_loss_weekly_dollar=loss_week_d,
        avg_loss_weekly_percent=loss_week_p,
        avg_win_monthly_dollar=win_month_d,
        avg_win_monthly_percent=win_month_p,
        avg_loss_monthly_dollar=loss_month_d,
        avg_loss_monthly_percent=loss_month_p,
        max_win_daily_dollar=max(daily_dollars),
        max_win_daily_percent=max(daily_percents),
        max_loss_daily_dollar=min(daily_dollars),
        max_loss_daily_percent=min(daily_percents),
        avg_general_dollar=_mean(daily_dollars),
        avg_general_percent=_mean(daily_percents),
    )
