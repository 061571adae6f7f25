"""Tests for the global statistics calculator.

**Feature: capital-journal**
"""

from datetime import date, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from capjournal.engine import build_snapshot
from capjournal.engine.derivation import process_entries
from capjournal.engine.periods import calculate_period_summaries
from capjournal.engine.stats import calculate_global_stats, calculate_streaks
from capjournal.models import AppConfig, GlobalStats, TradeEntry


def journal_from_pl(pls: list[float], start: float = 1000.0, **kwargs) -> list[TradeEntry]:
    """Build consecutive daily entries producing the given P&L sequence."""
    entries = []
    capital = start
    for i, pl in enumerate(pls):
        capital += pl
        day = date(2024, 1, 1) + timedelta(days=i)
        entries.append(TradeEntry(id=f"d{i}", date=day, final_capital=capital, **kwargs))
    return entries


def stats_for(entries: list[TradeEntry], initial: float = 1000.0) -> GlobalStats:
    return build_snapshot(entries, AppConfig(total_initial_capital=initial)).stats


class TestEmptyJournal:
    def test_all_zero(self):
        stats = calculate_global_stats([], [], [])

        assert stats == GlobalStats()
        assert stats.win_rate == 0
        assert stats.start_date is None
        assert stats.max_win_daily_dollar == 0
        assert stats.max_loss_daily_dollar == 0


class TestStreaks:
    """
    **Feature: capital-journal, Property: Streak Correctness**

    *For any* all-winning series of length N, the best streak is N and the
    worst streak is 0.
    """

    @given(pls=st.lists(st.integers(min_value=1, max_value=500).map(float), min_size=1, max_size=60))
    @settings(max_examples=50)
    def test_all_winning_series(self, pls):
        stats = stats_for(journal_from_pl(pls))

        assert stats.max_consecutive_wins == len(pls)
        assert stats.max_consecutive_losses == 0

    @given(pls=st.lists(st.integers(min_value=-500, max_value=-1).map(float), min_size=1, max_size=60))
    @settings(max_examples=50)
    def test_all_losing_series(self, pls):
        stats = stats_for(journal_from_pl(pls, start=100000))

        assert stats.max_consecutive_losses == len(pls)
        assert stats.max_consecutive_wins == 0

    def test_flat_day_breaks_both_streaks(self):
        stats = stats_for(journal_from_pl([10, 10, 0, 10, -5, -5, 0, -5]))

        assert stats.max_consecutive_wins == 2
        assert stats.max_consecutive_losses == 2

    def test_streaks_over_reversed_series(self):
        days = process_entries(journal_from_pl([5, 5, 5, -1]), AppConfig(total_initial_capital=1000))

        assert calculate_streaks(list(reversed(days))) == (3, 1)


class TestWinLossClassification:
    """Flat days count as losses for win rate even though they break both streaks."""

    def test_flat_day_counts_as_loss(self):
        stats = stats_for(journal_from_pl([100, 0, -50]))

        assert stats.winning_days == 1
        assert stats.losing_days == 2
        assert stats.win_rate == pytest.approx(100 / 3)
        assert stats.avg_loss_daily_dollar == pytest.approx(-25)

    def test_averages_and_extremes(self):
        stats = stats_for(journal_from_pl([100, 50, -30]))

        assert stats.avg_win_daily_dollar == pytest.approx(75)
        assert stats.avg_loss_daily_dollar == pytest.approx(-30)
        assert stats.max_win_daily_dollar == pytest.approx(100)
        assert stats.max_loss_daily_dollar == pytest.approx(-30)
        assert stats.avg_general_dollar == pytest.approx(40)
        assert stats.max_win_daily_percent == pytest.approx(10)

    def test_no_losing_days_averages_zero(self):
        stats = stats_for(journal_from_pl([10, 20]))

        assert stats.avg_loss_daily_dollar == 0
        assert stats.avg_loss_daily_percent == 0
        assert stats.avg_loss_weekly_dollar == 0
        assert stats.avg_loss_monthly_dollar == 0


class TestCapitalAndFlows:
    def test_current_capital_and_roi(self):
        entries = [
            TradeEntry(id="a", date=date(2024, 1, 2), final_capital=1000),
            TradeEntry(id="b", date=date(2024, 1, 3), final_capital=1200, deposit=100),
            TradeEntry(id="c", date=date(2024, 1, 4), final_capital=1150, withdrawal=100),
        ]
        stats = stats_for(entries)

        assert stats.current_capital == 1150
        assert stats.total_initial_capital == pytest.approx(1000)
        assert stats.total_pl_dollar == pytest.approx(150)
        assert stats.total_pl_percent == pytest.approx(15)
        assert stats.total_deposits == 100
        assert stats.total_withdrawals == 100
        assert stats.net_cash_flow == 0


class TestDurationAndVolume:
    def test_duration_is_inclusive_calendar_span(self):
        entries = [
            TradeEntry(id="a", date=date(2024, 1, 1), final_capital=1000),
            TradeEntry(id="b", date=date(2024, 1, 14), final_capital=1000),
        ]
        stats = stats_for(entries)

        assert stats.start_date == date(2024, 1, 1)
        assert stats.duration_weeks == pytest.approx(2.0)
        assert stats.duration_months == pytest.approx(14 / 30.44)
        assert stats.duration_years == pytest.approx(14 / 365.25)

    def test_trade_volume(self):
        entries = [
            TradeEntry(id="a", date=date(2024, 1, 2), final_capital=1000, trade_count=4),
            TradeEntry(id="b", date=date(2024, 1, 3), final_capital=1000, trade_count=2),
            TradeEntry(id="c", date=date(2024, 1, 10), final_capital=1000, trade_count=6),
        ]
        days = process_entries(entries, AppConfig(total_initial_capital=1000))
        weekly = calculate_period_summaries(days, "week_id")
        monthly = calculate_period_summaries(days, "month_id")
        stats = calculate_global_stats(days, weekly, monthly)

        assert stats.total_trades == 12
        assert stats.max_trades_per_day == 6
        assert stats.avg_trades_per_day == pytest.approx(4)
        assert stats.avg_trades_per_week == pytest.approx(6)
        assert stats.avg_trades_per_month == pytest.approx(12)

    def test_missing_summaries_do_not_divide_by_zero(self):
        days = process_entries(journal_from_pl([10]), AppConfig(total_initial_capital=1000))
        stats = calculate_global_stats(days, [], [])

        assert stats.avg_trades_per_week == 0
        assert stats.avg_trades_per_month == 0
        assert stats.avg_win_weekly_dollar == 0


class TestPeriodAverages:
    def test_weekly_win_and_loss_averages(self):
        # Two weeks: +30 and -20
        pls = [10, 10, 10, 0, 0, 0, 0, -20]
        stats = stats_for(journal_from_pl(pls))

        assert stats.avg_win_weekly_dollar == pytest.approx(30)
        assert stats.avg_loss_weekly_dollar == pytest.approx(-20)
        assert stats.avg_win_monthly_dollar == pytest.approx(10)
        assert stats.avg_loss_monthly_dollar == 0
