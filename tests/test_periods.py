"""Tests for period aggregation.

**Feature: capital-journal**
"""

from datetime import date, timedelta

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from capjournal.engine.derivation import process_entries
from capjournal.engine.periods import calculate_period_summaries, group_by_period
from capjournal.models import AppConfig, TradeEntry


def make_entry(day: str, final: float, **kwargs) -> TradeEntry:
    return TradeEntry(id=f"id-{day}", date=date.fromisoformat(day), final_capital=final, **kwargs)


@st.composite
def journal_strategy(draw):
    offsets = draw(st.lists(st.integers(min_value=0, max_value=500), min_size=1, max_size=40, unique=True))
    money = st.integers(min_value=0, max_value=2_000_000).map(lambda cents: cents / 100)
    return [
        TradeEntry(
            id=f"e{offset}",
            date=date(2023, 1, 2) + timedelta(days=offset),
            final_capital=draw(money),
            deposit=draw(st.one_of(st.just(0.0), money)),
            trade_count=draw(st.integers(min_value=0, max_value=10)),
        )
        for offset in offsets
    ]


class TestConservation:
    """
    **Feature: capital-journal, Property: Conservation**

    *For any* period, the summed daily P&L equals the period P&L.
    """

    @given(entries=journal_strategy(), key=st.sampled_from(["week_id", "month_id", "quarter_id", "year_id"]))
    @settings(max_examples=50)
    def test_period_pl_equals_sum_of_days(self, entries, key):
        days = process_entries(entries, AppConfig(total_initial_capital=1000))
        groups = group_by_period(days, key)

        for summary in calculate_period_summaries(days, key):
            expected = sum(d.pl_daily_dollar for d in groups[summary.period_id])
            assert summary.pl_dollar == pytest.approx(expected)

    @given(entries=journal_strategy(), key=st.sampled_from(["week_id", "month_id", "quarter_id", "year_id"]))
    @settings(max_examples=50)
    def test_every_day_counted_once(self, entries, key):
        days = process_entries(entries, AppConfig(total_initial_capital=1000))
        summaries = calculate_period_summaries(days, key)

        assert sum(s.day_count for s in summaries) == len(days)
        assert sum(s.total_operations for s in summaries) == sum(e.trade_count for e in entries)


class TestMonthlySummary:
    def setup_method(self):
        entries = [
            make_entry("2024-01-02", 1100, trade_count=3),
            make_entry("2024-01-03", 1050, trade_count=2, deposit=0),
            make_entry("2024-01-04", 1250, trade_count=1, deposit=100),
            make_entry("2024-02-01", 1200, trade_count=5, withdrawal=100),
        ]
        self.days = process_entries(entries, AppConfig(total_initial_capital=1000))
        self.summaries = calculate_period_summaries(self.days, "month_id")

    def test_most_recent_period_first(self):
        assert [s.period_id for s in self.summaries] == ["2024-02", "2024-01"]

    def test_january_figures(self):
        jan = self.summaries[1]

        assert jan.label == "2024-01"
        assert jan.start_capital == 1000
        assert jan.end_capital == 1250
        assert jan.pl_dollar == pytest.approx(100 - 50 + 100)
        assert jan.pl_percent == pytest.approx(15.0)
        assert jan.day_count == 3
        assert jan.total_operations == 6
        assert jan.total_deposits == 100
        assert jan.total_withdrawals == 0
        assert jan.win_rate == pytest.approx(2 / 3 * 100)

    def test_february_start_capital_includes_flow(self):
        feb = self.summaries[0]

        assert feb.start_capital == pytest.approx(1150)
        assert feb.pl_dollar == pytest.approx(50)
        assert feb.total_withdrawals == 100


class TestEdgeCases:
    def test_empty_input(self):
        assert calculate_period_summaries([], "week_id") == []

    def test_zero_start_capital_gives_zero_percent(self):
        days = process_entries([make_entry("2024-01-02", 300)], AppConfig(total_initial_capital=0))
        summary = calculate_period_summaries(days, "year_id")[0]

        assert summary.pl_dollar == 300
        assert summary.pl_percent == 0

    def test_flat_day_is_not_a_win(self):
        days = process_entries(
            [make_entry("2024-01-02", 1000), make_entry("2024-01-03", 1010)],
            AppConfig(total_initial_capital=1000),
        )
        summary = calculate_period_summaries(days, "week_id")[0]

        assert summary.win_rate == pytest.approx(50.0)
