"""PeriodSummary and GlobalStats data models."""

from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, Field


class PeriodSummary(BaseModel):
    """Aggregated figures for a week, month, quarter or year."""

    period_id: str = Field(..., description="Period identifier")
    label: str = Field(..., description="Display label")
    pl_dollar: float = Field(..., description="Summed daily P&L")
    pl_percent: float = Field(..., description="P&L relative to start capital")
    win_rate: float = Field(..., ge=0, le=100, description="Percentage of winning days")
    day_count: int = Field(..., ge=0, description="Number of recorded days")
    total_operations: int = Field(..., ge=0, description="Sum of trade counts")
    total_deposits: float = Field(default=0.0, description="Summed deposits")
    total_withdrawals: float = Field(default=0.0, description="Summed withdrawals")
    start_capital: float = Field(..., description="First day's starting capital")
    end_capital: float = Field(..., description="Last day's closing capital")

    model_config = {"frozen": True}


class GlobalStats(BaseModel):
    """Portfolio-level snapshot over the whole journal."""

    current_capital: float = 0.0
    total_initial_capital: float = Field(default=0.0, description="Net invested capital")
    total_pl_dollar: float = 0.0
    total_pl_percent: float = 0.0

    total_deposits: float = 0.0
    total_withdrawals: float = 0.0
    net_cash_flow: float = 0.0

    start_date: Optional[date_type] = None
    duration_weeks: float = 0.0
    duration_months: float = 0.0
    duration_years: float = 0.0

    max_consecutive_wins: int = 0
    max_consecutive_losses: int = 0

    winning_days: int = 0
    losing_days: int = 0
    win_rate: float = 0.0

    total_trades: int = 0
    avg_trades_per_day: float = 0.0
    avg_trades_per_week: float = 0.0
    avg_trades_per_month: float = 0.0
    max_trades_per_day: int = 0

    avg_win_daily_dollar: float = 0.0
    avg_win_daily_percent: float = 0.0
    avg_loss_daily_dollar: float = 0.0
    avg_loss_daily_percent: float = 0.0

    avg_win_weekly_dollar: float = 0.0
    avg_win_weekly_percent: float = 0.0
    avg_loss_weekly_dollar: float = 0.0
    avg_loss_weekly_percent: float = 0.0

    avg_win_monthly_dollar: float = 0.0
    avg_win_monthly_percent: float = 0.0
    avg_loss_monthly_dollar: float = 0.0
    avg_loss_monthly_percent: float = 0.0

    max_win_daily_dollar: float = 0.0
    max_win_daily_percent: float = 0.0
    max_loss_daily_dollar: float = 0.0
    max_loss_daily_percent: float = 0.0

    avg_general_dollar: float = Field(default=0.0, description="Expected P&L per day")
    avg_general_percent: float = 0.0

    model_config = {"frozen": True}
