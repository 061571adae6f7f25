"""CalculatedDay data model."""

from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CalculatedDay(BaseModel):
    """A journal entry enriched with derived P&L figures.

    Regenerated on every pipeline run and never persisted.
    """

    id: str
    date: date_type
    final_capital: float
    initial_capital_daily: float = Field(..., description="Resolved start-of-day capital")

    deposit: float = 0.0
    withdrawal: float = 0.0
    trade_count: int = 0
    notes: str = ""
    initial_capital: Optional[float] = Field(default=None, description="Manual override, if any")

    pl_daily_dollar: float
    pl_daily_percent: float

    pl_week_to_date_dollar: float
    pl_week_to_date_percent: float

    initial_capital_monthly: float
    pl_month_to_date_dollar: float
    pl_month_to_date_percent: float

    initial_capital_total: float = Field(..., description="Net invested capital at this day")
    pl_total_to_date_dollar: float
    pl_total_to_date_percent: float

    week_id: str
    month_id: str
    quarter_id: str
    year_id: str

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )
