"""TradeEntry and AppConfig data models."""

from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_INITIAL_CAPITAL = 1000.0


class TradeEntry(BaseModel):
    """Represents one user-submitted daily record."""

    id: str = Field(..., min_length=1, description="Opaque unique identifier")
    date: date_type = Field(..., description="Calendar date of the entry")
    final_capital: float = Field(..., description="Account balance at the close of the day")
    deposit: float = Field(default=0.0, ge=0, description="Cash added on this date")
    withdrawal: float = Field(default=0.0, ge=0, description="Cash removed on this date")
    trade_count: int = Field(default=0, ge=0, description="Trades executed on this date")
    notes: str = Field(default="", description="Journal notes")
    initial_capital: Optional[float] = Field(
        default=None, description="Manual override of the day's starting capital"
    )

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False
    )

    @property
    def has_override(self) -> bool:
        return self.initial_capital is not None


class AppConfig(BaseModel):
    """Global capital settings for the journal."""

    total_initial_capital: float = Field(
        default=DEFAULT_INITIAL_CAPITAL, description="Capital baseline before the first entry"
    )
    monthly_start_capitals: dict[str, float] = Field(
        default_factory=dict, description="Explicit start capital per YYYY-MM"
    )

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True, allow_inf_nan=False
    )
