from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import CURRENCIES, PIVOT_CURRENCY


class RateTableOut(BaseModel):
    """Snapshot of the exchange-rate table (units per 1 pivot currency)."""

    pivot: str = PIVOT_CURRENCY
    provider: str
    rates: Dict[str, float]
    fetched_at: Optional[datetime] = None
    stale: bool = False
    overrides: Dict[str, Dict[str, str | float]] = Field(default_factory=dict)


class ConversionOut(BaseModel):
    amount: float
    from_currency: str
    to_currency: str
    rate: Optional[float]
    converted: float
    formatted: str
    rate_available: bool


class OverrideSetPayload(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    currency: str = Field(..., description="Quote currency (e.g. BRL, USD)")
    rate: float = Field(..., gt=0, description="Units of currency per 1 EUR")
    ttl_seconds: int = Field(
        900,
        gt=0,
        le=86400,
        description="Override TTL seconds (default 900 = 15m, max 24h)",
    )

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        v = v.upper()
        if v not in CURRENCIES:
            raise ValueError("unsupported currency")
        return v
