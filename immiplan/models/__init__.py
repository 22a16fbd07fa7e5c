"""Pydantic domain models for the immigration cost planner."""

from .constants import (
    CATEGORIES,
    CURRENCIES,
    CURRENCY_SYMBOLS,
    PIVOT_CURRENCY,
    PaymentStatus,
)  # re-export
from .cost import (
    CostIn,
    CostItem,
    CostOut,
    CostSummary,
    CostUpdateIn,
    Payment,
    PaymentIn,
    PaymentUpdateIn,
)
from .rates import ConversionOut, OverrideSetPayload, RateTableOut

__all__ = [
    "CATEGORIES",
    "CURRENCIES",
    "CURRENCY_SYMBOLS",
    "PIVOT_CURRENCY",
    "PaymentStatus",
    "CostIn",
    "CostItem",
    "CostOut",
    "CostSummary",
    "CostUpdateIn",
    "Payment",
    "PaymentIn",
    "PaymentUpdateIn",
    "ConversionOut",
    "OverrideSetPayload",
    "RateTableOut",
]
