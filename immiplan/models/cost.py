from __future__ import annotations

from datetime import date as date_type, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import CATEGORIES, CURRENCIES, PaymentStatus


def _valid_currency(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.upper()
    if v not in CURRENCIES:
        raise ValueError("unsupported currency")
    return v


def _valid_category(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in CATEGORIES:
        raise ValueError("unsupported category")
    return v


def _clean_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


def _positive_or_none(v: Optional[float]) -> Optional[float]:
    # Surcharges of zero or below are stored as absent
    if v is None or v <= 0:
        return None
    return v


# ---------------------------------------------------------------- domain types
class Payment(BaseModel):
    """One partial payment against a cost item, in its own currency."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: float
    currency: str
    date: date_type
    description: Optional[str] = None
    receipt: Optional[str] = None


class CostItem(BaseModel):
    """A budgeted or incurred expense with the payments made against it."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: str
    currency: str
    quantity: int
    unit_value: float
    tax: Optional[float] = None
    fee: Optional[float] = None
    delivery_fee: Optional[float] = None
    payments: List[Payment] = Field(default_factory=list)
    created_at: datetime
    updated_at: Optional[datetime] = None


# ---------------------------------------------------------------- cost payloads
class CostIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: str
    currency: str
    quantity: int = Field(..., gt=0)
    unit_value: float = Field(..., gt=0)
    tax: Optional[float] = None
    fee: Optional[float] = None
    delivery_fee: Optional[float] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v

    @field_validator("description", "image_url")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v)

    @field_validator("category")
    @classmethod
    def valid_category(cls, v: str) -> str:
        return _valid_category(v)  # type: ignore[return-value]

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return _valid_currency(v)  # type: ignore[return-value]

    @field_validator("tax", "fee", "delivery_fee")
    @classmethod
    def surcharge(cls, v: Optional[float]) -> Optional[float]:
        return _positive_or_none(v)


class CostUpdateIn(BaseModel):
    """Partial update model; fields left out keep their stored value.

    Explicit nulls clear the optional text and surcharge fields.
    """

    model_config = ConfigDict(allow_inf_nan=False)

    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    currency: Optional[str] = None
    quantity: Optional[int] = Field(None, gt=0)
    unit_value: Optional[float] = Field(None, gt=0)
    tax: Optional[float] = None
    fee: Optional[float] = None
    delivery_fee: Optional[float] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            raise ValueError("name cannot be null")
        v = v.strip()
        if not v:
            raise ValueError("name cannot be blank")
        return v

    @field_validator("category", "currency", "quantity", "unit_value")
    @classmethod
    def not_null(cls, v):  # type: ignore[no-untyped-def]
        if v is None:
            raise ValueError("field cannot be null")
        return v

    @field_validator("description", "image_url")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v)

    @field_validator("category")
    @classmethod
    def valid_category(cls, v: Optional[str]) -> Optional[str]:
        return _valid_category(v)

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: Optional[str]) -> Optional[str]:
        return _valid_currency(v)

    @field_validator("tax", "fee", "delivery_fee")
    @classmethod
    def surcharge(cls, v: Optional[float]) -> Optional[float]:
        return _positive_or_none(v)

    @model_validator(mode="after")
    def at_least_one(self) -> "CostUpdateIn":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided for update")
        return self

    def changes(self) -> Dict[str, object]:
        """Fields explicitly sent by the client, ready for the DAL."""
        return {k: getattr(self, k) for k in self.model_fields_set}


# ---------------------------------------------------------------- payment payloads
class PaymentIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    amount: float = Field(..., gt=0)
    currency: Optional[str] = None  # defaults to the cost's currency
    date: date_type
    description: Optional[str] = None
    receipt: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: Optional[str]) -> Optional[str]:
        return _valid_currency(v)

    @field_validator("description", "receipt")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v)


class PaymentUpdateIn(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    amount: Optional[float] = Field(None, gt=0)
    currency: Optional[str] = None
    date: Optional[date_type] = None
    description: Optional[str] = None
    receipt: Optional[str] = None

    @field_validator("amount", "currency", "date")
    @classmethod
    def not_null(cls, v):  # type: ignore[no-untyped-def]
        if v is None:
            raise ValueError("field cannot be null")
        return v

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: Optional[str]) -> Optional[str]:
        return _valid_currency(v)

    @field_validator("description", "receipt")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _clean_text(v)

    @model_validator(mode="after")
    def at_least_one(self) -> "PaymentUpdateIn":
        if not self.model_fields_set:
            raise ValueError("at least one field must be provided for update")
        return self

    def changes(self) -> Dict[str, object]:
        return {k: getattr(self, k) for k in self.model_fields_set}


# ---------------------------------------------------------------- responses
class CostOut(CostItem):
    """Cost item enriched with totals in the requested display currency."""

    display_currency: str
    unit_total: float
    total: float
    paid: float
    remaining: float
    status: PaymentStatus
    formatted: Dict[str, str]


class CostSummary(BaseModel):
    display_currency: str
    item_count: int
    total_value: float
    total_paid: float
    total_remaining: float
    status_counts: Dict[str, int]
    formatted: Dict[str, str]
