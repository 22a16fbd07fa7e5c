"""Display context: the currency amounts are shown in plus the rates used.

Built once per request and passed explicitly to the aggregation helpers, so
those stay pure and independently testable.

Resolution order for the currency:
    1. explicit request value (``?display_currency=USD``)
    2. the stored user preference (metadata ``display_currency``)
    3. ``settings.default_display_currency``
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from immiplan.db.dal import Database
from immiplan.models.constants import CURRENCIES
from immiplan.services.app_settings import get_display_currency


@dataclass(frozen=True)
class DisplayContext:
    currency: str
    rates: Dict[str, float] = field(default_factory=dict)


def resolve_display_currency(
    db: Database, requested: Optional[str], default: Optional[str] = None
) -> str:
    if requested:
        currency = requested.upper()
        if currency not in CURRENCIES:
            raise ValueError(f"unsupported display currency '{requested}'")
        return currency
    return get_display_currency(db, default)


def build_display_context(
    db: Database,
    rates: Dict[str, float],
    requested: Optional[str] = None,
    default: Optional[str] = None,
) -> DisplayContext:
    return DisplayContext(
        currency=resolve_display_currency(db, requested, default),
        rates=dict(rates),
    )


__all__ = ["DisplayContext", "resolve_display_currency", "build_display_context"]
