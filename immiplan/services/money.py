"""Money / rounding / display helpers.

Centralized so the cost API, summaries, and the conversion calculator use
identical rounding and formatting semantics.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
import math

from babel.numbers import format_decimal

from immiplan.models.constants import CURRENCY_LOCALES, CURRENCY_SYMBOLS

_CENTS = Decimal("0.01")
_AMOUNT_PATTERN = "#,##0.00"
_FALLBACK_LOCALE = "en_US"


def _quantize(value: float) -> Decimal:
    # Non-finite amounts render as zero, like malformed surcharges
    if not math.isfinite(value):
        return Decimal("0.00")
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


def round2(value: float) -> float:
    return float(_quantize(value))


def format_amount(value: float, currency: str) -> str:
    """Two decimals with the digit grouping of the currency's home locale."""
    locale = CURRENCY_LOCALES.get(currency.upper(), _FALLBACK_LOCALE)
    return format_decimal(_quantize(value), format=_AMOUNT_PATTERN, locale=locale)


def format_currency(value: float, currency: str) -> str:
    """Render ``value`` prefixed with the currency symbol, e.g. ``€ 1.234,50``."""
    code = currency.upper()
    symbol = CURRENCY_SYMBOLS.get(code, code)
    return f"{symbol} {format_amount(value, code)}"
