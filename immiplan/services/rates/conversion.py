from __future__ import annotations

import math
from typing import Mapping, Optional

from immiplan.models.constants import PIVOT_CURRENCY

"""Currency conversion through the pivot currency.

Rate tables hold "units of X per 1 EUR". A value moves from its currency into
EUR by dividing by that currency's rate and from EUR into the target by
multiplying by the target's rate.

Missing data never raises: when a rate needed for the conversion is absent
(or unusable) the input value comes back unconverted, so a stale or failed
feed degrades displayed totals instead of breaking them.
"""

RateTable = Mapping[str, float]


def _usable_rate(rates: RateTable, currency: str) -> Optional[float]:
    rate = rates.get(currency)
    if rate is None or isinstance(rate, bool):
        return None
    try:
        rate = float(rate)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(rate) or rate <= 0:
        return None
    return rate


def cross_rate(from_currency: str, to_currency: str, rates: RateTable) -> Optional[float]:
    """Units of ``to_currency`` per 1 ``from_currency``; None when unknown."""
    if from_currency == to_currency:
        return 1.0
    from_rate = 1.0
    if from_currency != PIVOT_CURRENCY:
        from_rate = _usable_rate(rates, from_currency)
    to_rate = 1.0
    if to_currency != PIVOT_CURRENCY:
        to_rate = _usable_rate(rates, to_currency)
    if from_rate is None or to_rate is None:
        return None
    return to_rate / from_rate


def convert(
    value: float, from_currency: str, to_currency: str, rates: RateTable
) -> float:
    if from_currency == to_currency:
        return value

    amount = value
    if from_currency != PIVOT_CURRENCY:
        from_rate = _usable_rate(rates, from_currency)
        if from_rate is None:
            return value
        amount = amount / from_rate
    if to_currency != PIVOT_CURRENCY:
        to_rate = _usable_rate(rates, to_currency)
        if to_rate is None:
            return value
        amount = amount * to_rate
    return amount
