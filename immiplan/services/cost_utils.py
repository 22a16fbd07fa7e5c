"""Cost aggregation and payment status helpers.

Pure functions over a cost item, a target (display) currency and a rate
table snapshot:

    - total_cost: quantity * unit value plus surcharges, in the target currency
    - total_paid: every payment converted from its own currency, then summed
    - payment_status: not paid / partially paid / paid with a one-cent tolerance

The enrichment helpers further down build API shaped dicts (rounded numbers
and formatted strings) on top of those, so routers never repeat the math.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from immiplan.models.constants import PaymentStatus
from immiplan.services.money import format_currency, round2
from immiplan.services.rates.conversion import RateTable, convert

TOLERANCE = 0.01


class _PaymentLike(Protocol):
    amount: float
    currency: str


class _CostLike(Protocol):
    currency: str
    quantity: int
    unit_value: float
    tax: Optional[float]
    fee: Optional[float]
    delivery_fee: Optional[float]
    payments: Sequence[_PaymentLike]


def _finite_or_zero(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        return 0.0
    value = float(value)
    return value if math.isfinite(value) else 0.0


def surcharge(item: _CostLike) -> float:
    return (
        _finite_or_zero(item.tax)
        + _finite_or_zero(item.fee)
        + _finite_or_zero(item.delivery_fee)
    )


def raw_total(item: _CostLike) -> float:
    """Total in the item's home currency."""
    return item.quantity * item.unit_value + surcharge(item)


def total_cost(item: _CostLike, target_currency: str, rates: RateTable) -> float:
    return convert(raw_total(item), item.currency, target_currency, rates)


def total_paid(item: _CostLike, target_currency: str, rates: RateTable) -> float:
    return sum(
        (convert(p.amount, p.currency, target_currency, rates) for p in item.payments),
        0.0,
    )


def classify(total: float, paid: float) -> PaymentStatus:
    if paid == 0 or (paid < TOLERANCE and total > 0):
        return PaymentStatus.NOT_PAID
    if paid >= total or abs(paid - total) < TOLERANCE:
        return PaymentStatus.PAID
    return PaymentStatus.PARTIALLY_PAID


def payment_status(
    item: _CostLike, target_currency: str, rates: RateTable
) -> PaymentStatus:
    return classify(
        total_cost(item, target_currency, rates),
        total_paid(item, target_currency, rates),
    )


# ---------------- Enrichment for API responses -----------------


def cost_status(
    item: _CostLike, target_currency: str, rates: RateTable
) -> Dict[str, Any]:
    """Totals for one item in ``target_currency``.

    Rounding happens only here; the status is classified on unrounded values.
    ``remaining`` goes negative when an item is overpaid.
    """
    unit_total = convert(
        item.quantity * item.unit_value, item.currency, target_currency, rates
    )
    total = total_cost(item, target_currency, rates)
    paid = total_paid(item, target_currency, rates)
    remaining = total - paid
    return {
        "display_currency": target_currency,
        "unit_total": round2(unit_total),
        "total": round2(total),
        "paid": round2(paid),
        "remaining": round2(remaining),
        "status": classify(total, paid),
        "formatted": {
            "unit_value": format_currency(item.unit_value, item.currency),
            "unit_total": format_currency(unit_total, target_currency),
            "total": format_currency(total, target_currency),
            "paid": format_currency(paid, target_currency),
            "remaining": format_currency(remaining, target_currency),
        },
    }


def filter_items(
    items: Iterable[Any],
    target_currency: str,
    rates: RateTable,
    category: Optional[str] = None,
    status: Optional[PaymentStatus] = None,
) -> List[Any]:
    selected = []
    for item in items:
        if category is not None and item.category != category:
            continue
        if status is not None and payment_status(item, target_currency, rates) != status:
            continue
        selected.append(item)
    return selected


def summarize(
    items: Iterable[_CostLike], target_currency: str, rates: RateTable
) -> Dict[str, Any]:
    """Page level statistics over a set of cost items."""
    total_value = 0.0
    paid_value = 0.0
    count = 0
    status_counts = {s.value: 0 for s in PaymentStatus}
    for item in items:
        total = total_cost(item, target_currency, rates)
        paid = total_paid(item, target_currency, rates)
        total_value += total
        paid_value += paid
        status_counts[classify(total, paid).value] += 1
        count += 1
    remaining = total_value - paid_value
    return {
        "display_currency": target_currency,
        "item_count": count,
        "total_value": round2(total_value),
        "total_paid": round2(paid_value),
        "total_remaining": round2(remaining),
        "status_counts": status_counts,
        "formatted": {
            "total_value": format_currency(total_value, target_currency),
            "total_paid": format_currency(paid_value, target_currency),
            "total_remaining": format_currency(remaining, target_currency),
        },
    }
