
"""Rates router: current table, conversion calculator and manual overrides.

Endpoints:
    - GET /rates                          -> table snapshot (units per EUR) + freshness
    - POST /rates/refresh                 -> force a refetch from the provider
    - GET /rates/convert                  -> convert an amount between two currencies
    - GET /rates/overrides                -> list active overrides
    - POST /rates/overrides               -> set override {currency, rate, ttl_seconds}
    - DELETE /rates/overrides/{currency}  -> clear override
    - GET /rates/{currency}               -> single rate (EUR is always 1)

Overrides are in-memory only (guarded by settings.enable_rate_override); a
process restart clears them. Useful as manual fallback when the feed is down.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Dict

from immiplan.core.config import Settings
from immiplan.deps import get_app_settings, get_rates
from immiplan.models.constants import CURRENCIES
from immiplan.models.rates import ConversionOut, OverrideSetPayload, RateTableOut
from immiplan.services.money import format_currency, round2
from immiplan.services.rates.cache_service import RateTableService
from immiplan.services.rates.conversion import convert, cross_rate

router = APIRouter(prefix="/rates", tags=["rates"])


def require_override_enabled(settings: Settings = Depends(get_app_settings)):
    if not settings.enable_rate_override:
        raise HTTPException(status_code=403, detail="rate override feature disabled")
    return True


def _currency(value: str) -> str:
    code = value.upper()
    if code not in CURRENCIES:
        raise HTTPException(status_code=400, detail=f"unsupported currency '{value}'")
    return code


@router.get("/", response_model=RateTableOut, summary="Current exchange-rate table")
def get_rate_table(svc: RateTableService = Depends(get_rates)):
    table = svc.get_table()
    status = svc.status()
    return RateTableOut(
        provider=svc.provider_name,
        rates=table,
        fetched_at=status["fetched_at"],
        stale=bool(status["stale"]),
        overrides=svc.list_overrides(),
    )


@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
def convert_amount(
    amount: float = Query(..., ge=0, allow_inf_nan=False, description="Amount to convert"),
    from_currency: str = Query(..., alias="from"),
    to_currency: str = Query(..., alias="to"),
    svc: RateTableService = Depends(get_rates),
):
    src = _currency(from_currency)
    dst = _currency(to_currency)
    table = svc.get_table()
    rate = cross_rate(src, dst, table)
    converted = convert(amount, src, dst, table)
    return ConversionOut(
        amount=amount,
        from_currency=src,
        to_currency=dst,
        rate=rate,
        converted=round2(converted),
        formatted=format_currency(converted, dst),
        rate_available=rate is not None,
    )


@router.get("/overrides", summary="List active manual rate overrides")
def list_overrides(
    _: bool = Depends(require_override_enabled),
    svc: RateTableService = Depends(get_rates),
) -> Dict[str, Dict[str, str | float]]:
    return svc.list_overrides()


@router.post("/overrides", summary="Set a manual rate override")
def set_override(
    payload: OverrideSetPayload,
    _: bool = Depends(require_override_enabled),
    svc: RateTableService = Depends(get_rates),
):
    try:
        svc.set_override(payload.currency, payload.rate, payload.ttl_seconds)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return {
        "status": "ok",
        "override": svc.list_overrides().get(payload.currency),
    }


@router.delete("/overrides/{currency}", summary="Clear a manual rate override")
def clear_override(
    currency: str,
    _: bool = Depends(require_override_enabled),
    svc: RateTableService = Depends(get_rates),
):
    removed = svc.clear_override(currency)
    if not removed:
        raise HTTPException(status_code=404, detail="override not found")
    return {"status": "deleted", "currency": currency.upper()}


@router.post("/refresh", response_model=RateTableOut, summary="Refetch the rate table now")
def refresh_rate_table(svc: RateTableService = Depends(get_rates)):
    svc.refresh()
    return get_rate_table(svc)


# Declared last so the fixed paths above take precedence
@router.get("/{currency}", summary="Rate of one currency per 1 EUR")
def get_single_rate(currency: str, svc: RateTableService = Depends(get_rates)):
    code = _currency(currency)
    rate = svc.get_rate(code)
    if rate is None:
        raise HTTPException(status_code=404, detail=f"no rate available for {code}")
    return {"currency": code, "rate": rate}
