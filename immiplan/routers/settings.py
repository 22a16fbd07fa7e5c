from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from immiplan.core.config import Settings
from immiplan.db.dal import Database
from immiplan.deps import get_app_settings, get_db
from immiplan.models.constants import CURRENCY_LABELS, CURRENCY_SYMBOLS
from immiplan.services import app_settings
from immiplan.services.rates.cache_service import reset_rate_table_service

router = APIRouter(prefix="/settings", tags=["settings"])


class DisplayCurrencyIn(BaseModel):
    currency: str = Field(..., description="BRL, USD or EUR")


class DisplayCurrencyOut(BaseModel):
    currency: str
    symbol: str
    label: str


class RateSettingsIn(BaseModel):
    provider: str | None = Field(None, description="static or external-http")
    ttl_seconds: int | None = Field(None, description="Rate cache TTL (60..86400)")


def _display_out(code: str) -> DisplayCurrencyOut:
    return DisplayCurrencyOut(
        currency=code, symbol=CURRENCY_SYMBOLS[code], label=CURRENCY_LABELS[code]
    )


@router.get("/display-currency", response_model=DisplayCurrencyOut)
async def get_display_currency(
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return _display_out(
        app_settings.get_display_currency(db, settings.default_display_currency)
    )


@router.put("/display-currency", response_model=DisplayCurrencyOut)
async def put_display_currency(
    payload: DisplayCurrencyIn, db: Database = Depends(get_db)
):
    try:
        code = app_settings.set_display_currency(db, payload.currency)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return _display_out(code)


@router.get("/rates", summary="Effective rate provider and cache TTL")
def get_rate_settings(db: Database = Depends(get_db)):
    return {
        "provider": app_settings.get_effective_rate_provider(db),
        "ttl_seconds": app_settings.get_rates_cache_ttl(db),
    }


@router.put("/rates", summary="Change rate provider / TTL and reload the rate table")
def put_rate_settings(payload: RateSettingsIn, db: Database = Depends(get_db)):
    try:
        if payload.provider is not None:
            app_settings.set_rate_provider(db, payload.provider)
        if payload.ttl_seconds is not None:
            app_settings.set_rates_cache_ttl(db, payload.ttl_seconds)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    svc = reset_rate_table_service(db)
    return {
        "provider": svc.provider_name,
        "ttl_seconds": app_settings.get_rates_cache_ttl(db),
    }
