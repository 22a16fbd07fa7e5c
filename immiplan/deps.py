"""Shared FastAPI dependencies."""

from typing import Optional

from fastapi import Depends, HTTPException, Query, Request

from immiplan.core.config import Settings, get_settings
from immiplan.db.dal import Database
from immiplan.services.display_context import DisplayContext, build_display_context
from immiplan.services.rates.cache_service import (
    RateTableService,
    get_rate_table_service,
)


def get_app_settings(request: Request) -> Settings:
    # create_app stores the active settings; fall back for bare routers
    return getattr(request.app.state, "settings", None) or get_settings()


def get_db(settings: Settings = Depends(get_app_settings)) -> Database:
    return Database(settings.db_path)


def get_rates() -> RateTableService:
    return get_rate_table_service()


def get_display_context(
    display_currency: Optional[str] = Query(
        None, description="Currency to express amounts in (BRL, USD, EUR)"
    ),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    rates: RateTableService = Depends(get_rates),
) -> DisplayContext:
    try:
        return build_display_context(
            db,
            rates.get_table(),
            requested=display_currency,
            default=settings.default_display_currency,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
