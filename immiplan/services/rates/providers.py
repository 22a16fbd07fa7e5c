from __future__ import annotations

"""Concrete rate providers and factory.

'static' serves a fixed placeholder table (offline / tests); 'external-http'
reads the exchangerate-api.com v4 feed with EUR as base.
"""
import logging
import math
from typing import Dict, Optional

from immiplan.core.config import get_settings
from immiplan.models.constants import CURRENCIES, PIVOT_CURRENCY
from immiplan.services.http_client import get_json
from .base import RateFetchError, RateProvider

logger = logging.getLogger("immiplan.rates")

_STATIC_RATES: Dict[str, float] = {
    "BRL": 5.4,
    "USD": 1.086,
}

QUOTE_CURRENCIES = tuple(sorted(CURRENCIES - {PIVOT_CURRENCY}))


class StaticRateProvider(RateProvider):
    name = "static"

    def fetch_rates(self) -> Dict[str, float]:  # type: ignore[override]
        return dict(_STATIC_RATES)


class ExternalHTTPRateProvider(RateProvider):
    """Live rates from ``{exchange_api_base_url}/EUR``.

    The feed answers ``{"base": "EUR", "rates": {"BRL": 5.41, ...}}`` which is
    already in units-per-pivot orientation, so values are kept as is.
    """

    name = "external-http"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retries: int = 2,
    ):
        settings = get_settings()
        self._base_url = (base_url or settings.exchange_api_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._retries = retries

    @property
    def url(self) -> str:
        return f"{self._base_url}/{self.base_currency}"

    def fetch_rates(self) -> Dict[str, float]:  # type: ignore[override]
        data = get_json(self.url, timeout=self._timeout, retries=self._retries)
        raw = data.get("rates") or {}
        if not isinstance(raw, dict):
            raise RateFetchError(f"malformed rates payload from {self.url}")
        table: Dict[str, float] = {}
        for code in QUOTE_CURRENCIES:
            value = raw.get(code)
            if isinstance(value, (int, float)) and math.isfinite(value) and value > 0:
                table[code] = float(value)
            else:
                logger.warning("rate feed missing %s", code)
        if not table:
            raise RateFetchError(f"no usable rates from {self.url}")
        return table


_PROVIDER_REGISTRY = {
    "static": StaticRateProvider,
    "external-http": ExternalHTTPRateProvider,
}

ALLOWED_RATE_PROVIDERS = frozenset(_PROVIDER_REGISTRY)


def make_rate_provider(kind: str) -> RateProvider:
    cls = _PROVIDER_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    return cls()
