from __future__ import annotations

"""Rate provider abstraction.

Providers return a whole rate table at once: units of each supported
currency per 1 unit of the pivot currency (EUR).
"""
from abc import ABC, abstractmethod
from typing import Dict

from immiplan.models.constants import PIVOT_CURRENCY
from immiplan.services.http_client import HttpError


class RateFetchError(HttpError):
    """Raised when a provider cannot produce a usable rate table."""


class RateProvider(ABC):
    name: str = "abstract"
    base_currency: str = PIVOT_CURRENCY

    @abstractmethod
    def fetch_rates(self) -> Dict[str, float]:
        """Return {currency: units per 1 EUR} for supported non-pivot currencies."""
        raise NotImplementedError
