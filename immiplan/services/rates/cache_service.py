from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
from typing import Dict, Optional, TYPE_CHECKING

from immiplan.core.config import get_settings
from immiplan.models.constants import PIVOT_CURRENCY, CURRENCIES
from immiplan.services.app_settings import (
    get_effective_rate_provider,
    get_rates_cache_ttl,
)
from .base import RateProvider
from .providers import make_rate_provider

if TYPE_CHECKING:  # pragma: no cover
    from immiplan.db.dal import Database

"""Central exchange-rate table service.

Purpose:
    Hold the current rate table (units per 1 EUR) for a configurable TTL and
    hand out read-only snapshots to request handlers.

Design:
    - Wraps a RateProvider selected via settings / metadata override.
    - Whole-table refresh once the TTL has elapsed.
    - A failed refresh keeps the last-known table and retries after a short
      back-off; before the first success the table is empty, which the pure
      conversion functions treat as "no conversion".
    - Manual overrides win over fetched values until they expire.
"""

logger = logging.getLogger("immiplan.rates")

FAILURE_RETRY = timedelta(minutes=5)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _OverrideEntry:
    rate: float
    expires_at: datetime


class RateTableService:
    """Cached rate table with TTL-bound refresh, fallback and overrides."""

    def __init__(
        self,
        db: "Database" | None = None,
        provider: RateProvider | None = None,
        ttl_seconds: int | None = None,
    ):
        settings = get_settings()
        if provider is None:
            if db is not None:
                provider = make_rate_provider(get_effective_rate_provider(db))
            else:
                provider = make_rate_provider(settings.exchange_rate_provider)
        if ttl_seconds is None:
            ttl_seconds = (
                get_rates_cache_ttl(db)
                if db is not None
                else settings.rates_cache_ttl_seconds
            )
        self._provider = provider
        self._ttl = timedelta(seconds=ttl_seconds)
        self._rates: Dict[str, float] = {}
        self._fetched_at: Optional[datetime] = None
        self._next_refresh: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._overrides: Dict[str, _OverrideEntry] = {}

    # Internal --------------------------------------------------
    def _needs_refresh(self, now: datetime) -> bool:
        return self._next_refresh is None or now >= self._next_refresh

    def _refresh(self, now: datetime) -> None:
        try:
            fresh = self._provider.fetch_rates()
        except Exception as e:  # noqa: BLE001
            self._last_error = str(e) or type(e).__name__
            self._next_refresh = now + min(self._ttl, FAILURE_RETRY)
            logger.warning(
                "rate refresh via %s failed; keeping last-known table (%d rates): %s",
                self._provider.name,
                len(self._rates),
                e,
            )
            return
        self._rates = dict(fresh)
        self._fetched_at = now
        self._next_refresh = now + self._ttl
        self._last_error = None
        logger.info("rate table refreshed via %s: %s", self._provider.name, self._rates)

    def _purge_expired_overrides(self) -> None:
        now = _utcnow()
        expired = [k for k, v in self._overrides.items() if v.expires_at <= now]
        for k in expired:
            self._overrides.pop(k, None)

    # Public API -----------------------------------------------
    @property
    def provider_name(self) -> str:
        return self._provider.name

    def refresh(self) -> None:
        """Force a refresh regardless of TTL."""
        self._refresh(_utcnow())

    def get_table(self) -> Dict[str, float]:
        now = _utcnow()
        if self._needs_refresh(now):
            self._refresh(now)
        self._purge_expired_overrides()
        table = dict(self._rates)
        for currency, entry in self._overrides.items():
            table[currency] = entry.rate
        return table

    def get_rate(self, currency: str) -> Optional[float]:
        currency = currency.upper()
        if currency == PIVOT_CURRENCY:
            return 1.0
        return self.get_table().get(currency)

    def status(self) -> Dict[str, object]:
        return {
            "provider": self._provider.name,
            "fetched_at": self._fetched_at,
            "stale": self._fetched_at is None or self._last_error is not None,
            "last_error": self._last_error,
        }

    # Manual override API --------------------------------------
    def set_override(self, currency: str, rate: float, ttl_seconds: int) -> None:
        currency = currency.upper()
        if currency == PIVOT_CURRENCY:
            raise ValueError("pivot currency rate is fixed at 1")
        if currency not in CURRENCIES:
            raise ValueError(f"unsupported currency '{currency}'")
        if rate <= 0:
            raise ValueError("override rate must be positive")
        if ttl_seconds <= 0:
            raise ValueError("override ttl must be positive seconds")
        self._overrides[currency] = _OverrideEntry(
            rate=rate, expires_at=_utcnow() + timedelta(seconds=ttl_seconds)
        )
        logger.info("rate override set %s=%s for %ss", currency, rate, ttl_seconds)

    def clear_override(self, currency: str) -> bool:
        currency = currency.upper()
        return self._overrides.pop(currency, None) is not None

    def list_overrides(self) -> Dict[str, Dict[str, str | float]]:
        self._purge_expired_overrides()
        return {
            c: {"rate": v.rate, "expires_at": v.expires_at.isoformat()}
            for c, v in self._overrides.items()
        }


_service: Optional[RateTableService] = None


# Process-wide instance used by FastAPI DI
def get_rate_table_service() -> RateTableService:
    global _service
    if _service is None:
        _service = RateTableService()
    return _service


def reset_rate_table_service(db: "Database" | None = None) -> RateTableService:
    """Replace the shared instance so provider / TTL changes apply immediately.

    With a db, provider and TTL overrides stored in metadata are honoured.
    Overrides set on the previous instance are dropped.
    """
    global _service
    _service = RateTableService(db)
    return _service
