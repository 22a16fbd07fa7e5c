"""Application settings backed by the metadata table.

Typed accessors for settings a user can change at runtime. All getters are
resilient: a missing or invalid stored value falls back to the environment
configured default.

Metadata keys:
  - display_currency: str in CURRENCIES (default currency for amounts on screen)
  - exchange_rate_provider_override: str in {static, external-http}
  - rates_cache_ttl: int (seconds, 60..86400)
"""

from __future__ import annotations
from typing import Optional, Protocol

from immiplan.core.config import get_settings
from immiplan.models.constants import CURRENCIES
from immiplan.services.rates.providers import ALLOWED_RATE_PROVIDERS

DISPLAY_CURRENCY_KEY = "display_currency"
RATE_PROVIDER_KEY = "exchange_rate_provider_override"
RATES_TTL_KEY = "rates_cache_ttl"

MIN_RATES_TTL = 60
MAX_RATES_TTL = 86400


class _DBConnProto(Protocol):  # minimal protocol to satisfy type checking
    def _connect(self): ...  # noqa: D401


# ------------- Low level helpers -----------------


def _get_metadata_value(db: _DBConnProto, key: str) -> Optional[str]:
    with db._connect() as conn:  # type: ignore[attr-defined]
        cur = conn.cursor()
        cur.execute("SELECT value FROM metadata WHERE key=?", (key,))
        row = cur.fetchone()
        return row[0] if row else None


def _set_metadata_value(db: _DBConnProto, key: str, value: str) -> None:
    with db._connect() as conn:  # type: ignore[attr-defined]
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO metadata(key,value) VALUES(?,?) ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=(strftime('%Y-%m-%dT%H:%M:%fZ','now'))",
            (key, value),
        )


def _get_int(
    db: _DBConnProto,
    key: str,
    default: int,
    min_v: int | None = None,
    max_v: int | None = None,
) -> int:
    val = _get_metadata_value(db, key)
    if val is None:
        return default
    try:
        iv = int(val)
    except ValueError:
        return default
    if min_v is not None:
        iv = max(min_v, iv)
    if max_v is not None:
        iv = min(max_v, iv)
    return iv


# ------------- Display currency -------------------


def get_display_currency(db: _DBConnProto, default: str | None = None) -> str:
    stored = _get_metadata_value(db, DISPLAY_CURRENCY_KEY)
    if stored and stored.upper() in CURRENCIES:
        return stored.upper()
    return default or get_settings().default_display_currency


def set_display_currency(db: _DBConnProto, currency: str) -> str:
    currency = currency.upper()
    if currency not in CURRENCIES:
        raise ValueError(f"Unsupported currency '{currency}'")
    _set_metadata_value(db, DISPLAY_CURRENCY_KEY, currency)
    return currency


# ------------- Rate provider / cache -------------


def get_effective_rate_provider(db: _DBConnProto) -> str:
    override = _get_metadata_value(db, RATE_PROVIDER_KEY)
    if override and override in ALLOWED_RATE_PROVIDERS:
        return override
    # Fall back to environment settings
    return get_settings().exchange_rate_provider


def set_rate_provider(db: _DBConnProto, provider: str) -> None:
    if provider not in ALLOWED_RATE_PROVIDERS:
        raise ValueError(f"Unsupported provider '{provider}'")
    _set_metadata_value(db, RATE_PROVIDER_KEY, provider)


def get_rates_cache_ttl(db: _DBConnProto) -> int:
    return _get_int(
        db,
        RATES_TTL_KEY,
        get_settings().rates_cache_ttl_seconds,
        MIN_RATES_TTL,
        MAX_RATES_TTL,
    )


def set_rates_cache_ttl(db: _DBConnProto, seconds: int) -> int:
    if seconds < MIN_RATES_TTL or seconds > MAX_RATES_TTL:
        raise ValueError(
            f"rates cache ttl must be between {MIN_RATES_TTL} and {MAX_RATES_TTL} seconds"
        )
    _set_metadata_value(db, RATES_TTL_KEY, str(int(seconds)))
    return seconds
