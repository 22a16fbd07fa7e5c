from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic's rules (e.g., APP_NAME, DEBUG,
    DATA_DIR, DB_FILENAME, RATES_CACHE_TTL_SECONDS, DEFAULT_DISPLAY_CURRENCY).
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Basic app metadata
    app_name: str = "Immigration Cost Planner"
    debug: bool = False
    version: str = "0.1.0"

    # Data & persistence
    data_dir: Path = Path("data")
    db_filename: str = "immiplan.sqlite3"
    db_path: Optional[Path] = None  # derived if not provided
    seed_demo_data: bool = False

    # Exchange rates / caching
    rates_cache_ttl_seconds: int = 3600  # 1 hour
    exchange_api_base_url: str = "https://api.exchangerate-api.com/v4/latest"
    http_timeout_seconds: float = 5.0
    # Allowed: 'static' (built-in placeholder table), 'external-http'
    exchange_rate_provider: str = "static"
    enable_rate_override: bool = True

    # Display currency used when neither the request nor stored settings pick one
    default_display_currency: str = "BRL"

    def init_post_load(self) -> None:
        """Finalize derived fields and ensure directories exist."""
        from immiplan.models.constants import CURRENCIES

        if self.db_path is None:
            self.db_path = self.data_dir / self.db_filename
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        allowed = {"static", "external-http"}
        if self.exchange_rate_provider not in allowed:
            raise ValueError(
                f"Unsupported exchange_rate_provider '{self.exchange_rate_provider}'. Allowed: {allowed}"
            )
        self.default_display_currency = self.default_display_currency.upper()
        if self.default_display_currency not in CURRENCIES:
            raise ValueError(
                f"Unsupported default_display_currency '{self.default_display_currency}'"
            )


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
