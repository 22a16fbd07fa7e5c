"""Shared fixtures: isolated settings/DB per test and a controllable rate feed."""

from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from immiplan.core.config import Settings
from immiplan.db.dal import Database
from immiplan.db.migrate import apply_migrations
from immiplan.deps import get_rates
from immiplan.main import create_app
from immiplan.services.rates.base import RateFetchError, RateProvider
from immiplan.services.rates.cache_service import RateTableService

DEFAULT_RATES = {"USD": 1.086, "BRL": 5.4}


class FakeRateProvider(RateProvider):
    name = "fake"

    def __init__(self, rates: Optional[Dict[str, float]] = None, fail: bool = False):
        self.rates = dict(DEFAULT_RATES if rates is None else rates)
        self.fail = fail
        self.calls = 0

    def fetch_rates(self) -> Dict[str, float]:
        self.calls += 1
        if self.fail:
            raise RateFetchError("feed down")
        return dict(self.rates)


@pytest.fixture
def settings(tmp_path):
    s = Settings(_env_file=None, data_dir=tmp_path, db_filename="test.sqlite3")
    s.init_post_load()
    return s


@pytest.fixture
def db(settings):
    apply_migrations(settings.db_path)
    return Database(settings.db_path)


@pytest.fixture
def provider():
    return FakeRateProvider()


@pytest.fixture
def rate_service(provider):
    return RateTableService(provider=provider, ttl_seconds=3600)


@pytest.fixture
def client(settings, rate_service):
    app = create_app(settings_override=settings)
    app.dependency_overrides[get_rates] = lambda: rate_service
    with TestClient(app) as c:
        yield c
