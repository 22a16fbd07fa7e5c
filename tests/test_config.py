"""Tests for settings loading."""

import pytest

from immiplan.core.config import Settings


def test_defaults_derive_db_path(tmp_path):
    s = Settings(_env_file=None, data_dir=tmp_path / "nested")
    s.init_post_load()
    assert s.db_path == tmp_path / "nested" / "immiplan.sqlite3"
    assert s.db_path.parent.is_dir()
    assert s.exchange_rate_provider == "static"
    assert s.default_display_currency == "BRL"


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("EXCHANGE_RATE_PROVIDER", "external-http")
    monkeypatch.setenv("DEFAULT_DISPLAY_CURRENCY", "usd")
    s = Settings(_env_file=None, data_dir=tmp_path)
    s.init_post_load()
    assert s.exchange_rate_provider == "external-http"
    assert s.default_display_currency == "USD"


@pytest.mark.parametrize(
    "field,value",
    [("exchange_rate_provider", "carrier-pigeon"), ("default_display_currency", "JPY")],
)
def test_invalid_values_rejected(tmp_path, field, value):
    s = Settings(_env_file=None, data_dir=tmp_path, **{field: value})
    with pytest.raises(ValueError):
        s.init_post_load()
