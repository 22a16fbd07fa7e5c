"""Tests for pivot-currency conversion."""

import math

import pytest

from immiplan.services.rates.conversion import convert, cross_rate

RATES = {"USD": 1.086, "BRL": 5.4}


@pytest.mark.parametrize("currency", ["BRL", "USD", "EUR"])
@pytest.mark.parametrize("rates", [RATES, {}])
def test_same_currency_is_identity(currency, rates):
    assert convert(123.456, currency, currency, rates) == 123.456


@pytest.mark.parametrize(
    "a,b",
    [("BRL", "USD"), ("USD", "BRL"), ("EUR", "BRL"), ("BRL", "EUR"), ("EUR", "USD")],
)
@pytest.mark.parametrize("value", [0.01, 1.0, 1234.5, 98765.4321])
def test_round_trip(a, b, value):
    back = convert(convert(value, a, b, RATES), b, a, RATES)
    assert back == pytest.approx(value, abs=1e-9)


def test_missing_rate_returns_value_unchanged():
    assert convert(100, "USD", "BRL", {}) == 100


def test_missing_target_rate_returns_value_unchanged():
    assert convert(100, "USD", "BRL", {"USD": 1.086}) == 100
    assert convert(100, "EUR", "BRL", {"USD": 1.086}) == 100


def test_rates_are_units_per_pivot():
    # 10 EUR -> 54 BRL, 54 BRL -> 10 EUR
    assert convert(10, "EUR", "BRL", RATES) == pytest.approx(54.0)
    assert convert(54, "BRL", "EUR", RATES) == pytest.approx(10.0)
    # BRL -> USD goes through EUR
    assert convert(54, "BRL", "USD", RATES) == pytest.approx(10.86)


@pytest.mark.parametrize("bad", [0, -1.0, float("nan"), float("inf"), None, "x"])
def test_unusable_rates_degrade_to_no_op(bad):
    result = convert(100, "EUR", "BRL", {"BRL": bad})
    assert result == 100
    assert math.isfinite(result)


def test_cross_rate():
    assert cross_rate("EUR", "BRL", RATES) == pytest.approx(5.4)
    assert cross_rate("USD", "EUR", RATES) == pytest.approx(1 / 1.086)
    assert cross_rate("BRL", "BRL", {}) == 1.0
    assert cross_rate("USD", "BRL", {}) is None
