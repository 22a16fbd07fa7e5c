"""Tests for cost aggregation, payment status and summaries."""

from datetime import date, datetime
from types import SimpleNamespace

import pytest

from immiplan.models import CostItem, Payment, PaymentStatus
from immiplan.services.cost_utils import (
    TOLERANCE,
    classify,
    cost_status,
    filter_items,
    payment_status,
    summarize,
    total_cost,
    total_paid,
)

RATES = {"USD": 1.086, "BRL": 5.4}


def make_item(payments=(), **overrides):
    fields = dict(
        id=1,
        name="Passagem",
        category="Passagem",
        currency="EUR",
        quantity=1,
        unit_value=100.0,
        created_at=datetime(2024, 1, 10),
    )
    fields.update(overrides)
    pays = [
        Payment(id=i, amount=amount, currency=currency, date=date(2024, 1, 15))
        for i, (amount, currency) in enumerate(payments, start=1)
    ]
    return CostItem(payments=pays, **fields)


def test_total_cost_adds_surcharges():
    item = make_item(quantity=3, unit_value=10, tax=5, fee=2, delivery_fee=None)
    assert total_cost(item, "EUR", {}) == 37


def test_total_cost_converts_to_target():
    item = make_item(quantity=3, unit_value=10, tax=5, fee=2)
    assert total_cost(item, "BRL", RATES) == pytest.approx(37 * 5.4)


def test_total_cost_without_rates_is_unconverted():
    item = make_item(quantity=3, unit_value=10, tax=5, fee=2)
    assert total_cost(item, "BRL", {}) == 37


@pytest.mark.parametrize("bad", [float("nan"), float("inf"), "12", None, True])
def test_malformed_surcharges_count_as_zero(bad):
    item = SimpleNamespace(
        currency="EUR",
        quantity=2,
        unit_value=10.0,
        tax=bad,
        fee=1.5,
        delivery_fee=bad,
        payments=[],
    )
    assert total_cost(item, "EUR", {}) == 21.5


def test_total_paid_uses_each_payment_currency():
    item = make_item(payments=[(50, "EUR"), (54.30, "USD")])
    assert total_paid(item, "EUR", RATES) == pytest.approx(100.0, abs=0.01)


def test_total_paid_in_brl():
    item = make_item(currency="BRL", payments=[(10, "EUR"), (46, "BRL")])
    assert total_paid(item, "BRL", RATES) == pytest.approx(100.0)


def test_total_paid_no_payments():
    assert total_paid(make_item(), "USD", RATES) == 0


@pytest.mark.parametrize(
    "total,paid,expected",
    [
        (100.00, 100.00, PaymentStatus.PAID),
        (100.00, 99.995, PaymentStatus.PAID),
        (100.00, 99.98, PaymentStatus.PARTIALLY_PAID),
        (100.00, 0, PaymentStatus.NOT_PAID),
        (100.00, 0.005, PaymentStatus.NOT_PAID),
        (100.00, 150.0, PaymentStatus.PAID),
        (100.00, 40.0, PaymentStatus.PARTIALLY_PAID),
        (0, 0, PaymentStatus.NOT_PAID),
    ],
)
def test_classify(total, paid, expected):
    assert classify(total, paid) is expected


def test_tolerance_is_one_cent():
    assert TOLERANCE == 0.01


def test_payment_status_multi_currency_is_paid():
    item = make_item(payments=[(50, "EUR"), (54.30, "USD")])
    assert payment_status(item, "EUR", RATES) is PaymentStatus.PAID
    assert payment_status(item, "BRL", RATES) is PaymentStatus.PAID


def test_payment_status_partial_and_unpaid():
    assert payment_status(make_item(payments=[(40, "EUR")]), "USD", RATES) is (
        PaymentStatus.PARTIALLY_PAID
    )
    assert payment_status(make_item(), "USD", RATES) is PaymentStatus.NOT_PAID


def test_cost_status_rounds_and_formats():
    item = make_item(quantity=3, unit_value=800, tax=50, fee=25, payments=[(1200, "EUR")])
    out = cost_status(item, "EUR", RATES)
    assert out["unit_total"] == 2400
    assert out["total"] == 2475
    assert out["paid"] == 1200
    assert out["remaining"] == 1275
    assert out["status"] is PaymentStatus.PARTIALLY_PAID
    assert out["formatted"]["total"] == "€ 2.475,00"
    assert out["formatted"]["unit_value"] == "€ 800,00"


def test_cost_status_overpaid_has_negative_remaining():
    out = cost_status(make_item(payments=[(120, "EUR")]), "EUR", {})
    assert out["remaining"] == -20
    assert out["status"] is PaymentStatus.PAID


def test_summarize():
    items = [
        make_item(id=1, payments=[(100, "EUR")]),
        make_item(id=2, payments=[(30, "EUR")]),
        make_item(id=3),
    ]
    summary = summarize(items, "EUR", RATES)
    assert summary["item_count"] == 3
    assert summary["total_value"] == 300
    assert summary["total_paid"] == 130
    assert summary["total_remaining"] == 170
    assert summary["status_counts"] == {
        "not_paid": 1,
        "partially_paid": 1,
        "paid": 1,
    }
    assert summary["formatted"]["total_value"] == "€ 300,00"


def test_summarize_empty():
    summary = summarize([], "BRL", RATES)
    assert summary["item_count"] == 0
    assert summary["total_value"] == 0
    assert summary["formatted"]["total_remaining"] == "R$ 0,00"


def test_filter_items_by_category_and_status():
    items = [
        make_item(id=1, category="Passagem", payments=[(100, "EUR")]),
        make_item(id=2, category="Comida"),
        make_item(id=3, category="Passagem"),
    ]
    assert [i.id for i in filter_items(items, "EUR", RATES, category="Passagem")] == [1, 3]
    paid = filter_items(items, "EUR", RATES, status=PaymentStatus.PAID)
    assert [i.id for i in paid] == [1]
    none_left = filter_items(
        items, "EUR", RATES, category="Comida", status=PaymentStatus.PAID
    )
    assert none_left == []
