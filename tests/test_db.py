"""Tests for schema, migrations and the cost/payment data access layer."""

from datetime import date
import sqlite3

import pytest

from immiplan.db.dal import Database
from immiplan.db.migrate import CURRENT_SCHEMA_VERSION, apply_migrations
from immiplan.db.seed import seed_demo_costs
from immiplan.models import CostIn, PaymentIn


def _cost(**overrides):
    fields = dict(
        name="Passagem",
        category="Passagem",
        currency="EUR",
        quantity=2,
        unit_value=100.0,
    )
    fields.update(overrides)
    return CostIn(**fields)


def test_apply_migrations_creates_tables(tmp_path):
    path = tmp_path / "fresh.sqlite3"
    assert apply_migrations(path) == CURRENT_SCHEMA_VERSION
    conn = sqlite3.connect(path)
    names = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    conn.close()
    assert {"costs", "payments", "metadata"} <= names


def test_apply_migrations_idempotent(tmp_path):
    path = tmp_path / "twice.sqlite3"
    apply_migrations(path)
    assert apply_migrations(path) == CURRENT_SCHEMA_VERSION


def test_legacy_payments_inherit_cost_currency(tmp_path):
    path = tmp_path / "legacy.sqlite3"
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE costs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL, description TEXT, category TEXT NOT NULL,
            currency TEXT NOT NULL, quantity INTEGER NOT NULL, unit_value REAL NOT NULL,
            tax REAL, fee REAL, delivery_fee REAL,
            created_at TEXT NOT NULL, updated_at TEXT NOT NULL
        );
        CREATE TABLE payments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            cost_id INTEGER NOT NULL, amount REAL NOT NULL, date TEXT NOT NULL,
            description TEXT, receipt TEXT,
            created_at TEXT NOT NULL, updated_at TEXT NOT NULL
        );
        CREATE TABLE metadata (key TEXT PRIMARY KEY, value TEXT NOT NULL, updated_at TEXT);
        INSERT INTO costs VALUES (1, 'Malas', NULL, 'Acessório', 'BRL', 4, 250, NULL, NULL, 30,
            '2024-01-20T00:00:00.000Z', '2024-01-20T00:00:00.000Z');
        INSERT INTO payments VALUES (1, 1, 500, '2024-02-05', NULL, NULL,
            '2024-02-05T00:00:00.000Z', '2024-02-05T00:00:00.000Z');
        """
    )
    conn.commit()
    conn.close()

    assert apply_migrations(path) == 2
    item = Database(path).load_cost_item(1)
    assert item is not None
    assert item.image_url is None
    assert item.payments[0].currency == "BRL"


def test_create_and_load_cost(db):
    cost_id = db.create_cost(_cost(tax=10, description="  ida e volta  "))
    item = db.load_cost_item(cost_id)
    assert item.name == "Passagem"
    assert item.description == "ida e volta"
    assert item.tax == 10
    assert item.fee is None
    assert item.payments == []


def test_add_payment_defaults_to_cost_currency(db):
    cost_id = db.create_cost(_cost(currency="BRL"))
    db.add_payment(cost_id, PaymentIn(amount=50, date=date(2024, 3, 1)))
    db.add_payment(cost_id, PaymentIn(amount=10, currency="usd", date=date(2024, 3, 2)))
    payments = db.load_cost_item(cost_id).payments
    # newest first
    assert [(p.amount, p.currency) for p in payments] == [(10, "USD"), (50, "BRL")]


def test_add_payment_unknown_cost(db):
    with pytest.raises(ValueError):
        db.add_payment(999, PaymentIn(amount=1, date=date(2024, 1, 1)))


def test_update_cost_partial(db):
    cost_id = db.create_cost(_cost(tax=5))
    db.update_cost(cost_id, {"quantity": 3, "tax": None, "ignored": "x"})
    row = db.get_cost(cost_id)
    assert row["quantity"] == 3
    assert row["tax"] is None
    assert row["unit_value"] == 100.0


def test_update_missing_rows_raise(db):
    with pytest.raises(ValueError):
        db.update_cost(42, {"name": "x"})
    cost_id = db.create_cost(_cost())
    with pytest.raises(ValueError):
        db.update_payment(cost_id, 42, {"amount": 1})
    with pytest.raises(ValueError):
        db.delete_payment(cost_id, 42)


def test_payment_scoped_to_cost(db):
    a = db.create_cost(_cost(name="A"))
    b = db.create_cost(_cost(name="B"))
    pid = db.add_payment(a, PaymentIn(amount=5, date=date(2024, 1, 1)))
    assert db.get_payment(b, pid) is None
    with pytest.raises(ValueError):
        db.delete_payment(b, pid)
    db.update_payment(a, pid, {"amount": 7, "date": date(2024, 2, 1)})
    row = db.get_payment(a, pid)
    assert row["amount"] == 7
    assert row["date"] == "2024-02-01"


def test_delete_cost_cascades_payments(db):
    cost_id = db.create_cost(_cost())
    db.add_payment(cost_id, PaymentIn(amount=5, date=date(2024, 1, 1)))
    db.delete_cost(cost_id)
    assert db.get_cost(cost_id) is None
    assert db.list_payments(cost_id) == []
    with pytest.raises(ValueError):
        db.delete_cost(cost_id)


def test_list_costs_filters_category_newest_first(db):
    first = db.create_cost(_cost(name="first", category="Comida"))
    second = db.create_cost(_cost(name="second", category="Comida"))
    db.create_cost(_cost(name="other", category="Lazer"))
    items = db.load_cost_items(category="Comida")
    assert [i.id for i in items] == [second, first]
    assert len(db.load_cost_items()) == 3


def test_seed_demo_costs_once(db):
    assert seed_demo_costs(db) == 3
    assert seed_demo_costs(db) == 0
    items = {i.name: i for i in db.load_cost_items()}
    assert len(items["Malas de Viagem"].payments) == 2
    assert items["Renovação de Passaporte"].payments == []
