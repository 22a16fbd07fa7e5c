"""Seeding helpers for demo cost data.

`seed_demo_costs` inserts a handful of representative immigration costs (with
payments) when the costs table is empty. Existing data is never touched so it
can be safely re-run.
"""

from __future__ import annotations
from datetime import date, datetime
import logging

from immiplan.models import CostIn, PaymentIn
from .dal import Database

logger = logging.getLogger("immiplan.db")

DEMO_COSTS = (
    (
        CostIn(
            name="Passagem Aérea - Lisboa",
            description="Passagem aérea para toda a família",
            image_url="https://images.unsplash.com/photo-1436491865332-7a61a109cc05?w=400",
            category="Passagem",
            currency="EUR",
            quantity=3,
            unit_value=800,
            tax=50,
            fee=25,
        ),
        datetime(2024, 1, 10),
        (
            PaymentIn(
                amount=1200,
                currency="EUR",
                date=date(2024, 1, 15),
                receipt="https://example.com/receipt1.pdf",
            ),
        ),
    ),
    (
        CostIn(
            name="Malas de Viagem",
            description="Malas grandes para mudança",
            image_url="https://images.unsplash.com/photo-1553062407-98eeb64c6a62?w=400",
            category="Acessório",
            currency="BRL",
            quantity=4,
            unit_value=250,
            delivery_fee=30,
        ),
        datetime(2024, 1, 20),
        (
            PaymentIn(amount=500, currency="BRL", date=date(2024, 2, 5)),
            PaymentIn(amount=530, currency="BRL", date=date(2024, 2, 20)),
        ),
    ),
    (
        CostIn(
            name="Renovação de Passaporte",
            description="Taxa de renovação de passaporte",
            category="Documentação",
            currency="BRL",
            quantity=3,
            unit_value=257,
        ),
        datetime(2024, 2, 1),
        (),
    ),
)


def seed_demo_costs(db: Database) -> int:
    """Insert demo costs if none exist; return the number of costs created."""
    if db.count_costs() > 0:
        return 0
    created = 0
    for cost, created_at, payments in DEMO_COSTS:
        cost_id = db.create_cost(cost, created_at=created_at)
        for payment in payments:
            db.add_payment(cost_id, payment)
        created += 1
    logger.info("seeded %d demo costs", created)
    return created
