"""Data Access Layer for cost items and their payments.

Responsibilities
----------------
- CRUD helpers for costs and payments returning plain dict rows.
- Keep payments scoped to their parent cost: every payment lookup is keyed by
  (cost_id, payment_id) and deleting a cost removes its payments in the same
  transaction.
- Load rows into domain objects (`CostItem` / `Payment`), resolving the
  payment currency of legacy rows to the parent cost currency.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from pathlib import Path
import sqlite3
from typing import Any, Dict, List, Mapping, Optional

from immiplan.models import CostIn, CostItem, Payment, PaymentIn

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

COST_UPDATABLE_COLUMNS = (
    "name",
    "description",
    "image_url",
    "category",
    "currency",
    "quantity",
    "unit_value",
    "tax",
    "fee",
    "delivery_fee",
)
PAYMENT_UPDATABLE_COLUMNS = ("amount", "currency", "date", "description", "receipt")


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", ""))


def _sql_value(value: Any) -> Any:
    if isinstance(value, date):
        return value.isoformat()
    return value


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    # ------------------------------------------------------------------
    # Costs
    def create_cost(self, cost: CostIn, created_at: Optional[datetime] = None) -> int:
        created = (
            created_at.strftime("%Y-%m-%dT%H:%M:%S.000Z") if created_at else None
        )
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                f"""
                INSERT INTO costs (
                    name, description, image_url, category, currency, quantity,
                    unit_value, tax, fee, delivery_fee, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?,
                    COALESCE(?, ({UTC_NOW_SQL})), COALESCE(?, ({UTC_NOW_SQL})))
                """,
                (
                    cost.name,
                    cost.description,
                    cost.image_url,
                    cost.category,
                    cost.currency,
                    cost.quantity,
                    cost.unit_value,
                    cost.tax,
                    cost.fee,
                    cost.delivery_fee,
                    created,
                    created,
                ),
            )
            conn.commit()
            return int(cur.lastrowid)

    def get_cost(self, cost_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM costs WHERE id = ?", (cost_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def list_costs(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        query = "SELECT * FROM costs"
        params: List[Any] = []
        if category:
            query += " WHERE category = ?"
            params.append(category)
        query += " ORDER BY created_at DESC, id DESC"
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(query, params)
            return [dict(r) for r in cur.fetchall()]

    def count_costs(self) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT COUNT(*) FROM costs")
            row = cur.fetchone()
            return int(row[0] if row and row[0] is not None else 0)

    def update_cost(self, cost_id: int, changes: Mapping[str, Any]) -> None:
        fields = {k: v for k, v in changes.items() if k in COST_UPDATABLE_COLUMNS}
        with self._connect() as conn:
            cur = conn.cursor()
            assignments = [f"{col} = ?" for col in fields]
            assignments.append(f"updated_at = ({UTC_NOW_SQL})")
            cur.execute(
                f"UPDATE costs SET {', '.join(assignments)} WHERE id = ?",
                [_sql_value(v) for v in fields.values()] + [cost_id],
            )
            if cur.rowcount == 0:
                raise ValueError("cost not found")
            conn.commit()

    def delete_cost(self, cost_id: int) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            # Explicit delete keeps the cascade even on connections without FK support
            cur.execute("DELETE FROM payments WHERE cost_id = ?", (cost_id,))
            cur.execute("DELETE FROM costs WHERE id = ?", (cost_id,))
            if cur.rowcount == 0:
                conn.rollback()
                raise ValueError("cost not found")
            conn.commit()

    # ------------------------------------------------------------------
    # Payments (always scoped to their cost)
    def add_payment(self, cost_id: int, payment: PaymentIn) -> int:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT currency FROM costs WHERE id = ?", (cost_id,))
            row = cur.fetchone()
            if not row:
                raise ValueError("cost not found")
            currency = payment.currency or row["currency"]
            cur.execute(
                f"""
                INSERT INTO payments (
                    cost_id, amount, currency, date, description, receipt,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ({UTC_NOW_SQL}), ({UTC_NOW_SQL}))
                """,
                (
                    cost_id,
                    payment.amount,
                    currency,
                    payment.date.isoformat(),
                    payment.description,
                    payment.receipt,
                ),
            )
            payment_id = int(cur.lastrowid)
            cur.execute(
                f"UPDATE costs SET updated_at = ({UTC_NOW_SQL}) WHERE id = ?",
                (cost_id,),
            )
            conn.commit()
            return payment_id

    def get_payment(self, cost_id: int, payment_id: int) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM payments WHERE id = ? AND cost_id = ?",
                (payment_id, cost_id),
            )
            row = cur.fetchone()
            return dict(row) if row else None

    def list_payments(self, cost_id: int) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "SELECT * FROM payments WHERE cost_id = ? ORDER BY date DESC, id DESC",
                (cost_id,),
            )
            return [dict(r) for r in cur.fetchall()]

    def update_payment(
        self, cost_id: int, payment_id: int, changes: Mapping[str, Any]
    ) -> None:
        fields = {k: v for k, v in changes.items() if k in PAYMENT_UPDATABLE_COLUMNS}
        with self._connect() as conn:
            cur = conn.cursor()
            assignments = [f"{col} = ?" for col in fields]
            assignments.append(f"updated_at = ({UTC_NOW_SQL})")
            cur.execute(
                f"UPDATE payments SET {', '.join(assignments)} WHERE id = ? AND cost_id = ?",
                [_sql_value(v) for v in fields.values()] + [payment_id, cost_id],
            )
            if cur.rowcount == 0:
                raise ValueError("payment not found")
            conn.commit()

    def delete_payment(self, cost_id: int, payment_id: int) -> None:
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute(
                "DELETE FROM payments WHERE id = ? AND cost_id = ?",
                (payment_id, cost_id),
            )
            if cur.rowcount == 0:
                raise ValueError("payment not found")
            conn.commit()

    # ------------------------------------------------------------------
    # Domain loading
    @staticmethod
    def _payment_from_row(row: Mapping[str, Any], cost_currency: str) -> Payment:
        return Payment(
            id=row["id"],
            amount=row["amount"],
            currency=row["currency"] or cost_currency,
            date=date.fromisoformat(row["date"][:10]),
            description=row["description"],
            receipt=row["receipt"],
        )

    @classmethod
    def _cost_from_row(
        cls, row: Mapping[str, Any], payment_rows: List[Mapping[str, Any]]
    ) -> CostItem:
        return CostItem(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            image_url=row.get("image_url"),
            category=row["category"],
            currency=row["currency"],
            quantity=row["quantity"],
            unit_value=row["unit_value"],
            tax=row["tax"],
            fee=row["fee"],
            delivery_fee=row["delivery_fee"],
            payments=[cls._payment_from_row(p, row["currency"]) for p in payment_rows],
            created_at=_parse_timestamp(row["created_at"]),
            updated_at=_parse_timestamp(row["updated_at"]),
        )

    def load_cost_item(self, cost_id: int) -> Optional[CostItem]:
        row = self.get_cost(cost_id)
        if not row:
            return None
        return self._cost_from_row(row, self.list_payments(cost_id))

    def load_cost_items(self, category: Optional[str] = None) -> List[CostItem]:
        rows = self.list_costs(category=category)
        if not rows:
            return []
        by_cost: Dict[int, List[Dict[str, Any]]] = defaultdict(list)
        with self._connect() as conn:
            cur = conn.cursor()
            cur.execute("SELECT * FROM payments ORDER BY date DESC, id DESC")
            for p in cur.fetchall():
                by_cost[int(p["cost_id"])].append(dict(p))
        return [self._cost_from_row(r, by_cost.get(int(r["id"]), [])) for r in rows]
