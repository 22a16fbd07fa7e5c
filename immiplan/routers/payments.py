from typing import List

from fastapi import APIRouter, Depends, HTTPException

from immiplan.db.dal import Database
from immiplan.deps import get_db, get_display_context
from immiplan.models.cost import CostOut, Payment, PaymentIn, PaymentUpdateIn
from immiplan.routers.costs import to_cost_out
from immiplan.services.display_context import DisplayContext

router = APIRouter(prefix="/costs/{cost_id}/payments", tags=["payments"])


def _require_cost(db: Database, cost_id: int) -> None:
    if db.get_cost(cost_id) is None:
        raise HTTPException(status_code=404, detail="cost not found")


def _cost_out(db: Database, cost_id: int, ctx: DisplayContext) -> CostOut:
    item = db.load_cost_item(cost_id)
    if item is None:
        raise HTTPException(status_code=404, detail="cost not found")
    return to_cost_out(item, ctx)


@router.post(
    "/",
    response_model=CostOut,
    status_code=201,
    summary="Add a payment; returns the cost with refreshed totals",
)
async def add_payment(
    cost_id: int,
    payload: PaymentIn,
    db: Database = Depends(get_db),
    ctx: DisplayContext = Depends(get_display_context),
):
    try:
        db.add_payment(cost_id, payload)
    except ValueError:
        raise HTTPException(status_code=404, detail="cost not found")
    return _cost_out(db, cost_id, ctx)


@router.get("/", response_model=List[Payment], summary="List payments of a cost")
async def list_payments(cost_id: int, db: Database = Depends(get_db)):
    item = db.load_cost_item(cost_id)
    if item is None:
        raise HTTPException(status_code=404, detail="cost not found")
    return item.payments


@router.patch(
    "/{payment_id}", response_model=CostOut, summary="Edit a payment (partial)"
)
async def patch_payment(
    cost_id: int,
    payment_id: int,
    payload: PaymentUpdateIn,
    db: Database = Depends(get_db),
    ctx: DisplayContext = Depends(get_display_context),
):
    _require_cost(db, cost_id)
    try:
        db.update_payment(cost_id, payment_id, payload.changes())
    except ValueError:
        raise HTTPException(status_code=404, detail="payment not found")
    return _cost_out(db, cost_id, ctx)


@router.delete("/{payment_id}", status_code=204, summary="Remove a payment")
async def delete_payment(
    cost_id: int,
    payment_id: int,
    db: Database = Depends(get_db),
):
    _require_cost(db, cost_id)
    try:
        db.delete_payment(cost_id, payment_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="payment not found")
    return None
