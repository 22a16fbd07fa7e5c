import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from immiplan.db.dal import Database
from immiplan.deps import get_db, get_display_context
from immiplan.models.constants import CATEGORIES, PaymentStatus
from immiplan.models.cost import CostIn, CostItem, CostOut, CostSummary, CostUpdateIn
from immiplan.services.cost_utils import cost_status, filter_items, summarize
from immiplan.services.display_context import DisplayContext

router = APIRouter(prefix="/costs", tags=["costs"])

logger = logging.getLogger("immiplan.costs")


# Helpers ----------------------------------------------------------


def to_cost_out(item: CostItem, ctx: DisplayContext) -> CostOut:
    return CostOut(**item.model_dump(), **cost_status(item, ctx.currency, ctx.rates))


def _load_or_404(db: Database, cost_id: int) -> CostItem:
    item = db.load_cost_item(cost_id)
    if item is None:
        raise HTTPException(status_code=404, detail="cost not found")
    return item


def _filtered(
    db: Database,
    ctx: DisplayContext,
    category: Optional[str],
    status: Optional[PaymentStatus],
) -> List[CostItem]:
    if category is not None and category not in CATEGORIES:
        raise HTTPException(status_code=400, detail="unsupported category")
    items = db.load_cost_items(category=category)
    return filter_items(items, ctx.currency, ctx.rates, status=status)


# Routes -----------------------------------------------------------
@router.post("/", response_model=CostOut, status_code=201, summary="Create a cost item")
async def create_cost(
    payload: CostIn,
    db: Database = Depends(get_db),
    ctx: DisplayContext = Depends(get_display_context),
):
    cost_id = db.create_cost(payload)
    logger.info("created cost %s (%s %s)", cost_id, payload.category, payload.currency)
    item = db.load_cost_item(cost_id)
    if item is None:
        raise HTTPException(status_code=500, detail="cost not found after insert")
    return to_cost_out(item, ctx)


@router.get(
    "/",
    response_model=List[CostOut],
    summary="List cost items with totals in the display currency",
)
async def list_costs(
    category: Optional[str] = Query(None, description="Filter by category"),
    status: Optional[PaymentStatus] = Query(
        None, description="Filter by derived payment status"
    ),
    db: Database = Depends(get_db),
    ctx: DisplayContext = Depends(get_display_context),
):
    return [to_cost_out(i, ctx) for i in _filtered(db, ctx, category, status)]


@router.get(
    "/summary",
    response_model=CostSummary,
    summary="Total value, paid and remaining across cost items",
)
async def costs_summary(
    category: Optional[str] = Query(None, description="Filter by category"),
    status: Optional[PaymentStatus] = Query(
        None, description="Filter by derived payment status"
    ),
    db: Database = Depends(get_db),
    ctx: DisplayContext = Depends(get_display_context),
):
    items = _filtered(db, ctx, category, status)
    return CostSummary(**summarize(items, ctx.currency, ctx.rates))


@router.get("/{cost_id}", response_model=CostOut, summary="Get one cost item")
async def get_cost(
    cost_id: int,
    db: Database = Depends(get_db),
    ctx: DisplayContext = Depends(get_display_context),
):
    return to_cost_out(_load_or_404(db, cost_id), ctx)


@router.patch("/{cost_id}", response_model=CostOut, summary="Edit a cost item (partial)")
async def patch_cost(
    cost_id: int,
    payload: CostUpdateIn,
    db: Database = Depends(get_db),
    ctx: DisplayContext = Depends(get_display_context),
):
    try:
        db.update_cost(cost_id, payload.changes())
    except ValueError:
        raise HTTPException(status_code=404, detail="cost not found")
    return to_cost_out(_load_or_404(db, cost_id), ctx)


@router.delete("/{cost_id}", status_code=204, summary="Delete a cost item and its payments")
async def delete_cost(cost_id: int, db: Database = Depends(get_db)):
    try:
        db.delete_cost(cost_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="cost not found")
    logger.info("deleted cost %s", cost_id)
    return None
