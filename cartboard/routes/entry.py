# cartboard/routes/entry.py
from __future__ import annotations
from typing import List
from fastapi import APIRouter, Depends, Query

from ..errors import CartboardError, to_http
from ..schemas.orders import ApplyPreviousBody, DraftOrder, LineEdit, Order
from ..services import entry
from ..state import WorkshopState, get_state

router = APIRouter(prefix="/entry", tags=["entry"])


@router.get("/draft", response_model=DraftOrder)
def blank_draft(state: WorkshopState = Depends(get_state)):
    """A fresh draft with one unselected line per catalog product."""
    return entry.new_draft(state.catalog)


@router.patch("/draft/lines/{key}", response_model=DraftOrder)
def edit_draft_line(key: str, body: LineEdit):
    try:
        return entry.edit_line(body.draft, key, selected=body.selected,
                               quantity=body.quantity, specs=body.specs)
    except CartboardError as e:
        raise to_http(e)


# GET /entry/history?firstName=Jane&lastName=Doe
@router.get("/history", response_model=List[Order])
def history(
    firstName: str = Query(""),
    lastName: str = Query(""),
    state: WorkshopState = Depends(get_state),
):
    return entry.customer_history(state.orders.list_orders(), firstName, lastName)


@router.post("/apply", response_model=DraftOrder)
def apply_previous(body: ApplyPreviousBody, state: WorkshopState = Depends(get_state)):
    try:
        previous = state.orders.get(body.orderId)
    except CartboardError as e:
        raise to_http(e)
    return entry.apply_previous(body.draft, previous, state.catalog)
