# cartboard/routes/orders.py
from __future__ import annotations
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from ..errors import CartboardError, to_http
from ..schemas.orders import (
    ArchiveResult,
    CartsOut,
    Order,
    OrderBoardOut,
    OrderDetailsOut,
    OrderStatus,
    ProductsBody,
    SubmitOrderBody,
)
from ..services import entry, listing
from ..state import WorkshopState, get_state


router = APIRouter(prefix="/orders", tags=["orders"])


# GET /orders?status=open&search=smith
@router.get("", response_model=List[Order])
def list_orders_endpoint(
    status: Optional[OrderStatus] = Query(None),
    search: Optional[str] = Query(None),
    state: WorkshopState = Depends(get_state),
):
    return listing.search_orders(state.orders.list_orders(), search, status)


@router.get("/board", response_model=OrderBoardOut)
def board_endpoint(state: WorkshopState = Depends(get_state)):
    """Open / waiting / completed / archived tables, newest first."""
    return listing.orders_by_status(state.orders.list_orders())


@router.get("/carts", response_model=CartsOut)
def carts_endpoint(state: WorkshopState = Depends(get_state)):
    return CartsOut(occupied=sorted(state.orders.occupied_carts()),
                    free=state.orders.free_carts())


# POST /orders   {draft, action: open|waiting}
@router.post("", response_model=Order)
def submit_order(body: SubmitOrderBody, state: WorkshopState = Depends(get_state)):
    try:
        return state.orders.create(entry.submit(body.draft, body.action, state.catalog))
    except CartboardError as e:
        raise to_http(e)


@router.post("/archive", response_model=ArchiveResult)
def archive_completed(state: WorkshopState = Depends(get_state)):
    return state.orders.archive_completed()


@router.get("/{order_id}", response_model=Order)
def get_order_endpoint(order_id: str, state: WorkshopState = Depends(get_state)):
    try:
        return state.orders.get(order_id)
    except CartboardError as e:
        raise to_http(e)


@router.get("/{order_id}/details", response_model=OrderDetailsOut)
def order_details_endpoint(order_id: str, state: WorkshopState = Depends(get_state)):
    try:
        return listing.order_details(state.orders.get(order_id))
    except CartboardError as e:
        raise to_http(e)


@router.post("/{order_id}/open", response_model=Order)
def move_to_open(order_id: str, state: WorkshopState = Depends(get_state)):
    try:
        return state.orders.move_to_open(order_id)
    except CartboardError as e:
        raise to_http(e)


@router.post("/{order_id}/complete", response_model=Order)
def complete_order(order_id: str, state: WorkshopState = Depends(get_state)):
    try:
        return state.orders.complete(order_id)
    except CartboardError as e:
        raise to_http(e)


@router.put("/{order_id}/products", response_model=Order)
def update_products(order_id: str, body: ProductsBody,
                    state: WorkshopState = Depends(get_state)):
    try:
        return state.orders.update_products(order_id, body.products)
    except CartboardError as e:
        raise to_http(e)


# DELETE /orders/{id}?confirm=true  (waiting orders only)
@router.delete("/{order_id}")
def delete_order(order_id: str, confirm: bool = Query(False),
                 state: WorkshopState = Depends(get_state)):
    try:
        state.orders.delete(order_id, confirmed=confirm)
    except CartboardError as e:
        raise to_http(e)
    return {"ok": True}
