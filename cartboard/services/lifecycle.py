# cartboard/services/lifecycle.py
"""
Order lifecycle: status transitions and cart assignment.

    (new) --cart chosen--> open --complete--> completed --archive--> archived
    (new) --no cart------> waiting --move to open--> open
                           waiting --delete--> (gone)

Carts 1..10 are a shared pool; an open order holds exactly one, and which
carts are taken is always derived from the open orders themselves. All cart
allocation runs under one lock, and each order is mutated under its own
lock, so two requests can never hand out the same cart.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional, Set

from ..errors import (
    CartboardError,
    CartOccupied,
    InvalidTransition,
    NoCartAvailable,
    OrderNotFound,
    ValidationError,
)
from ..schemas.orders import (
    CART_NUMBERS,
    NO_CART,
    ArchiveResult,
    Order,
    OrderData,
    OrderStatus,
    Product,
)
from .store import OrderStore

logger = logging.getLogger(__name__)


def first_free_cart(occupied: Set[int]) -> Optional[int]:
    for n in CART_NUMBERS:
        if n not in occupied:
            return n
    return None


class OrderLifecycle:
    """Owns every change to an order's status and cart number."""

    def __init__(self, store: OrderStore):
        self._store = store
        self._orders: Dict[str, Order] = {}
        self._view_lock = threading.Lock()
        self._alloc_lock = threading.Lock()
        self._locks_guard = threading.Lock()
        self._order_locks: Dict[str, threading.Lock] = {}

    # --- VIEW ---------------------------------------------------------------
    def load(self) -> None:
        orders = self._store.list_orders()
        with self._view_lock:
            self._orders = {o.id: o for o in orders}
        logger.info("loaded %d orders", len(orders))

    def list_orders(self) -> List[Order]:
        with self._view_lock:
            orders = list(self._orders.values())
        return sorted(orders, key=lambda o: o.createdAt, reverse=True)

    def get(self, order_id: str) -> Order:
        with self._view_lock:
            order = self._orders.get(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def occupied_carts(self) -> Set[int]:
        with self._view_lock:
            return {
                o.cartNumber for o in self._orders.values()
                if o.status is OrderStatus.OPEN and o.cartNumber != NO_CART
            }

    def free_carts(self) -> List[int]:
        occupied = self.occupied_carts()
        return [n for n in CART_NUMBERS if n not in occupied]

    def _remember(self, order: Order) -> Order:
        with self._view_lock:
            self._orders[order.id] = order
        return order

    def _apply(self, order: Order, patch: Dict[str, Any]) -> Order:
        return self._remember(Order.model_validate({**order.model_dump(), **patch}))

    def _lock_for(self, order_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._order_locks.get(order_id)
            if lock is None:
                lock = self._order_locks[order_id] = threading.Lock()
            return lock

    # --- TRANSITIONS --------------------------------------------------------
    def create(self, data: OrderData) -> Order:
        """Persist a new order as open (cart chosen) or waiting (no cart)."""
        if data.status is OrderStatus.WAITING:
            order = self._store.create_order(data.model_copy(update={"cartNumber": NO_CART}))
            logger.info("order %s created waiting", order.id)
            return self._remember(order)

        if data.status is not OrderStatus.OPEN:
            raise ValidationError(f"new orders must be open or waiting, not {data.status.value}")
        if data.cartNumber not in CART_NUMBERS:
            raise ValidationError("please select a cart")

        with self._alloc_lock:
            if data.cartNumber in self.occupied_carts():
                raise CartOccupied(data.cartNumber)
            order = self._store.create_order(data)
            self._remember(order)
        logger.info("order %s created open on cart %d", order.id, order.cartNumber)
        return order

    def move_to_open(self, order_id: str) -> Order:
        """Give a waiting order the lowest free cart."""
        with self._lock_for(order_id):
            order = self.get(order_id)
            if order.status is not OrderStatus.WAITING:
                raise InvalidTransition(order_id, order.status.value, "move to open")
            with self._alloc_lock:
                cart = first_free_cart(self.occupied_carts())
                if cart is None:
                    raise NoCartAvailable()
                patch = self._store.set_order_status(order_id, OrderStatus.OPEN, cart)
                order = self._apply(order, patch)
        logger.info("order %s moved to open on cart %d", order_id, cart)
        return order

    def complete(self, order_id: str) -> Order:
        with self._lock_for(order_id):
            order = self.get(order_id)
            if order.status is not OrderStatus.OPEN:
                raise InvalidTransition(order_id, order.status.value, "complete")
            patch = self._store.set_order_status(order_id, OrderStatus.COMPLETED)
            order = self._apply(order, patch)
        logger.info("order %s completed, cart %d released", order_id, order.cartNumber)
        return order

    def archive_completed(self) -> ArchiveResult:
        """
        Archive every completed order. Each order is its own unit of failure:
        any error on one is logged and recorded in `failed` and the rest carry on.
        """
        result = ArchiveResult()
        candidates = [o.id for o in self.list_orders() if o.status is OrderStatus.COMPLETED]
        for order_id in candidates:
            try:
                with self._lock_for(order_id):
                    order = self.get(order_id)
                    if order.status is not OrderStatus.COMPLETED:
                        continue
                    patch = self._store.set_order_status(order_id, OrderStatus.ARCHIVED)
                    self._apply(order, patch)
            except CartboardError as e:
                logger.warning("could not archive order %s: %s", order_id, e)
                result.failed[order_id] = str(e)
                continue
            except Exception as e:
                logger.exception("unexpected error archiving order %s", order_id)
                result.failed[order_id] = f"{type(e).__name__}: {e}"
                continue
            result.archived.append(order_id)
        logger.info("archived %d orders (%d failed)", len(result.archived), len(result.failed))
        return result

    def update_products(self, order_id: str, products: Dict[str, Product]) -> Order:
        """
        Replace product lines on an existing order. Only lines the order
        already has can change, and only their existing spec fields.
        Lines missing from `products` are left as they are.
        """
        with self._lock_for(order_id):
            order = self.get(order_id)
            if order.status is OrderStatus.ARCHIVED:
                raise InvalidTransition(order_id, order.status.value, "edit products of")
            merged = dict(order.products)
            for key, line in products.items():
                current = order.products.get(key)
                if current is None:
                    raise ValidationError(f"order {order_id} has no {key} line")
                unknown = set(line.specs) - set(current.specs)
                if unknown:
                    raise ValidationError(
                        f"{current.name} has no spec field(s): {', '.join(sorted(unknown))}"
                    )
                merged[key] = line.model_copy(update={"id": key})
            patch = self._store.set_order_products(order_id, merged)
            return self._apply(order, patch)

    def delete(self, order_id: str, confirmed: bool = False) -> None:
        """Remove a waiting order. The caller must have asked the user first."""
        if not confirmed:
            raise ValidationError("deleting an order must be confirmed")
        with self._lock_for(order_id):
            order = self.get(order_id)
            if order.status is not OrderStatus.WAITING:
                raise InvalidTransition(order_id, order.status.value, "delete")
            self._store.delete_order(order_id)
            with self._view_lock:
                self._orders.pop(order_id, None)
        with self._locks_guard:
            self._order_locks.pop(order_id, None)
        logger.info("order %s deleted", order_id)
