# cartboard/state.py
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from .errors import CartboardError, to_http
from .services.catalog import CatalogRegistry
from .services.lifecycle import OrderLifecycle
from .services.store import OrderStore, TemplateStore, build_stores
from .settings import Settings, settings


@dataclass
class WorkshopState:
    """Everything the API works on; rebuilt from the store on every start."""

    catalog: CatalogRegistry
    orders: OrderLifecycle

    def load(self) -> None:
        self.catalog.load()
        self.orders.load()

    def close(self) -> None:
        # nothing lives outside the store
        pass


def build_state(cfg: Settings = settings, order_store: Optional[OrderStore] = None,
                template_store: Optional[TemplateStore] = None) -> WorkshopState:
    if order_store is None or template_store is None:
        default_orders, default_templates = build_stores(cfg)
        order_store = order_store or default_orders
        template_store = template_store or default_templates
    return WorkshopState(
        catalog=CatalogRegistry(template_store),
        orders=OrderLifecycle(order_store),
    )


_init_lock = threading.Lock()


def get_state(request: Request) -> WorkshopState:
    """FastAPI dependency; loads the state lazily when startup did not."""
    state = getattr(request.app.state, "workshop", None)
    if state is not None:
        return state
    with _init_lock:
        state = getattr(request.app.state, "workshop", None)
        if state is None:
            state = build_state()
            try:
                state.load()
            except CartboardError as e:
                raise to_http(e)
            request.app.state.workshop = state
    return state
