"""Shared fixtures: in-memory stores so tests run without Firestore credentials."""
from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone

# Set env BEFORE any app imports
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest

from cartboard.schemas.catalog import ProductTemplate
from cartboard.schemas.orders import Order, OrderStatus, Product
from cartboard.services.catalog import DEFAULT_TEMPLATES
from cartboard.services.store import MemoryOrderStore, MemoryTemplateStore
from cartboard.state import WorkshopState, build_state, get_state

BASE_TIME = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


def make_order(order_id: str, status: OrderStatus = OrderStatus.OPEN, cart: int = 0,
               first: str = "Jane", last: str = "Doe", minutes: int = 0,
               products: dict | None = None) -> Order:
    """Build a stored order; `minutes` shifts createdAt so ordering is predictable."""
    at = BASE_TIME + timedelta(minutes=minutes)
    return Order(
        id=order_id,
        firstName=first,
        lastName=last,
        products=products or {},
        cartNumber=cart,
        status=status,
        createdAt=at,
        updatedAt=at,
        archivedAt=at if status is OrderStatus.ARCHIVED else None,
    )


def saddle_line(base_color: str = "black", quantity: int = 5, selected: bool = True) -> Product:
    return Product(
        id="saddle",
        name="Saddle",
        quantity=quantity,
        selected=selected,
        specs={"type": "", "baseColor": base_color, "stitchColor": "",
               "topAccentColor": "", "bottomAccentColor": ""},
    )


@pytest.fixture()
def order_store() -> MemoryOrderStore:
    return MemoryOrderStore()


@pytest.fixture()
def template_store() -> MemoryTemplateStore:
    return MemoryTemplateStore([t.model_copy(deep=True) for t in DEFAULT_TEMPLATES])


@pytest.fixture()
def state(order_store, template_store) -> WorkshopState:
    s = build_state(order_store=order_store, template_store=template_store)
    s.load()
    return s


@pytest.fixture()
def small_catalog() -> MemoryTemplateStore:
    return MemoryTemplateStore([
        ProductTemplate(id="saddle", name="Saddle", specs=["type", "baseColor"], sortOrder=1),
        ProductTemplate(id="raincover", name="Raincover", specs=["baseColor", "logoColor"], sortOrder=0),
    ])


@pytest.fixture()
def client(state):
    """FastAPI TestClient (sync) bound to the in-memory state."""
    from fastapi.testclient import TestClient
    from cartboard.main import app

    app.dependency_overrides[get_state] = lambda: state
    yield TestClient(app)
    app.dependency_overrides.clear()
