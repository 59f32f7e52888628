"""Firestore store against a mocked client: document shapes and error mapping."""
from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions

from cartboard.errors import OrderNotFound, StoreUnavailable
from cartboard.schemas.catalog import ProductTemplate
from cartboard.schemas.orders import OrderData, OrderStatus
from cartboard.services.store import (
    FirestoreOrderStore,
    FirestoreTemplateStore,
    MemoryOrderStore,
)

from tests.conftest import make_order, saddle_line


@pytest.fixture()
def db():
    return MagicMock()


def _snap(doc_id, data):
    snap = MagicMock()
    snap.id = doc_id
    snap.to_dict.return_value = data
    return snap


def test_create_order_writes_document_with_timestamps(db):
    db.collection.return_value.document.return_value.id = "abc123"
    store = FirestoreOrderStore("orders", client_factory=lambda: db)
    data = OrderData(firstName="Jane", lastName="Doe", cartNumber=2,
                     status=OrderStatus.OPEN, products={"saddle": saddle_line()})

    order = store.create_order(data)

    db.collection.assert_called_with("orders")
    written = db.collection.return_value.document.return_value.set.call_args.args[0]
    assert written["status"] == "open"
    assert written["products"]["saddle"]["specs"]["baseColor"] == "black"
    assert isinstance(written["createdAt"], datetime)
    assert written["createdAt"] == written["updatedAt"]
    assert order.id == "abc123"
    assert order.cartNumber == 2


def test_list_orders_converts_documents(db):
    at = datetime(2024, 1, 2, tzinfo=timezone.utc)
    query = db.collection.return_value.order_by.return_value
    query.stream.return_value = [
        _snap("o1", {"firstName": "Jane", "lastName": "Doe", "products": {},
                     "cartNumber": 0, "status": "waiting", "createdAt": at, "updatedAt": at}),
    ]
    store = FirestoreOrderStore("orders", client_factory=lambda: db)

    orders = store.list_orders()

    assert db.collection.return_value.order_by.call_args.args == ("createdAt",)
    assert orders[0].id == "o1"
    assert orders[0].status is OrderStatus.WAITING
    assert orders[0].createdAt == at
    assert orders[0].archivedAt is None


def test_archiving_stamps_archived_at(db):
    store = FirestoreOrderStore("orders", client_factory=lambda: db)
    patch = store.set_order_status("o1", OrderStatus.ARCHIVED)
    db.collection.return_value.document.assert_called_with("o1")
    db.collection.return_value.document.return_value.update.assert_called_once_with(patch)
    assert patch["status"] == "archived"
    assert patch["archivedAt"] == patch["updatedAt"]


def test_status_change_with_cart(db):
    store = FirestoreOrderStore("orders", client_factory=lambda: db)
    patch = store.set_order_status("o1", OrderStatus.OPEN, 4)
    assert patch["cartNumber"] == 4
    assert "archivedAt" not in patch


def test_missing_document_maps_to_order_not_found(db):
    db.collection.return_value.document.return_value.update.side_effect = \
        google_exceptions.NotFound("no document")
    store = FirestoreOrderStore("orders", client_factory=lambda: db)
    with pytest.raises(OrderNotFound):
        store.set_order_products("gone", {})


def test_api_failure_maps_to_store_unavailable(db):
    db.collection.return_value.document.return_value.delete.side_effect = \
        google_exceptions.ServiceUnavailable("backend down")
    store = FirestoreOrderStore("orders", client_factory=lambda: db)
    with pytest.raises(StoreUnavailable):
        store.delete_order("o1")


def test_template_store_round_trip(db):
    store = FirestoreTemplateStore("productTemplates", client_factory=lambda: db)
    t = ProductTemplate(id="saddle", name="Saddle", specs=["baseColor"], sortOrder=7)
    store.save_template(t)
    db.collection.return_value.document.assert_called_with("saddle")
    db.collection.return_value.document.return_value.set.assert_called_once_with(
        {"name": "Saddle", "specs": ["baseColor"], "sortOrder": 7}
    )

    db.collection.return_value.stream.return_value = [
        _snap("saddle", {"name": "Saddle", "specs": ["baseColor"], "sortOrder": 7})
    ]
    assert store.list_templates() == [t]


def test_memory_store_lists_newest_first_and_deletes():
    store = MemoryOrderStore([
        make_order("old", OrderStatus.WAITING, minutes=1),
        make_order("new", OrderStatus.WAITING, minutes=9),
    ])
    assert [o.id for o in store.list_orders()] == ["new", "old"]
    store.delete_order("old")
    assert [o.id for o in store.list_orders()] == ["new"]
    with pytest.raises(OrderNotFound):
        store.delete_order("old")
