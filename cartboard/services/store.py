# cartboard/services/store.py
"""
Document-store collaborators for orders and product templates.

`FirestoreOrderStore` / `FirestoreTemplateStore` talk to Firestore through
firebase_admin; the `Memory*` variants keep the same documents in-process
and back local development (STORE_BACKEND=memory) and the test-suite.
Every write stamps its own timestamps and returns the fields it wrote so
callers can update their view only after the store acknowledged it.
"""
from __future__ import annotations

import logging
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterator, List, Optional, Protocol, Tuple

from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions

from ..errors import OrderNotFound, StoreUnavailable
from ..schemas.catalog import ProductTemplate
from ..schemas.orders import Order, OrderData, OrderStatus, Product
from ..settings import Settings
from .firebase import ensure_firestore

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _oid() -> str:
    return uuid.uuid4().hex[:20]


def _status_patch(status: OrderStatus, cart_number: Optional[int]) -> Dict[str, Any]:
    now = _now()
    patch: Dict[str, Any] = {"status": status.value, "updatedAt": now}
    if cart_number is not None:
        patch["cartNumber"] = cart_number
    if status is OrderStatus.ARCHIVED:
        patch["archivedAt"] = now
    return patch


def _products_patch(products: Dict[str, Product]) -> Dict[str, Any]:
    return {
        "products": {key: p.model_dump() for key, p in products.items()},
        "updatedAt": _now(),
    }


class OrderStore(Protocol):
    def list_orders(self) -> List[Order]: ...

    def create_order(self, data: OrderData) -> Order: ...

    def set_order_status(
        self, order_id: str, status: OrderStatus, cart_number: Optional[int] = None
    ) -> Dict[str, Any]: ...

    def set_order_products(self, order_id: str, products: Dict[str, Product]) -> Dict[str, Any]: ...

    def delete_order(self, order_id: str) -> None: ...


class TemplateStore(Protocol):
    def list_templates(self) -> List[ProductTemplate]: ...

    def save_template(self, template: ProductTemplate) -> None: ...

    def delete_template(self, template_id: str) -> None: ...


# --- FIRESTORE ----------------------------------------------------------------
@contextmanager
def _store_call(what: str, order_id: Optional[str] = None) -> Iterator[None]:
    try:
        yield
    except google_exceptions.NotFound as e:
        if order_id is None:
            logger.error("%s failed: %s", what, e)
            raise StoreUnavailable(f"{what} failed: {e}") from e
        raise OrderNotFound(order_id) from e
    except (google_exceptions.GoogleAPIError, auth_exceptions.GoogleAuthError) as e:
        logger.error("%s failed: %s", what, e)
        raise StoreUnavailable(f"{what} failed: {e}") from e


class FirestoreOrderStore:
    def __init__(self, collection: str = "orders",
                 client_factory: Callable[[], Any] = ensure_firestore):
        self.collection = collection
        self._client_factory = client_factory

    def _col(self):
        return self._client_factory().collection(self.collection)

    def list_orders(self) -> List[Order]:
        """All orders, newest first."""
        rows: List[Dict[str, Any]] = []
        with _store_call("list orders"):
            q = self._col().order_by("createdAt", direction=firestore.Query.DESCENDING)
            for snap in q.stream():
                row = snap.to_dict() or {}
                row["id"] = snap.id
                rows.append(row)
        return [Order.model_validate(r) for r in rows]

    def create_order(self, data: OrderData) -> Order:
        now = _now()
        payload = data.model_dump(mode="json", include=set(OrderData.model_fields))
        payload["createdAt"] = now
        payload["updatedAt"] = now
        with _store_call("create order"):
            ref = self._col().document()
            ref.set(payload)
        logger.debug("order %s written", ref.id)
        return Order(id=ref.id, **payload)

    def set_order_status(self, order_id: str, status: OrderStatus,
                         cart_number: Optional[int] = None) -> Dict[str, Any]:
        patch = _status_patch(status, cart_number)
        with _store_call("update order status", order_id):
            self._col().document(order_id).update(patch)
        return patch

    def set_order_products(self, order_id: str, products: Dict[str, Product]) -> Dict[str, Any]:
        patch = _products_patch(products)
        with _store_call("update order products", order_id):
            self._col().document(order_id).update(patch)
        return patch

    def delete_order(self, order_id: str) -> None:
        with _store_call("delete order", order_id):
            self._col().document(order_id).delete()


class FirestoreTemplateStore:
    def __init__(self, collection: str = "productTemplates",
                 client_factory: Callable[[], Any] = ensure_firestore):
        self.collection = collection
        self._client_factory = client_factory

    def _col(self):
        return self._client_factory().collection(self.collection)

    def list_templates(self) -> List[ProductTemplate]:
        rows: List[Dict[str, Any]] = []
        with _store_call("list product templates"):
            for snap in self._col().stream():
                row = snap.to_dict() or {}
                row["id"] = snap.id
                rows.append(row)
        return [ProductTemplate.model_validate(r) for r in rows]

    def save_template(self, template: ProductTemplate) -> None:
        data = template.model_dump(exclude={"id"})
        with _store_call("save product template"):
            self._col().document(template.id).set(data)

    def delete_template(self, template_id: str) -> None:
        with _store_call("delete product template"):
            self._col().document(template_id).delete()


# --- IN-MEMORY ----------------------------------------------------------------
class MemoryOrderStore:
    """Dict-backed store holding the same documents Firestore would."""

    def __init__(self, orders: Optional[List[Order]] = None):
        self._lock = threading.Lock()
        self._docs: Dict[str, Dict[str, Any]] = {}
        for o in orders or []:
            self._docs[o.id] = o.model_dump(mode="python", exclude={"id"})

    def list_orders(self) -> List[Order]:
        with self._lock:
            rows: List[Tuple[str, Dict[str, Any]]] = list(self._docs.items())
        rows.sort(key=lambda r: r[1]["createdAt"], reverse=True)
        return [Order.model_validate({**doc, "id": oid}) for oid, doc in rows]

    def create_order(self, data: OrderData) -> Order:
        now = _now()
        payload = data.model_dump(mode="json", include=set(OrderData.model_fields))
        payload["createdAt"] = now
        payload["updatedAt"] = now
        oid = _oid()
        with self._lock:
            self._docs[oid] = payload
        return Order(id=oid, **payload)

    def _update(self, order_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            doc = self._docs.get(order_id)
            if doc is None:
                raise OrderNotFound(order_id)
            doc.update(patch)
        return patch

    def set_order_status(self, order_id: str, status: OrderStatus,
                         cart_number: Optional[int] = None) -> Dict[str, Any]:
        return self._update(order_id, _status_patch(status, cart_number))

    def set_order_products(self, order_id: str, products: Dict[str, Product]) -> Dict[str, Any]:
        return self._update(order_id, _products_patch(products))

    def delete_order(self, order_id: str) -> None:
        with self._lock:
            if self._docs.pop(order_id, None) is None:
                raise OrderNotFound(order_id)


class MemoryTemplateStore:
    def __init__(self, templates: Optional[List[ProductTemplate]] = None):
        self._lock = threading.Lock()
        self._docs: Dict[str, ProductTemplate] = {t.id: t for t in templates or []}

    def list_templates(self) -> List[ProductTemplate]:
        with self._lock:
            return [t.model_copy(deep=True) for t in self._docs.values()]

    def save_template(self, template: ProductTemplate) -> None:
        with self._lock:
            self._docs[template.id] = template.model_copy(deep=True)

    def delete_template(self, template_id: str) -> None:
        with self._lock:
            self._docs.pop(template_id, None)


def build_stores(cfg: Settings) -> Tuple[OrderStore, TemplateStore]:
    if cfg.store_backend == "memory":
        logger.warning("using in-memory store; data is lost on restart")
        return MemoryOrderStore(), MemoryTemplateStore()
    return (
        FirestoreOrderStore(cfg.orders_collection),
        FirestoreTemplateStore(cfg.templates_collection),
    )
