# cartboard/schemas/orders.py
from __future__ import annotations

import math
import re
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

CART_NUMBERS = range(1, 11)
NO_CART = 0

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def coerce_quantity(value: Any) -> int:
    """Form input to a non-negative int; anything unparsable becomes 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0) if math.isfinite(value) else 0
    m = _LEADING_INT.match(str(value))
    if not m:
        return 0
    return max(int(m.group(1)), 0)


class OrderStatus(str, Enum):
    OPEN = "open"
    WAITING = "waiting"
    COMPLETED = "completed"
    ARCHIVED = "archived"


class Product(BaseModel):
    """One order line. Unselected lines are kept so they can be toggled back on."""

    id: Optional[str] = None
    name: str
    quantity: int = Field(0, ge=0)
    selected: bool = False
    specs: Dict[str, str] = Field(default_factory=dict)


class DraftLine(Product):
    """A line still being typed in; quantity is raw form input."""

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce(cls, v: Any) -> int:
        return coerce_quantity(v)


class OrderData(BaseModel):
    """Everything an order carries before the store assigns id and timestamps."""

    firstName: str
    lastName: str
    products: Dict[str, Product] = Field(default_factory=dict)
    cartNumber: int = Field(NO_CART, ge=0, le=max(CART_NUMBERS))
    status: OrderStatus


class Order(OrderData):
    id: str
    createdAt: datetime
    updatedAt: datetime
    archivedAt: Optional[datetime] = None


class DraftOrder(BaseModel):
    firstName: str = ""
    lastName: str = ""
    # None or 0: no cart chosen yet
    cartNumber: Optional[int] = Field(None, ge=NO_CART, le=max(CART_NUMBERS))
    products: Dict[str, DraftLine] = Field(default_factory=dict)


class SubmitAction(str, Enum):
    OPEN = "open"
    WAITING = "waiting"


class SubmitOrderBody(BaseModel):
    draft: DraftOrder
    action: SubmitAction = SubmitAction.OPEN


class ProductsBody(BaseModel):
    products: Dict[str, Product]


class LineEdit(BaseModel):
    draft: DraftOrder
    selected: Optional[bool] = None
    # raw form input; coerced to a non-negative int
    quantity: Optional[int | str | float] = None
    specs: Optional[Dict[str, str]] = None


class ApplyPreviousBody(BaseModel):
    draft: DraftOrder
    orderId: str


class OrderDetailsOut(BaseModel):
    id: str
    firstName: str
    lastName: str
    cartNumber: int
    status: OrderStatus
    products: Dict[str, Product]
    totalQuantity: int
    createdAt: datetime
    archivedAt: Optional[datetime] = None


class OrderBoardOut(BaseModel):
    open: List[Order]
    waiting: List[Order]
    completed: List[Order]
    archived: List[Order]


class CartsOut(BaseModel):
    occupied: List[int]
    free: List[int]


class ArchiveResult(BaseModel):
    archived: List[str] = Field(default_factory=list)
    failed: Dict[str, str] = Field(default_factory=dict)
