# cartboard/services/listing.py
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from ..schemas.orders import Order, OrderBoardOut, OrderDetailsOut, OrderStatus, Product


def newest_first(orders: Iterable[Order]) -> List[Order]:
    return sorted(orders, key=lambda o: o.createdAt, reverse=True)


def selected_lines(order: Order) -> Dict[str, Product]:
    return {k: p for k, p in order.products.items() if p.selected}


def total_quantity(order: Order) -> int:
    return sum(p.quantity for p in selected_lines(order).values())


def matches(order: Order, term: str) -> bool:
    """Name or selected product name contains `term` (case-insensitive)."""
    needle = term.lower()
    if needle in order.firstName.lower() or needle in order.lastName.lower():
        return True
    return any(needle in p.name.lower() for p in selected_lines(order).values())


def search_orders(orders: Iterable[Order], term: Optional[str] = None,
                  status: Optional[OrderStatus] = None) -> List[Order]:
    term = (term or "").strip()
    out = []
    for o in newest_first(orders):
        if status is not None and o.status is not status:
            continue
        if term and not matches(o, term):
            continue
        out.append(o)
    return out


def orders_by_status(orders: Iterable[Order]) -> OrderBoardOut:
    tables: Dict[OrderStatus, List[Order]] = {s: [] for s in OrderStatus}
    for o in newest_first(orders):
        tables[o.status].append(o)
    return OrderBoardOut(**{s.value: rows for s, rows in tables.items()})


def order_details(order: Order) -> OrderDetailsOut:
    """Customer-facing view: only the selected lines count."""
    return OrderDetailsOut(
        id=order.id,
        firstName=order.firstName,
        lastName=order.lastName,
        cartNumber=order.cartNumber,
        status=order.status,
        products=selected_lines(order),
        totalQuantity=total_quantity(order),
        createdAt=order.createdAt,
        archivedAt=order.archivedAt,
    )
