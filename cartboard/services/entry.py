# cartboard/services/entry.py
"""
Order entry: building a draft order from the catalog and turning it into
an `OrderData` for the lifecycle. Drafts never touch the store.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from ..errors import TemplateNotFound, ValidationError
from ..schemas.orders import (
    CART_NUMBERS,
    NO_CART,
    DraftLine,
    DraftOrder,
    Order,
    OrderData,
    OrderStatus,
    Product,
    SubmitAction,
    coerce_quantity,
)
from .catalog import CatalogRegistry


def _blank_lines(catalog: CatalogRegistry) -> Dict[str, DraftLine]:
    return {
        t.id: DraftLine(name=t.name, quantity=0, selected=False,
                        specs={spec: "" for spec in t.specs})
        for t in catalog.ordered()
    }


def new_draft(catalog: CatalogRegistry) -> DraftOrder:
    """A blank order form; also what the form resets to."""
    return DraftOrder(products=_blank_lines(catalog))


def edit_line(draft: DraftOrder, key: str, selected: Optional[bool] = None,
              quantity: Any = None, specs: Optional[Dict[str, str]] = None) -> DraftOrder:
    line = draft.products.get(key)
    if line is None:
        raise ValidationError(f"unknown product: {key}")
    update: Dict[str, Any] = {}
    if selected is not None:
        update["selected"] = selected
    if quantity is not None:
        update["quantity"] = coerce_quantity(quantity)
    if specs:
        unknown = sorted(set(specs) - set(line.specs))
        if unknown:
            raise ValidationError(f"unknown spec fields for {key}: {', '.join(unknown)}")
        update["specs"] = {**line.specs, **specs}
    products = {**draft.products, key: line.model_copy(update=update)}
    return draft.model_copy(update={"products": products})


def customer_history(orders: Iterable[Order], first_name: str, last_name: str) -> List[Order]:
    """Prior orders of one customer (case-insensitive exact match), newest first."""
    first = (first_name or "").strip().lower()
    last = (last_name or "").strip().lower()
    if not first or not last:
        return []
    matches = [
        o for o in orders
        if o.firstName.strip().lower() == first and o.lastName.strip().lower() == last
    ]
    return sorted(matches, key=lambda o: o.createdAt, reverse=True)


def apply_previous(draft: DraftOrder, order: Order, catalog: CatalogRegistry) -> DraftOrder:
    """
    Start the draft's products over and copy in what the customer picked last
    time: selected flag and spec values. Quantities are not carried over.
    Products no longer in the catalog are dropped, and so are spec fields
    their template no longer has.
    """
    products = _blank_lines(catalog)
    for key, prev in order.products.items():
        base = products.get(key)
        if base is None or not prev.selected:
            continue
        specs = dict(base.specs)
        specs.update({f: str(v) for f, v in prev.specs.items() if f in base.specs})
        products[key] = base.model_copy(update={"selected": True, "specs": specs})
    return draft.model_copy(update={"products": products})


def _checked_line(catalog: CatalogRegistry, key: str, line: Product) -> Product:
    try:
        template = catalog.get(key)
    except TemplateNotFound:
        raise ValidationError(f"unknown product: {key}") from None
    unknown = sorted(set(line.specs) - set(template.specs))
    if unknown:
        raise ValidationError(f"unknown spec fields for {key}: {', '.join(unknown)}")
    return Product(id=key, name=line.name, quantity=coerce_quantity(line.quantity),
                   selected=True, specs=dict(line.specs))


def submit(draft: DraftOrder, action: SubmitAction, catalog: CatalogRegistry) -> OrderData:
    first = draft.firstName.strip()
    last = draft.lastName.strip()
    if not first or not last:
        raise ValidationError("please enter customer name")

    if action is SubmitAction.OPEN:
        if draft.cartNumber not in CART_NUMBERS:
            raise ValidationError("please select a cart")
        status, cart = OrderStatus.OPEN, draft.cartNumber
    else:
        status, cart = OrderStatus.WAITING, NO_CART

    # only selected lines become part of the order
    products = {
        key: _checked_line(catalog, key, line)
        for key, line in draft.products.items()
        if line.selected
    }
    return OrderData(firstName=first, lastName=last, products=products,
                     cartNumber=cart, status=status)
