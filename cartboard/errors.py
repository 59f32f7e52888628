"""Workshop domain exceptions.

Raised by the service layer when a business rule is violated or the
document store cannot be reached. Routes translate them into HTTP errors.
"""
from __future__ import annotations

from fastapi import HTTPException


class CartboardError(Exception):
    """Base class for every error the services raise on purpose."""

    status_code = 400


class ValidationError(CartboardError):
    """User input was rejected; nothing was changed."""


class CartOccupied(ValidationError):
    """The chosen cart is already held by another open order."""

    status_code = 409

    def __init__(self, cart_number: int):
        super().__init__(f"cart {cart_number} is already in use by an open order")
        self.cart_number = cart_number


class NoCartAvailable(CartboardError):
    """All carts are held by open orders. Complete an order to free one."""

    status_code = 409

    def __init__(self, message: str = "no cart available; complete an open order first"):
        super().__init__(message)


class InvalidTransition(CartboardError):
    status_code = 409

    def __init__(self, order_id: str, current: str, action: str):
        super().__init__(f"cannot {action} order {order_id} while it is {current}")
        self.order_id = order_id
        self.current = current
        self.action = action


class OrderNotFound(CartboardError):
    status_code = 404

    def __init__(self, order_id: str):
        super().__init__(f"order not found: {order_id}")
        self.order_id = order_id


class TemplateNotFound(CartboardError):
    status_code = 404

    def __init__(self, template_id: str):
        super().__init__(f"product template not found: {template_id}")
        self.template_id = template_id


class StoreUnavailable(CartboardError):
    """The document store failed or could not be reached."""

    status_code = 503


def to_http(e: CartboardError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=str(e))
