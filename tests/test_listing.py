"""Tests for search, status tables and the customer-facing detail view."""
from __future__ import annotations

from cartboard.schemas.orders import OrderStatus, Product
from cartboard.services import listing

from tests.conftest import make_order, saddle_line


def _orders():
    blanket = Product(id="blanket", name="Blanket", quantity=1, selected=False, specs={})
    return [
        make_order("a", OrderStatus.OPEN, cart=1, first="Ann", last="Lee", minutes=1,
                   products={"saddle": saddle_line(quantity=2), "blanket": blanket}),
        make_order("b", OrderStatus.WAITING, first="Bob", last="Stone", minutes=3),
        make_order("c", OrderStatus.COMPLETED, cart=2, first="Cara", last="Leeds", minutes=2),
        make_order("d", OrderStatus.ARCHIVED, cart=3, first="Dan", last="Moss", minutes=4),
    ]


def test_search_without_term_returns_all_newest_first():
    assert [o.id for o in listing.search_orders(_orders())] == ["d", "b", "c", "a"]


def test_search_matches_names_case_insensitively():
    assert [o.id for o in listing.search_orders(_orders(), "LEE")] == ["c", "a"]


def test_search_matches_selected_products_only():
    assert [o.id for o in listing.search_orders(_orders(), "saddle")] == ["a"]
    assert listing.search_orders(_orders(), "blanket") == []


def test_search_by_status():
    found = listing.search_orders(_orders(), "  ", OrderStatus.COMPLETED)
    assert [o.id for o in found] == ["c"]


def test_board_groups_by_status():
    board = listing.orders_by_status(_orders())
    assert [o.id for o in board.open] == ["a"]
    assert [o.id for o in board.waiting] == ["b"]
    assert [o.id for o in board.completed] == ["c"]
    assert [o.id for o in board.archived] == ["d"]


def test_details_show_selected_lines_only():
    details = listing.order_details(_orders()[0])
    assert list(details.products) == ["saddle"]
    assert details.totalQuantity == 2
