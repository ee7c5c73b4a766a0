"""
Pure status rule tests.

These functions never touch the database, so the tests run without it.
"""
from types import SimpleNamespace

from orders.models import Order, OrderItem
from orders.status import (
    aggregate_status,
    all_items_ready,
    can_transition_item,
    derive_status,
    is_visible_on_station,
    station_matches,
)

ItemStatus = OrderItem.ItemStatus
OrderStatus = Order.OrderStatus


class TestItemTransitions:
    """Items only move forward"""

    def test_forward_moves_are_allowed(self):
        assert can_transition_item(ItemStatus.FIRED, ItemStatus.PREPARING)
        assert can_transition_item(ItemStatus.PREPARING, ItemStatus.READY)
        assert can_transition_item(ItemStatus.READY, ItemStatus.SERVED)

    def test_skipping_ahead_is_allowed(self):
        assert can_transition_item(ItemStatus.FIRED, ItemStatus.READY)

    def test_backwards_and_same_status_are_rejected(self):
        assert not can_transition_item(ItemStatus.READY, ItemStatus.PREPARING)
        assert not can_transition_item(ItemStatus.PREPARING, ItemStatus.PREPARING)
        assert not can_transition_item(ItemStatus.SERVED, ItemStatus.DELIVERED)

    def test_unknown_status_is_rejected(self):
        assert not can_transition_item(ItemStatus.FIRED, "BURNT")


class TestAggregation:
    """Order status derived from item statuses"""

    def test_all_ready_gives_ready(self):
        assert derive_status([ItemStatus.READY, ItemStatus.SERVED]) == OrderStatus.READY

    def test_any_preparing_gives_preparing(self):
        assert derive_status([ItemStatus.READY, ItemStatus.PREPARING, ItemStatus.FIRED]) == OrderStatus.PREPARING

    def test_otherwise_fired(self):
        assert derive_status([ItemStatus.READY, ItemStatus.FIRED]) == OrderStatus.FIRED
        assert derive_status([ItemStatus.PENDING]) == OrderStatus.FIRED

    def test_empty_items_derive_nothing(self):
        assert derive_status([]) is None
        assert aggregate_status(OrderStatus.PREPARING, []) == OrderStatus.PREPARING

    def test_draft_is_never_aggregated(self):
        assert aggregate_status(OrderStatus.DRAFT, [ItemStatus.READY]) == OrderStatus.DRAFT

    def test_delivery_custody_is_never_aggregated(self):
        assert aggregate_status(OrderStatus.OUT_FOR_DELIVERY, [ItemStatus.FIRED]) == OrderStatus.OUT_FOR_DELIVERY

    def test_ready_regresses_when_a_new_item_is_fired(self):
        assert aggregate_status(OrderStatus.READY, [ItemStatus.READY, ItemStatus.FIRED]) == OrderStatus.FIRED

    def test_all_items_ready_needs_at_least_one_item(self):
        assert not all_items_ready([])
        assert all_items_ready([ItemStatus.READY, ItemStatus.DELIVERED])


class TestStationVisibility:
    """Which lines appear on a kitchen display"""

    def test_all_matches_every_station(self):
        assert station_matches("grill", "ALL")
        assert station_matches("grill", None)

    def test_station_match_ignores_case(self):
        assert station_matches("Hot", "hot")
        assert not station_matches("bar", "hot")

    def test_ready_items_are_hidden(self):
        item = SimpleNamespace(status=ItemStatus.READY, station="hot")
        assert not is_visible_on_station(item, "hot")

    def test_preparing_item_is_visible_on_its_station(self):
        item = SimpleNamespace(status=ItemStatus.PREPARING, station="hot")
        assert is_visible_on_station(item, "hot")
        assert is_visible_on_station(item, "ALL")
        assert not is_visible_on_station(item, "bar")
