"""
Pure status rules for orders and their items.

Nothing in this module touches the database: every function takes plain
statuses (or objects exposing ``status`` and ``station``) and returns a
decision, so the rules can be reused by services, serializers and tests.
"""

from .models import Order, OrderItem

ItemStatus = OrderItem.ItemStatus
OrderStatus = Order.OrderStatus

# Forward-only ordering of item statuses. SERVED and DELIVERED are both
# "handed over" and share the top rank.
ITEM_STATUS_RANK = {
    ItemStatus.PENDING: 0,
    ItemStatus.FIRED: 1,
    ItemStatus.PREPARING: 2,
    ItemStatus.READY: 3,
    ItemStatus.SERVED: 4,
    ItemStatus.DELIVERED: 4,
}

# Items in these statuses count as ready for the aggregate READY status
READY_ITEM_STATUSES = frozenset({ItemStatus.READY, ItemStatus.SERVED, ItemStatus.DELIVERED})

# Statuses the aggregator is allowed to move between
KITCHEN_STATUSES = frozenset({OrderStatus.FIRED, OrderStatus.PREPARING, OrderStatus.READY})

ALL_STATIONS = "ALL"


def can_transition_item(current, requested):
    """
    True if an item may move from ``current`` to ``requested``.

    Moves are forward only; skipping stages (FIRED -> READY) is allowed.
    Going backwards is only possible through a kitchen display undo.
    """
    if current not in ITEM_STATUS_RANK or requested not in ITEM_STATUS_RANK:
        return False
    return ITEM_STATUS_RANK[requested] > ITEM_STATUS_RANK[current]


def derive_status(item_statuses):
    """
    Derive the kitchen status implied by a collection of item statuses.

    Returns None for an empty collection.
    """
    statuses = list(item_statuses)
    if not statuses:
        return None
    if all(status in READY_ITEM_STATUSES for status in statuses):
        return OrderStatus.READY
    if any(status == ItemStatus.PREPARING for status in statuses):
        return OrderStatus.PREPARING
    return OrderStatus.FIRED


def aggregate_status(current_status, item_statuses):
    """
    Order status after applying the aggregation rules.

    Only orders in the kitchen phase are recomputed; drafts, delivery
    custody statuses and final statuses are returned unchanged.
    """
    if current_status not in KITCHEN_STATUSES:
        return current_status
    derived = derive_status(item_statuses)
    return derived or current_status


def all_items_ready(item_statuses):
    statuses = list(item_statuses)
    return bool(statuses) and all(status in READY_ITEM_STATUSES for status in statuses)


def station_matches(item_station, station_filter):
    if not station_filter or station_filter == ALL_STATIONS:
        return True
    return (item_station or "").lower() == station_filter.lower()


def is_visible_on_station(item, station_filter):
    """
    Kitchen display visibility: station matches and the item still needs work.
    """
    if item.status in READY_ITEM_STATUSES:
        return False
    return station_matches(item.station, station_filter)
