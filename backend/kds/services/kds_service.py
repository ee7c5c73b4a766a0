from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_datetime
import logging

from core_backend.exceptions import (
    ConfirmationRequiredError,
    InvalidTransitionError,
)
from orders.models import Order, OrderItem
from orders.services import OrderItemService, OrderService
from orders.signals import order_items_changed, order_status_changed
from orders.status import KITCHEN_STATUSES, is_visible_on_station, station_matches
from settings.config import get_restaurant_settings
from ..models import KDSUndoEntry

logger = logging.getLogger(__name__)

ItemStatus = OrderItem.ItemStatus

# What a single tap on a ticket line moves the item to
NEXT_KITCHEN_STATUS = {
    ItemStatus.PENDING: ItemStatus.PREPARING,
    ItemStatus.FIRED: ItemStatus.PREPARING,
    ItemStatus.PREPARING: ItemStatus.READY,
}

READY_ALL_SOURCE_STATUSES = (ItemStatus.PENDING, ItemStatus.FIRED, ItemStatus.PREPARING)


class KDSService:
    """
    Kitchen display operations.

    Every mutating action first pushes a snapshot of what it is about to
    change onto the calling terminal's undo stack, inside the same
    transaction as the change itself.
    """

    @staticmethod
    def station_queue(station):
        """
        Orders a station still has work on, oldest fired first.

        Returns a list of ``{"order": Order, "items": [OrderItem, ...]}``
        where ``items`` only holds lines visible on ``station``.
        """
        orders = (
            Order.objects.filter(status__in=KITCHEN_STATUSES)
            .prefetch_related("items")
            .order_by("fired_at", "created_at")
        )
        queue = []
        for order in orders:
            items = [item for item in order.items.all() if is_visible_on_station(item, station)]
            if items:
                queue.append({"order": order, "items": items})
        return queue

    # ------------------------------------------------------------------
    # Undo stack
    # ------------------------------------------------------------------

    @staticmethod
    def _snapshot_item(item):
        return {
            "position": item.position,
            "status": item.status,
            "quantity": item.quantity,
            "ready_at": item.ready_at.isoformat() if item.ready_at else None,
        }

    @staticmethod
    def push_undo(order, items, terminal_id, action, station="", user=None):
        """Record the pre-action state and trim the terminal's stack to the configured depth."""
        entry = KDSUndoEntry.objects.create(
            tenant=order.tenant,
            terminal_id=terminal_id,
            order=order,
            order_status=order.status,
            items=[KDSService._snapshot_item(item) for item in items],
            action=action[:255],
            station=station or "",
            performed_by=user,
        )

        depth = get_restaurant_settings(order.tenant).kds_undo_depth
        stale = list(
            KDSUndoEntry.objects.filter(terminal_id=terminal_id)
            .order_by("-id")
            .values_list("pk", flat=True)[depth:]
        )
        if stale:
            KDSUndoEntry.objects.filter(pk__in=stale).delete()
        return entry

    @staticmethod
    def undo_stack(terminal_id):
        return KDSUndoEntry.objects.filter(terminal_id=terminal_id).select_related("order")

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    @staticmethod
    def _ensure_in_kitchen(order):
        OrderService.ensure_mutable(order)
        if order.status not in KITCHEN_STATUSES:
            raise InvalidTransitionError(
                "Order",
                order.status,
                message=f"Order {order.order_number} is {order.status} and not on the kitchen display",
            )

    @staticmethod
    @transaction.atomic
    def advance_item(order_id, item_index, terminal_id, user=None, expected_version=None) -> Order:
        """
        Bump one line to its next kitchen status (FIRED -> PREPARING -> READY).

        Raises:
            InvalidTransitionError: If the item is already ready or the order left the kitchen
        """
        order = OrderService.get_locked_order(order_id, expected_version)
        KDSService._ensure_in_kitchen(order)

        item = OrderItemService.get_item(order, item_index)
        next_status = NEXT_KITCHEN_STATUS.get(item.status)
        if next_status is None:
            raise InvalidTransitionError(f"Item '{item.product_name}'", item.status)

        KDSService.push_undo(
            order,
            [item],
            terminal_id,
            f"{item.product_name} {item.status} -> {next_status}",
            station=item.station,
            user=user,
        )
        return OrderItemService.set_item_status(order.pk, item_index, next_status, user=user)

    @staticmethod
    @transaction.atomic
    def ready_all(order_id, station, confirm=False, terminal_id="", user=None, expected_version=None) -> Order:
        """
        Mark every unfinished line of ``station`` on one order READY.

        Bulk changes need an explicit confirmation from the terminal.

        Raises:
            ConfirmationRequiredError: If ``confirm`` is not set
        """
        if not confirm:
            raise ConfirmationRequiredError(
                "ready_all", message="Marking all items ready requires confirmation"
            )

        order = OrderService.get_locked_order(order_id, expected_version)
        KDSService._ensure_in_kitchen(order)

        items = [
            item
            for item in OrderItem.objects.filter(order=order, status__in=READY_ALL_SOURCE_STATUSES)
            if station_matches(item.station, station)
        ]
        if not items:
            logger.info(f"Ready all on {order.order_number} ({station}): nothing to do")
            return order

        KDSService.push_undo(
            order, items, terminal_id, f"Ready all ({station})", station=station, user=user
        )

        now = timezone.now()
        OrderItem.objects.filter(pk__in=[item.pk for item in items]).update(
            status=ItemStatus.READY, ready_at=now, updated_at=now
        )
        for item in items:
            item.status = ItemStatus.READY
            item.ready_at = now

        logger.info(f"Order {order.order_number}: {len(items)} item(s) marked ready at {station}")
        OrderService.refresh_status(order, user=user, action=f"Ready all ({station})")
        order_items_changed.send(sender=Order, order=order, items=items)
        return order

    @staticmethod
    @transaction.atomic
    def undo_last_action(terminal_id, user=None):
        """
        Revert the newest action recorded for ``terminal_id``.

        Item statuses, quantities and the order status are restored exactly
        as they were. Returns None when the terminal has nothing to undo.

        Raises:
            InvalidTransitionError: If the order has since left the kitchen
        """
        entry = (
            KDSUndoEntry.objects.select_for_update()
            .filter(terminal_id=terminal_id)
            .order_by("-id")
            .first()
        )
        if entry is None:
            return None

        order = OrderService.get_locked_order(entry.order_id)
        if order.is_terminal or order.status not in KITCHEN_STATUSES:
            raise InvalidTransitionError(
                "Order",
                order.status,
                message=f"Cannot undo '{entry.action}': order {order.order_number} is {order.status}",
            )

        restored = []
        for snapshot in entry.items:
            item = OrderItemService.get_item(order, snapshot["position"])
            item.status = snapshot["status"]
            item.quantity = snapshot["quantity"]
            item.ready_at = parse_datetime(snapshot["ready_at"]) if snapshot.get("ready_at") else None
            item.save(update_fields=["status", "quantity", "ready_at", "updated_at"])
            restored.append(item)

        old_status = order.status
        order.status = entry.order_status
        fields = ["status", *OrderService.recalculate(order)]
        order.commit(fields, user=user, action=f"Undo: {entry.action}")

        entry.delete()
        logger.info(
            f"Terminal {terminal_id} undid '{entry.action}' on {order.order_number} "
            f"({old_status} -> {order.status})"
        )

        if order.status != old_status:
            order_status_changed.send(
                sender=Order, order=order, old_status=old_status, new_status=order.status, user=user
            )
        order_items_changed.send(sender=Order, order=order, items=restored)
        return order
