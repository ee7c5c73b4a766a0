from django.db import transaction
from django.utils import timezone
import logging

from core_backend.exceptions import (
    ConcurrentModificationError,
    InsufficientInputError,
    InvalidTransitionError,
)
from orders.models import Order, OrderItem
from orders.signals import order_items_changed
from orders.status import can_transition_item, READY_ITEM_STATUSES
from products.models import Product

logger = logging.getLogger(__name__)


class OrderItemService:
    """Service for order lines: building snapshots and moving item statuses."""

    @staticmethod
    def build_item(order: Order, product: Product, quantity: int, notes: str = "", position: int = 0) -> OrderItem:
        """Unsaved OrderItem carrying a snapshot of the product's menu data."""
        if quantity is None or int(quantity) < 1:
            raise InsufficientInputError(f"Quantity for '{product.name}' must be at least 1")
        if not product.is_available:
            raise InsufficientInputError(f"'{product.name}' is not available")

        return OrderItem(
            tenant=order.tenant,
            order=order,
            position=position,
            product=product,
            product_name=product.name,
            unit_price=product.price,
            station=product.station,
            category_name=product.category.name if product.category_id else "",
            pricing_strategy=product.pricing_strategy,
            quantity=int(quantity),
            notes=notes or "",
        )

    @staticmethod
    def add_items(order: Order, items_data) -> list:
        """
        Create PENDING lines for ``items_data`` (dicts with product_id, quantity, notes).

        Caller must hold the order lock and commit ``next_item_position``;
        indexes of removed lines are never handed out again.
        """
        items_data = list(items_data or [])
        if not items_data:
            return []

        product_ids = {str(entry["product_id"]) for entry in items_data}
        products = {
            str(product.id): product
            for product in Product.objects.filter(id__in=product_ids).select_related("category")
        }
        missing = product_ids - set(products)
        if missing:
            raise InsufficientInputError(f"Unknown menu item(s): {', '.join(sorted(missing))}")

        position = order.next_item_position
        created = []
        for entry in items_data:
            item = OrderItemService.build_item(
                order,
                products[str(entry["product_id"])],
                entry.get("quantity", 1),
                entry.get("notes", ""),
                position=position,
            )
            position += 1
            created.append(item)

        OrderItem.objects.bulk_create(created)
        order.next_item_position = position
        return created

    @staticmethod
    def get_item(order: Order, item_index: int) -> OrderItem:
        try:
            return OrderItem.objects.get(order=order, position=item_index)
        except OrderItem.DoesNotExist:
            raise InsufficientInputError(
                f"Order {order.order_number} has no item at index {item_index}"
            )

    @staticmethod
    def compare_and_set_status(item: OrderItem, next_status: str) -> None:
        """
        Move one item to ``next_status`` only if it still has the status we read.

        This is the targeted update kitchen terminals rely on: a concurrent
        edit to the same line makes the update match zero rows instead of
        silently overwriting it.
        """
        now = timezone.now()
        values = {"status": next_status, "updated_at": now}
        if next_status == OrderItem.ItemStatus.FIRED:
            values["fired_at"] = now
        if next_status in READY_ITEM_STATUSES and item.ready_at is None:
            values["ready_at"] = now

        rows = OrderItem.objects.filter(pk=item.pk, status=item.status).update(**values)
        if rows == 0:
            raise ConcurrentModificationError(f"Item {item.position} of order {item.order_id}")

        for field, value in values.items():
            setattr(item, field, value)

    @staticmethod
    @transaction.atomic
    def set_item_status(order_id, item_index: int, next_status: str, user=None, expected_version=None) -> Order:
        """
        Move a single item forward and recompute the order status.

        Raises:
            InvalidTransitionError: If the move is backwards, or the order is final
            ConcurrentModificationError: If the order or item changed underneath us
        """
        from .order_service import OrderService

        if next_status not in OrderItem.ItemStatus.values:
            raise InsufficientInputError(f"'{next_status}' is not a valid item status.")

        order = OrderService.get_locked_order(order_id, expected_version)
        OrderService.ensure_mutable(order)
        if order.status == Order.OrderStatus.DRAFT:
            raise InvalidTransitionError(
                "Order", order.status, message="Fire the order before changing item statuses"
            )
        if next_status == OrderItem.ItemStatus.PENDING:
            raise InvalidTransitionError("Item", "fired", next_status)

        item = OrderItemService.get_item(order, item_index)
        if not can_transition_item(item.status, next_status):
            raise InvalidTransitionError(f"Item '{item.product_name}'", item.status, next_status)

        old_status = item.status
        OrderItemService.compare_and_set_status(item, next_status)
        logger.info(
            f"Order {order.order_number} item {item_index} ({item.product_name}): {old_status} -> {next_status}"
        )

        action = f"Item {item.product_name} {old_status} -> {next_status}"
        OrderService.refresh_status(order, user=user, action=action)
        order_items_changed.send(sender=Order, order=order, items=[item])
        return order
