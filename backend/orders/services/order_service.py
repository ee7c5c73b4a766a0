from django.db import transaction
from django.utils import timezone
import logging

from core_backend.exceptions import (
    ConcurrentModificationError,
    InsufficientInputError,
    InvalidTransitionError,
)
from orders.models import Order, OrderItem
from orders.signals import order_items_changed, order_status_changed
from orders.status import aggregate_status, all_items_ready, READY_ITEM_STATUSES
from payments.money import to_decimal
from .calculation_service import OrderCalculationService
from .item_service import OrderItemService

logger = logging.getLogger(__name__)

PAYMENT_PENDING_ITEMS_ERROR = "Order items pending, cannot process payment"


class OrderService:
    """Core service for order lifecycle management - creating, firing, editing, voiding orders."""

    # Valid status transitions for the order state machine. Kitchen statuses
    # may move back to FIRED/PREPARING when an undo or a newly added item
    # makes the aggregate regress.
    VALID_STATUS_TRANSITIONS = {
        Order.OrderStatus.DRAFT: [
            Order.OrderStatus.FIRED,
            Order.OrderStatus.CANCELLED,
        ],
        Order.OrderStatus.FIRED: [
            Order.OrderStatus.PREPARING,
            Order.OrderStatus.READY,
            Order.OrderStatus.OUT_FOR_DELIVERY,
            Order.OrderStatus.VOID,
        ],
        Order.OrderStatus.PREPARING: [
            Order.OrderStatus.FIRED,
            Order.OrderStatus.READY,
            Order.OrderStatus.OUT_FOR_DELIVERY,
            Order.OrderStatus.VOID,
        ],
        Order.OrderStatus.READY: [
            Order.OrderStatus.FIRED,
            Order.OrderStatus.PREPARING,
            Order.OrderStatus.OUT_FOR_DELIVERY,
            Order.OrderStatus.PAID,
            Order.OrderStatus.VOID,
        ],
        Order.OrderStatus.OUT_FOR_DELIVERY: [
            Order.OrderStatus.DELIVERED,
            Order.OrderStatus.VOID,
        ],
        Order.OrderStatus.DELIVERED: [],
        Order.OrderStatus.PAID: [],
        Order.OrderStatus.CANCELLED: [],
        Order.OrderStatus.VOID: [],
    }

    STATUS_TIMESTAMPS = {
        Order.OrderStatus.FIRED: "fired_at",
        Order.OrderStatus.READY: "ready_at",
        Order.OrderStatus.OUT_FOR_DELIVERY: "dispatched_at",
        Order.OrderStatus.DELIVERED: "delivered_at",
        Order.OrderStatus.PAID: "paid_at",
        Order.OrderStatus.CANCELLED: "cancelled_at",
        Order.OrderStatus.VOID: "cancelled_at",
    }

    # ------------------------------------------------------------------
    # Guards
    # ------------------------------------------------------------------

    @staticmethod
    def get_locked_order(order_id, expected_version=None) -> Order:
        """
        Fetch an order with a row lock.

        Args:
            order_id: Order primary key
            expected_version: Version the caller last saw; a mismatch is rejected

        Raises:
            Order.DoesNotExist: If the order is not visible to the current tenant
            ConcurrentModificationError: If ``expected_version`` is stale
        """
        order = Order.objects.select_for_update().get(pk=order_id)
        if expected_version is not None and int(expected_version) != order.version:
            raise ConcurrentModificationError(
                f"Order {order.order_number}",
                expected_version=expected_version,
                actual_version=order.version,
            )
        return order

    @staticmethod
    def ensure_mutable(order: Order) -> None:
        if order.is_terminal:
            raise InvalidTransitionError(
                "Order",
                order.status,
                message=f"Order {order.order_number} is {order.status} and can no longer be modified",
            )

    @staticmethod
    def ensure_payable(order: Order) -> None:
        """
        Payment guard.

        Dine-in and takeaway orders need every item ready; delivery orders
        need to have been handed over by the rider.
        """
        if order.is_terminal:
            raise InvalidTransitionError(
                "Order", order.status, message=f"Order {order.order_number} is already {order.status}"
            )
        if order.is_delivery:
            if order.status != Order.OrderStatus.DELIVERED:
                raise InvalidTransitionError(
                    "Order",
                    order.status,
                    message=f"Delivery order {order.order_number} must be DELIVERED before it can be settled",
                )
            return

        statuses = list(order.items.values_list("status", flat=True))
        if order.status != Order.OrderStatus.READY or not all_items_ready(statuses):
            raise InvalidTransitionError("Order", order.status, message=PAYMENT_PENDING_ITEMS_ERROR)

    # ------------------------------------------------------------------
    # State transitions
    # ------------------------------------------------------------------

    @staticmethod
    def transition(order: Order, new_status: str, user=None, action=None, fields=()) -> Order:
        """
        Validate and write a status change together with ``fields``.

        Caller must hold the order lock.
        """
        old_status = order.status
        if new_status != old_status and new_status not in OrderService.VALID_STATUS_TRANSITIONS.get(old_status, []):
            raise InvalidTransitionError("order", old_status, new_status)

        changed = set(fields)
        if new_status != old_status:
            order.status = new_status
            changed.add("status")
            timestamp_field = OrderService.STATUS_TIMESTAMPS.get(new_status)
            if timestamp_field and getattr(order, timestamp_field) is None:
                setattr(order, timestamp_field, timezone.now())
                changed.add(timestamp_field)

        order.commit(changed, user=user, action=action or f"{old_status} -> {new_status}")

        if new_status != old_status:
            logger.info(f"Order {order.order_number}: {old_status} -> {new_status}")
            order_status_changed.send(
                sender=Order, order=order, old_status=old_status, new_status=new_status, user=user
            )
        return order

    @staticmethod
    def refresh_status(order: Order, user=None, action=None) -> Order:
        """Recompute the aggregate status from the items and write it (always bumps the version)."""
        statuses = list(OrderItem.objects.filter(order=order).values_list("status", flat=True))
        new_status = aggregate_status(order.status, statuses)
        return OrderService.transition(order, new_status, user=user, action=action)

    @staticmethod
    def recalculate(order: Order) -> list:
        """Recompute the breakdown in memory; returns the fields to commit."""
        breakdown = OrderCalculationService.calculate_breakdown(order)
        return OrderCalculationService.apply_breakdown(order, breakdown)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @staticmethod
    @transaction.atomic
    def create_order(
        tenant,
        order_type: str = Order.OrderType.DINE_IN,
        created_by=None,
        items=None,
        guest_count: int = 1,
        customer_name: str = "",
        customer_phone: str = "",
        delivery_address: str = "",
        discount_type: str = Order.DiscountType.AMOUNT,
        discount_value=0,
        delivery_fee=None,
    ) -> Order:
        """
        Creates a new DRAFT order, optionally with its first PENDING items.

        Raises:
            ValueError: If tenant is missing or the order type is unknown
        """
        if tenant is None:
            raise ValueError("tenant parameter is required for creating orders")
        if order_type not in Order.OrderType.values:
            raise InsufficientInputError(f"'{order_type}' is not a valid order type.")
        if discount_type not in Order.DiscountType.values:
            raise InsufficientInputError(f"'{discount_type}' is not a valid discount type.")

        order = Order.objects.create(
            tenant=tenant,
            order_type=order_type,
            created_by=created_by,
            guest_count=max(1, int(guest_count or 1)),
            customer_name=customer_name or "",
            customer_phone=customer_phone or "",
            delivery_address=delivery_address or "",
            discount_type=discount_type,
            discount_value=to_decimal(discount_value or 0, "discount"),
            delivery_fee_override=to_decimal(delivery_fee, "delivery fee") if delivery_fee is not None else None,
        )
        OrderItemService.add_items(order, items)
        fields = OrderService.recalculate(order) + ["next_item_position"]
        order.commit(fields, user=created_by, action="Order created")
        logger.info(f"Created {order.order_type} order {order.order_number}")
        return order

    @staticmethod
    @transaction.atomic
    def fire_order(order_id, user=None, expected_version=None) -> Order:
        """
        Send every PENDING item to its kitchen station.

        Works for new drafts and for orders that received extra items after
        they were first fired.

        Raises:
            InvalidTransitionError: If the order is final, in delivery custody, or empty
            InsufficientInputError: If a delivery order lacks phone or address
        """
        order = OrderService.get_locked_order(order_id, expected_version)
        OrderService.ensure_mutable(order)
        if order.status in (Order.OrderStatus.OUT_FOR_DELIVERY, Order.OrderStatus.DELIVERED):
            raise InvalidTransitionError("Order", order.status, Order.OrderStatus.FIRED)

        if order.is_delivery:
            if not order.customer_phone.strip():
                raise InsufficientInputError("Customer phone is required for delivery orders")
            if not order.delivery_address.strip():
                raise InsufficientInputError("Delivery address is required for delivery orders")

        pending = list(OrderItem.objects.filter(order=order, status=OrderItem.ItemStatus.PENDING))
        if not OrderItem.objects.filter(order=order).exists():
            raise InvalidTransitionError("Order", order.status, message="Cannot fire an order with no items")
        if not pending and order.status != Order.OrderStatus.DRAFT:
            raise InvalidTransitionError("Order", order.status, message="No pending items to fire")

        for item in pending:
            OrderItemService.compare_and_set_status(item, OrderItem.ItemStatus.FIRED)

        if order.status == Order.OrderStatus.DRAFT:
            OrderService.transition(order, Order.OrderStatus.FIRED, user=user, action="Order fired")
        # Newly fired lines pull a READY order back to FIRED
        OrderService.refresh_status(order, user=user, action=f"Fired {len(pending)} item(s)")
        order_items_changed.send(sender=Order, order=order, items=pending)
        return order

    @staticmethod
    @transaction.atomic
    def update_order_items(order_id, items, user=None, expected_version=None) -> Order:
        """
        Apply item edits as discrete commands.

        Each entry in ``items`` is one of:
            {"product_id": ..., "quantity": 2, "notes": ""}          add a new line
            {"position": 3, "quantity": 1, "notes": "no onions"}     change a pending line
            {"position": 3, "remove": True}                          remove a pending line

        Lines that have been fired are immutable; editing or removing one is
        rejected and nothing is applied.
        """
        order = OrderService.get_locked_order(order_id, expected_version)
        OrderService.ensure_mutable(order)
        if order.status in (Order.OrderStatus.OUT_FOR_DELIVERY, Order.OrderStatus.DELIVERED):
            raise InvalidTransitionError(
                "Order", order.status, message=f"Order {order.order_number} has left the kitchen"
            )

        additions = []
        for entry in items or []:
            if entry.get("position") is None:
                if not entry.get("product_id"):
                    raise InsufficientInputError("New items need a product_id")
                additions.append(entry)
                continue

            item = OrderItemService.get_item(order, int(entry["position"]))
            wants_change = (
                entry.get("remove")
                or ("quantity" in entry and int(entry["quantity"]) != item.quantity)
                or ("notes" in entry and (entry["notes"] or "") != item.notes)
            )
            if not wants_change:
                continue
            if not item.is_pending:
                raise InvalidTransitionError(
                    f"Item '{item.product_name}'",
                    item.status,
                    message=f"Item '{item.product_name}' has been fired and can no longer be changed",
                )
            if entry.get("remove"):
                item.delete()
                continue
            if "quantity" in entry:
                if int(entry["quantity"]) < 1:
                    raise InsufficientInputError("Quantity must be at least 1; remove the item instead")
                item.quantity = int(entry["quantity"])
            if "notes" in entry:
                item.notes = entry["notes"] or ""
            item.save(update_fields=["quantity", "notes", "updated_at"])

        created = OrderItemService.add_items(order, additions)

        fields = OrderService.recalculate(order) + ["next_item_position"]
        order.commit(fields, user=user, action="Items updated")
        # New PENDING lines can pull a READY order back into the kitchen phase
        OrderService.refresh_status(order, user=user, action="Items updated")
        order_items_changed.send(sender=Order, order=order, items=created)
        return order

    @staticmethod
    @transaction.atomic
    def apply_discount(order_id, discount_type: str, discount_value, user=None, expected_version=None) -> Order:
        """Set the order-level discount and recompute totals."""
        order = OrderService.get_locked_order(order_id, expected_version)
        OrderService.ensure_mutable(order)
        if discount_type not in Order.DiscountType.values:
            raise InsufficientInputError(f"'{discount_type}' is not a valid discount type.")
        value = to_decimal(discount_value, "discount")
        if value < 0:
            raise InsufficientInputError("Discount cannot be negative")
        if order.status in (Order.OrderStatus.OUT_FOR_DELIVERY, Order.OrderStatus.DELIVERED):
            raise InvalidTransitionError(
                "Order", order.status, message="Cannot change the discount once the order is with a rider"
            )

        order.discount_type = discount_type
        order.discount_value = value
        fields = OrderService.recalculate(order) + ["discount_type", "discount_value"]
        order.commit(fields, user=user, action=f"Discount {discount_type} {value}")
        return order

    @staticmethod
    @transaction.atomic
    def void_order(order_id, reason: str, user=None, expected_version=None) -> Order:
        """
        Cancel an unpaid order.

        Drafts become CANCELLED; orders already sent to the kitchen become
        VOID. Table and rider are released by the status-change receivers.

        Raises:
            InsufficientInputError: If no reason is given
            InvalidTransitionError: If the order is paid, delivered or final
        """
        if not reason or not reason.strip():
            raise InsufficientInputError("A cancellation reason is required")

        order = OrderService.get_locked_order(order_id, expected_version)
        if order.is_terminal or order.status in (Order.OrderStatus.DELIVERED, Order.OrderStatus.PAID):
            raise InvalidTransitionError(
                "Order",
                order.status,
                message=f"Order {order.order_number} is {order.status}; only unpaid orders can be voided",
            )

        new_status = (
            Order.OrderStatus.CANCELLED
            if order.status == Order.OrderStatus.DRAFT
            else Order.OrderStatus.VOID
        )
        order.cancellation_reason = reason.strip()
        order.cancelled_by = user
        logger.warning(f"Order {order.order_number} {new_status.lower()} by {user}: {order.cancellation_reason}")
        return OrderService.transition(
            order,
            new_status,
            user=user,
            action=f"{new_status}: {order.cancellation_reason}",
            fields=["cancellation_reason", "cancelled_by"],
        )

    @staticmethod
    @transaction.atomic
    def mark_paid(order: Order, user=None) -> Order:
        """
        Move a locked, payable dine-in/takeaway order to PAID and serve its items.
        Called by the payment service inside its transaction.
        """
        OrderService.ensure_payable(order)
        OrderItem.objects.filter(order=order, status=OrderItem.ItemStatus.READY).update(
            status=OrderItem.ItemStatus.SERVED, updated_at=timezone.now()
        )
        return OrderService.transition(order, Order.OrderStatus.PAID, user=user, action="Payment received")

    @staticmethod
    def items_ready(order: Order) -> bool:
        statuses = OrderItem.objects.filter(order=order).values_list("status", flat=True)
        return all_items_ready(statuses)

    @staticmethod
    def unready_items(order: Order):
        return OrderItem.objects.filter(order=order).exclude(status__in=list(READY_ITEM_STATUSES))
