from dataclasses import dataclass, field
from datetime import timedelta
from django.db import transaction
from django.utils import timezone
import logging

from core_backend.exceptions import InsufficientInputError, InvalidTransitionError, SeatingError
from orders.models import Order
from orders.services import OrderService
from settings.config import get_restaurant_settings
from .events.publishers import FloorEventPublisher
from .models import Reservation, Table

logger = logging.getLogger(__name__)

OVER_CAPACITY = "OVER_CAPACITY"
RESERVED_SOON = "RESERVED_SOON"


@dataclass
class SeatingResult:
    table: Table
    order: Order
    warnings: list = field(default_factory=list)


class FloorService:
    """Binds table occupancy to the order seated at it."""

    VALID_TABLE_TRANSITIONS = {
        Table.TableStatus.AVAILABLE: [Table.TableStatus.OCCUPIED],
        Table.TableStatus.OCCUPIED: [
            Table.TableStatus.PAYMENT_PENDING,
            Table.TableStatus.DIRTY,
            Table.TableStatus.AVAILABLE,
        ],
        Table.TableStatus.PAYMENT_PENDING: [
            Table.TableStatus.OCCUPIED,
            Table.TableStatus.DIRTY,
            Table.TableStatus.AVAILABLE,
        ],
        Table.TableStatus.DIRTY: [Table.TableStatus.AVAILABLE],
    }

    @staticmethod
    def _set_status(table: Table, new_status: str, fields=()):
        old_status = table.status
        if new_status != old_status and new_status not in FloorService.VALID_TABLE_TRANSITIONS.get(old_status, []):
            raise InvalidTransitionError(f"Table {table.name}", old_status, new_status)

        table.status = new_status
        table.last_status_change = timezone.now()
        table.save(update_fields=["status", "last_status_change", *fields])
        logger.info(f"Table {table.name}: {old_status} -> {new_status}")
        FloorEventPublisher.table_changed(table)
        return table

    @staticmethod
    def _capacity_warnings(table: Table, guest_count: int) -> list:
        if table and guest_count > table.capacity:
            return [f"{OVER_CAPACITY}: {guest_count} guests at {table.name} (capacity {table.capacity})"]
        return []

    @staticmethod
    @transaction.atomic
    def seat_party(table_id, guest_count: int, waiter=None, order_id=None, customer_name: str = "", reservation_id=None) -> SeatingResult:
        """
        Seat a party: bind a dine-in order (new or existing draft) to a free table.

        Guest counts above capacity are allowed; the caller gets an
        OVER_CAPACITY warning to confirm the squeeze with the waiter.

        Raises:
            SeatingError: If the table is not AVAILABLE or another order claims it
        """
        guest_count = int(guest_count or 0)
        if guest_count < 1:
            raise InsufficientInputError("Guest count must be at least 1")

        table = Table.objects.select_for_update().get(pk=table_id)
        if table.status != Table.TableStatus.AVAILABLE or table.active_order_id:
            raise SeatingError(f"Table {table.name} is {table.status} and cannot be seated")

        claimed = (
            Order.objects.filter(table=table)
            .exclude(status__in=[*Order.FINAL_STATUSES, Order.OrderStatus.DELIVERED])
            .exclude(pk=order_id)
            .exists()
        )
        if claimed:
            raise SeatingError(f"Table {table.name} is still claimed by an open order")

        if order_id:
            order = OrderService.get_locked_order(order_id)
            OrderService.ensure_mutable(order)
            if order.order_type != Order.OrderType.DINE_IN:
                raise SeatingError(f"Order {order.order_number} is not a dine-in order")
            if order.status != Order.OrderStatus.DRAFT:
                raise SeatingError(f"Order {order.order_number} is {order.status}; only draft orders can be seated")
            if order.table_id and order.table_id != table.pk:
                raise SeatingError(f"Order {order.order_number} is already seated at another table")
        else:
            order = OrderService.create_order(
                tenant=table.tenant,
                order_type=Order.OrderType.DINE_IN,
                created_by=waiter,
                guest_count=guest_count,
                customer_name=customer_name,
            )

        order.table = table
        order.guest_count = guest_count
        if customer_name:
            order.customer_name = customer_name
        fields = OrderService.recalculate(order) + ["table", "guest_count", "customer_name"]
        order.commit(fields, user=waiter, action=f"Seated at {table.name}")

        table.active_order = order
        table.server = waiter
        FloorService._set_status(table, Table.TableStatus.OCCUPIED, fields=["active_order", "server"])
        if order.status == Order.OrderStatus.READY:
            FloorService._set_status(table, Table.TableStatus.PAYMENT_PENDING)

        warnings = FloorService._capacity_warnings(table, guest_count)
        if reservation_id:
            Reservation.objects.filter(pk=reservation_id).update(
                status=Reservation.ReservationStatus.SEATED, table=table
            )
        else:
            upcoming = FloorService.upcoming_reservation(table)
            if upcoming is not None:
                warnings.append(
                    f"{RESERVED_SOON}: {upcoming.customer_name} at {upcoming.reservation_time:%H:%M}"
                )

        for warning in warnings:
            logger.warning(f"Seating order {order.order_number}: {warning}")
        return SeatingResult(table=table, order=order, warnings=warnings)

    @staticmethod
    @transaction.atomic
    def update_guest_count(order_id, guest_count: int, user=None, expected_version=None) -> SeatingResult:
        """Change the party size; per-head items are repriced."""
        guest_count = int(guest_count or 0)
        if guest_count < 1:
            raise InsufficientInputError("Guest count must be at least 1")

        order = OrderService.get_locked_order(order_id, expected_version)
        OrderService.ensure_mutable(order)
        previous = order.guest_count
        order.guest_count = guest_count
        fields = OrderService.recalculate(order) + ["guest_count"]
        order.commit(fields, user=user, action=f"Guests {previous} -> {guest_count}")

        table = order.table
        return SeatingResult(
            table=table,
            order=order,
            warnings=FloorService._capacity_warnings(table, guest_count),
        )

    @staticmethod
    def sync_with_order(order: Order, new_status: str):
        """
        Follow the active order's status.

        READY puts the table in PAYMENT_PENDING (the only way in); a
        regression to the kitchen phase puts it back to OCCUPIED; a cancelled
        or voided order releases the table.
        """
        table = Table.objects.select_for_update().filter(active_order=order).first()
        if table is None:
            return None

        if new_status == Order.OrderStatus.READY and table.status == Table.TableStatus.OCCUPIED:
            return FloorService._set_status(table, Table.TableStatus.PAYMENT_PENDING)

        if (
            new_status in (Order.OrderStatus.FIRED, Order.OrderStatus.PREPARING)
            and table.status == Table.TableStatus.PAYMENT_PENDING
        ):
            return FloorService._set_status(table, Table.TableStatus.OCCUPIED)

        if new_status in (Order.OrderStatus.CANCELLED, Order.OrderStatus.VOID):
            table.active_order = None
            table.server = None
            logger.info(f"Releasing table {table.name} after order {order.order_number} {new_status}")
            return FloorService._set_status(table, Table.TableStatus.AVAILABLE, fields=["active_order", "server"])

        return table

    @staticmethod
    @transaction.atomic
    def mark_dirty(table_id, user=None) -> Table:
        """
        Operator declares the table dirty once the bill is settled.

        Raises:
            SeatingError: If the seated order has not been paid
        """
        table = Table.objects.select_for_update().get(pk=table_id)
        order = table.active_order
        if order is not None and order.status != Order.OrderStatus.PAID:
            raise SeatingError(
                f"Table {table.name} still has unpaid order {order.order_number} ({order.status})"
            )
        if table.status not in (Table.TableStatus.OCCUPIED, Table.TableStatus.PAYMENT_PENDING):
            raise InvalidTransitionError(f"Table {table.name}", table.status, Table.TableStatus.DIRTY)

        table.active_order = None
        return FloorService._set_status(table, Table.TableStatus.DIRTY, fields=["active_order"])

    @staticmethod
    @transaction.atomic
    def reset_table(table_id, user=None) -> Table:
        """DIRTY -> AVAILABLE after the table has been cleaned."""
        table = Table.objects.select_for_update().get(pk=table_id)
        if table.status != Table.TableStatus.DIRTY:
            raise InvalidTransitionError(f"Table {table.name}", table.status, Table.TableStatus.AVAILABLE)
        table.server = None
        return FloorService._set_status(table, Table.TableStatus.AVAILABLE, fields=["server"])

    # ------------------------------------------------------------------
    # Reservations (advisory)
    # ------------------------------------------------------------------

    @staticmethod
    def upcoming_reservation(table: Table, at=None):
        """
        CONFIRMED reservation whose window covers ``at``.

        The window opens ``buffer`` minutes before the booking and closes
        when the booked duration ends.
        """
        at = at or timezone.now()
        default_buffer = get_restaurant_settings(table.tenant).reservation_buffer_minutes
        candidates = Reservation.objects.filter(
            table=table,
            status=Reservation.ReservationStatus.CONFIRMED,
            reservation_time__range=(at - timedelta(days=1), at + timedelta(days=1)),
        ).order_by("reservation_time")

        for reservation in candidates:
            buffer = reservation.buffer_minutes if reservation.buffer_minutes is not None else default_buffer
            window_start = reservation.reservation_time - timedelta(minutes=buffer)
            window_end = reservation.reservation_time + timedelta(minutes=reservation.duration_minutes)
            if window_start <= at <= window_end:
                return reservation
        return None

    @staticmethod
    def create_reservation(tenant, customer_name, reservation_time, party_size=2, table_id=None, **extra) -> Reservation:
        if not customer_name:
            raise InsufficientInputError("Customer name is required for a reservation")
        table = Table.objects.get(pk=table_id) if table_id else None
        reservation = Reservation.objects.create(
            tenant=tenant,
            table=table,
            customer_name=customer_name,
            reservation_time=reservation_time,
            party_size=party_size,
            **extra,
        )
        logger.info(f"Reservation created: {reservation}")
        return reservation

    @staticmethod
    def floor_board(at=None) -> list:
        """Tables with their reservation hint for the floor plan."""
        board = []
        for table in Table.objects.select_related("active_order", "server"):
            upcoming = FloorService.upcoming_reservation(table, at)
            board.append({"table": table, "reserved_soon": upcoming})
        return board
