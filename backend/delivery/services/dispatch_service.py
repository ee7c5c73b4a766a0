from django.db import transaction
from django.db.models import F
from django.utils import timezone
import logging

from core_backend.exceptions import DispatchError, InvalidTransitionError
from orders.models import Order, OrderItem
from orders.services import OrderService
from settings.config import get_restaurant_settings
from delivery.models import Driver

logger = logging.getLogger(__name__)

DISPATCHABLE_STATUSES = (
    Order.OrderStatus.FIRED,
    Order.OrderStatus.PREPARING,
    Order.OrderStatus.READY,
)


class DispatchService:
    """Custody of delivery orders: handing them to a rider and taking the handover back."""

    @staticmethod
    def _get_locked_driver(driver_id) -> Driver:
        return Driver.objects.select_for_update().select_related("user").get(pk=driver_id)

    @staticmethod
    def _orders_out(driver: Driver, exclude=None):
        queryset = Order.objects.filter(
            assigned_driver=driver, status=Order.OrderStatus.OUT_FOR_DELIVERY
        )
        if exclude is not None:
            queryset = queryset.exclude(pk=exclude.pk)
        return queryset

    @staticmethod
    def _set_driver_status(driver: Driver, new_status: str):
        if driver.status != new_status:
            logger.info(f"Rider {driver}: {driver.status} -> {new_status}")
            driver.status = new_status
            driver.save(update_fields=["status"])

    @staticmethod
    @transaction.atomic
    def assign_driver(order_id, driver_id, user=None, expected_version=None) -> Order:
        """
        Hand a fired delivery order to a rider. This is the only way an order
        reaches OUT_FOR_DELIVERY.

        Raises:
            DispatchError: If the order is not a delivery order, is already
                assigned, or the rider cannot take it
            InvalidTransitionError: If the order has not been fired or is final
        """
        order = OrderService.get_locked_order(order_id, expected_version)
        if not order.is_delivery:
            raise DispatchError(f"Order {order.order_number} is not a delivery order")
        OrderService.ensure_mutable(order)
        if order.assigned_driver_id:
            raise DispatchError(f"Order {order.order_number} is already assigned to a rider")
        if order.status not in DISPATCHABLE_STATUSES:
            raise InvalidTransitionError("Order", order.status, Order.OrderStatus.OUT_FOR_DELIVERY)

        driver = DispatchService._get_locked_driver(driver_id)
        if not driver.is_active:
            raise DispatchError(f"Rider {driver} is inactive")

        shift = driver.active_shift
        if get_restaurant_settings(order.tenant).require_rider_shift:
            if shift is None:
                raise DispatchError("Rider must have an active open shift to receive assignments")
        elif driver.status == Driver.DriverStatus.OFF_DUTY:
            raise DispatchError(f"Rider {driver} is off duty")

        order.assigned_driver = driver
        order.rider_shift = shift
        OrderService.transition(
            order,
            Order.OrderStatus.OUT_FOR_DELIVERY,
            user=user,
            action=f"Assigned to rider {driver}",
            fields=["assigned_driver", "rider_shift"],
        )

        Driver.objects.filter(pk=driver.pk).update(total_deliveries=F("total_deliveries") + 1)
        DispatchService._set_driver_status(driver, Driver.DriverStatus.BUSY)
        return order

    @staticmethod
    @transaction.atomic
    def complete_delivery(order_id, user=None, expected_version=None) -> Order:
        """
        Rider handed the order over and collected the cash. The order total
        becomes the rider's liability until it is settled.

        Raises:
            InvalidTransitionError: If the order is not OUT_FOR_DELIVERY
            DispatchError: If the order has no rider
        """
        from accounting.models import LedgerEntry
        from accounting.services import AccountingService

        order = OrderService.get_locked_order(order_id, expected_version)
        if order.status != Order.OrderStatus.OUT_FOR_DELIVERY:
            raise InvalidTransitionError("Order", order.status, Order.OrderStatus.DELIVERED)
        if not order.assigned_driver_id:
            raise DispatchError(f"Order {order.order_number} is not assigned to a rider")

        driver = DispatchService._get_locked_driver(order.assigned_driver_id)

        OrderItem.objects.filter(order=order).update(
            status=OrderItem.ItemStatus.DELIVERED, updated_at=timezone.now()
        )
        OrderService.transition(
            order, Order.OrderStatus.DELIVERED, user=user, action=f"Delivered by {driver}"
        )

        Driver.objects.filter(pk=driver.pk).update(cash_in_hand=F("cash_in_hand") + order.total)
        AccountingService.record_entry(
            order.tenant,
            LedgerEntry.Account.RIDER,
            LedgerEntry.TransactionType.DEBIT,
            LedgerEntry.ReferenceType.RIDER_LIABILITY,
            order.total,
            reference_id=order.pk,
            driver=driver,
            description=f"Collected for {order.order_number}",
            processed_by=user,
        )

        if not DispatchService._orders_out(driver, exclude=order).exists():
            DispatchService._set_driver_status(driver, Driver.DriverStatus.AVAILABLE)
        logger.info(f"Order {order.order_number} delivered by {driver}; {order.total} added to cash in hand")
        return order

    @staticmethod
    def release_driver(order: Order):
        """
        Called when an assigned order is voided: the rider brings the food
        back and is free again once nothing else is out.
        """
        driver = Driver.objects.select_for_update().filter(pk=order.assigned_driver_id).first()
        if driver is None or driver.status != Driver.DriverStatus.BUSY:
            return None
        if DispatchService._orders_out(driver, exclude=order).exists():
            return driver
        DispatchService._set_driver_status(driver, Driver.DriverStatus.AVAILABLE)
        return driver
