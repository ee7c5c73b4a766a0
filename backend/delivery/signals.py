from django.dispatch import receiver
import logging

from orders.models import Order
from orders.signals import order_status_changed

logger = logging.getLogger(__name__)


@receiver(order_status_changed)
def release_rider_on_void(sender, order, old_status, new_status, **kwargs):
    """Free the rider when an order they were carrying is voided."""
    if new_status not in (Order.OrderStatus.VOID, Order.OrderStatus.CANCELLED):
        return
    if not order.assigned_driver_id:
        return

    from .services import DispatchService

    logger.info(f"Order {order.order_number} {new_status}; releasing rider")
    DispatchService.release_driver(order)
