from django.dispatch import receiver
import logging

from orders.signals import order_status_changed

logger = logging.getLogger(__name__)


@receiver(order_status_changed)
def sync_table_with_order(sender, order, old_status, new_status, **kwargs):
    """
    Keep the seated table in step with its order.
    Runs inside the order's transaction so a failure rolls both back.
    """
    if order.table_id is None:
        return

    from .services import FloorService

    FloorService.sync_with_order(order, new_status)
