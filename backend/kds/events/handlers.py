"""
Receivers that keep kitchen displays in step with order changes.
"""

from django.dispatch import receiver
import logging

from orders.signals import order_items_changed, order_status_changed
from .publishers import KDSEventPublisher

logger = logging.getLogger(__name__)


def _stations_for(order, items=None):
    if items is None:
        return order.items.values_list("station", flat=True)
    return [item.station for item in items]


@receiver(order_status_changed)
def handle_order_status_changed(sender, order, old_status, new_status, **kwargs):
    KDSEventPublisher.order_changed(order, _stations_for(order), f"{old_status} -> {new_status}")


@receiver(order_items_changed)
def handle_order_items_changed(sender, order, items=None, **kwargs):
    KDSEventPublisher.order_changed(order, _stations_for(order, items), "items_changed")
