"""
Orders services package.

- OrderService: order lifecycle (create, fire, edit items, discount, void, pay guard)
- OrderItemService: item snapshots and targeted item status changes
- OrderCalculationService: subtotal, discount, service charge, tax and delivery fee
"""

from .order_service import OrderService, PAYMENT_PENDING_ITEMS_ERROR
from .item_service import OrderItemService
from .calculation_service import OrderCalculationService, OrderBreakdown

__all__ = [
    'OrderService',
    'OrderItemService',
    'OrderCalculationService',
    'OrderBreakdown',
    'PAYMENT_PENDING_ITEMS_ERROR',
]
