"""
Orders serializers package.
"""

from .order_serializers import (
    OrderItemSerializer,
    OrderSerializer,
    OrderItemInputSerializer,
    OrderCreateSerializer,
)
from .status_serializers import (
    VersionedActionSerializer,
    ItemEditSerializer,
    UpdateOrderItemsSerializer,
    SetItemStatusSerializer,
    VoidOrderSerializer,
    ApplyDiscountSerializer,
)

__all__ = [
    'OrderItemSerializer',
    'OrderSerializer',
    'OrderItemInputSerializer',
    'OrderCreateSerializer',
    'VersionedActionSerializer',
    'ItemEditSerializer',
    'UpdateOrderItemsSerializer',
    'SetItemStatusSerializer',
    'VoidOrderSerializer',
    'ApplyDiscountSerializer',
]
