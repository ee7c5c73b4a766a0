"""
Orders views package - the order viewset composed from action mixins.
"""

from .order_viewset import OrderViewSet

__all__ = [
    'OrderViewSet',
]
