"""
Core backend base components.

Shared viewset classes used by every engine app so tenant context,
pagination and filtering are configured the same way everywhere.
"""

from .viewsets import TenantContextMixin, BaseViewSet, ReadOnlyBaseViewSet

__all__ = [
    'TenantContextMixin',
    'BaseViewSet',
    'ReadOnlyBaseViewSet',
]
