from rest_framework import viewsets, filters
from django_filters.rest_framework import DjangoFilterBackend

from tenant.managers import set_current_tenant
from ..pagination import StandardPagination


class TenantContextMixin:
    """
    Establishes the tenant context for the authenticated user.

    JWT authentication runs inside DRF (after Django middleware), so the
    tenant can only be resolved once ``request.user`` is known. Every
    tenant-scoped manager relies on this context being set.
    """

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        tenant = getattr(request.user, 'tenant', None)
        if tenant is not None:
            set_current_tenant(tenant)
            request.tenant = tenant


class BaseViewSet(TenantContextMixin, viewsets.ModelViewSet):
    """
    Base ViewSet that provides standard configuration for all ModelViewSets.

    Features:
    - Tenant context from the authenticated user
    - Standard pagination, filtering, and ordering

    Usage:
        class TableViewSet(BaseViewSet):
            queryset = Table.objects.all()
            serializer_class = TableSerializer
    """

    pagination_class = StandardPagination

    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]

    ordering = ['-created_at']

    def get_queryset(self):
        """
        Re-evaluate the class-level queryset at request time.

        The class attribute is built at import time, before any tenant
        context exists, so the tenant filter must be applied again here.
        """
        if getattr(self, 'queryset', None) is not None:
            return self.queryset.model.objects.all()
        return super().get_queryset()


class ReadOnlyBaseViewSet(TenantContextMixin, viewsets.ReadOnlyModelViewSet):
    """Base ViewSet for read-only endpoints."""

    pagination_class = StandardPagination
    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    ordering = ['-created_at']

    def get_queryset(self):
        """Re-evaluate queryset at request time for tenant context"""
        if getattr(self, 'queryset', None) is not None:
            return self.queryset.model.objects.all()
        return super().get_queryset()
