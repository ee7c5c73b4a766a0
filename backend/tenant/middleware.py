from .managers import set_current_tenant


class TenantContextMiddleware:
    """
    Guarantees every request starts and ends without a tenant context.

    The tenant itself is resolved from the authenticated user inside the
    DRF viewsets (see ``core_backend.base.TenantContextMixin``); this
    middleware only prevents a context from leaking between requests
    served by the same worker thread.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        set_current_tenant(None)
        request.tenant = None
        try:
            return self.get_response(request)
        finally:
            set_current_tenant(None)
