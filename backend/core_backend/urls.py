"""
URL configuration for core_backend project.

Every engine app registers its own router; the order router owns
``/api/orders/`` and composes delivery and payment actions onto it.
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView


def health_check(request):
    """Simple health check endpoint that doesn't require authentication"""
    return JsonResponse({"status": "ok", "message": "Backend is running"})


urlpatterns = [
    path("api/health/", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/auth/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/", include("orders.urls")),
    path("api/kds/", include("kds.urls")),
    path("api/floor/", include("floor.urls")),
    path("api/riders/", include("delivery.urls")),
    path("api/payments/", include("payments.urls")),
    path("api/accounting/", include("accounting.urls")),
]
