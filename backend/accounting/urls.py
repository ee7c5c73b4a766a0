from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import CashDrawerSessionViewSet, LedgerEntryViewSet, RiderBalanceView

app_name = "accounting"

router = DefaultRouter()
router.register(r"sessions", CashDrawerSessionViewSet, basename="drawer-session")
router.register(r"ledger", LedgerEntryViewSet, basename="ledger-entry")

urlpatterns = [
    path("riders/<uuid:driver_id>/balance/", RiderBalanceView.as_view(), name="rider-balance"),
    path("", include(router.urls)),
]
