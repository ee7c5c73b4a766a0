from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import DriverViewSet, RiderSettlementViewSet, RiderShiftViewSet

app_name = "delivery"

router = DefaultRouter()
router.register(r"shifts", RiderShiftViewSet, basename="rider-shift")
router.register(r"settlements", RiderSettlementViewSet, basename="rider-settlement")
router.register(r"", DriverViewSet, basename="driver")

urlpatterns = [
    path("", include(router.urls)),
]
