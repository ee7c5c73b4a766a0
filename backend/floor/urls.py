from django.urls import path, include
from rest_framework import routers
from .views import ReservationViewSet, TableViewSet

app_name = "floor"

router = routers.DefaultRouter()
router.register(r"tables", TableViewSet, basename="table")
router.register(r"reservations", ReservationViewSet, basename="reservation")

urlpatterns = [
    path("", include(router.urls)),
]
