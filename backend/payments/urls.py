from django.urls import path, include
from rest_framework import routers
from .views import PaymentTransactionViewSet

app_name = "payments"

router = routers.DefaultRouter()
router.register(r"transactions", PaymentTransactionViewSet, basename="payment-transaction")

urlpatterns = [
    path("", include(router.urls)),
]
