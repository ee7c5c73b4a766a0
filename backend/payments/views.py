from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import ReadOnlyBaseViewSet
from core_backend.exceptions import error_response
from orders.serializers import OrderSerializer
from users.permissions import IsCashierOrHigher, IsPosStaff
from .models import PaymentTransaction
from .serializers import PaymentTransactionSerializer, ProcessPaymentSerializer
from .services import PaymentService

logger = logging.getLogger(__name__)


class PaymentActionsMixin:
    """Payment action composed onto the order viewset."""

    @action(detail=True, methods=["post"], url_path="pay", permission_classes=[IsCashierOrHigher])
    def pay(self, request: Request, pk=None) -> Response:
        """Takes the full payment for a ready dine-in or takeaway order."""
        order = self.get_object()
        serializer = ProcessPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            payment_transaction = PaymentService.process_payment(
                order.pk,
                data["method"],
                processed_by=request.user,
                tendered=data.get("tendered"),
                reference=data.get("reference", ""),
                expected_version=data.get("expected_version"),
            )
        except ValueError as e:
            return error_response(e)

        order.refresh_from_db()
        return Response(
            {
                "order": OrderSerializer(order).data,
                "transaction": PaymentTransactionSerializer(payment_transaction).data,
            },
            status=status.HTTP_201_CREATED,
        )


class PaymentTransactionViewSet(ReadOnlyBaseViewSet):
    """Read-only history of payments taken."""

    queryset = PaymentTransaction.objects.all()
    serializer_class = PaymentTransactionSerializer
    permission_classes = [IsPosStaff]
    filterset_fields = ["method", "drawer_session", "order"]

    def get_queryset(self):
        return super().get_queryset().select_related("order")
