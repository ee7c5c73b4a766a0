from rest_framework import mixins, status
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import ReadOnlyBaseViewSet
from core_backend.exceptions import error_response
from delivery.views import DeliveryActionsMixin
from floor.views import GuestCountActionsMixin
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import OrderCreateSerializer, OrderSerializer
from orders.services import OrderService
from payments.views import PaymentActionsMixin
from users.permissions import IsPosStaff
from .status_actions import StatusActionsMixin

logger = logging.getLogger(__name__)


class OrderViewSet(
    StatusActionsMixin,
    GuestCountActionsMixin,
    DeliveryActionsMixin,
    PaymentActionsMixin,
    mixins.CreateModelMixin,
    ReadOnlyBaseViewSet,
):
    """
    ViewSet for orders.

    Orders are never updated or deleted through generic REST verbs: every
    change goes through a lifecycle action so the engine's guards apply.
    - Kitchen lifecycle (StatusActionsMixin)
    - Party size (GuestCountActionsMixin)
    - Dispatch and delivery handover (DeliveryActionsMixin)
    - Payment (PaymentActionsMixin)
    """
    queryset = Order.objects.all()
    serializer_class = OrderSerializer
    permission_classes = [IsPosStaff]
    filterset_class = OrderFilter
    search_fields = ['order_number', 'customer_name', 'customer_phone']
    ordering_fields = ['created_at', 'order_number', 'total']

    def get_queryset(self):
        return (
            super()
            .get_queryset()
            .select_related('table', 'assigned_driver__user', 'rider_shift')
            .prefetch_related('items')
        )

    def create(self, request: Request, *args, **kwargs) -> Response:
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            order = OrderService.create_order(
                tenant=request.user.tenant,
                order_type=data["order_type"],
                created_by=request.user,
                items=data.get("items", []),
                guest_count=data["guest_count"],
                customer_name=data["customer_name"],
                customer_phone=data["customer_phone"],
                delivery_address=data["delivery_address"],
                discount_type=data["discount_type"],
                discount_value=data["discount_value"],
                delivery_fee=data.get("delivery_fee"),
            )
        except ValueError as e:
            return error_response(e)
        order.refresh_from_db()
        return Response(OrderSerializer(order).data, status=status.HTTP_201_CREATED)
