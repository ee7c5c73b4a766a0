from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.exceptions import error_response
from orders.serializers import (
    ApplyDiscountSerializer,
    OrderSerializer,
    SetItemStatusSerializer,
    UpdateOrderItemsSerializer,
    VersionedActionSerializer,
    VoidOrderSerializer,
)
from orders.services import OrderService, OrderItemService

logger = logging.getLogger(__name__)


class StatusActionsMixin:
    """
    Mixin for order lifecycle actions

    This mixin provides action methods for OrderViewSet.
    """

    def _order_response(self, order):
        order.refresh_from_db()
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="fire")
    def fire(self, request: Request, pk=None) -> Response:
        """Sends every pending item of the order to its kitchen station."""
        order = self.get_object()
        serializer = VersionedActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = OrderService.fire_order(
                order.pk,
                user=request.user,
                expected_version=serializer.validated_data.get("expected_version"),
            )
        except ValueError as e:
            return error_response(e)
        return self._order_response(order)

    @action(detail=True, methods=["put", "patch"], url_path="items")
    def update_items(self, request: Request, pk=None) -> Response:
        """Adds, edits or removes pending items."""
        order = self.get_object()
        serializer = UpdateOrderItemsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = OrderService.update_order_items(
                order.pk,
                serializer.validated_data["items"],
                user=request.user,
                expected_version=serializer.validated_data.get("expected_version"),
            )
        except ValueError as e:
            return error_response(e)
        return self._order_response(order)

    @action(detail=True, methods=["post"], url_path=r"items/(?P<item_index>\d+)/status")
    def set_item_status(self, request: Request, pk=None, item_index=None) -> Response:
        """Moves one item forward (e.g. PREPARING -> READY)."""
        order = self.get_object()
        serializer = SetItemStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = OrderItemService.set_item_status(
                order.pk,
                int(item_index),
                serializer.validated_data["status"],
                user=request.user,
                expected_version=serializer.validated_data.get("expected_version"),
            )
        except ValueError as e:
            return error_response(e)
        return self._order_response(order)

    @action(detail=True, methods=["post"], url_path="discount")
    def discount(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        serializer = ApplyDiscountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            order = OrderService.apply_discount(
                order.pk,
                data["discount_type"],
                data["discount_value"],
                user=request.user,
                expected_version=data.get("expected_version"),
            )
        except ValueError as e:
            return error_response(e)
        return self._order_response(order)

    @action(detail=True, methods=["post"], url_path="void")
    def void(self, request: Request, pk=None) -> Response:
        """
        Voids an unpaid order. A reason is mandatory.

        Returns:
        - 200: Order voided (or cancelled, for drafts)
        - 400: Missing reason or order already paid/delivered
        """
        order = self.get_object()
        serializer = VoidOrderSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"error": "A cancellation reason is required", "details": serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        try:
            order = OrderService.void_order(
                order.pk,
                serializer.validated_data["reason"],
                user=request.user,
                expected_version=serializer.validated_data.get("expected_version"),
            )
        except ValueError as e:
            return error_response(e)
        return self._order_response(order)
