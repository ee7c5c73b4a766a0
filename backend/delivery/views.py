from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import BaseViewSet, ReadOnlyBaseViewSet
from core_backend.exceptions import error_response
from orders.serializers import OrderSerializer, VersionedActionSerializer
from users.permissions import IsCashierOrHigher, IsManagerOrHigher, IsPosStaff
from .models import Driver, RiderSettlement, RiderShift
from .serializers import (
    AssignDriverSerializer,
    CloseShiftSerializer,
    DriverSerializer,
    OpenShiftSerializer,
    PendingSettlementSerializer,
    RiderSettlementSerializer,
    RiderShiftSerializer,
    SettleRiderSerializer,
)
from .services import DispatchService, SettlementService, ShiftService

logger = logging.getLogger(__name__)


class DriverViewSet(BaseViewSet):
    """
    Riders, their cash and their shifts.

    Cash figures are never edited directly; they move only through
    deliveries, settlements and shift floats.
    """
    queryset = Driver.objects.all()
    serializer_class = DriverSerializer
    filterset_fields = ["status", "is_active"]
    search_fields = ["user__first_name", "user__last_name", "user__email", "phone"]
    ordering = ["user__first_name"]

    def get_permissions(self):
        if self.action in ("create", "update", "partial_update", "destroy"):
            return [IsManagerOrHigher()]
        if self.action in ("settle", "open_shift"):
            return [IsCashierOrHigher()]
        return [IsPosStaff()]

    def get_queryset(self):
        return super().get_queryset().select_related("user")

    def perform_create(self, serializer):
        serializer.save(tenant=self.request.user.tenant)

    @action(detail=True, methods=["get"], url_path="pending-settlement")
    def pending_settlement(self, request: Request, pk=None) -> Response:
        driver = self.get_object()
        pending = SettlementService.pending_settlement(driver.pk)
        return Response(PendingSettlementSerializer(pending).data)

    @action(detail=True, methods=["post"], url_path="settle")
    def settle(self, request: Request, pk=None) -> Response:
        """Settles delivered orders (all pending by default) against the cash handed in."""
        driver = self.get_object()
        serializer = SettleRiderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            settlement = SettlementService.settle_rider(
                driver.pk,
                data["amount_collected"],
                processed_by=request.user,
                order_ids=data.get("order_ids"),
                include_float=data["include_float"],
                notes=data["notes"],
            )
        except ValueError as e:
            return error_response(e)
        return Response(RiderSettlementSerializer(settlement).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="settlements")
    def settlements(self, request: Request, pk=None) -> Response:
        driver = self.get_object()
        history = SettlementService.settlement_history(driver.pk)
        return Response(RiderSettlementSerializer(history, many=True).data)

    @action(detail=True, methods=["post"], url_path="shift/open")
    def open_shift(self, request: Request, pk=None) -> Response:
        driver = self.get_object()
        serializer = OpenShiftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            shift = ShiftService.open_shift(
                driver.pk,
                serializer.validated_data["opening_float"],
                opened_by=request.user,
                notes=serializer.validated_data["notes"],
            )
        except ValueError as e:
            return error_response(e)
        return Response(RiderShiftSerializer(shift).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="active-shift")
    def active_shift(self, request: Request, pk=None) -> Response:
        driver = self.get_object()
        shift = ShiftService.get_active_shift(driver.pk)
        if shift is None:
            return Response({"shift": None})
        metrics = ShiftService.shift_metrics(shift.pk)
        metrics["shift"] = RiderShiftSerializer(shift).data
        return Response(metrics)


class RiderShiftViewSet(ReadOnlyBaseViewSet):
    queryset = RiderShift.objects.all()
    serializer_class = RiderShiftSerializer
    permission_classes = [IsPosStaff]
    filterset_fields = ["driver", "status"]
    ordering = ["-opened_at"]

    @action(detail=True, methods=["post"], url_path="close", permission_classes=[IsCashierOrHigher])
    def close(self, request: Request, pk=None) -> Response:
        """Closes the shift, settling everything the rider still owes."""
        shift = self.get_object()
        serializer = CloseShiftSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            shift = ShiftService.close_shift(
                shift.pk,
                serializer.validated_data["closing_cash"],
                closed_by=request.user,
                notes=serializer.validated_data["notes"],
            )
        except ValueError as e:
            return error_response(e)
        return Response(RiderShiftSerializer(shift).data)


class RiderSettlementViewSet(ReadOnlyBaseViewSet):
    queryset = RiderSettlement.objects.all()
    serializer_class = RiderSettlementSerializer
    permission_classes = [IsPosStaff]
    filterset_fields = ["driver", "has_discrepancy"]

    def get_queryset(self):
        return super().get_queryset().prefetch_related("settled_orders__order")


class DeliveryActionsMixin:
    """Dispatch actions composed onto the order viewset."""

    @action(detail=True, methods=["post"], url_path="assign-driver")
    def assign_driver(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        serializer = AssignDriverSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = DispatchService.assign_driver(
                order.pk,
                serializer.validated_data["driver_id"],
                user=request.user,
                expected_version=serializer.validated_data.get("expected_version"),
            )
        except ValueError as e:
            return error_response(e)
        order.refresh_from_db()
        return Response(OrderSerializer(order).data)

    @action(detail=True, methods=["post"], url_path="complete-delivery")
    def complete_delivery(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        serializer = VersionedActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = DispatchService.complete_delivery(
                order.pk,
                user=request.user,
                expected_version=serializer.validated_data.get("expected_version"),
            )
        except ValueError as e:
            return error_response(e)
        order.refresh_from_db()
        return Response(OrderSerializer(order).data)
