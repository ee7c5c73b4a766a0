from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
import logging

from core_backend.base import BaseViewSet
from core_backend.exceptions import error_response
from orders.serializers import OrderSerializer
from users.permissions import IsManagerOrHigher, IsPosStaff
from .models import Reservation, Table
from .serializers import (
    GuestCountSerializer,
    ReservationSerializer,
    SeatPartySerializer,
    TableSerializer,
)
from .services import FloorService

logger = logging.getLogger(__name__)


class TableViewSet(BaseViewSet):
    """
    Floor plan tables. Status is never written directly: seating, marking
    dirty and resetting go through the actions below.
    """
    queryset = Table.objects.all()
    serializer_class = TableSerializer
    filterset_fields = ["status", "section"]
    ordering = ["section", "name"]

    def get_permissions(self):
        if self.action in ("create", "update", "partial_update", "destroy"):
            return [IsManagerOrHigher()]
        return [IsPosStaff()]

    def perform_create(self, serializer):
        serializer.save(tenant=self.request.user.tenant)

    def list(self, request: Request, *args, **kwargs) -> Response:
        """Floor board: every table with its reservation hint."""
        board = FloorService.floor_board()
        data = []
        for entry in board:
            row = TableSerializer(entry["table"]).data
            reservation = entry["reserved_soon"]
            row["reserved_soon"] = ReservationSerializer(reservation).data if reservation else None
            data.append(row)
        return Response(data)

    @action(detail=True, methods=["post"], url_path="seat")
    def seat(self, request: Request, pk=None) -> Response:
        table = self.get_object()
        serializer = SeatPartySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            result = FloorService.seat_party(
                table.pk,
                data["guest_count"],
                waiter=request.user,
                order_id=data.get("order_id"),
                customer_name=data.get("customer_name", ""),
                reservation_id=data.get("reservation_id"),
            )
        except ValueError as e:
            return error_response(e)
        result.order.refresh_from_db()
        return Response(
            {
                "table": TableSerializer(result.table).data,
                "order": OrderSerializer(result.order).data,
                "warnings": result.warnings,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["post"], url_path="mark-dirty")
    def mark_dirty(self, request: Request, pk=None) -> Response:
        table = self.get_object()
        try:
            table = FloorService.mark_dirty(table.pk, user=request.user)
        except ValueError as e:
            return error_response(e)
        return Response(TableSerializer(table).data)

    @action(detail=True, methods=["post"], url_path="reset")
    def reset(self, request: Request, pk=None) -> Response:
        table = self.get_object()
        try:
            table = FloorService.reset_table(table.pk, user=request.user)
        except ValueError as e:
            return error_response(e)
        return Response(TableSerializer(table).data)


class ReservationViewSet(BaseViewSet):
    queryset = Reservation.objects.all()
    serializer_class = ReservationSerializer
    permission_classes = [IsPosStaff]
    filterset_fields = ["status", "table"]
    ordering = ["reservation_time"]

    def perform_create(self, serializer):
        serializer.save(tenant=self.request.user.tenant)

    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request: Request, pk=None) -> Response:
        reservation = self.get_object()
        reservation.status = Reservation.ReservationStatus.CANCELLED
        reservation.save(update_fields=["status"])
        return Response(ReservationSerializer(reservation).data)


class GuestCountActionsMixin:
    """Guest count action composed onto the order viewset."""

    @action(detail=True, methods=["post"], url_path="guests")
    def guests(self, request: Request, pk=None) -> Response:
        order = self.get_object()
        serializer = GuestCountSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            result = FloorService.update_guest_count(
                order.pk,
                serializer.validated_data["guest_count"],
                user=request.user,
                expected_version=serializer.validated_data.get("expected_version"),
            )
        except ValueError as e:
            return error_response(e)
        result.order.refresh_from_db()
        return Response({"order": OrderSerializer(result.order).data, "warnings": result.warnings})
