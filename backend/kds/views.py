from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
import logging

from core_backend.base import TenantContextMixin
from core_backend.exceptions import error_response
from orders.serializers import OrderSerializer
from users.permissions import IsPosStaff
from .serializers import (
    KDSTicketSerializer,
    KDSUndoEntrySerializer,
    ReadyAllSerializer,
    TerminalActionSerializer,
    UndoSerializer,
)
from .services import KDSService

logger = logging.getLogger(__name__)


class KDSBaseView(TenantContextMixin, APIView):
    permission_classes = [IsPosStaff]

    def _order_response(self, order):
        order.refresh_from_db()
        return Response(OrderSerializer(order).data)


class StationQueueView(KDSBaseView):
    """
    Tickets for one station (``ALL`` for the expo screen).

    Only fired, preparing and ready orders appear, and each ticket lists
    just the lines the station still has to make.
    """

    def get(self, request: Request, station=None) -> Response:
        queue = KDSService.station_queue(station)
        return Response(KDSTicketSerializer(queue, many=True).data)


class AdvanceItemView(KDSBaseView):
    def post(self, request: Request, order_id=None, item_index=None) -> Response:
        serializer = TerminalActionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = KDSService.advance_item(
                order_id,
                item_index,
                serializer.validated_data["terminal_id"],
                user=request.user,
                expected_version=serializer.validated_data.get("expected_version"),
            )
        except ValueError as e:
            return error_response(e)
        return self._order_response(order)


class ReadyAllView(KDSBaseView):
    def post(self, request: Request, order_id=None) -> Response:
        serializer = ReadyAllSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        try:
            order = KDSService.ready_all(
                order_id,
                data["station"],
                confirm=data["confirm"],
                terminal_id=data["terminal_id"],
                user=request.user,
                expected_version=data.get("expected_version"),
            )
        except ValueError as e:
            return error_response(e)
        return self._order_response(order)


class UndoView(KDSBaseView):
    """GET lists the terminal's undo stack; POST reverts its newest entry."""

    def get(self, request: Request) -> Response:
        terminal_id = request.query_params.get("terminal_id")
        if not terminal_id:
            return Response({"error": "terminal_id is required"}, status=status.HTTP_400_BAD_REQUEST)
        entries = KDSService.undo_stack(terminal_id)
        return Response(KDSUndoEntrySerializer(entries, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = UndoSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            order = KDSService.undo_last_action(serializer.validated_data["terminal_id"], user=request.user)
        except ValueError as e:
            return error_response(e)
        if order is None:
            return Response({"detail": "Nothing to undo"}, status=status.HTTP_200_OK)
        return self._order_response(order)
