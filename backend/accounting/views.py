from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView
import logging

from core_backend.base import ReadOnlyBaseViewSet, TenantContextMixin
from core_backend.exceptions import error_response
from delivery.models import Driver
from users.permissions import IsCashierOrHigher, IsManagerOrHigher, IsPosStaff
from .models import CashDrawerSession, LedgerEntry, ZReport
from .reports import export_z_report_pdf
from .serializers import (
    CashDrawerSessionSerializer,
    CloseSessionSerializer,
    LedgerEntrySerializer,
    OpenSessionSerializer,
    PayoutSerializer,
    RecordPayoutSerializer,
    ZReportSerializer,
)
from .services import AccountingService

logger = logging.getLogger(__name__)


class CashDrawerSessionViewSet(ReadOnlyBaseViewSet):
    """
    Cash drawer sessions: open, pay out, close with a Z-report.
    Closing is restricted to managers.
    """
    queryset = CashDrawerSession.objects.all()
    serializer_class = CashDrawerSessionSerializer
    filterset_fields = ["status"]
    ordering = ["-opened_at"]

    def get_permissions(self):
        if self.action == "close":
            return [IsManagerOrHigher()]
        if self.action in ("open", "payouts"):
            return [IsCashierOrHigher()]
        return [IsPosStaff()]

    def _session_payload(self, session):
        data = CashDrawerSessionSerializer(session).data
        data["metrics"] = AccountingService.session_metrics(session)
        return data

    @action(detail=False, methods=["post"], url_path="open")
    def open(self, request: Request) -> Response:
        serializer = OpenSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            session = AccountingService.open_session(
                request.user,
                serializer.validated_data["opening_balance"],
                notes=serializer.validated_data["notes"],
            )
        except ValueError as e:
            return error_response(e)
        return Response(self._session_payload(session), status=status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path="active")
    def active(self, request: Request) -> Response:
        session = AccountingService.get_active_session()
        if session is None:
            return Response({"session": None})
        return Response(self._session_payload(session))

    @action(detail=True, methods=["get", "post"], url_path="payouts")
    def payouts(self, request: Request, pk=None) -> Response:
        session = self.get_object()
        if request.method == "GET":
            return Response(PayoutSerializer(session.payouts.all(), many=True).data)

        serializer = RecordPayoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            payout = AccountingService.record_payout(
                session.pk,
                serializer.validated_data["amount"],
                category=serializer.validated_data["category"],
                notes=serializer.validated_data["notes"],
                staff=request.user,
            )
        except ValueError as e:
            return error_response(e)
        return Response(PayoutSerializer(payout).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get"], url_path="ledger")
    def ledger(self, request: Request, pk=None) -> Response:
        session = self.get_object()
        entries = AccountingService.drawer_entries(session).order_by("created_at")
        return Response(LedgerEntrySerializer(entries, many=True).data)

    @action(detail=True, methods=["post"], url_path="close")
    def close(self, request: Request, pk=None) -> Response:
        session = self.get_object()
        serializer = CloseSessionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            report = AccountingService.close_session(
                session.pk,
                serializer.validated_data["actual_balance"],
                request.user,
                notes=serializer.validated_data["notes"],
            )
        except ValueError as e:
            return error_response(e)
        return Response(ZReportSerializer(report).data, status=status.HTTP_201_CREATED)

    def _get_report(self, session):
        return get_object_or_404(ZReport.objects.select_related("session", "closed_by"), session=session)

    @action(detail=True, methods=["get"], url_path="z-report")
    def z_report(self, request: Request, pk=None) -> Response:
        report = self._get_report(self.get_object())
        return Response(ZReportSerializer(report).data)

    @action(detail=True, methods=["get"], url_path="z-report/pdf")
    def z_report_pdf(self, request: Request, pk=None) -> HttpResponse:
        report = self._get_report(self.get_object())
        content = export_z_report_pdf(report)
        response = HttpResponse(content, content_type="application/pdf")
        response["Content-Disposition"] = (
            f'attachment; filename="z-report-{report.created_at:%Y%m%d-%H%M}.pdf"'
        )
        return response


class LedgerEntryViewSet(ReadOnlyBaseViewSet):
    queryset = LedgerEntry.objects.all()
    serializer_class = LedgerEntrySerializer
    permission_classes = [IsManagerOrHigher]
    filterset_fields = ["account", "transaction_type", "reference_type", "session", "driver"]


class RiderBalanceView(TenantContextMixin, APIView):
    """Rider liability according to the ledger, next to the cash-in-hand counter."""

    permission_classes = [IsPosStaff]

    def get(self, request: Request, driver_id=None) -> Response:
        driver = get_object_or_404(Driver.objects.all(), pk=driver_id)
        return Response(
            {
                "driver": str(driver.pk),
                "balance": AccountingService.get_balance(driver),
                "cash_in_hand": driver.cash_in_hand,
            }
        )
