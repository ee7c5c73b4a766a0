from django.db import IntegrityError, transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone
import logging

from core_backend.exceptions import DispatchError, InsufficientInputError, InvalidTransitionError
from orders.models import Order
from payments.money import to_decimal, ZERO
from delivery.models import Driver, RiderShift
from .settlement_service import SettlementService

logger = logging.getLogger(__name__)


class ShiftService:
    """
    Rider shifts. Opening a shift issues the float from the drawer;
    closing it settles everything the rider still owes.
    """

    @staticmethod
    def get_active_shift(driver_id):
        return RiderShift.objects.filter(driver_id=driver_id, status=RiderShift.ShiftStatus.OPEN).first()

    @staticmethod
    @transaction.atomic
    def open_shift(driver_id, opening_float=0, opened_by=None, notes: str = "") -> RiderShift:
        """
        Start a shift and hand the rider their float.

        Raises:
            InvalidTransitionError: If the rider already has an OPEN shift
        """
        from accounting.models import LedgerEntry
        from accounting.services import AccountingService

        opening_float = to_decimal(opening_float or 0, "opening float")
        if opening_float < 0:
            raise InsufficientInputError("Opening float cannot be negative")

        driver = Driver.objects.select_for_update().select_related("user").get(pk=driver_id)
        if not driver.is_active:
            raise DispatchError(f"Rider {driver} is inactive")
        if driver.active_shift is not None:
            raise InvalidTransitionError("Shift", RiderShift.ShiftStatus.OPEN, message="Rider already has an active open shift")

        try:
            with transaction.atomic():
                shift = RiderShift.objects.create(
                    tenant=driver.tenant,
                    driver=driver,
                    opening_float=opening_float,
                    opened_by=opened_by,
                    notes=notes or "",
                )
        except IntegrityError:
            raise InvalidTransitionError("Shift", RiderShift.ShiftStatus.OPEN, message="Rider already has an active open shift")

        if opening_float > 0:
            AccountingService.record_drawer_entry(
                driver.tenant,
                LedgerEntry.TransactionType.CREDIT,
                LedgerEntry.ReferenceType.FLOAT,
                opening_float,
                reference_id=shift.pk,
                description=f"Float issued to {driver}",
                processed_by=opened_by,
            )
            AccountingService.record_entry(
                driver.tenant,
                LedgerEntry.Account.RIDER,
                LedgerEntry.TransactionType.DEBIT,
                LedgerEntry.ReferenceType.FLOAT,
                opening_float,
                reference_id=shift.pk,
                driver=driver,
                description="Shift opening float received",
                processed_by=opened_by,
            )
            Driver.objects.filter(pk=driver.pk).update(cash_in_hand=F("cash_in_hand") + opening_float)

        driver.status = Driver.DriverStatus.AVAILABLE
        driver.save(update_fields=["status"])
        logger.info(f"Shift opened for {driver} with float {opening_float}")
        return shift

    @staticmethod
    @transaction.atomic
    def close_shift(shift_id, closing_cash, closed_by=None, notes: str = "") -> RiderShift:
        """
        End a shift: everything the rider still owes (unsettled deliveries
        and the float) is settled against ``closing_cash``.

        Raises:
            InvalidTransitionError: If the shift is closed or orders are still out
        """
        from accounting.models import LedgerEntry
        from accounting.services import AccountingService

        closing_cash = to_decimal(closing_cash, "closing cash")
        if closing_cash < 0:
            raise InsufficientInputError("Closing cash cannot be negative")

        shift = RiderShift.objects.select_for_update().select_related("driver__user").get(pk=shift_id)
        if not shift.is_open:
            raise InvalidTransitionError("Shift", shift.status, message="Valid open shift required for closing")

        driver = shift.driver
        still_out = Order.objects.filter(
            assigned_driver=driver, status=Order.OrderStatus.OUT_FOR_DELIVERY
        )
        if still_out.exists():
            numbers = ", ".join(still_out.values_list("order_number", flat=True))
            raise InvalidTransitionError(
                "Shift", shift.status, message=f"Orders still out for delivery: {numbers}"
            )

        pending = SettlementService.pending_settlement(driver.pk)
        settlement = None
        if pending["orders"] or pending["unsettled_float"] > 0:
            settlement = SettlementService.settle_rider(
                driver.pk,
                closing_cash,
                processed_by=closed_by,
                include_float=True,
                notes="Shift close",
            )
            expected = settlement.amount_expected
        else:
            expected = ZERO
            if closing_cash > 0:
                AccountingService.record_drawer_entry(
                    driver.tenant,
                    LedgerEntry.TransactionType.DEBIT,
                    LedgerEntry.ReferenceType.ADJUSTMENT,
                    closing_cash,
                    reference_id=shift.pk,
                    description=f"Unexpected cash handed in by {driver} at shift close",
                    processed_by=closed_by,
                )
                logger.warning(f"{driver} handed in {closing_cash} at shift close with nothing owed")

        shift.expected_cash = expected
        shift.closing_cash_received = closing_cash
        shift.cash_difference = closing_cash - expected
        shift.status = RiderShift.ShiftStatus.CLOSED
        shift.closed_at = timezone.now()
        shift.closed_by = closed_by
        if notes:
            shift.notes = f"{shift.notes}\n{notes}".strip()
        shift.save(update_fields=[
            "expected_cash", "closing_cash_received", "cash_difference",
            "status", "closed_at", "closed_by", "notes",
        ])

        Driver.objects.filter(pk=driver.pk).update(status=Driver.DriverStatus.OFF_DUTY)

        if shift.cash_difference != ZERO:
            logger.warning(
                f"Shift for {driver} closed with difference {shift.cash_difference} "
                f"(expected {expected}, received {closing_cash})"
            )
        else:
            logger.info(f"Shift for {driver} closed, {expected} received")
        return shift

    @staticmethod
    def shift_metrics(shift_id) -> dict:
        shift = RiderShift.objects.select_related("driver__user").get(pk=shift_id)
        delivered = Q(status=Order.OrderStatus.DELIVERED)
        out = Q(status=Order.OrderStatus.OUT_FOR_DELIVERY)
        unsettled = Q(status=Order.OrderStatus.DELIVERED, is_settled_with_rider=False)

        totals = Order.objects.filter(rider_shift=shift).aggregate(
            order_count=Count("id"),
            delivered_count=Count("id", filter=delivered),
            active_count=Count("id", filter=out),
            total_sales=Sum("total", filter=delivered),
            unsettled_sales=Sum("total", filter=unsettled),
        )
        total_sales = totals["total_sales"] or ZERO
        unsettled_sales = totals["unsettled_sales"] or ZERO
        unsettled_float = ZERO if shift.float_settled else shift.opening_float

        return {
            "shift": shift,
            "order_count": totals["order_count"],
            "delivered_count": totals["delivered_count"],
            "active_count": totals["active_count"],
            "total_sales": total_sales,
            "expected_liability": unsettled_sales + unsettled_float,
        }
