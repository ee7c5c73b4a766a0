from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone
import logging

from core_backend.exceptions import InsufficientInputError, SettlementError
from orders.models import Order
from payments.money import quantize, to_decimal, ZERO
from settings.config import get_restaurant_settings
from delivery.models import Driver, RiderSettlement, RiderShift, SettledOrder

logger = logging.getLogger(__name__)


class SettlementService:
    """
    Clears delivered orders against the cash a rider hands back.

    Each order can be settled exactly once: it is locked, checked and then
    linked to a single SettledOrder row, which the database keeps unique.
    """

    @staticmethod
    def unsettled_orders(driver: Driver):
        return Order.objects.filter(
            assigned_driver=driver,
            status=Order.OrderStatus.DELIVERED,
            is_settled_with_rider=False,
        ).order_by("delivered_at", "created_at")

    @staticmethod
    def unsettled_float(driver: Driver):
        shift = driver.active_shift
        if shift is None or shift.float_settled:
            return None, ZERO
        return shift, shift.opening_float

    @staticmethod
    def pending_settlement(driver_id) -> dict:
        """What the rider has to hand in right now."""
        driver = Driver.objects.select_related("user").get(pk=driver_id)
        orders = list(SettlementService.unsettled_orders(driver))
        orders_total = sum((order.total for order in orders), ZERO)
        shift, float_amount = SettlementService.unsettled_float(driver)
        return {
            "driver": driver,
            "orders": orders,
            "orders_total": orders_total,
            "shift": shift,
            "unsettled_float": float_amount,
            "expected": orders_total + float_amount,
            "cash_in_hand": driver.cash_in_hand,
        }

    @staticmethod
    def _lock_orders(driver: Driver, order_ids):
        """Lock the selected orders and check every one can be settled by this rider."""
        if order_ids is None:
            orders = list(
                SettlementService.unsettled_orders(driver).select_for_update()
            )
        else:
            order_ids = [str(order_id) for order_id in order_ids]
            orders = list(
                Order.objects.select_for_update().filter(pk__in=order_ids).order_by("delivered_at", "created_at")
            )
            found = {str(order.pk) for order in orders}
            missing = set(order_ids) - found
            if missing:
                raise SettlementError(f"Unknown order(s): {', '.join(sorted(missing))}")

        for order in orders:
            if order.assigned_driver_id != driver.pk:
                raise SettlementError(f"Order {order.order_number} was not delivered by {driver}")
            if order.status != Order.OrderStatus.DELIVERED:
                raise SettlementError(f"Order {order.order_number} is {order.status}, not DELIVERED")
            if order.is_settled_with_rider:
                raise SettlementError(f"Order {order.order_number} has already been settled")
        return orders

    @staticmethod
    @transaction.atomic
    def settle_rider(driver_id, amount_collected, processed_by=None, order_ids=None, include_float=True, notes: str = "") -> RiderSettlement:
        """
        Settle a rider's delivered orders (all pending ones by default).

        The rider's liability drops by the full expected amount; any
        difference from the cash actually collected is flagged on the
        settlement for follow-up and never blocks it.

        Raises:
            SettlementError: If any selected order cannot be settled, or
                there is nothing to settle
            InsufficientInputError: If the collected amount is invalid
        """
        from accounting.models import LedgerEntry
        from accounting.services import AccountingService
        from payments.services import PaymentService

        amount_collected = to_decimal(amount_collected, "amount collected")
        if amount_collected < 0:
            raise InsufficientInputError("Collected amount cannot be negative")

        driver = Driver.objects.select_for_update().select_related("user").get(pk=driver_id)
        currency = get_restaurant_settings(driver.tenant).currency
        orders = SettlementService._lock_orders(driver, order_ids)

        shift = driver.active_shift
        float_amount = ZERO
        if shift is not None:
            shift = RiderShift.objects.select_for_update().get(pk=shift.pk)
            if include_float and not shift.float_settled:
                float_amount = shift.opening_float

        orders_total = sum((order.total for order in orders), ZERO)
        amount_expected = quantize(currency, orders_total + float_amount)
        if not orders and float_amount == ZERO:
            raise SettlementError(f"Rider {driver} has nothing to settle")

        variance = quantize(currency, amount_collected - amount_expected)
        settlement = RiderSettlement.objects.create(
            tenant=driver.tenant,
            driver=driver,
            shift=shift,
            amount_expected=amount_expected,
            amount_collected=amount_collected,
            shortage=-variance,
            variance=variance,
            included_float=float_amount,
            has_discrepancy=variance != ZERO,
            notes=notes or "",
            processed_by=processed_by,
        )

        for order in orders:
            try:
                with transaction.atomic():
                    SettledOrder.objects.create(
                        tenant=order.tenant, settlement=settlement, order=order, amount=order.total
                    )
            except IntegrityError:
                raise SettlementError(f"Order {order.order_number} has already been settled")
            order.is_settled_with_rider = True
            order.commit(
                ["is_settled_with_rider"],
                user=processed_by,
                action=f"Settled in {settlement.settlement_number}",
            )
            PaymentService.record_settlement_payment(order, settlement, processed_by=processed_by)

        if float_amount != ZERO:
            RiderShift.objects.filter(pk=shift.pk).update(float_settled=True)

        Driver.objects.filter(pk=driver.pk).update(
            cash_in_hand=F("cash_in_hand") - amount_expected,
            last_settled_at=timezone.now(),
        )

        AccountingService.record_drawer_entry(
            driver.tenant,
            LedgerEntry.TransactionType.DEBIT,
            LedgerEntry.ReferenceType.SETTLEMENT,
            amount_collected,
            reference_id=settlement.pk,
            description=f"{settlement.settlement_number} cash from {driver}",
            processed_by=processed_by,
        )
        AccountingService.record_entry(
            driver.tenant,
            LedgerEntry.Account.RIDER,
            LedgerEntry.TransactionType.CREDIT,
            LedgerEntry.ReferenceType.SETTLEMENT,
            amount_expected,
            reference_id=settlement.pk,
            driver=driver,
            description=f"{settlement.settlement_number} cleared {len(orders)} order(s)",
            processed_by=processed_by,
        )

        if settlement.has_discrepancy:
            logger.warning(
                f"Settlement {settlement.settlement_number} for {driver}: expected {amount_expected}, "
                f"collected {amount_collected} (variance {variance})"
            )
        else:
            logger.info(f"Settlement {settlement.settlement_number} for {driver}: {amount_collected} cleared")
        return settlement

    @staticmethod
    def settlement_history(driver_id):
        return (
            RiderSettlement.objects.filter(driver_id=driver_id)
            .prefetch_related("settled_orders__order")
            .order_by("-created_at")
        )
