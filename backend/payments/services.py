from django.db import IntegrityError, transaction
import logging

from core_backend.exceptions import InvalidTransitionError
from orders.models import Order
from orders.services import OrderService
from settings.config import get_restaurant_settings
from .factories import PaymentStrategyFactory
from .models import PaymentTransaction
from .signals import payment_completed

logger = logging.getLogger(__name__)


class PaymentService:
    """
    Takes the final payment for an order.

    Dine-in and takeaway orders are paid at the counter in one go. Delivery
    orders are never paid here: their cash comes back through the rider
    settlement, which records the transaction itself.
    """

    @staticmethod
    def _active_session(tenant):
        from accounting.services import AccountingService

        return AccountingService.lock_active_session(tenant)

    @staticmethod
    @transaction.atomic
    def process_payment(order_id, method: str, processed_by=None, tendered=None, reference: str = "", expected_version=None):
        """
        Pay an order in full and close it.

        Args:
            order_id: Order to pay
            method: CASH, CARD or RAAST
            tendered: Cash handed over (cash only); must cover the total
            reference: Card slip / Raast reference

        Raises:
            InvalidTransitionError: If the order is a delivery order, not ready, or already paid
            InsufficientInputError: If the cash tendered is short
        """
        order = OrderService.get_locked_order(order_id, expected_version)
        if order.is_delivery:
            raise InvalidTransitionError(
                "Order",
                order.status,
                message=f"Delivery order {order.order_number} is paid through rider settlement",
            )
        OrderService.ensure_payable(order)

        strategy = PaymentStrategyFactory.get_strategy(method)
        currency = get_restaurant_settings(order.tenant).currency
        details = strategy.prepare(order, currency, tendered=tendered, reference=reference)

        try:
            with transaction.atomic():
                payment_transaction = PaymentTransaction.objects.create(
                    tenant=order.tenant,
                    order=order,
                    method=strategy.method,
                    amount=order.total,
                    processed_by=processed_by,
                    drawer_session=PaymentService._active_session(order.tenant),
                    **details,
                )
        except IntegrityError:
            raise InvalidTransitionError(
                "Order", order.status, message=f"Order {order.order_number} already has a payment"
            )

        OrderService.mark_paid(order, user=processed_by)
        strategy.after_record(payment_transaction)

        logger.info(
            f"Order {order.order_number} paid: {payment_transaction.method} {payment_transaction.amount}"
            f" (change {payment_transaction.change})"
        )
        payment_completed.send(sender=PaymentTransaction, order=order, transaction=payment_transaction)
        return payment_transaction

    @staticmethod
    def record_settlement_payment(order: Order, settlement, processed_by=None) -> PaymentTransaction:
        """
        CASH transaction for a delivery order cleared by a rider settlement.
        Caller holds the order lock inside the settlement transaction.
        """
        payment_transaction = PaymentTransaction.objects.create(
            tenant=order.tenant,
            order=order,
            method=PaymentTransaction.PaymentMethod.CASH,
            amount=order.total,
            processed_by=processed_by,
            drawer_session=PaymentService._active_session(order.tenant),
            rider_settlement=settlement,
        )
        payment_completed.send(sender=PaymentTransaction, order=order, transaction=payment_transaction)
        return payment_transaction
