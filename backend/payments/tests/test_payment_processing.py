"""
Payment processing tests.

Dine-in and takeaway orders are paid in full once every item is ready.
Cash sales land in the open drawer session; card and Raast do not.
"""
import pytest
from decimal import Decimal
from rest_framework import status

from accounting.models import LedgerEntry
from accounting.services import AccountingService
from core_backend.exceptions import InsufficientInputError, InvalidTransitionError
from orders.models import Order, OrderItem
from orders.services import OrderItemService, PAYMENT_PENDING_ITEMS_ERROR
from payments.factories import PaymentStrategyFactory
from payments.models import PaymentTransaction
from payments.services import PaymentService
from payments.signals import payment_completed
from tenant.managers import set_current_tenant

Method = PaymentTransaction.PaymentMethod


@pytest.fixture
def drawer(manager_user):
    return AccountingService.open_session(manager_user, Decimal("5000"))


@pytest.mark.django_db
class TestCashPayments:
    """Cash over the counter"""

    def test_cash_payment_gives_change_and_hits_drawer(self, drawer, make_ready_order, karahi, cashier_user):
        order = make_ready_order([(karahi, 1)])

        payment = PaymentService.process_payment(order.pk, Method.CASH, processed_by=cashier_user, tendered="1500")

        assert payment.amount == Decimal("1000.00")
        assert payment.tendered == Decimal("1500.00")
        assert payment.change == Decimal("500.00")
        assert payment.drawer_session == drawer
        order.refresh_from_db()
        assert order.status == Order.OrderStatus.PAID
        assert order.items.get().status == OrderItem.ItemStatus.SERVED

        entry = LedgerEntry.objects.get(reference_type=LedgerEntry.ReferenceType.SALE)
        assert entry.account == LedgerEntry.Account.DRAWER
        assert entry.transaction_type == LedgerEntry.TransactionType.DEBIT
        assert entry.amount == Decimal("1000.00")
        assert entry.session == drawer
        assert entry.reference_id == str(payment.pk)

    def test_short_tender_is_rejected(self, drawer, make_ready_order, karahi, cashier_user):
        order = make_ready_order([(karahi, 1)])

        with pytest.raises(InsufficientInputError, match="less than the order total"):
            PaymentService.process_payment(order.pk, Method.CASH, processed_by=cashier_user, tendered="900")

        order.refresh_from_db()
        assert order.status == Order.OrderStatus.READY
        assert not PaymentTransaction.objects.exists()
        assert not LedgerEntry.objects.exists()

    def test_cash_without_open_session_is_still_recorded(self, make_ready_order, karahi, cashier_user):
        order = make_ready_order([(karahi, 1)])

        payment = PaymentService.process_payment(order.pk, Method.CASH, processed_by=cashier_user, tendered="1000")

        assert payment.drawer_session is None
        assert LedgerEntry.objects.get().session is None


@pytest.mark.django_db
class TestNonCashPayments:
    def test_card_payment_skips_drawer(self, drawer, make_ready_order, karahi, cashier_user):
        order = make_ready_order([(karahi, 2)])

        payment = PaymentService.process_payment(order.pk, Method.CARD, processed_by=cashier_user)

        assert payment.method == Method.CARD
        assert payment.tendered is None
        assert payment.drawer_session == drawer
        assert not LedgerEntry.objects.exists()

    def test_raast_requires_reference(self, make_ready_order, karahi, cashier_user):
        order = make_ready_order([(karahi, 1)])

        with pytest.raises(InsufficientInputError, match="Raast"):
            PaymentService.process_payment(order.pk, Method.RAAST, processed_by=cashier_user)

        payment = PaymentService.process_payment(
            order.pk, Method.RAAST, processed_by=cashier_user, reference=" RAAST-778812 "
        )
        assert payment.reference == "RAAST-778812"

    def test_unknown_method_is_rejected(self):
        with pytest.raises(ValueError):
            PaymentStrategyFactory.get_strategy("CHEQUE")


@pytest.mark.django_db
class TestPaymentGuards:
    """Payments only close orders that are actually ready"""

    def test_pending_items_block_payment(self, make_order, karahi, naan, kitchen_user, cashier_user):
        """
        CRITICAL: one item still PREPARING; payment is rejected
        with the pending-items error and nothing changes.
        """
        order = make_order([(karahi, 1), (naan, 1)], fire=True)
        OrderItemService.set_item_status(order.pk, 0, OrderItem.ItemStatus.READY, user=kitchen_user)
        OrderItemService.set_item_status(order.pk, 1, OrderItem.ItemStatus.PREPARING, user=kitchen_user)
        order.refresh_from_db()
        version = order.version

        with pytest.raises(InvalidTransitionError, match=PAYMENT_PENDING_ITEMS_ERROR):
            PaymentService.process_payment(order.pk, Method.CARD, processed_by=cashier_user)

        order.refresh_from_db()
        assert order.status == Order.OrderStatus.PREPARING
        assert order.version == version
        assert not PaymentTransaction.objects.exists()

    def test_delivery_orders_are_paid_through_settlement(self, make_order, karahi, cashier_user):
        order = make_order([(karahi, 1)], order_type=Order.OrderType.DELIVERY, fire=True)

        with pytest.raises(InvalidTransitionError, match="rider settlement"):
            PaymentService.process_payment(order.pk, Method.CASH, processed_by=cashier_user, tendered="5000")

    def test_order_cannot_be_paid_twice(self, make_ready_order, karahi, cashier_user):
        order = make_ready_order([(karahi, 1)])
        PaymentService.process_payment(order.pk, Method.CARD, processed_by=cashier_user)

        with pytest.raises(InvalidTransitionError, match="already PAID"):
            PaymentService.process_payment(order.pk, Method.CARD, processed_by=cashier_user)

        assert PaymentTransaction.objects.count() == 1

    def test_payment_completed_signal(self, make_ready_order, karahi, cashier_user):
        received = []

        def listener(sender, order, transaction, **kwargs):
            received.append((order.pk, transaction.method))

        payment_completed.connect(listener)
        try:
            order = make_ready_order([(karahi, 1)])
            PaymentService.process_payment(order.pk, Method.CARD, processed_by=cashier_user)
        finally:
            payment_completed.disconnect(listener)

        assert received == [(order.pk, Method.CARD)]

    def test_transactions_are_immutable(self, make_ready_order, karahi, cashier_user):
        order = make_ready_order([(karahi, 1)])
        payment = PaymentService.process_payment(order.pk, Method.CARD, processed_by=cashier_user)

        payment.amount = Decimal("1.00")
        with pytest.raises(ValueError):
            payment.save()


@pytest.mark.django_db
class TestPayEndpoint:
    def test_cashier_can_pay(self, cashier_client, tenant_a, make_ready_order, karahi):
        order = make_ready_order([(karahi, 1)])

        response = cashier_client.post(
            f'/api/orders/{order.pk}/pay/', {'method': 'CASH', 'tendered': '2000'}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['order']['status'] == 'PAID'
        assert Decimal(response.data['transaction']['change']) == Decimal('1000.00')

    def test_cash_needs_tendered_amount(self, cashier_client, tenant_a, make_ready_order, karahi):
        order = make_ready_order([(karahi, 1)])

        response = cashier_client.post(f'/api/orders/{order.pk}/pay/', {'method': 'CASH'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'tendered' in response.data

    def test_waiter_cannot_take_payment(self, waiter_client, tenant_a, make_ready_order, karahi):
        order = make_ready_order([(karahi, 1)])

        response = waiter_client.post(f'/api/orders/{order.pk}/pay/', {'method': 'CARD'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        set_current_tenant(tenant_a)
        order.refresh_from_db()
        assert order.status == Order.OrderStatus.READY

    def test_pending_items_error_over_api(self, cashier_client, tenant_a, make_order, karahi):
        order = make_order([(karahi, 1)], fire=True)

        response = cashier_client.post(f'/api/orders/{order.pk}/pay/', {'method': 'CARD'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == PAYMENT_PENDING_ITEMS_ERROR
