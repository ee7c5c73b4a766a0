"""
Delivery and rider settlement tests.

A rider carries the food out, collects the cash and owes it back until a
settlement clears the delivered orders. Shift floats are owed the same way.
"""
import pytest
from decimal import Decimal
from rest_framework import status

from accounting.models import LedgerEntry
from accounting.services import AccountingService
from core_backend.exceptions import DispatchError, InvalidTransitionError, SettlementError
from delivery.models import Driver, RiderSettlement, RiderShift, SettledOrder
from delivery.services import DispatchService, SettlementService, ShiftService
from orders.models import Order, OrderItem
from orders.services import OrderService
from payments.models import PaymentTransaction
from tenant.managers import set_current_tenant

DriverStatus = Driver.DriverStatus
OrderStatus = Order.OrderStatus


@pytest.fixture
def make_delivery(make_order):
    """Fired delivery order"""
    def _make(lines, **kwargs):
        return make_order(lines, order_type=Order.OrderType.DELIVERY, fire=True, **kwargs)
    return _make


@pytest.fixture
def on_shift(driver, cashier_user):
    """Rider with an open shift and no float"""
    ShiftService.open_shift(driver.pk, 0, opened_by=cashier_user)
    driver.refresh_from_db()
    return driver


def deliver(order, driver, user=None):
    DispatchService.assign_driver(order.pk, driver.pk, user=user)
    return DispatchService.complete_delivery(order.pk, user=user)


@pytest.mark.django_db
class TestDispatch:
    """Only riders on shift can take delivery orders"""

    def test_assign_moves_order_out_and_rider_busy(self, make_delivery, karahi, on_shift, cashier_user):
        order = make_delivery([(karahi, 1)])

        order = DispatchService.assign_driver(order.pk, on_shift.pk, user=cashier_user)

        assert order.status == OrderStatus.OUT_FOR_DELIVERY
        assert order.assigned_driver == on_shift
        assert order.rider_shift == ShiftService.get_active_shift(on_shift.pk)
        on_shift.refresh_from_db()
        assert on_shift.status == DriverStatus.BUSY
        assert on_shift.total_deliveries == 1

    def test_rider_without_shift_is_rejected(self, make_delivery, karahi, driver):
        order = make_delivery([(karahi, 1)])

        with pytest.raises(DispatchError, match="active open shift"):
            DispatchService.assign_driver(order.pk, driver.pk)

        order.refresh_from_db()
        assert order.status == OrderStatus.FIRED
        assert order.assigned_driver is None

    def test_off_duty_rider_rejected_when_shifts_not_required(
        self, make_delivery, karahi, driver, restaurant_settings
    ):
        restaurant_settings.require_rider_shift = False
        restaurant_settings.save()
        order = make_delivery([(karahi, 1)])

        with pytest.raises(DispatchError, match="off duty"):
            DispatchService.assign_driver(order.pk, driver.pk)

        driver.status = DriverStatus.AVAILABLE
        driver.save()
        order = DispatchService.assign_driver(order.pk, driver.pk)
        assert order.rider_shift is None

    def test_draft_and_dine_in_orders_cannot_be_dispatched(self, make_order, karahi, on_shift):
        draft = make_order([(karahi, 1)], order_type=Order.OrderType.DELIVERY)
        dine_in = make_order([(karahi, 1)], fire=True)

        with pytest.raises(InvalidTransitionError):
            DispatchService.assign_driver(draft.pk, on_shift.pk)
        with pytest.raises(DispatchError, match="not a delivery order"):
            DispatchService.assign_driver(dine_in.pk, on_shift.pk)

    def test_order_cannot_be_assigned_twice(self, make_delivery, karahi, on_shift, second_driver, cashier_user):
        ShiftService.open_shift(second_driver.pk, 0, opened_by=cashier_user)
        order = make_delivery([(karahi, 1)])
        DispatchService.assign_driver(order.pk, on_shift.pk)

        with pytest.raises(DispatchError, match="already assigned"):
            DispatchService.assign_driver(order.pk, second_driver.pk)

    def test_rider_can_carry_several_orders(self, make_delivery, karahi, on_shift):
        first = make_delivery([(karahi, 1)])
        second = make_delivery([(karahi, 1)])
        DispatchService.assign_driver(first.pk, on_shift.pk)
        DispatchService.assign_driver(second.pk, on_shift.pk)

        DispatchService.complete_delivery(first.pk)
        on_shift.refresh_from_db()
        assert on_shift.status == DriverStatus.BUSY

        DispatchService.complete_delivery(second.pk)
        on_shift.refresh_from_db()
        assert on_shift.status == DriverStatus.AVAILABLE


@pytest.mark.django_db
class TestCompleteDelivery:
    def test_delivery_adds_total_to_rider_liability(self, make_delivery, karahi, on_shift, cashier_user):
        order = make_delivery([(karahi, 2)])

        order = deliver(order, on_shift, user=cashier_user)

        assert order.status == OrderStatus.DELIVERED
        assert order.delivered_at is not None
        assert not order.is_terminal
        assert set(order.items.values_list("status", flat=True)) == {OrderItem.ItemStatus.DELIVERED}
        on_shift.refresh_from_db()
        assert on_shift.cash_in_hand == Decimal("2000.00")

        entry = LedgerEntry.objects.get(reference_type=LedgerEntry.ReferenceType.RIDER_LIABILITY)
        assert entry.account == LedgerEntry.Account.RIDER
        assert entry.transaction_type == LedgerEntry.TransactionType.DEBIT
        assert entry.driver == on_shift
        assert AccountingService.get_balance(on_shift) == Decimal("2000.00")

    def test_complete_requires_out_for_delivery(self, make_delivery, karahi):
        order = make_delivery([(karahi, 1)])

        with pytest.raises(InvalidTransitionError):
            DispatchService.complete_delivery(order.pk)

    def test_void_releases_rider(self, make_delivery, karahi, on_shift, manager_user):
        order = make_delivery([(karahi, 1)])
        DispatchService.assign_driver(order.pk, on_shift.pk)

        OrderService.void_order(order.pk, "Customer not reachable", user=manager_user)

        on_shift.refresh_from_db()
        assert on_shift.status == DriverStatus.AVAILABLE
        assert on_shift.cash_in_hand == Decimal("0.00")

    def test_delivered_order_cannot_be_voided(self, make_delivery, karahi, on_shift, manager_user):
        order = deliver(make_delivery([(karahi, 1)]), on_shift)

        with pytest.raises(InvalidTransitionError):
            OrderService.void_order(order.pk, "Changed mind", user=manager_user)


@pytest.mark.django_db
class TestRiderSettlement:
    """Settlement clears delivered orders exactly once"""

    @pytest.fixture
    def three_delivered(self, make_delivery, karahi, naan, on_shift):
        """Three delivered orders totalling Rs 4,500"""
        orders = [
            make_delivery([(karahi, 1)]),
            make_delivery([(karahi, 2)]),
            make_delivery([(karahi, 1), (naan, 10)]),
        ]
        return [deliver(order, on_shift) for order in orders]

    def test_pending_settlement(self, three_delivered, on_shift):
        pending = SettlementService.pending_settlement(on_shift.pk)

        assert len(pending["orders"]) == 3
        assert pending["orders_total"] == Decimal("4500.00")
        assert pending["unsettled_float"] == Decimal("0")
        assert pending["expected"] == Decimal("4500.00")
        assert pending["cash_in_hand"] == Decimal("4500.00")

    def test_short_settlement_is_flagged_but_clears_all(self, three_delivered, on_shift, cashier_user):
        """
        CRITICAL: rider hands in 4,400 against 4,500; all three
        orders settle, the variance is -100 and the liability drops by 4,500.
        """
        settlement = SettlementService.settle_rider(on_shift.pk, "4400", processed_by=cashier_user)

        assert settlement.settlement_number == "SET-00001"
        assert settlement.amount_expected == Decimal("4500.00")
        assert settlement.amount_collected == Decimal("4400")
        assert settlement.variance == Decimal("-100.00")
        assert settlement.shortage == Decimal("100.00")
        assert settlement.has_discrepancy

        for order in three_delivered:
            order.refresh_from_db()
            assert order.is_settled_with_rider
            assert order.is_terminal
        assert SettledOrder.objects.filter(settlement=settlement).count() == 3
        assert PaymentTransaction.objects.filter(rider_settlement=settlement).count() == 3

        on_shift.refresh_from_db()
        assert on_shift.cash_in_hand == Decimal("0.00")
        assert AccountingService.get_balance(on_shift) == Decimal("0.00")

        drawer_entry = LedgerEntry.objects.get(
            account=LedgerEntry.Account.DRAWER, reference_type=LedgerEntry.ReferenceType.SETTLEMENT
        )
        assert drawer_entry.transaction_type == LedgerEntry.TransactionType.DEBIT
        assert drawer_entry.amount == Decimal("4400.00")

    def test_order_is_settled_exactly_once(self, three_delivered, on_shift, cashier_user):
        first = three_delivered[0]
        SettlementService.settle_rider(on_shift.pk, "1000", order_ids=[first.pk], processed_by=cashier_user)

        with pytest.raises(SettlementError, match="already been settled"):
            SettlementService.settle_rider(on_shift.pk, "1000", order_ids=[first.pk], processed_by=cashier_user)

        assert RiderSettlement.objects.count() == 1
        on_shift.refresh_from_db()
        assert on_shift.cash_in_hand == Decimal("3500.00")

    def test_nothing_to_settle(self, on_shift):
        with pytest.raises(SettlementError, match="nothing to settle"):
            SettlementService.settle_rider(on_shift.pk, "0")

    def test_undelivered_order_cannot_be_settled(self, make_delivery, karahi, on_shift):
        order = make_delivery([(karahi, 1)])
        DispatchService.assign_driver(order.pk, on_shift.pk)

        with pytest.raises(SettlementError, match="not DELIVERED"):
            SettlementService.settle_rider(on_shift.pk, "1000", order_ids=[order.pk])

    def test_other_riders_order_cannot_be_settled(
        self, three_delivered, second_driver, cashier_user
    ):
        ShiftService.open_shift(second_driver.pk, 0, opened_by=cashier_user)

        with pytest.raises(SettlementError, match="was not delivered by"):
            SettlementService.settle_rider(second_driver.pk, "1000", order_ids=[three_delivered[0].pk])

    def test_settled_order_cannot_be_paid_at_counter(self, three_delivered, on_shift, cashier_user):
        from payments.services import PaymentService

        SettlementService.settle_rider(on_shift.pk, "4500", processed_by=cashier_user)

        with pytest.raises(InvalidTransitionError):
            PaymentService.process_payment(
                three_delivered[0].pk, PaymentTransaction.PaymentMethod.CASH, tendered="1000"
            )


@pytest.mark.django_db
class TestRiderShifts:
    """Floats go out with the rider and come back at settlement"""

    def test_open_shift_issues_float_from_drawer(self, driver, manager_user, cashier_user):
        session = AccountingService.open_session(manager_user, Decimal("10000"))

        shift = ShiftService.open_shift(driver.pk, "500", opened_by=cashier_user)

        driver.refresh_from_db()
        assert driver.status == DriverStatus.AVAILABLE
        assert driver.cash_in_hand == Decimal("500.00")
        float_entry = LedgerEntry.objects.get(
            account=LedgerEntry.Account.DRAWER, reference_type=LedgerEntry.ReferenceType.FLOAT
        )
        assert float_entry.transaction_type == LedgerEntry.TransactionType.CREDIT
        assert float_entry.session == session
        assert float_entry.reference_id == str(shift.pk)

    def test_only_one_open_shift_per_rider(self, on_shift, cashier_user):
        with pytest.raises(InvalidTransitionError, match="already has an active open shift"):
            ShiftService.open_shift(on_shift.pk, 0, opened_by=cashier_user)

    def test_settlement_includes_unsettled_float_once(self, make_delivery, karahi, driver, cashier_user):
        ShiftService.open_shift(driver.pk, "500", opened_by=cashier_user)
        deliver(make_delivery([(karahi, 1)]), driver)

        settlement = SettlementService.settle_rider(driver.pk, "1500", processed_by=cashier_user)

        assert settlement.included_float == Decimal("500.00")
        assert settlement.amount_expected == Decimal("1500.00")
        assert not settlement.has_discrepancy
        assert ShiftService.get_active_shift(driver.pk).float_settled

        deliver(make_delivery([(karahi, 1)]), driver)
        second = SettlementService.settle_rider(driver.pk, "1000", processed_by=cashier_user)
        assert second.included_float == Decimal("0")
        assert second.amount_expected == Decimal("1000.00")

    def test_close_shift_settles_everything(self, make_delivery, karahi, driver, cashier_user):
        shift = ShiftService.open_shift(driver.pk, "500", opened_by=cashier_user)
        deliver(make_delivery([(karahi, 2)]), driver)

        shift = ShiftService.close_shift(shift.pk, "2450", closed_by=cashier_user)

        assert shift.status == RiderShift.ShiftStatus.CLOSED
        assert shift.expected_cash == Decimal("2500.00")
        assert shift.cash_difference == Decimal("-50.00")
        driver.refresh_from_db()
        assert driver.status == DriverStatus.OFF_DUTY
        assert driver.cash_in_hand == Decimal("0.00")
        assert SettlementService.unsettled_orders(driver).count() == 0

    def test_cash_handed_in_with_nothing_owed_reaches_the_drawer(self, driver, cashier_user, manager_user):
        session = AccountingService.open_session(manager_user, "1000")
        shift = ShiftService.open_shift(driver.pk, 0, opened_by=cashier_user)

        shift = ShiftService.close_shift(shift.pk, "50", closed_by=cashier_user)

        assert shift.expected_cash == Decimal("0")
        assert shift.cash_difference == Decimal("50")
        entry = LedgerEntry.objects.get(reference_type=LedgerEntry.ReferenceType.ADJUSTMENT)
        assert entry.account == LedgerEntry.Account.DRAWER
        assert entry.transaction_type == LedgerEntry.TransactionType.DEBIT
        assert entry.session == session
        assert AccountingService.expected_cash(session) == Decimal("1050")
        assert not RiderSettlement.objects.exists()

    def test_close_shift_blocked_while_orders_out(self, make_delivery, karahi, driver, cashier_user):
        shift = ShiftService.open_shift(driver.pk, 0, opened_by=cashier_user)
        DispatchService.assign_driver(make_delivery([(karahi, 1)]).pk, driver.pk)

        with pytest.raises(InvalidTransitionError, match="still out for delivery"):
            ShiftService.close_shift(shift.pk, "0", closed_by=cashier_user)

    def test_shift_metrics(self, make_delivery, karahi, on_shift):
        shift = ShiftService.get_active_shift(on_shift.pk)
        deliver(make_delivery([(karahi, 1)]), on_shift)
        DispatchService.assign_driver(make_delivery([(karahi, 2)]).pk, on_shift.pk)

        metrics = ShiftService.shift_metrics(shift.pk)

        assert metrics["order_count"] == 2
        assert metrics["delivered_count"] == 1
        assert metrics["active_count"] == 1
        assert metrics["total_sales"] == Decimal("1000.00")
        assert metrics["expected_liability"] == Decimal("1000.00")


@pytest.mark.django_db
class TestDeliveryEndpoints:
    def test_assign_and_complete_over_api(self, cashier_client, tenant_a, make_delivery, karahi, on_shift):
        order = make_delivery([(karahi, 1)])

        response = cashier_client.post(
            f'/api/orders/{order.pk}/assign-driver/', {'driver_id': str(on_shift.pk)}, format='json'
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'OUT_FOR_DELIVERY'

        response = cashier_client.post(f'/api/orders/{order.pk}/complete-delivery/', {}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'DELIVERED'

        response = cashier_client.get(f'/api/riders/{on_shift.pk}/pending-settlement/')
        assert Decimal(response.data['expected']) == Decimal('1000.00')

    def test_settle_endpoint(self, cashier_client, tenant_a, make_delivery, karahi, on_shift):
        deliver(make_delivery([(karahi, 1)]), on_shift)

        response = cashier_client.post(
            f'/api/riders/{on_shift.pk}/settle/', {'amount_collected': '900'}, format='json'
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert Decimal(response.data['variance']) == Decimal('-100.00')
        assert response.data['has_discrepancy'] is True

        response = cashier_client.post(
            f'/api/riders/{on_shift.pk}/settle/', {'amount_collected': '0'}, format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_waiter_cannot_settle(self, waiter_client, tenant_a, on_shift):
        response = waiter_client.post(
            f'/api/riders/{on_shift.pk}/settle/', {'amount_collected': '0'}, format='json'
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_cash_in_hand_is_read_only(self, manager_client, tenant_a, driver):
        response = manager_client.patch(f'/api/riders/{driver.pk}/', {'cash_in_hand': '9999'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        set_current_tenant(tenant_a)
        driver.refresh_from_db()
        assert driver.cash_in_hand == Decimal('0.00')

    def test_shift_open_and_close_over_api(self, cashier_client, tenant_a, driver):
        response = cashier_client.post(
            f'/api/riders/{driver.pk}/shift/open/', {'opening_float': '300'}, format='json'
        )
        assert response.status_code == status.HTTP_201_CREATED
        shift_id = response.data['id']

        response = cashier_client.get(f'/api/riders/{driver.pk}/active-shift/')
        assert response.data['shift']['id'] == shift_id
        assert Decimal(response.data['expected_liability']) == Decimal('300.00')

        response = cashier_client.post(f'/api/riders/shifts/{shift_id}/close/', {'closing_cash': '300'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'CLOSED'
