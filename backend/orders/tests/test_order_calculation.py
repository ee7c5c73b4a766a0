"""
Order total calculation tests.

Rates mirror a typical Karachi restaurant: 5% service charge on dine-in,
16% tax on every order type, Rs 200 delivery.
"""
import pytest
from decimal import Decimal

from orders.models import Order
from orders.services import OrderCalculationService, OrderService
from floor.services import FloorService


@pytest.fixture
def taxed_settings(restaurant_settings):
    restaurant_settings.tax_rate = Decimal("0.16")
    restaurant_settings.service_charge_rate = Decimal("0.05")
    restaurant_settings.delivery_fee_default = Decimal("200.00")
    restaurant_settings.max_discount_rate = Decimal("0.50")
    restaurant_settings.save()
    return restaurant_settings


@pytest.mark.django_db
class TestBreakdown:
    """Subtotal, discount, service charge, tax and delivery fee"""

    def test_dine_in_with_percent_discount(self, taxed_settings, make_order, karahi):
        order = make_order(
            [(karahi, 2)], discount_type=Order.DiscountType.PERCENT, discount_value=Decimal("10")
        )

        assert order.subtotal == Decimal("2000.00")
        assert order.discount_amount == Decimal("200.00")
        # 5% of 1,800
        assert order.service_charge == Decimal("90.00")
        # 16% of 1,890
        assert order.tax == Decimal("302.40")
        assert order.delivery_fee == Decimal("0.00")
        assert order.total == Decimal("2192.40")

    def test_takeaway_has_no_service_charge(self, taxed_settings, make_order, karahi):
        order = make_order([(karahi, 1)], order_type=Order.OrderType.TAKEAWAY)

        assert order.service_charge == Decimal("0.00")
        assert order.tax == Decimal("160.00")
        assert order.total == Decimal("1160.00")

    def test_delivery_uses_default_fee(self, taxed_settings, make_order, karahi):
        order = make_order([(karahi, 1)], order_type=Order.OrderType.DELIVERY)

        assert order.delivery_fee == Decimal("200.00")
        assert order.total == Decimal("1360.00")

    def test_delivery_fee_override(self, taxed_settings, make_order, karahi):
        order = make_order([(karahi, 1)], order_type=Order.OrderType.DELIVERY, delivery_fee=Decimal("150"))

        assert order.delivery_fee == Decimal("150.00")
        assert order.total == Decimal("1310.00")

    def test_discount_is_capped(self, taxed_settings, make_order, karahi):
        order = make_order([(karahi, 2)], order_type=Order.OrderType.TAKEAWAY, discount_value=Decimal("5000"))

        # Capped at 50% of 2,000
        assert order.discount_amount == Decimal("1000.00")
        assert order.total == Decimal("1160.00")

    def test_apply_discount_recalculates(self, taxed_settings, make_order, karahi):
        order = make_order([(karahi, 1)], order_type=Order.OrderType.TAKEAWAY)

        OrderService.apply_discount(order.pk, Order.DiscountType.AMOUNT, "100")
        order.refresh_from_db()

        assert order.discount_amount == Decimal("100.00")
        assert order.total == Decimal("1044.00")


@pytest.mark.django_db
class TestFixedPerHead:
    """Fixed-per-head items are charged per guest, once per product"""

    def test_buffet_charged_per_guest_not_per_quantity(self, make_order, buffet):
        order = make_order([(buffet, 5)], guest_count=3)

        assert order.subtotal == Decimal("6000.00")

    def test_buffet_on_two_lines_is_charged_once(self, make_order, buffet, karahi):
        order = make_order([(buffet, 1), (buffet, 1), (karahi, 1)], guest_count=2)

        assert order.subtotal == Decimal("5000.00")

    def test_guest_count_change_reprices_buffet(self, make_order, buffet, table, waiter_user):
        order = make_order([(buffet, 1)], guest_count=2)
        FloorService.seat_party(table.pk, 2, waiter=waiter_user, order_id=order.pk)

        FloorService.update_guest_count(order.pk, 4, user=waiter_user)
        order.refresh_from_db()

        assert order.subtotal == Decimal("8000.00")

    def test_breakdown_is_pure(self, make_order, buffet):
        order = make_order([(buffet, 1)], guest_count=2)
        order.guest_count = 5

        breakdown = OrderCalculationService.calculate_breakdown(order)

        assert breakdown.subtotal == Decimal("10000.00")
        order.refresh_from_db()
        assert order.subtotal == Decimal("4000.00")
