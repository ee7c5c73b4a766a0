from dataclasses import dataclass
from decimal import Decimal
import logging

from payments.money import quantize, ZERO
from products.models import Product
from settings.config import get_restaurant_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderBreakdown:
    subtotal: Decimal
    discount: Decimal
    service_charge: Decimal
    tax: Decimal
    delivery_fee: Decimal
    total: Decimal

    def as_dict(self):
        return {
            "subtotal": self.subtotal,
            "discount": self.discount,
            "service_charge": self.service_charge,
            "tax": self.tax,
            "delivery_fee": self.delivery_fee,
            "total": self.total,
        }


class OrderCalculationService:
    """Service for calculating order totals: subtotal, discount, service charge, tax and delivery fee."""

    @staticmethod
    def calculate_subtotal(items, guest_count, currency):
        """
        Sum line totals.

        Per-unit items are charged ``unit_price * quantity``. Fixed-per-head
        items are charged ``unit_price * max(1, guest_count)`` once per
        product, however many lines or units reference it.
        """
        subtotal = ZERO
        charged_per_head = set()
        guests = max(1, guest_count or 0)
        for item in items:
            if item.pricing_strategy == Product.PricingStrategy.FIXED_PER_HEAD:
                if item.product_id in charged_per_head:
                    continue
                charged_per_head.add(item.product_id)
                subtotal += item.unit_price * guests
            else:
                subtotal += item.unit_price * item.quantity
        return quantize(currency, subtotal)

    @staticmethod
    def calculate_discount(order, subtotal, restaurant_settings):
        """Discount by amount or percentage, capped at ``max_discount_rate`` of the subtotal."""
        currency = restaurant_settings.currency
        value = order.discount_value or ZERO
        if value <= 0 or subtotal <= 0:
            return quantize(currency, ZERO)

        if order.discount_type == order.DiscountType.PERCENT:
            discount = subtotal * value / Decimal("100")
        else:
            discount = value

        cap = subtotal * restaurant_settings.max_discount_rate
        if discount > cap:
            logger.info(
                f"Discount on order {order.order_number} capped from {discount} to {cap}"
            )
            discount = cap
        return quantize(currency, min(discount, subtotal))

    @staticmethod
    def calculate_breakdown(order, items=None, restaurant_settings=None) -> OrderBreakdown:
        """
        Compute the full cost breakdown for ``order`` without saving it.

        Service charge applies to the discounted subtotal; tax applies to the
        discounted subtotal plus service charge; delivery orders add the
        order's delivery fee or the restaurant default.
        """
        restaurant_settings = restaurant_settings or get_restaurant_settings(order.tenant)
        currency = restaurant_settings.currency
        if items is None:
            items = list(order.items.all())

        subtotal = OrderCalculationService.calculate_subtotal(items, order.guest_count, currency)
        discount = OrderCalculationService.calculate_discount(order, subtotal, restaurant_settings)
        discounted = subtotal - discount

        service_charge = ZERO
        if order.order_type in (restaurant_settings.service_charge_order_types or []):
            service_charge = quantize(currency, discounted * restaurant_settings.service_charge_rate)

        tax = ZERO
        if order.order_type in (restaurant_settings.tax_order_types or []):
            tax = quantize(currency, (discounted + service_charge) * restaurant_settings.tax_rate)

        delivery_fee = ZERO
        if order.is_delivery:
            fee = order.delivery_fee_override
            if fee is None:
                fee = restaurant_settings.delivery_fee_default
            delivery_fee = quantize(currency, fee)

        total = quantize(currency, discounted + service_charge + tax + delivery_fee)
        return OrderBreakdown(
            subtotal=subtotal,
            discount=discount,
            service_charge=quantize(currency, service_charge),
            tax=quantize(currency, tax),
            delivery_fee=delivery_fee,
            total=total,
        )

    @staticmethod
    def apply_breakdown(order, breakdown: OrderBreakdown):
        """Copy a breakdown onto the order; returns the changed field names."""
        order.subtotal = breakdown.subtotal
        order.discount_amount = breakdown.discount
        order.service_charge = breakdown.service_charge
        order.tax = breakdown.tax
        order.delivery_fee = breakdown.delivery_fee
        order.total = breakdown.total
        return ["subtotal", "discount_amount", "service_charge", "tax", "delivery_fee", "total"]
