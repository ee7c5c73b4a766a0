import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from tenant.managers import TenantManager


def default_service_charge_order_types():
    return ["DINE_IN"]


def default_tax_order_types():
    return ["DINE_IN", "TAKEAWAY", "DELIVERY"]


class RestaurantSettings(models.Model):
    """
    Per-restaurant financial and operational configuration.

    One row per tenant. Read by the calculation, dispatch and KDS services
    through ``settings.config.get_restaurant_settings``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.OneToOneField(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='restaurant_settings',
    )

    currency = models.CharField(
        max_length=3,
        default="PKR",
        help_text=_("ISO 4217 currency code used for rounding and reports."),
    )
    tax_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0.16"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
        help_text=_("Sales tax as a fraction (0.16 = 16%)."),
    )
    service_charge_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0.05"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
        help_text=_("Service charge as a fraction of the discounted subtotal."),
    )
    service_charge_order_types = models.JSONField(
        default=default_service_charge_order_types,
        help_text=_("Order types that carry a service charge."),
    )
    tax_order_types = models.JSONField(
        default=default_tax_order_types,
        help_text=_("Order types that are taxed."),
    )
    delivery_fee_default = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("200.00"),
        help_text=_("Delivery fee applied when an order does not specify one."),
    )
    max_discount_rate = models.DecimalField(
        max_digits=5,
        decimal_places=4,
        default=Decimal("0.50"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("1"))],
        help_text=_("Largest discount allowed, as a fraction of the subtotal."),
    )
    reservation_buffer_minutes = models.PositiveIntegerField(
        default=30,
        help_text=_("Minutes before a reservation during which the table shows as reserved soon."),
    )
    require_rider_shift = models.BooleanField(
        default=True,
        help_text=_("Block dispatch to riders without an open shift."),
    )
    kds_undo_depth = models.PositiveSmallIntegerField(
        default=10,
        validators=[MinValueValidator(1), MaxValueValidator(10)],
        help_text=_("How many kitchen display actions each terminal can undo."),
    )
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name = "restaurant settings"
        verbose_name_plural = "restaurant settings"

    def __str__(self):
        return f"Settings for {self.tenant}"

    def clean(self):
        if self.kds_undo_depth > 10:
            raise ValidationError({"kds_undo_depth": "Undo depth cannot exceed 10."})
