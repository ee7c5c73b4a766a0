import uuid
from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _
from tenant.managers import TenantManager


class Category(models.Model):
    """Menu category; only its name is read by the order engine."""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='categories',
    )
    name = models.CharField(max_length=100, help_text=_("Name of the menu category."))
    order = models.IntegerField(
        default=0,
        help_text=_("Display order for this category. Lower numbers appear first."),
    )

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        verbose_name_plural = "categories"
        ordering = ['order', 'name']
        constraints = [
            models.UniqueConstraint(fields=['tenant', 'name'], name='unique_category_name_per_tenant'),
        ]

    def __str__(self):
        return self.name


class Product(models.Model):
    """
    A menu item. Maintained by the catalog screens; the order engine only
    reads its price, station and pricing strategy.
    """

    class PricingStrategy(models.TextChoices):
        UNIT = "UNIT", _("Per Unit")
        FIXED_PER_HEAD = "FIXED_PER_HEAD", _("Fixed Per Head")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    tenant = models.ForeignKey(
        'tenant.Tenant',
        on_delete=models.CASCADE,
        related_name='products',
    )
    name = models.CharField(max_length=200)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products',
    )
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    station = models.CharField(
        max_length=50,
        default="kitchen",
        help_text=_("Kitchen station that prepares this item (e.g., hot, grill, bar)."),
    )
    pricing_strategy = models.CharField(
        max_length=20,
        choices=PricingStrategy.choices,
        default=PricingStrategy.UNIT,
        help_text=_("Fixed-per-head items are charged once per guest regardless of quantity."),
    )
    is_available = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantManager()
    all_objects = models.Manager()

    class Meta:
        ordering = ['name']
        indexes = [
            models.Index(fields=['tenant', 'station'], name='product_station_idx'),
            models.Index(fields=['tenant', 'is_available'], name='product_available_idx'),
        ]

    def __str__(self):
        return self.name
