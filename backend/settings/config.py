"""
Access point for per-restaurant configuration.

Business logic never queries RestaurantSettings directly; it asks this
module, which lazily creates the row from ``settings.RESTAURANT_DEFAULTS``
the first time a restaurant is used.
"""

from decimal import Decimal
import logging

from django.conf import settings as django_settings
from django.core.exceptions import ImproperlyConfigured

from tenant.managers import get_current_tenant

logger = logging.getLogger(__name__)


def get_restaurant_settings(tenant=None):
    """
    Return the RestaurantSettings row for ``tenant`` (or the current tenant).

    Raises:
        ImproperlyConfigured: If no tenant is given and no tenant context is set
    """
    from .models import RestaurantSettings

    tenant = tenant or get_current_tenant()
    if tenant is None:
        raise ImproperlyConfigured("No tenant context available for restaurant settings")

    defaults = getattr(django_settings, "RESTAURANT_DEFAULTS", {})
    restaurant_settings, created = RestaurantSettings.all_objects.get_or_create(
        tenant=tenant,
        defaults={
            "currency": defaults.get("currency", "PKR"),
            "tax_rate": Decimal(str(defaults.get("tax_rate", "0.16"))),
            "service_charge_rate": Decimal(str(defaults.get("service_charge_rate", "0.05"))),
            "delivery_fee_default": Decimal(str(defaults.get("delivery_fee_default", "200"))),
            "max_discount_rate": Decimal(str(defaults.get("max_discount_rate", "0.50"))),
        },
    )
    if created:
        logger.info(f"Created default restaurant settings for tenant {tenant.slug}")
    return restaurant_settings
