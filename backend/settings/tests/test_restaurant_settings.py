"""
Restaurant settings tests.
"""
import pytest
from decimal import Decimal
from django.core.exceptions import ImproperlyConfigured, ValidationError

from settings.config import get_restaurant_settings
from settings.models import RestaurantSettings
from tenant.managers import set_current_tenant


@pytest.mark.django_db
class TestRestaurantSettings:
    def test_defaults_are_created_lazily(self, tenant_a):
        assert not RestaurantSettings.all_objects.exists()

        restaurant_settings = get_restaurant_settings(tenant_a)

        assert restaurant_settings.currency == "PKR"
        assert restaurant_settings.tax_rate == Decimal("0.16")
        assert restaurant_settings.service_charge_rate == Decimal("0.05")
        assert restaurant_settings.service_charge_order_types == ["DINE_IN"]
        assert restaurant_settings.require_rider_shift is True
        assert restaurant_settings.kds_undo_depth == 10

    def test_same_row_is_returned(self, tenant_a):
        assert get_restaurant_settings(tenant_a).pk == get_restaurant_settings().pk
        assert RestaurantSettings.all_objects.count() == 1

    def test_each_restaurant_has_its_own_settings(self, tenant_a, tenant_b):
        get_restaurant_settings(tenant_a)
        other = get_restaurant_settings(tenant_b)

        assert other.tenant == tenant_b
        assert RestaurantSettings.all_objects.count() == 2

    def test_requires_tenant(self, tenant_a):
        set_current_tenant(None)

        with pytest.raises(ImproperlyConfigured):
            get_restaurant_settings()

    def test_undo_depth_is_capped(self, tenant_a):
        restaurant_settings = get_restaurant_settings(tenant_a)
        restaurant_settings.kds_undo_depth = 11

        with pytest.raises(ValidationError):
            restaurant_settings.full_clean()
