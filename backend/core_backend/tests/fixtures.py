"""
Shared test fixtures for all backend tests.

This module provides reusable pytest fixtures for common test objects
like tenants, staff, menu items, tables and riders, plus small builders
for orders in a given lifecycle state.
"""
import pytest
from decimal import Decimal

from tenant.models import Tenant
from tenant.managers import set_current_tenant
from users.models import User
from products.models import Product, Category
from orders.models import Order, OrderItem
from orders.services import OrderService, OrderItemService
from floor.models import Table
from delivery.models import Driver
from settings.config import get_restaurant_settings


# ============================================================================
# TENANT FIXTURES
# ============================================================================

@pytest.fixture
def tenant_a(db):
    """Create test tenant A (Karachi Grill) and make it the current tenant"""
    tenant = Tenant.objects.create(
        name='Karachi Grill',
        slug='karachi-grill',
        is_active=True
    )
    set_current_tenant(tenant)
    return tenant


@pytest.fixture
def tenant_b(db):
    """Create test tenant B (Lahore Tikka House); does not touch the tenant context"""
    return Tenant.objects.create(
        name='Lahore Tikka House',
        slug='lahore-tikka',
        is_active=True
    )


@pytest.fixture
def restaurant_settings(tenant_a):
    """
    Settings for tenant A with no tax, service charge or delivery fee,
    so order totals equal the item prices.
    """
    restaurant_settings = get_restaurant_settings(tenant_a)
    restaurant_settings.tax_rate = Decimal('0')
    restaurant_settings.service_charge_rate = Decimal('0')
    restaurant_settings.delivery_fee_default = Decimal('0')
    restaurant_settings.save()
    return restaurant_settings


# ============================================================================
# USER FIXTURES
# ============================================================================

def _make_user(tenant, email, role, first_name=''):
    return User.objects.create_user(
        email=email,
        password='password123',
        tenant=tenant,
        role=role,
        first_name=first_name,
        is_pos_staff=True,
    )


@pytest.fixture
def manager_user(tenant_a):
    return _make_user(tenant_a, 'manager@grill.pk', User.Role.MANAGER, 'Maryam')


@pytest.fixture
def cashier_user(tenant_a):
    return _make_user(tenant_a, 'cashier@grill.pk', User.Role.CASHIER, 'Bilal')


@pytest.fixture
def waiter_user(tenant_a):
    return _make_user(tenant_a, 'waiter@grill.pk', User.Role.WAITER, 'Sana')


@pytest.fixture
def kitchen_user(tenant_a):
    return _make_user(tenant_a, 'kitchen@grill.pk', User.Role.KITCHEN, 'Usman')


@pytest.fixture
def manager_user_tenant_b(tenant_b):
    return _make_user(tenant_b, 'manager@tikka.pk', User.Role.MANAGER, 'Hina')


# ============================================================================
# MENU FIXTURES
# ============================================================================

@pytest.fixture
def category(tenant_a):
    return Category.objects.create(tenant=tenant_a, name='Mains')


@pytest.fixture
def karahi(tenant_a, category):
    """Per-unit hot station item (Rs 1,000)"""
    return Product.objects.create(
        tenant=tenant_a,
        name='Chicken Karahi',
        category=category,
        price=Decimal('1000.00'),
        station='hot',
    )


@pytest.fixture
def naan(tenant_a, category):
    """Per-unit tandoor item (Rs 50)"""
    return Product.objects.create(
        tenant=tenant_a,
        name='Naan',
        category=category,
        price=Decimal('50.00'),
        station='tandoor',
    )


@pytest.fixture
def buffet(tenant_a, category):
    """Fixed-per-head item (Rs 2,000 per guest)"""
    return Product.objects.create(
        tenant=tenant_a,
        name='Hi-Tea Buffet',
        category=category,
        price=Decimal('2000.00'),
        station='hot',
        pricing_strategy=Product.PricingStrategy.FIXED_PER_HEAD,
    )


# ============================================================================
# FLOOR AND DELIVERY FIXTURES
# ============================================================================

@pytest.fixture
def table(tenant_a):
    return Table.objects.create(tenant=tenant_a, name='T4', section='Main Hall', capacity=4)


@pytest.fixture
def driver(tenant_a):
    """Rider profile for a DRIVER user; starts OFF_DUTY with no cash"""
    user = _make_user(tenant_a, 'rider@grill.pk', User.Role.DRIVER, 'Imran')
    return Driver.objects.create(tenant=tenant_a, user=user, phone='03001234567')


@pytest.fixture
def second_driver(tenant_a):
    user = _make_user(tenant_a, 'rider2@grill.pk', User.Role.DRIVER, 'Kashif')
    return Driver.objects.create(tenant=tenant_a, user=user, phone='03007654321')


# ============================================================================
# ORDER BUILDERS
# ============================================================================

@pytest.fixture
def make_order(tenant_a, restaurant_settings, waiter_user):
    """
    Build an order from ``(product, quantity)`` pairs.

    Usage:
        order = make_order([(karahi, 2)], fire=True)
    """
    def _make(lines, order_type=Order.OrderType.DINE_IN, fire=False, **kwargs):
        if order_type == Order.OrderType.DELIVERY:
            kwargs.setdefault('customer_phone', '03211112222')
            kwargs.setdefault('delivery_address', 'House 12, Block 5, Clifton')
        order = OrderService.create_order(
            tenant=tenant_a,
            order_type=order_type,
            created_by=waiter_user,
            items=[{'product_id': product.id, 'quantity': quantity} for product, quantity in lines],
            **kwargs,
        )
        if fire:
            order = OrderService.fire_order(order.pk, user=waiter_user)
        order.refresh_from_db()
        return order
    return _make


@pytest.fixture
def make_ready_order(make_order, kitchen_user):
    """Fire an order and mark every item READY through the item status command"""
    def _make(lines, **kwargs):
        order = make_order(lines, fire=True, **kwargs)
        for position in OrderItem.objects.filter(order=order).values_list('position', flat=True):
            OrderItemService.set_item_status(order.pk, position, OrderItem.ItemStatus.READY, user=kitchen_user)
        order.refresh_from_db()
        return order
    return _make


@pytest.fixture
def product_priced(tenant_a, category):
    """Create a one-off hot station product with the given price"""
    def _make(price, name=None, station='hot'):
        return Product.objects.create(
            tenant=tenant_a,
            name=name or f'Special {price}',
            category=category,
            price=Decimal(str(price)),
            station=station,
        )
    return _make
