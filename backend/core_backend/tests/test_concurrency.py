"""
Conflict handling across terminals.

Two terminals acting on the same order must never both win: stale
versions come back as HTTP 409 and engine errors map onto HTTP codes
in one place.
"""
import pytest
from django.core.exceptions import ObjectDoesNotExist
from django.db import IntegrityError
from rest_framework import status

from core_backend.exceptions import (
    ConcurrentModificationError,
    DrawerSessionError,
    InvalidTransitionError,
    engine_exception_handler,
    error_response,
)
from orders.models import Order, OrderItem
from tenant.managers import set_current_tenant


class TestExceptionMapping:
    """engine_exception_handler turns engine errors into responses"""

    def test_engine_errors_are_bad_requests(self):
        response = engine_exception_handler(DrawerSessionError("Drawer already open"), {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"error": "Drawer already open"}

    def test_concurrent_modification_is_conflict(self):
        exc = ConcurrentModificationError("Order ORD-00001", expected_version=3, actual_version=4)

        response = error_response(exc)

        assert response.status_code == status.HTTP_409_CONFLICT
        assert "expected version 3, found 4" in response.data["error"]

    def test_transition_error_message(self):
        exc = InvalidTransitionError("Order", "PAID", "FIRED")

        assert str(exc) == "Cannot transition Order from PAID to FIRED"
        assert isinstance(exc, ValueError)

    def test_missing_objects_are_not_found(self):
        response = engine_exception_handler(ObjectDoesNotExist("Order matching query does not exist."), {})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_integrity_errors_are_conflicts(self):
        response = engine_exception_handler(IntegrityError("duplicate key"), {})

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_unknown_errors_fall_through(self):
        assert engine_exception_handler(RuntimeError("boom"), {}) is None


@pytest.mark.django_db
class TestStaleTerminals:
    """A terminal holding an old version is told to reload"""

    def test_stale_payment_is_rejected(self, cashier_client, tenant_a, make_ready_order, karahi):
        order = make_ready_order([(karahi, 1)])
        stale = order.version - 1

        response = cashier_client.post(
            f'/api/orders/{order.pk}/pay/',
            {'method': 'CARD', 'expected_version': stale},
            format='json',
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        set_current_tenant(tenant_a)
        order.refresh_from_db()
        assert order.status == Order.OrderStatus.READY

    def test_stale_kitchen_bump_is_rejected(self, kitchen_client, tenant_a, make_order, karahi):
        order = make_order([(karahi, 1)], fire=True)

        response = kitchen_client.post(
            f'/api/kds/orders/{order.pk}/items/0/advance/',
            {'terminal_id': 'hot-1', 'expected_version': order.version + 5},
            format='json',
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        set_current_tenant(tenant_a)
        assert OrderItem.objects.get(order_id=order.pk).status == OrderItem.ItemStatus.FIRED

    def test_current_version_is_accepted(self, kitchen_client, tenant_a, make_order, karahi):
        order = make_order([(karahi, 1)], fire=True)

        response = kitchen_client.post(
            f'/api/orders/{order.pk}/items/0/status/',
            {'status': 'PREPARING', 'expected_version': order.version},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['version'] == order.version + 1

    def test_second_of_two_identical_commands_loses(self, waiter_client, tenant_a, make_order, karahi):
        order = make_order([(karahi, 1)])
        payload = {'expected_version': order.version}

        first = waiter_client.post(f'/api/orders/{order.pk}/fire/', payload, format='json')
        second = waiter_client.post(f'/api/orders/{order.pk}/fire/', payload, format='json')

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_409_CONFLICT
