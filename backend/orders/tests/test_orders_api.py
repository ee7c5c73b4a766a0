"""
Orders API integration tests.

The request middleware clears the tenant context when a request finishes,
so tests re-establish it before touching the ORM directly.
"""
import pytest
from decimal import Decimal
from rest_framework import status

from tenant.managers import set_current_tenant
from orders.models import Order, OrderItem


@pytest.mark.django_db
class TestOrderEndpoints:
    """Create, fire and move items through the REST API"""

    def test_requires_authentication(self, api_client, tenant_a):
        response = api_client.get('/api/orders/')
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_and_fire_order(self, waiter_client, tenant_a, restaurant_settings, karahi, naan):
        response = waiter_client.post(
            '/api/orders/',
            {
                'order_type': 'DINE_IN',
                'guest_count': 2,
                'items': [
                    {'product_id': str(karahi.id), 'quantity': 1},
                    {'product_id': str(naan.id), 'quantity': 4, 'notes': 'extra butter'},
                ],
            },
            format='json',
        )
        assert response.status_code == status.HTTP_201_CREATED
        data = response.data
        assert data['status'] == 'DRAFT'
        assert Decimal(data['total']) == Decimal('1200.00')
        assert [item['position'] for item in data['items']] == [0, 1]

        response = waiter_client.post(
            f"/api/orders/{data['id']}/fire/", {'expected_version': data['version']}, format='json'
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'FIRED'
        assert all(item['status'] == 'FIRED' for item in response.data['items'])

    def test_item_status_endpoint_aggregates(self, kitchen_client, tenant_a, make_order, karahi):
        order = make_order([(karahi, 1)], fire=True)

        response = kitchen_client.post(
            f'/api/orders/{order.pk}/items/0/status/', {'status': 'READY'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'READY'
        assert response.data['items'][0]['status'] == 'READY'

    def test_stale_version_returns_conflict(self, waiter_client, tenant_a, make_order, karahi, naan):
        order = make_order([(karahi, 1)])
        stale = order.version
        set_current_tenant(tenant_a)
        order.commit(['customer_name'], action='edited elsewhere')

        response = waiter_client.put(
            f'/api/orders/{order.pk}/items/',
            {'expected_version': stale, 'items': [{'product_id': str(naan.id), 'quantity': 1}]},
            format='json',
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        set_current_tenant(tenant_a)
        assert OrderItem.objects.filter(order_id=order.pk).count() == 1

    def test_editing_fired_item_is_rejected(self, waiter_client, tenant_a, make_order, karahi):
        order = make_order([(karahi, 1)], fire=True)

        response = waiter_client.patch(
            f'/api/orders/{order.pk}/items/', {'items': [{'position': 0, 'quantity': 3}]}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'can no longer be changed' in response.data['error']

    def test_void_requires_reason(self, manager_client, tenant_a, make_order, karahi):
        order = make_order([(karahi, 1)], fire=True)

        response = manager_client.post(f'/api/orders/{order.pk}/void/', {}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

        response = manager_client.post(f'/api/orders/{order.pk}/void/', {'reason': 'Kitchen error'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'VOID'

    def test_orders_are_not_visible_across_tenants(
        self, client_for, tenant_a, make_order, karahi, manager_user_tenant_b
    ):
        order = make_order([(karahi, 1)])

        response = client_for(manager_user_tenant_b).get(f'/api/orders/{order.pk}/')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_filter_by_status(self, manager_client, tenant_a, make_order, karahi):
        make_order([(karahi, 1)])
        fired = make_order([(karahi, 1)], fire=True)

        response = manager_client.get('/api/orders/', {'status': 'FIRED'})

        assert response.status_code == status.HTTP_200_OK
        ids = [row['id'] for row in response.data['results']]
        assert ids == [str(fired.pk)]

    def test_orders_cannot_be_deleted(self, manager_client, tenant_a, make_order, karahi):
        order = make_order([(karahi, 1)])

        response = manager_client.delete(f'/api/orders/{order.pk}/')

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED
        set_current_tenant(tenant_a)
        assert Order.objects.filter(pk=order.pk).exists()
