"""
Kitchen Display System tests.

Station queues, item bumps, bulk ready with confirmation, and the
per-terminal undo stack.
"""
import pytest
from rest_framework import status

from core_backend.exceptions import ConfirmationRequiredError, InvalidTransitionError
from floor.models import Table
from floor.services import FloorService
from kds.models import KDSUndoEntry
from kds.services import KDSService, station_group_name
from orders.models import Order, OrderItem
from orders.services import OrderItemService, OrderService
from tenant.managers import set_current_tenant

ItemStatus = OrderItem.ItemStatus
OrderStatus = Order.OrderStatus


@pytest.mark.django_db
class TestStationQueue:
    """Which tickets each station sees"""

    def test_draft_orders_are_not_shown(self, make_order, karahi):
        make_order([(karahi, 1)])

        assert KDSService.station_queue("hot") == []

    def test_station_sees_only_its_unfinished_lines(self, make_order, karahi, naan):
        order = make_order([(karahi, 1), (naan, 2)], fire=True)

        hot = KDSService.station_queue("hot")
        tandoor = KDSService.station_queue("tandoor")
        expo = KDSService.station_queue("ALL")

        assert [entry["order"].pk for entry in hot] == [order.pk]
        assert [item.product_name for item in hot[0]["items"]] == ["Chicken Karahi"]
        assert [item.product_name for item in tandoor[0]["items"]] == ["Naan"]
        assert len(expo[0]["items"]) == 2

    def test_ready_lines_drop_off_the_station(self, make_order, karahi, naan, kitchen_user):
        make_order([(karahi, 1), (naan, 2)], fire=True)
        order = Order.objects.get()
        OrderItemService.set_item_status(order.pk, 0, ItemStatus.READY, user=kitchen_user)

        assert KDSService.station_queue("hot") == []
        assert len(KDSService.station_queue("tandoor")) == 1

    def test_station_group_name_is_sanitized(self, tenant_a):
        name = station_group_name(tenant_a.id, "Cold Bar/Desserts")

        assert " " not in name and "/" not in name
        assert name.endswith("cold_bar_desserts")


@pytest.mark.django_db
class TestAdvanceItem:
    """One tap moves a line to its next kitchen status"""

    def test_advance_moves_fired_to_preparing_to_ready(self, make_order, karahi, kitchen_user):
        order = make_order([(karahi, 1)], fire=True)

        KDSService.advance_item(order.pk, 0, "hot-1", user=kitchen_user)
        assert OrderItem.objects.get(order=order).status == ItemStatus.PREPARING

        KDSService.advance_item(order.pk, 0, "hot-1", user=kitchen_user)
        order.refresh_from_db()
        assert order.items.get().status == ItemStatus.READY
        assert order.status == OrderStatus.READY

    def test_advance_ready_item_is_rejected(self, make_ready_order, karahi):
        order = make_ready_order([(karahi, 1)])

        with pytest.raises(InvalidTransitionError):
            KDSService.advance_item(order.pk, 0, "hot-1")

    def test_advance_on_draft_is_rejected(self, make_order, karahi):
        order = make_order([(karahi, 1)])

        with pytest.raises(InvalidTransitionError, match="not on the kitchen display"):
            KDSService.advance_item(order.pk, 0, "hot-1")
        assert not KDSUndoEntry.objects.exists()


@pytest.mark.django_db
class TestReadyAll:
    """Bulk ready needs confirmation"""

    def test_ready_all_requires_confirmation(self, make_order, karahi, kitchen_user):
        order = make_order([(karahi, 2)], fire=True)

        with pytest.raises(ConfirmationRequiredError):
            KDSService.ready_all(order.pk, "hot", confirm=False, terminal_id="hot-1", user=kitchen_user)

        assert OrderItem.objects.get(order=order).status == ItemStatus.FIRED

    def test_ready_all_only_touches_the_station(self, make_order, karahi, naan, kitchen_user):
        order = make_order([(karahi, 1), (naan, 3)], fire=True)

        KDSService.ready_all(order.pk, "hot", confirm=True, terminal_id="hot-1", user=kitchen_user)
        order.refresh_from_db()

        assert order.items.get(position=0).status == ItemStatus.READY
        assert order.items.get(position=1).status == ItemStatus.FIRED
        assert order.status == OrderStatus.FIRED

    def test_ready_all_on_every_station_makes_order_ready(self, make_order, karahi, naan, kitchen_user):
        order = make_order([(karahi, 1), (naan, 3)], fire=True)

        KDSService.ready_all(order.pk, "ALL", confirm=True, terminal_id="expo", user=kitchen_user)
        order.refresh_from_db()

        assert order.status == OrderStatus.READY
        assert set(order.items.values_list("status", flat=True)) == {ItemStatus.READY}


@pytest.mark.django_db
class TestUndo:
    """Per-terminal undo restores the snapshot taken before the action"""

    def test_undo_restores_item_and_order_status(self, make_order, karahi, kitchen_user):
        order = make_order([(karahi, 1)], fire=True)
        KDSService.advance_item(order.pk, 0, "hot-1", user=kitchen_user)
        KDSService.advance_item(order.pk, 0, "hot-1", user=kitchen_user)
        order.refresh_from_db()
        assert order.status == OrderStatus.READY

        restored = KDSService.undo_last_action("hot-1", user=kitchen_user)

        assert restored.status == OrderStatus.PREPARING
        item = OrderItem.objects.get(order=order)
        assert item.status == ItemStatus.PREPARING
        assert item.ready_at is None
        assert restored.last_action_desc.startswith("Undo:")

    def test_undo_stack_is_per_terminal(self, make_order, karahi, naan, kitchen_user):
        order = make_order([(karahi, 1), (naan, 1)], fire=True)
        KDSService.advance_item(order.pk, 0, "hot-1", user=kitchen_user)
        KDSService.advance_item(order.pk, 1, "tandoor-1", user=kitchen_user)

        KDSService.undo_last_action("hot-1", user=kitchen_user)

        assert order.items.get(position=0).status == ItemStatus.FIRED
        assert order.items.get(position=1).status == ItemStatus.PREPARING
        assert KDSService.undo_stack("hot-1").count() == 0
        assert KDSService.undo_stack("tandoor-1").count() == 1

    def test_undo_with_empty_stack_returns_none(self, tenant_a):
        assert KDSService.undo_last_action("nobody") is None

    def test_undo_stack_is_bounded(self, make_order, product_priced, restaurant_settings, kitchen_user):
        restaurant_settings.kds_undo_depth = 3
        restaurant_settings.save()
        products = [product_priced(100 + n, name=f"Dish {n}") for n in range(5)]
        order = make_order([(product, 1) for product in products], fire=True)

        for position in range(5):
            KDSService.advance_item(order.pk, position, "hot-1", user=kitchen_user)

        stack = list(KDSService.undo_stack("hot-1"))
        assert len(stack) == 3
        assert stack[0].items[0]["position"] == 4

    def test_undo_ready_all_restores_every_line(self, make_order, karahi, naan, kitchen_user):
        order = make_order([(karahi, 1), (naan, 1)], fire=True)
        KDSService.advance_item(order.pk, 0, "expo", user=kitchen_user)
        KDSService.ready_all(order.pk, "ALL", confirm=True, terminal_id="expo", user=kitchen_user)

        KDSService.undo_last_action("expo", user=kitchen_user)
        order.refresh_from_db()

        assert order.items.get(position=0).status == ItemStatus.PREPARING
        assert order.items.get(position=1).status == ItemStatus.FIRED
        assert order.status == OrderStatus.PREPARING

    def test_undo_after_payment_is_rejected(self, make_order, karahi, kitchen_user, cashier_user):
        order = make_order([(karahi, 1)], fire=True)
        KDSService.ready_all(order.pk, "hot", confirm=True, terminal_id="hot-1", user=kitchen_user)
        order.refresh_from_db()
        OrderService.mark_paid(order, user=cashier_user)

        with pytest.raises(InvalidTransitionError, match="Cannot undo"):
            KDSService.undo_last_action("hot-1", user=kitchen_user)

        order.refresh_from_db()
        assert order.status == OrderStatus.PAID

    def test_undo_moves_table_back_to_occupied(
        self, make_order, karahi, table, waiter_user, kitchen_user
    ):
        order = make_order([(karahi, 1)])
        FloorService.seat_party(table.pk, 2, waiter=waiter_user, order_id=order.pk)
        OrderService.fire_order(order.pk, user=waiter_user)
        KDSService.ready_all(order.pk, "hot", confirm=True, terminal_id="hot-1", user=kitchen_user)
        table.refresh_from_db()
        assert table.status == Table.TableStatus.PAYMENT_PENDING

        KDSService.undo_last_action("hot-1", user=kitchen_user)
        table.refresh_from_db()

        assert table.status == Table.TableStatus.OCCUPIED


@pytest.mark.django_db
class TestKDSEndpoints:
    """REST surface used by kitchen terminals"""

    def test_queue_endpoint(self, kitchen_client, tenant_a, make_order, karahi, naan):
        order = make_order([(karahi, 1), (naan, 1)], fire=True)

        response = kitchen_client.get('/api/kds/stations/hot/queue/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['order_number'] == order.order_number
        assert [item['product_name'] for item in response.data[0]['items']] == ['Chicken Karahi']

    def test_ready_all_without_confirm_is_rejected(self, kitchen_client, tenant_a, make_order, karahi):
        order = make_order([(karahi, 1)], fire=True)

        response = kitchen_client.post(
            f'/api/kds/orders/{order.pk}/ready-all/',
            {'station': 'hot', 'terminal_id': 'hot-1'},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'confirmation' in response.data['error']

    def test_advance_and_undo_endpoints(self, kitchen_client, tenant_a, make_order, karahi):
        order = make_order([(karahi, 1)], fire=True)

        response = kitchen_client.post(
            f'/api/kds/orders/{order.pk}/items/0/advance/', {'terminal_id': 'hot-1'}, format='json'
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.data['items'][0]['status'] == 'PREPARING'

        response = kitchen_client.get('/api/kds/undo/', {'terminal_id': 'hot-1'})
        assert len(response.data) == 1

        response = kitchen_client.post('/api/kds/undo/', {'terminal_id': 'hot-1'}, format='json')
        assert response.status_code == status.HTTP_200_OK
        assert response.data['items'][0]['status'] == 'FIRED'

        response = kitchen_client.post('/api/kds/undo/', {'terminal_id': 'hot-1'}, format='json')
        assert response.data == {'detail': 'Nothing to undo'}
        set_current_tenant(tenant_a)
        assert not KDSUndoEntry.objects.exists()
