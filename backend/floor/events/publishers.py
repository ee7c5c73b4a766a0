import logging
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

logger = logging.getLogger(__name__)


def floor_group_name(tenant_id) -> str:
    return f"floor_{str(tenant_id).replace('-', '')}"


class FloorEventPublisher:
    """Broadcasts table changes to floor plan terminals"""

    @staticmethod
    def table_changed(table):
        """Publish a table status change once the surrounding transaction commits"""
        try:
            payload = {
                "table_id": str(table.pk),
                "name": table.name,
                "status": table.status,
                "active_order_id": str(table.active_order_id) if table.active_order_id else None,
                "last_status_change": table.last_status_change.isoformat(),
            }
            group = floor_group_name(table.tenant_id)
            if transaction.get_connection().in_atomic_block:
                transaction.on_commit(lambda: FloorEventPublisher._send(group, "table_changed", payload))
            else:
                FloorEventPublisher._send(group, "table_changed", payload)
        except Exception as e:
            logger.error(f"Error publishing table_changed event: {e}")

    @staticmethod
    def _send(group: str, message_type: str, data: dict):
        try:
            channel_layer = get_channel_layer()
            if not channel_layer:
                logger.warning("No channel layer available for notifications")
                return
            async_to_sync(channel_layer.group_send)(
                group,
                {"type": "floor_notification", "message_type": message_type, "data": data},
            )
        except Exception as e:
            logger.error(f"Error sending {message_type} notification to {group}: {e}")
