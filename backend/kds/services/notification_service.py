from typing import Dict, Any, Iterable
import logging
from channels.layers import get_channel_layer
from asgiref.sync import async_to_sync

from orders.status import ALL_STATIONS

logger = logging.getLogger(__name__)


def station_group_name(tenant_id, station: str) -> str:
    """Channels group for one station of one restaurant."""
    # Group names only allow ASCII alphanumerics, hyphens, underscores and periods
    sanitized = ''.join(c if c.isalnum() or c in '-_.' else '_' for c in station.lower())
    return f"kds_{str(tenant_id).replace('-', '')}_{sanitized}"


class KDSNotificationService:
    """Service for handling KDS WebSocket notifications"""

    def __init__(self):
        self.channel_layer = get_channel_layer()

    def notify_station(self, tenant_id, station: str, message_type: str, data: Dict[str, Any]):
        """Send notification to one station's terminals"""
        if not self.channel_layer:
            logger.warning("No channel layer available for notifications")
            return

        group_name = station_group_name(tenant_id, station)
        try:
            logger.debug(f"Sending {message_type} to station {station} (group: {group_name})")
            async_to_sync(self.channel_layer.group_send)(
                group_name,
                {
                    'type': 'kds_notification',
                    'message_type': message_type,
                    'data': data,
                    'station': station,
                }
            )
        except Exception as e:
            logger.error(f"Error sending notification to station {station}: {e}")

    def notify_stations(self, tenant_id, stations: Iterable[str], message_type: str, data: Dict[str, Any]):
        """Send to every listed station plus the expo screens watching ALL"""
        targets = {station.lower() for station in stations if station}
        targets.add(ALL_STATIONS.lower())
        for station in sorted(targets):
            self.notify_station(tenant_id, station, message_type, data)

    def order_changed_notification(self, order, stations, reason: str):
        data = {
            'order_id': str(order.id),
            'order_number': order.order_number,
            'status': order.status,
            'version': order.version,
            'reason': reason,
            'timestamp': self._get_timestamp(),
        }
        self.notify_stations(order.tenant_id, stations, 'order_changed', data)

    def _get_timestamp(self):
        """Get current timestamp in ISO format"""
        from django.utils import timezone
        return timezone.now().isoformat()


# Global instance for easy access
notification_service = KDSNotificationService()
