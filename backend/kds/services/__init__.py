"""
KDS services package.

- KDSService: station queues, item bumps, ready-all and the per-terminal undo stack
- KDSNotificationService: WebSocket fan-out to station groups
"""

from .kds_service import KDSService
from .notification_service import KDSNotificationService, notification_service, station_group_name

__all__ = [
    'KDSService',
    'KDSNotificationService',
    'notification_service',
    'station_group_name',
]
