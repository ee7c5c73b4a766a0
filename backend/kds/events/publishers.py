import logging

from django.db import transaction

from ..services.notification_service import notification_service

logger = logging.getLogger(__name__)


class KDSEventPublisher:
    """Centralized event publishing for KDS events"""

    @staticmethod
    def order_changed(order, stations, reason: str):
        """Publish an order change to the stations whose items it touches"""
        try:
            stations = sorted({station for station in stations if station})
            logger.info(f"Publishing order_changed ({reason}) for {order.order_number} to {stations}")

            # Terminals reload from the database, so broadcast only after commit
            if transaction.get_connection().in_atomic_block:
                transaction.on_commit(lambda: KDSEventPublisher._send_order_changed(order, stations, reason))
            else:
                KDSEventPublisher._send_order_changed(order, stations, reason)

        except Exception as e:
            logger.error(f"Error publishing order_changed event: {e}")

    @staticmethod
    def _send_order_changed(order, stations, reason):
        try:
            notification_service.order_changed_notification(order, stations, reason)
        except Exception as e:
            logger.error(f"Error sending order_changed notification: {e}")
