from channels.generic.websocket import AsyncJsonWebsocketConsumer
from channels.db import database_sync_to_async
from django.utils import timezone
import logging

from tenant.managers import set_current_tenant
from tenant.models import Tenant
from .serializers import KDSTicketSerializer
from .services import KDSService, station_group_name

logger = logging.getLogger(__name__)


class KDSConsumer(AsyncJsonWebsocketConsumer):
    """
    Push channel for one kitchen station.

    Terminals send commands over HTTP; this socket only tells them when
    to reload and hands them the current queue on connect and on request.
    """

    async def connect(self):
        user = self.scope.get("user")
        self.station = self.scope["url_route"]["kwargs"].get("station")
        if user is None or not user.is_authenticated or not self.station:
            await self.close()
            return

        self.tenant_id = user.tenant_id
        self.group_name = station_group_name(user.tenant_id, self.station)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        await self.send_queue("initial_data")
        logger.info(f"KDS WebSocket connected: station={self.station}, tenant={user.tenant_id}")

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)
            logger.info(f"KDS WebSocket disconnected: station={self.station}, code={close_code}")

    async def receive_json(self, content, **kwargs):
        action = content.get("action")
        if action == "ping":
            await self.send_json({"type": "pong", "timestamp": timezone.now().isoformat()})
        elif action == "refresh_data":
            await self.send_queue("queue_data")
        else:
            await self.send_json({"type": "error", "message": f"Unknown action: {action}"})

    async def send_queue(self, message_type):
        queue = await database_sync_to_async(self._load_queue)()
        await self.send_json({"type": message_type, "station": self.station, "data": queue})

    def _load_queue(self):
        set_current_tenant(Tenant.objects.get(pk=self.tenant_id))
        try:
            return KDSTicketSerializer(KDSService.station_queue(self.station), many=True).data
        finally:
            set_current_tenant(None)

    async def kds_notification(self, event):
        await self.send_json({"type": event["message_type"], "data": event["data"]})
