from channels.generic.websocket import AsyncJsonWebsocketConsumer
import logging

from .events.publishers import floor_group_name

logger = logging.getLogger(__name__)


class FloorConsumer(AsyncJsonWebsocketConsumer):
    """Read-only feed of table changes for floor plan terminals"""

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            await self.close()
            return

        self.group_name = floor_group_name(user.tenant_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        logger.info(f"Floor WebSocket connected for tenant {user.tenant_id}")

    async def disconnect(self, close_code):
        if hasattr(self, "group_name"):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def floor_notification(self, event):
        await self.send_json({"type": event["message_type"], "data": event["data"]})
