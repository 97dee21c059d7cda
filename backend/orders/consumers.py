import json
import logging

from channels.generic.websocket import AsyncWebsocketConsumer

from core_backend.infrastructure.broadcast import CHANGES_GROUP

logger = logging.getLogger(__name__)


class OrderingChangesConsumer(AsyncWebsocketConsumer):
    """
    Pushes every change event (order created, status changed, payout...) to
    connected dashboards. Clients re-fetch what they display.
    """

    async def connect(self):
        await self.channel_layer.group_add(CHANGES_GROUP, self.channel_name)
        await self.accept()
        logger.info(f"OrderingChangesConsumer: {self.channel_name} joined {CHANGES_GROUP}")

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(CHANGES_GROUP, self.channel_name)

    async def ordering_change(self, event):
        await self.send(
            text_data=json.dumps({"kind": event["kind"], "entity_id": event.get("entity_id")})
        )
