import json
from channels.generic.websocket import AsyncWebsocketConsumer

QUEUE_GROUP = "queue"


class QueueUpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes ``queue.changed`` events to live queue screens."""
    GROUP = QUEUE_GROUP

    async def connect(self):
        user = self.scope.get("user")
        if not (user and getattr(user, "is_authenticated", False)):
            await self.close(code=4001)
            return
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def queue_changed(self, event):
        # event: {"type": "queue.changed", "reason": "...", "entryId": int, "ts": "..."}
        await self.send(json.dumps(event))
