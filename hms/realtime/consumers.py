import json

from channels.generic.websocket import AsyncWebsocketConsumer

from hms.services.broadcast import BED_BOARD_GROUP


class BedBoardConsumer(AsyncWebsocketConsumer):
    """Live ward/bed occupancy feed for signed-in staff."""
    GROUP = BED_BOARD_GROUP

    async def connect(self):
        user = self.scope.get("user")
        if user is None or not user.is_authenticated:
            await self.close(code=4401)
            return
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def bed_changed(self, event):
        # event: {"type": "bed.changed", "bedId": ..., "wardId": ..., "bedNumber": ..., "status": ...}
        await self.send(json.dumps(event))
