import json

from channels.exceptions import DenyConnection
from channels.generic.websocket import AsyncWebsocketConsumer

from alert.tasks import ADMIN_STATS_GROUP
from alert.utils import notification_group_name


class NotificationConsumer(AsyncWebsocketConsumer):
    async def connect(self):
        me = self.scope['user']
        if not me.is_anonymous:
            self.user_group_name = notification_group_name(me.id)
            await self.channel_layer.group_add(
                self.user_group_name,
                self.channel_name
            )
            await self.accept()
        else:
            raise DenyConnection("Authentication failed")

    async def disconnect(self, code):
        if hasattr(self, 'user_group_name'):
            await self.channel_layer.group_discard(self.user_group_name, self.channel_name)

    async def notification_message(self, event):
        await self.send(text_data=json.dumps(event['text'], default=str))


class AdminStatsConsumer(AsyncWebsocketConsumer):
    async def connect(self):
        me = self.scope['user']
        if me.is_anonymous or not me.is_platform_admin:
            raise DenyConnection("Only admins can subscribe to dashboard stats")
        await self.channel_layer.group_add(ADMIN_STATS_GROUP, self.channel_name)
        await self.accept()

    async def disconnect(self, code):
        await self.channel_layer.group_discard(ADMIN_STATS_GROUP, self.channel_name)

    async def stats_message(self, event):
        await self.send(text_data=json.dumps(event['text'], default=str))
