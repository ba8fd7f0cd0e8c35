import json

from channels.generic.websocket import AsyncWebsocketConsumer

from opscore.services.notifications import tenant_group


class TenantUpdatesConsumer(AsyncWebsocketConsumer):
    """Pushes tenant-wide events (currently ``shift.archived``) to staff sockets."""

    async def connect(self):
        ctx = self.scope.get('session_ctx')
        if ctx is None:
            await self.close(code=4001)
            return
        self.group_name = tenant_group(ctx.tenant_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()
        await self.send(json.dumps({'type': 'welcome', 'tenantId': str(ctx.tenant_id)}))

    async def disconnect(self, close_code):
        if hasattr(self, 'group_name'):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def shift_archived(self, event):
        await self.send(json.dumps(event))
