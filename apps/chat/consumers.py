import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer

from apps.chat.services.messaging import chat_group

logger = logging.getLogger(__name__)


class ChatConsumer(AsyncWebsocketConsumer):

    async def connect(self):
        self.conversation_id = self.scope.get("url_route", {}).get("kwargs", {}).get("conversation_id")
        self.chat_group_name = chat_group(self.conversation_id)

        allowed = await self.is_participant()
        if not allowed:
            logger.info("Chat socket rejected for conversation %s", self.conversation_id)
            await self.close()
            return

        await self.channel_layer.group_add(
            self.chat_group_name,
            self.channel_name
        )
        await self.accept()

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(
            self.chat_group_name,
            self.channel_name
        )

    async def receive(self, text_data=None, bytes_data=None):
        if text_data is None:
            logger.debug("Ignoring binary frame on conversation %s", self.conversation_id)
            return

        try:
            data = json.loads(text_data)
        except json.JSONDecodeError:
            logger.debug("Ignoring invalid JSON on conversation %s", self.conversation_id)
            return

        if not isinstance(data, dict):
            logger.debug("Ignoring non-object payload on conversation %s", self.conversation_id)
            return

        content = str(data.get("content", "")).strip()
        if not content:
            return

        serialized = await self.create_message(content)

        await self.channel_layer.group_send(
            self.chat_group_name,
            {
                "type": "chat_message",
                "message": serialized
            }
        )

    async def chat_message(self, event):
        await self.send(text_data=json.dumps(event["message"], default=str))

    @database_sync_to_async
    def is_participant(self):
        from apps.chat.models import Conversation

        user = self.scope.get("user")
        if not user or not user.is_authenticated:
            return False

        try:
            conversation = Conversation.objects.get(id=self.conversation_id)
        except Conversation.DoesNotExist:
            return False

        return conversation.has_participant(user)

    @database_sync_to_async
    def create_message(self, content):
        # Lazy imports keep the app registry happy at routing import time
        from apps.chat.models import Conversation
        from apps.chat.serializers import MessageSerializer
        from apps.chat.services.messaging import send_message

        conversation = Conversation.objects.get(id=self.conversation_id)
        message = send_message(conversation, self.scope["user"], content)
        return MessageSerializer(message).data
