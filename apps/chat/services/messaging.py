import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from apps.chat.models import Conversation, Message

logger = logging.getLogger(__name__)


def chat_group(conversation_id):
    return f"chat_{conversation_id}"


def get_or_create_conversation(user, other):
    """Return the two-person conversation between user and other, creating it if needed."""
    if user.pk == other.pk:
        raise ValidationError("You cannot start a conversation with yourself.")

    existing = (
        Conversation.objects
        .filter(participants=user)
        .filter(participants=other)
        .first()
    )
    if existing:
        return existing, False

    with transaction.atomic():
        conversation = Conversation.objects.create()
        conversation.participants.add(user, other)

    logger.info("Conversation %s created between users %s and %s", conversation.id, user.pk, other.pk)
    return conversation, True


def send_message(conversation, sender, content):
    content = (content or "").strip()
    if not content:
        raise ValidationError({"content": "Message cannot be empty."})

    with transaction.atomic():
        message = Message.objects.create(
            conversation=conversation,
            sender=sender,
            content=content,
        )
        conversation.last_message = content
        conversation.last_message_at = message.created_at
        conversation.save(update_fields=["last_message", "last_message_at"])

    return message


def broadcast_message(message):
    from apps.chat.serializers import MessageSerializer

    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    try:
        async_to_sync(channel_layer.group_send)(
            chat_group(message.conversation_id),
            {
                "type": "chat_message",
                "message": MessageSerializer(message).data,
            }
        )
    except Exception:
        logger.exception("Failed to broadcast message %s", message.id)


def mark_conversation_read(conversation, reader):
    """Mark every message the reader received in this conversation as read."""
    return (
        conversation.messages
        .filter(is_read=False)
        .exclude(sender=reader)
        .update(is_read=True)
    )
