import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

from apps.notifications.models import Notification

logger = logging.getLogger(__name__)


def user_group(user_id):
    return f"user_{user_id}"


def push_notification(notif):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    async_to_sync(channel_layer.group_send)(
        user_group(notif.recipient_id),
        {
            "type": "send_notification",
            "id": notif.id,
            "title": notif.title,
            "message": notif.message,
            "notif_type": notif.notif_type,
            "link": notif.link,
            "data": notif.data,
            "created_at": notif.created_at.isoformat(),
            "is_read": notif.is_read,
        }
    )


def notify_user(recipient, notif_type, title, message="", link="", data=None):
    """
    Store a notification and push it to the recipient's websocket group
    once the surrounding transaction commits.
    """
    if data is None:
        data = {}

    notif = Notification.objects.create(
        recipient=recipient,
        notif_type=notif_type,
        title=title,
        message=message,
        link=link,
        data=data,
    )

    transaction.on_commit(lambda: _safe_push(notif))
    return notif


def _safe_push(notif):
    # The row is already stored; a broken channel layer only loses the live push
    try:
        push_notification(notif)
    except Exception:
        logger.exception("Failed to push notification %s", notif.id)
