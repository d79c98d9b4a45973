from unittest.mock import patch

from channels.db import database_sync_to_async
from channels.layers import get_channel_layer
from channels.testing import WebsocketCommunicator
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.test import TransactionTestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from apps.notifications.consumers import NotificationConsumer
from apps.notifications.models import Notification
from apps.notifications.services.create_notifications import notify_user, user_group

User = get_user_model()


def make_user(username):
    return User.objects.create_user(
        email=f"{username}@example.com",
        username=username,
        password="Str0ng!pass",
        is_verified=True,
    )


class NotifyUserTests(APITestCase):

    def setUp(self):
        self.user = make_user("ada")

    @patch("apps.notifications.services.create_notifications.push_notification")
    def test_push_happens_after_commit(self, push):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            notif = notify_user(self.user, "SYSTEM", "Welcome", "Hello")

        push.assert_not_called()
        self.assertEqual(len(callbacks), 1)

        callbacks[0]()
        push.assert_called_once_with(notif)

    @patch(
        "apps.notifications.services.create_notifications.push_notification",
        side_effect=RuntimeError("layer down"),
    )
    def test_push_failure_keeps_the_row(self, push):
        with self.captureOnCommitCallbacks(execute=True):
            notify_user(self.user, "SYSTEM", "Welcome")

        self.assertEqual(Notification.objects.filter(recipient=self.user).count(), 1)


class NotificationApiTests(APITestCase):

    def setUp(self):
        self.user = make_user("ada")
        self.other = make_user("ben")
        self.first = Notification.objects.create(recipient=self.user, notif_type="SYSTEM", title="First")
        self.second = Notification.objects.create(recipient=self.user, notif_type="SYSTEM", title="Second")
        Notification.objects.create(recipient=self.other, notif_type="SYSTEM", title="Not yours")
        self.client.force_authenticate(self.user)

    def test_list_is_newest_first_and_scoped(self):
        response = self.client.get(reverse("notification-list"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([n["title"] for n in response.data], ["Second", "First"])

    def test_mark_read_and_unread_count(self):
        self.client.post(reverse("notification-read", args=[self.first.id]))

        response = self.client.get(reverse("notification-unread-count"))
        self.assertEqual(response.data, {"unread": 1})

        response = self.client.get(reverse("notification-list"), {"unread": "true"})
        self.assertEqual([n["title"] for n in response.data], ["Second"])

    def test_read_all(self):
        response = self.client.post(reverse("notification-read-all"))

        self.assertEqual(response.data, {"updated": 2})
        self.assertFalse(Notification.objects.get(title="Not yours").is_read)

    def test_cannot_mark_someone_elses_notification(self):
        theirs = Notification.objects.get(title="Not yours")

        response = self.client.post(reverse("notification-read", args=[theirs.id]))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class NotificationConsumerTests(TransactionTestCase):

    async def test_user_receives_pushes_for_their_group(self):
        user = await database_sync_to_async(make_user)("ada")

        socket = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/")
        socket.scope["user"] = user
        connected, _ = await socket.connect()
        self.assertTrue(connected)

        await get_channel_layer().group_send(
            user_group(user.id),
            {"type": "send_notification", "id": 1, "title": "Application accepted"},
        )
        payload = await socket.receive_json_from()

        self.assertEqual(payload, {"id": 1, "title": "Application accepted"})
        await socket.disconnect()

    async def test_anonymous_socket_is_closed(self):
        socket = WebsocketCommunicator(NotificationConsumer.as_asgi(), "/ws/notifications/")
        socket.scope["user"] = AnonymousUser()

        connected, _ = await socket.connect()

        self.assertFalse(connected)
