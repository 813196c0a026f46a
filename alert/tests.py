from decimal import Decimal
from unittest import mock

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from account.models import CustomUser
from alert.choices import ActivityTypeChoices, NotificationTypeChoices
from alert.models import Activity, Notification
from alert.tasks import collect_admin_stats, queue_admin_stats_broadcast
from alert.utils import create_activity, create_notification


def create_user(username):
    return CustomUser.objects.create_user(username=username, email=f"{username}@gmail.com", password="123456789ASas@")


class SideEffectHelpersTestCase(TestCase):
    def setUp(self):
        self.user = create_user("alerted")

    def test_create_notification(self):
        notification = create_notification(self.user.id, NotificationTypeChoices.SYSTEM, "Hello", "Welcome aboard", link="/home")
        self.assertEqual(notification.user, self.user)
        self.assertFalse(notification.is_read)

    def test_notification_survives_realtime_failure(self):
        with mock.patch("alert.utils.get_channel_layer", side_effect=RuntimeError("redis down")):
            notification = create_notification(self.user.id, NotificationTypeChoices.PAYMENT, "Paid", "You were paid")
        self.assertIsNotNone(notification)
        self.assertEqual(Notification.objects.count(), 1)

    def test_failed_notification_returns_none(self):
        with mock.patch.object(Notification.objects, "create", side_effect=RuntimeError("database unavailable")):
            with self.assertLogs("alert.utils", level="ERROR"):
                self.assertIsNone(create_notification(self.user.id, NotificationTypeChoices.SYSTEM, "Lost", "Never stored"))

    def test_create_activity(self):
        activity = create_activity(self.user.id, ActivityTypeChoices.PAYMENT_RECEIVED, message="Deposited $5", amount=Decimal("5"))
        self.assertFalse(activity.is_public)
        self.assertEqual(Activity.objects.count(), 1)

    def test_stats_broadcast_never_raises(self):
        with mock.patch("alert.tasks.broadcast_admin_stats") as task:
            task.delay.side_effect = RuntimeError("broker down")
            queue_admin_stats_broadcast()
        task.delay.assert_called_once()

    def test_collect_admin_stats(self):
        stats = collect_admin_stats()
        self.assertEqual(stats["users"]["total"], 1)
        self.assertEqual(len(stats["graph_data"]), 7)
        self.assertEqual(stats["graph_data"][-1]["users"], 1)


class NotificationApiTestCase(APITestCase):
    def setUp(self):
        self.user = create_user("reader")
        self.other = create_user("other")
        for i in range(3):
            create_notification(self.user.id, NotificationTypeChoices.SYSTEM, f"Note {i}", "Body")
        create_notification(self.other.id, NotificationTypeChoices.SYSTEM, "Not yours", "Body")
        token = RefreshToken.for_user(self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")

    def test_list_own_notifications(self):
        response = self.client.get(reverse("alert:notifications"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["count"], 3)
        self.assertEqual(response.data["data"]["unread_count"], 3)

    def test_mark_read(self):
        notification = Notification.objects.filter(user=self.user).first()
        response = self.client.post(reverse("alert:notification-read", kwargs={"notification_id": notification.id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        notification.refresh_from_db()
        self.assertTrue(notification.is_read)

    def test_cannot_mark_someone_elses_notification(self):
        notification = Notification.objects.get(user=self.other)
        response = self.client.post(reverse("alert:notification-read", kwargs={"notification_id": notification.id}))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_mark_all_read(self):
        self.client.post(reverse("alert:notifications-read-all"))
        self.assertFalse(Notification.objects.filter(user=self.user, is_read=False).exists())
        self.assertTrue(Notification.objects.filter(user=self.other, is_read=False).exists())

    def test_public_activity_feed(self):
        create_activity(self.user.id, ActivityTypeChoices.JOB_POSTED, message="posted", is_public=True)
        create_activity(self.user.id, ActivityTypeChoices.PAYMENT_RECEIVED, message="private")
        self.client.credentials()
        response = self.client.get(reverse("alert:recent-activity"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["data"]), 1)
