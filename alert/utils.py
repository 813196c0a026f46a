"""
Fire-and-forget side effects of ledger operations.

These run after the money has already moved, so they log their failures and return None
instead of raising.
"""

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from alert.models import Activity, Notification

logger = logging.getLogger(__name__)


def notification_group_name(user_id):
    return f"user_notifications_{user_id}"


def dispatch_notification_message(receiver_id, payload):
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return
    async_to_sync(channel_layer.group_send)(
        notification_group_name(receiver_id),
        {"type": "notification.message", "text": {"action": "new_notification", **payload}},
    )


def create_notification(user_id, notification_type, title, message, link="", related_job=None, related_work=None):
    try:
        notification = Notification.objects.create(
            user_id=user_id,
            notification_type=notification_type,
            title=title,
            message=message,
            link=link,
            related_job=related_job,
            related_work=related_work,
        )
    except Exception:
        logger.exception(f"Failed to create '{notification_type}' notification for user {user_id}")
        return None

    try:
        dispatch_notification_message(
            user_id,
            {
                "id": notification.id,
                "type": notification.notification_type,
                "title": notification.title,
                "message": notification.message,
                "link": notification.link,
                "is_read": notification.is_read,
                "created_at": notification.created_at.isoformat(),
            },
        )
    except Exception as e:
        logger.warning(f"Realtime notification to user {user_id} failed: {e}")
    return notification


def create_activity(user_id, activity_type, job=None, work=None, message="", amount=0, is_public=False):
    try:
        return Activity.objects.create(
            user_id=user_id,
            activity_type=activity_type,
            job=job,
            work=work,
            message=message,
            amount=amount,
            is_public=is_public,
        )
    except Exception:
        logger.exception(f"Failed to record '{activity_type}' activity for user {user_id}")
        return None
