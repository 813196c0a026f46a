from rest_framework import serializers

from account.serializers import SimpleUserSerializer
from .models import Activity, Notification


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ["id", "notification_type", "title", "message", "link", "is_read", "related_job", "related_work", "created_at"]


class ActivitySerializer(serializers.ModelSerializer):
    user = SimpleUserSerializer()
    job_title = serializers.CharField(source="job.title", default=None, read_only=True)

    class Meta:
        model = Activity
        fields = ["id", "user", "activity_type", "job", "job_title", "amount", "message", "created_at"]
