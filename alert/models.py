from django.db import models

from account.models import CustomUser
from alert.choices import ActivityTypeChoices, NotificationTypeChoices


class Notification(models.Model):
    user = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='notifications')
    notification_type = models.CharField(max_length=30, choices=NotificationTypeChoices.choices)
    title = models.CharField(max_length=255)
    message = models.TextField()
    link = models.CharField(max_length=255, blank=True, default='')
    is_read = models.BooleanField(default=False)
    related_job = models.ForeignKey('job.Job', on_delete=models.SET_NULL, null=True, blank=True, related_name='notifications')
    related_work = models.ForeignKey('job.Work', on_delete=models.SET_NULL, null=True, blank=True, related_name='notifications')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['user', 'is_read', '-created_at'], name='alert_notif_user_read_idx')]

    def __str__(self):
        return f"{self.user.username}: {self.title}"


class Activity(models.Model):
    """Feed entry; public ones show up on the landing page activity feed"""

    user = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='activities')
    activity_type = models.CharField(max_length=30, choices=ActivityTypeChoices.choices)
    job = models.ForeignKey('job.Job', on_delete=models.SET_NULL, null=True, blank=True, related_name='activities')
    work = models.ForeignKey('job.Work', on_delete=models.SET_NULL, null=True, blank=True, related_name='activities')
    amount = models.DecimalField(max_digits=14, decimal_places=4, default=0)
    message = models.CharField(max_length=500, blank=True, default='')
    is_public = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'activities'
        indexes = [models.Index(fields=['is_public', '-created_at'], name='alert_activity_public_idx')]

    def __str__(self):
        return f"{self.user.username} - {self.activity_type}"
