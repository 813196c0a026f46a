from django.urls import path
from . import apis

app_name = 'alert'
urlpatterns = [
    path('notifications/', apis.NotificationListView.as_view(), name='notifications'),
    path('notifications/<int:notification_id>/read/', apis.MarkNotificationReadView.as_view(), name='notification-read'),
    path('notifications/read-all/', apis.MarkAllNotificationsReadView.as_view(), name='notifications-read-all'),
    path('activity/recent/', apis.RecentActivityView.as_view(), name='recent-activity'),
]
