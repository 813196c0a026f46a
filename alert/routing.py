from django.urls import path

from alert import consumers

websocket_urlpatterns = [
    path("ws/notifications/", consumers.NotificationConsumer.as_asgi()),
    path("ws/admin/stats/", consumers.AdminStatsConsumer.as_asgi()),
]
