from drf_spectacular.utils import extend_schema
from rest_framework import generics, permissions

from common.responses import ErrorResponse, SuccessResponse

from .models import Activity, Notification
from .serializers import ActivitySerializer, NotificationSerializer


class NotificationListView(generics.ListAPIView):
    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = Notification.objects.filter(user=self.request.user)
        if self.request.query_params.get("unread") in ("1", "true"):
            queryset = queryset.filter(is_read=False)
        return queryset

    @extend_schema(summary="List the notifications of the logged in user, newest first")
    def get(self, request, *args, **kwargs):
        page = self.paginate_queryset(self.get_queryset())
        serializer = self.get_serializer(page, many=True)
        data = self.get_paginated_response(serializer.data).data
        data["unread_count"] = Notification.objects.filter(user=request.user, is_read=False).count()
        return SuccessResponse(data=data)


class MarkNotificationReadView(generics.GenericAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = NotificationSerializer

    @extend_schema(summary="Mark one notification as read", request=None)
    def post(self, request, notification_id):
        updated = Notification.objects.filter(id=notification_id, user=request.user).update(is_read=True)
        if not updated:
            return ErrorResponse(message="Notification not found", status=404)
        return SuccessResponse(message="Notification marked as read")


class MarkAllNotificationsReadView(generics.GenericAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = NotificationSerializer

    @extend_schema(summary="Mark every notification of the logged in user as read", request=None)
    def post(self, request):
        count = Notification.objects.filter(user=request.user, is_read=False).update(is_read=True)
        return SuccessResponse(message=f"{count} notifications marked as read")


class RecentActivityView(generics.ListAPIView):
    serializer_class = ActivitySerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None

    def get_queryset(self):
        return Activity.objects.filter(is_public=True).select_related("user", "job")[:20]

    @extend_schema(summary="Public feed of recent marketplace activity")
    def get(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return SuccessResponse(data=serializer.data)
