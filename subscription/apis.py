import logging

from drf_spectacular.utils import OpenApiExample, OpenApiResponse, extend_schema
from rest_framework import generics, permissions, status

from common.caching import cache_response_decorator
from common.exceptions import LedgerError
from common.responses import ErrorResponse, SuccessResponse, format_first_error, ledger_error_response

from .models import SubscriptionPlan
from .serializers import SubscribeRequestSerializer, SubscriptionPlanSerializer, UserSubscriptionSerializer
from .services import get_or_create_subscription, purchase_subscription

logger = logging.getLogger(__name__)


class ListSubscriptionPlansView(generics.ListAPIView):
    queryset = SubscriptionPlan.objects.filter(is_active=True)
    serializer_class = SubscriptionPlanSerializer
    permission_classes = [permissions.AllowAny]
    pagination_class = None

    @extend_schema(
        summary="List all available subscription plans",
        responses={200: SubscriptionPlanSerializer(many=True)},
        examples=[
            OpenApiExample(
                "Plans Example",
                value=[
                    {"id": 1, "name": "basic", "price": "0.0000", "duration_months": 1, "features": ["basic_job_posting", "limited_applications"]},
                    {"id": 2, "name": "premium", "price": "9.9900", "duration_months": 1, "features": ["unlimited_job_posting", "priority_support"]},
                ],
                response_only=True,
            )
        ],
    )
    @cache_response_decorator('subscription_plans', cache_timeout=60 * 60)
    def get(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return SuccessResponse(message="Subscription plans", data=serializer.data)


class CurrentSubscriptionView(generics.GenericAPIView):
    permission_classes = [permissions.IsAuthenticated]
    serializer_class = UserSubscriptionSerializer

    @extend_schema(summary="Get current user's subscription status")
    def get(self, request):
        subscription = get_or_create_subscription(request.user)
        return SuccessResponse(message="Current subscription", data=self.get_serializer(subscription).data)


class SubscribeToPlanView(generics.GenericAPIView):
    serializer_class = SubscribeRequestSerializer
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        summary="Subscribe to a plan using the deposit balance",
        request=SubscribeRequestSerializer,
        responses={
            201: UserSubscriptionSerializer,
            400: OpenApiResponse(description="Insufficient deposit balance"),
        },
        examples=[
            OpenApiExample("Subscription Request", value={"plan": "premium"}, request_only=True),
        ],
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors, False))

        try:
            subscription = purchase_subscription(request.user, serializer.validated_data["plan"])
        except LedgerError as e:
            logger.warning(f"User '{request.user.username}' could not subscribe: {e}")
            return ledger_error_response(e)
        except Exception as e:
            logger.error(f"Error subscribing user {request.user.id}: {str(e)}", exc_info=True)
            return ErrorResponse(message="Could not complete subscription", status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return SuccessResponse(message="Subscribed successfully", data=UserSubscriptionSerializer(subscription).data, status=status.HTTP_201_CREATED)
