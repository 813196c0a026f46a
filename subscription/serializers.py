from rest_framework import serializers
from .models import SubscriptionPlan, UserSubscription


class SubscriptionPlanSerializer(serializers.ModelSerializer):
    class Meta:
        model = SubscriptionPlan
        fields = ["id", "name", "price", "duration_months", "features"]


class UserSubscriptionSerializer(serializers.ModelSerializer):
    plan = SubscriptionPlanSerializer()
    is_active = serializers.BooleanField(read_only=True)

    class Meta:
        model = UserSubscription
        fields = ["plan", "status", "start_date", "end_date", "is_active"]


class SubscribeRequestSerializer(serializers.Serializer):
    plan = serializers.CharField()

    def validate_plan(self, value):
        try:
            return SubscriptionPlan.objects.get(name=value.lower())
        except SubscriptionPlan.DoesNotExist:
            raise serializers.ValidationError("Invalid plan")
