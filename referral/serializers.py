from rest_framework import serializers

from account.serializers import SimpleUserSerializer
from .models import Referral, ReferralSetting


class ReferralSerializer(serializers.ModelSerializer):
    referred = SimpleUserSerializer(read_only=True)

    class Meta:
        model = Referral
        fields = [
            "id",
            "referred",
            "referral_code",
            "deposit_earnings",
            "task_earnings",
            "total_earnings",
            "status",
            "first_deposit_date",
            "first_task_date",
            "created_at",
        ]


class ReferralSettingSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReferralSetting
        fields = ["generation", "percentage"]


class ApplyReferralCodeSerializer(serializers.Serializer):
    referral_code = serializers.CharField(max_length=20)
