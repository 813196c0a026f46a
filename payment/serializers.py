from rest_framework import serializers

from payment.choices import TransactionStatusChoices
from payment.models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Transaction
        fields = "__all__"


class AdminTransactionSerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()

    class Meta:
        model = Transaction
        fields = "__all__"

    def get_user(self, obj):
        return {"id": obj.user.id, "username": obj.user.username, "email": obj.user.email}


class WithdrawSerializer(serializers.Serializer):
    amount = serializers.DecimalField(required=True, max_digits=14, decimal_places=4, min_value=0)
    payment_method = serializers.CharField(required=True, max_length=100)
    account_details = serializers.JSONField(required=True, help_text="Payout destination, e.g. bank name and account number")


class DepositSerializer(serializers.Serializer):
    amount = serializers.DecimalField(required=True, max_digits=14, decimal_places=4, min_value=0)
    payment_method = serializers.CharField(required=True, max_length=100)
    reference_id = serializers.CharField(required=False, allow_blank=True, max_length=255)


class ConvertEarningsSerializer(serializers.Serializer):
    amount = serializers.DecimalField(required=True, max_digits=14, decimal_places=4, min_value=0)


class RejectTransactionSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class UpdateTransactionStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TransactionStatusChoices.choices)
    reason = serializers.CharField(required=False, allow_blank=True, default="")
