"""
Typed metadata for Transaction rows.

Each transaction type that carries metadata has one serializer describing its keys; the
metadata of a type without a schema must be empty. Keys a schema does not declare are rejected.
"""

from rest_framework import serializers
from rest_framework.settings import api_settings

from common.exceptions import InvalidMetadata
from payment.choices import TransactionTypeChoices
from referral.choices import ReferralSourceChoices


class StrictMetadataSerializer(serializers.Serializer):
    def to_internal_value(self, data):
        if not isinstance(data, dict):
            raise serializers.ValidationError({api_settings.NON_FIELD_ERRORS_KEY: ["Metadata must be an object"]})
        unknown = set(data) - set(self.fields)
        if unknown:
            raise serializers.ValidationError(
                {api_settings.NON_FIELD_ERRORS_KEY: [f"Unknown metadata keys: {', '.join(sorted(unknown))}"]}
            )
        return super().to_internal_value(data)


class WithdrawalMetadataSerializer(StrictMetadataSerializer):
    account_details = serializers.JSONField()
    payment_method = serializers.CharField(max_length=100)


class ConversionMetadataSerializer(StrictMetadataSerializer):
    gross_amount = serializers.DecimalField(max_digits=14, decimal_places=4)
    fee = serializers.DecimalField(max_digits=14, decimal_places=4)
    net_amount = serializers.DecimalField(max_digits=14, decimal_places=4)


class ReferralMetadataSerializer(StrictMetadataSerializer):
    referred_user_id = serializers.IntegerField()
    original_amount = serializers.DecimalField(max_digits=14, decimal_places=4)
    source = serializers.ChoiceField(choices=ReferralSourceChoices.choices)


class RefundMetadataSerializer(StrictMetadataSerializer):
    reason = serializers.CharField(required=False, allow_blank=True)


class RejectionMetadataSerializer(StrictMetadataSerializer):
    rejection_reason = serializers.CharField(allow_blank=True)
    rejected_by = serializers.IntegerField()
    rejected_at = serializers.DateTimeField()


METADATA_SERIALIZERS = {
    TransactionTypeChoices.WITHDRAWAL: WithdrawalMetadataSerializer,
    TransactionTypeChoices.CONVERSION: ConversionMetadataSerializer,
    TransactionTypeChoices.REFERRAL: ReferralMetadataSerializer,
    TransactionTypeChoices.DEPOSIT: RefundMetadataSerializer,
    TransactionTypeChoices.REFUND: RefundMetadataSerializer,
}


def _run(serializer_class, metadata):
    serializer = serializer_class(data=metadata)
    if not serializer.is_valid():
        raise InvalidMetadata(f"Invalid transaction metadata: {serializer.errors}")
    return dict(serializer.validated_data)


def validate_metadata(transaction_type, metadata):
    """Validate the metadata recorded when a Transaction of the given type is created"""
    metadata = metadata or {}
    serializer_class = METADATA_SERIALIZERS.get(transaction_type)
    if serializer_class is None:
        if metadata:
            raise InvalidMetadata(f"{transaction_type} transactions do not carry metadata")
        return {}
    return _run(serializer_class, metadata)


def validate_rejection_metadata(metadata):
    """Validate the annotation merged into a pending Transaction when it is failed or cancelled"""
    return _run(RejectionMetadataSerializer, metadata or {})
