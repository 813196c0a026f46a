from django.conf import settings
from django.db.models import Count, Sum
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status

from common.exceptions import LedgerError
from common.responses import ErrorResponse, SuccessResponse, format_first_error, ledger_error_response
from payment.choices import TransactionStatusChoices, TransactionTypeChoices
from payment.models import Transaction
from referral.models import Referral, ReferralSetting
from referral.serializers import ApplyReferralCodeSerializer, ReferralSerializer, ReferralSettingSerializer
from referral.services import apply_referral_code


class MyReferralCodeView(generics.GenericAPIView):
    @extend_schema(summary="Get the current user's referral code and share link")
    def get(self, request, *args, **kwargs):
        code = request.user.referral_code
        return SuccessResponse(
            message="Referral code",
            data={"referral_code": code, "referral_link": f"{settings.FRONTEND_URL}/register?ref={code}"},
        )


class MyReferralsView(generics.ListAPIView):
    serializer_class = ReferralSerializer

    def get_queryset(self):
        return Referral.objects.select_related("referred").filter(referrer=self.request.user)

    @extend_schema(summary="List the users the current user has referred")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class ReferralEarningsView(generics.GenericAPIView):
    @extend_schema(summary="Summary of the commission earned from referrals")
    def get(self, request, *args, **kwargs):
        totals = Referral.objects.filter(referrer=request.user).aggregate(
            total_referrals=Count("id"),
            deposit_earnings=Sum("deposit_earnings"),
            task_earnings=Sum("task_earnings"),
            total_earnings=Sum("total_earnings"),
        )
        paid = Transaction.objects.filter(
            user=request.user,
            transaction_type=TransactionTypeChoices.REFERRAL,
            status=TransactionStatusChoices.COMPLETED,
        ).aggregate(total=Sum("amount"))
        return SuccessResponse(
            message="Referral earnings",
            data={
                "total_referrals": totals["total_referrals"],
                "deposit_earnings": totals["deposit_earnings"] or 0,
                "task_earnings": totals["task_earnings"] or 0,
                "total_earnings": totals["total_earnings"] or 0,
                "total_paid": paid["total"] or 0,
            },
        )


class ApplyReferralCodeView(generics.GenericAPIView):
    serializer_class = ApplyReferralCodeSerializer

    @extend_schema(summary="Apply a referral code to the current user")
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors), status=status.HTTP_400_BAD_REQUEST)

        try:
            referral = apply_referral_code(request.user, serializer.validated_data["referral_code"])
        except LedgerError as e:
            return ledger_error_response(e)
        return SuccessResponse(message="Referral code applied", data={"referrer": referral.referrer.username})


class ReferralSettingsView(generics.ListAPIView):
    """Commission percentage per referral generation, as configured by admins"""
    serializer_class = ReferralSettingSerializer
    queryset = ReferralSetting.objects.all()
    pagination_class = None

    @extend_schema(summary="List the configured referral commission rates per generation")
    def get(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_queryset(), many=True)
        return SuccessResponse(message="Referral settings", data=serializer.data)
