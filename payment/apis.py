import logging

from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated

from account.utils import IsAdminUser
from common.caching import cache_response_decorator
from common.exceptions import LedgerError
from common.responses import ErrorResponse, SuccessResponse, format_first_error, ledger_error_response
from payment import services
from payment.choices import TransactionStatusChoices, TransactionTypeChoices
from payment.models import Transaction
from payment.serializers import (
    AdminTransactionSerializer,
    ConvertEarningsSerializer,
    DepositSerializer,
    RejectTransactionSerializer,
    TransactionSerializer,
    UpdateTransactionStatusSerializer,
    WithdrawSerializer,
)

logger = logging.getLogger(__name__)


class FetchUserTransactionHistoryView(generics.ListAPIView):
    serializer_class = TransactionSerializer

    def get_queryset(self):
        queryset = Transaction.objects.filter(user=self.request.user)
        transaction_type = self.request.query_params.get("type")
        if transaction_type:
            queryset = queryset.filter(transaction_type=transaction_type)
        return queryset

    @extend_schema(summary="Fetch the transaction history for the currently logged in user")
    @cache_response_decorator('user_transaction_history', cache_timeout=60 * 60 * 24, per_user=True)
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class WithdrawView(generics.GenericAPIView):
    serializer_class = WithdrawSerializer

    @extend_schema(summary="Request a withdrawal from the earning balance", description="The amount is reserved immediately and paid out once an admin approves the request")
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors), status=status.HTTP_400_BAD_REQUEST)

        try:
            txn = services.request_withdrawal(request.user, **serializer.validated_data)
        except LedgerError as e:
            return ledger_error_response(e)
        except Exception as e:
            logger.error(f"Error requesting withdrawal for user {request.user.id}: {str(e)}", exc_info=True)
            return ErrorResponse(message="Could not submit withdrawal request", status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return SuccessResponse(message="Withdrawal request submitted", data=TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)


class DepositView(generics.GenericAPIView):
    serializer_class = DepositSerializer

    @extend_schema(summary="Submit a deposit for admin verification")
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors), status=status.HTTP_400_BAD_REQUEST)

        try:
            txn = services.request_deposit(request.user, **serializer.validated_data)
        except LedgerError as e:
            return ledger_error_response(e)
        except Exception as e:
            logger.error(f"Error submitting deposit for user {request.user.id}: {str(e)}", exc_info=True)
            return ErrorResponse(message="Could not submit deposit", status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return SuccessResponse(message="Deposit submitted and awaiting verification", data=TransactionSerializer(txn).data, status=status.HTTP_201_CREATED)


class ConvertEarningsView(generics.GenericAPIView):
    serializer_class = ConvertEarningsSerializer

    @extend_schema(summary="Convert earnings into deposit balance", description="A conversion fee is deducted from the converted amount")
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors), status=status.HTTP_400_BAD_REQUEST)

        try:
            txn = services.convert_earnings(request.user, serializer.validated_data["amount"])
        except LedgerError as e:
            return ledger_error_response(e)
        except Exception as e:
            logger.error(f"Error converting earnings for user {request.user.id}: {str(e)}", exc_info=True)
            return ErrorResponse(message="Could not convert earnings", status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return SuccessResponse(message="Earnings converted", data=TransactionSerializer(txn).data)


class AdminPendingTransactionsView(generics.ListAPIView):
    """Lists pending transactions of one type; transaction_type is set per url"""
    permission_classes = [IsAuthenticated, IsAdminUser]
    serializer_class = AdminTransactionSerializer
    transaction_type = None

    def get_queryset(self):
        queryset = Transaction.objects.select_related("user").filter(transaction_type=self.transaction_type)
        transaction_status = self.request.query_params.get("status", TransactionStatusChoices.PENDING)
        if transaction_status != "all":
            queryset = queryset.filter(status=transaction_status)
        return queryset

    @extend_schema(summary="List withdrawals or deposits (admin only), pending by default")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminSettleTransactionView(generics.GenericAPIView):
    """Base view for approve/reject endpoints that act on one transaction of a given type"""
    permission_classes = [IsAuthenticated, IsAdminUser]
    transaction_type = None

    def get_transaction(self, transaction_id):
        return Transaction.objects.filter(id=transaction_id, transaction_type=self.transaction_type).first()

    def settle(self, request, txn):
        raise NotImplementedError

    def post(self, request, *args, **kwargs):
        txn = self.get_transaction(kwargs.get("transaction_id"))
        if not txn:
            return ErrorResponse(message="Transaction not found", status=status.HTTP_404_NOT_FOUND)

        try:
            return self.settle(request, txn)
        except LedgerError as e:
            return ledger_error_response(e)
        except Exception as e:
            logger.error(f"Error settling transaction {txn.id}: {str(e)}", exc_info=True)
            return ErrorResponse(message="Could not process transaction", status=status.HTTP_500_INTERNAL_SERVER_ERROR)


class ApproveWithdrawalView(AdminSettleTransactionView):
    transaction_type = TransactionTypeChoices.WITHDRAWAL

    @extend_schema(summary="Approve a pending withdrawal (admin only)", request=None)
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def settle(self, request, txn):
        txn = services.approve_withdrawal(txn, request.user)
        return SuccessResponse(message="Withdrawal approved", data=AdminTransactionSerializer(txn).data)


class RejectWithdrawalView(AdminSettleTransactionView):
    transaction_type = TransactionTypeChoices.WITHDRAWAL
    serializer_class = RejectTransactionSerializer

    @extend_schema(summary="Reject a pending withdrawal and refund the earning balance (admin only)")
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def settle(self, request, txn):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        txn = services.reject_withdrawal(txn, request.user, serializer.validated_data["reason"])
        return SuccessResponse(message="Withdrawal rejected", data=AdminTransactionSerializer(txn).data)


class ApproveDepositView(AdminSettleTransactionView):
    transaction_type = TransactionTypeChoices.DEPOSIT

    @extend_schema(summary="Approve a pending deposit and credit the deposit balance (admin only)", request=None)
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def settle(self, request, txn):
        txn = services.approve_deposit(txn, request.user)
        return SuccessResponse(message="Deposit approved", data=AdminTransactionSerializer(txn).data)


class RejectDepositView(AdminSettleTransactionView):
    transaction_type = TransactionTypeChoices.DEPOSIT
    serializer_class = RejectTransactionSerializer

    @extend_schema(summary="Reject a pending deposit (admin only)")
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def settle(self, request, txn):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        txn = services.reject_deposit(txn, request.user, serializer.validated_data["reason"])
        return SuccessResponse(message="Deposit rejected", data=AdminTransactionSerializer(txn).data)


class UpdateTransactionStatusView(generics.GenericAPIView):
    permission_classes = [IsAuthenticated, IsAdminUser]
    serializer_class = UpdateTransactionStatusSerializer

    @extend_schema(summary="Override the status of a pending transaction (admin only)")
    def patch(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors), status=status.HTTP_400_BAD_REQUEST)

        txn = Transaction.objects.filter(id=kwargs.get("transaction_id")).first()
        if not txn:
            return ErrorResponse(message="Transaction not found", status=status.HTTP_404_NOT_FOUND)

        try:
            txn = services.update_transaction_status(
                txn, serializer.validated_data["status"], request.user, serializer.validated_data["reason"]
            )
        except LedgerError as e:
            return ledger_error_response(e)
        return SuccessResponse(message="Transaction status updated", data=AdminTransactionSerializer(txn).data)
