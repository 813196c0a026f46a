from django.urls import path

from payment.choices import TransactionTypeChoices
from . import apis

app_name = 'payment'
urlpatterns = [
    path('user/transactions/', apis.FetchUserTransactionHistoryView.as_view(), name='fetch-user-transaction-history'),
    path('withdraw/', apis.WithdrawView.as_view(), name='withdraw'),
    path('deposit/', apis.DepositView.as_view(), name='deposit'),
    path('convert/', apis.ConvertEarningsView.as_view(), name='convert-earnings'),
    # Admin settlement endpoints
    path('admin/withdrawals/', apis.AdminPendingTransactionsView.as_view(transaction_type=TransactionTypeChoices.WITHDRAWAL), name='admin-list-withdrawals'),
    path('admin/withdrawals/<uuid:transaction_id>/approve/', apis.ApproveWithdrawalView.as_view(), name='approve-withdrawal'),
    path('admin/withdrawals/<uuid:transaction_id>/reject/', apis.RejectWithdrawalView.as_view(), name='reject-withdrawal'),
    path('admin/deposits/', apis.AdminPendingTransactionsView.as_view(transaction_type=TransactionTypeChoices.DEPOSIT), name='admin-list-deposits'),
    path('admin/deposits/<uuid:transaction_id>/approve/', apis.ApproveDepositView.as_view(), name='approve-deposit'),
    path('admin/deposits/<uuid:transaction_id>/reject/', apis.RejectDepositView.as_view(), name='reject-deposit'),
    path('admin/transactions/<uuid:transaction_id>/status/', apis.UpdateTransactionStatusView.as_view(), name='update-transaction-status'),
]
