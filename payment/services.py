import logging

from django.utils import timezone

from account.choices import BalanceAccountChoices
from alert.choices import ActivityTypeChoices, NotificationTypeChoices
from alert.tasks import queue_admin_stats_broadcast
from alert.utils import create_activity, create_notification
from common.exceptions import AlreadyProcessed, InvalidAmount, InvalidState, Unauthorized
from common.utils import get_ledger_setting
from payment import ledger
from payment.choices import TransactionStatusChoices, TransactionTypeChoices
from payment.models import Transaction
from referral.choices import ReferralSourceChoices
from referral.services import process_referral_earnings


logger = logging.getLogger(__name__)


def _ensure_admin(admin):
    if not admin.is_platform_admin:
        raise Unauthorized("Only admins can settle transactions")


def _ensure_type(txn, transaction_type):
    if txn.transaction_type != transaction_type:
        raise InvalidState(f"Transaction is a {txn.transaction_type}, not a {transaction_type}")


def _rejection(admin, reason):
    return {"rejection_reason": reason or "", "rejected_by": admin.id, "rejected_at": timezone.now()}


def request_withdrawal(user, amount, payment_method, account_details) -> Transaction:
    """
    Reserve amount from the earning balance for a payout. The money leaves the balance now
    and the pending Transaction waits for an admin to approve or reject it.
    """
    txn = ledger.debit(
        user,
        BalanceAccountChoices.EARNING,
        amount,
        TransactionTypeChoices.WITHDRAWAL,
        f"Withdrawal request via {payment_method}",
        status=TransactionStatusChoices.PENDING,
        payment_method=payment_method,
        metadata={"account_details": account_details, "payment_method": payment_method},
    )
    queue_admin_stats_broadcast()
    return txn


def approve_withdrawal(txn, admin) -> Transaction:
    _ensure_admin(admin)
    _ensure_type(txn, TransactionTypeChoices.WITHDRAWAL)
    txn = ledger.settle_pending(txn)
    logger.info(f"Withdrawal {txn.id} of {txn.amount} approved by '{admin.username}'")

    create_notification(
        txn.user_id,
        NotificationTypeChoices.PAYMENT,
        "Withdrawal Approved",
        f"Your withdrawal of ${txn.amount} has been approved",
        link="/wallet",
    )
    queue_admin_stats_broadcast()
    return txn


def reject_withdrawal(txn, admin, reason="", status=TransactionStatusChoices.FAILED) -> Transaction:
    _ensure_admin(admin)
    _ensure_type(txn, TransactionTypeChoices.WITHDRAWAL)
    txn = ledger.fail_pending(txn, status=status, metadata=_rejection(admin, reason))
    logger.info(f"Withdrawal {txn.id} of {txn.amount} rejected by '{admin.username}', amount returned to earning balance")

    create_notification(
        txn.user_id,
        NotificationTypeChoices.PAYMENT,
        "Withdrawal Rejected",
        f"Your withdrawal of ${txn.amount} was rejected and refunded to your earning balance. {reason}".strip(),
        link="/wallet",
    )
    queue_admin_stats_broadcast()
    return txn


def request_deposit(user, amount, payment_method, reference_id=None) -> Transaction:
    """Record a deposit that credits the deposit balance only once an admin verifies the payment"""
    if reference_id and Transaction.objects.filter(reference_id=reference_id).exists():
        raise AlreadyProcessed("A deposit with this reference has already been submitted")
    txn = ledger.record_pending_credit(
        user,
        amount,
        TransactionTypeChoices.DEPOSIT,
        f"Deposit via {payment_method}",
        reference_id=reference_id or None,
        payment_method=payment_method,
    )
    queue_admin_stats_broadcast()
    return txn


def approve_deposit(txn, admin) -> Transaction:
    _ensure_admin(admin)
    _ensure_type(txn, TransactionTypeChoices.DEPOSIT)
    txn = ledger.settle_pending(txn)
    logger.info(f"Deposit {txn.id} of {txn.amount} approved by '{admin.username}'")

    process_referral_earnings(txn.user_id, ReferralSourceChoices.DEPOSIT, txn.amount)
    create_notification(
        txn.user_id,
        NotificationTypeChoices.PAYMENT,
        "Deposit Approved",
        f"Your deposit of ${txn.amount} has been added to your balance",
        link="/wallet",
    )
    create_activity(
        txn.user_id,
        ActivityTypeChoices.PAYMENT_RECEIVED,
        message=f"Deposited ${txn.amount}",
        amount=txn.amount,
    )
    queue_admin_stats_broadcast()
    return txn


def reject_deposit(txn, admin, reason="", status=TransactionStatusChoices.FAILED) -> Transaction:
    _ensure_admin(admin)
    _ensure_type(txn, TransactionTypeChoices.DEPOSIT)
    txn = ledger.fail_pending(txn, status=status, metadata=_rejection(admin, reason))
    logger.info(f"Deposit {txn.id} of {txn.amount} rejected by '{admin.username}'")

    create_notification(
        txn.user_id,
        NotificationTypeChoices.PAYMENT,
        "Deposit Rejected",
        f"Your deposit of ${txn.amount} could not be verified. {reason}".strip(),
        link="/wallet",
    )
    queue_admin_stats_broadcast()
    return txn


APPROVAL_HANDLERS = {
    TransactionTypeChoices.WITHDRAWAL: approve_withdrawal,
    TransactionTypeChoices.DEPOSIT: approve_deposit,
}
REJECTION_HANDLERS = {
    TransactionTypeChoices.WITHDRAWAL: reject_withdrawal,
    TransactionTypeChoices.DEPOSIT: reject_deposit,
}


def update_transaction_status(txn, new_status, admin, reason="") -> Transaction:
    """
    Admin override for a transaction's status. Only the settlements above are allowed, so a
    status change always carries the balance movement that goes with it.
    """
    _ensure_admin(admin)
    if not txn.is_pending:
        raise AlreadyProcessed(f"Transaction has already been {txn.status}")

    if new_status == TransactionStatusChoices.COMPLETED:
        handler = APPROVAL_HANDLERS.get(txn.transaction_type)
        if handler:
            return handler(txn, admin)
    elif new_status in (TransactionStatusChoices.FAILED, TransactionStatusChoices.CANCELLED):
        handler = REJECTION_HANDLERS.get(txn.transaction_type)
        if handler:
            return handler(txn, admin, reason, status=new_status)
    raise InvalidState(f"Cannot move a pending {txn.transaction_type} to {new_status}")


def convert_earnings(user, amount) -> Transaction:
    """Convert part of the earning balance into deposit balance, less the conversion fee"""
    amount = ledger.to_money(amount)
    minimum = get_ledger_setting("conversion_min_amount")
    if amount < minimum:
        raise InvalidAmount(f"Minimum conversion amount is ${minimum}")
    txn = ledger.convert_earning_to_deposit(user, amount, get_ledger_setting("conversion_fee_rate"))
    queue_admin_stats_broadcast()
    return txn
