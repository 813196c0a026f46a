"""
Ledger primitives.

These are the only functions that move money between a user's balances and the outside
world. Each one changes a balance with a conditional F() update and writes the Transaction
that describes the change inside the same database transaction, so a balance and its
ledger entry are never out of step.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from account.choices import BalanceAccountChoices
from account.models import CustomUser
from common.exceptions import AlreadyProcessed, InsufficientBalance, InvalidAmount, InvalidState, NotFound
from payment.choices import TransactionStatusChoices, TransactionTypeChoices
from payment.metadata import validate_metadata, validate_rejection_metadata
from payment.models import Transaction
from payment.signals import invalidate_user_transaction_cache

logger = logging.getLogger(__name__)

MONEY_PLACES = Decimal("0.0001")

# Pending entries that move money only when settled, and the balance they settle into.
PENDING_CREDIT_ACCOUNTS = {
    TransactionTypeChoices.DEPOSIT: BalanceAccountChoices.DEPOSIT,
}
# Pending entries whose amount was reserved at request time, and the balance it came from.
PENDING_DEBIT_ACCOUNTS = {
    TransactionTypeChoices.WITHDRAWAL: BalanceAccountChoices.EARNING,
}


def to_money(amount) -> Decimal:
    """Coerce an amount to a positive Decimal with four decimal places"""
    try:
        value = Decimal(str(amount)).quantize(MONEY_PLACES)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Invalid amount: {amount}")
    if value <= 0:
        raise InvalidAmount("Amount must be greater than zero")
    return value


def _refresh_balances(user):
    user.refresh_from_db(fields=["deposit_balance", "earning_balance", "total_earnings", "completed_jobs", "active_jobs"])


def credit(user, account, amount, transaction_type, description, *, related_job=None, related_work=None,
           metadata=None, increment_total_earnings=False, extra_counters=None, reference_id=None, payment_method=""):
    """
    Increase one of the user's balances and append a completed Transaction for the same amount.

    extra_counters maps counter fields (completed_jobs, active_jobs) to a positive delta
    applied in the same update, e.g. {"completed_jobs": 1} on a work payout.
    """
    amount = to_money(amount)
    metadata = validate_metadata(transaction_type, metadata)
    field = CustomUser.balance_field(account)

    updates = {field: F(field) + amount}
    if increment_total_earnings:
        updates["total_earnings"] = F("total_earnings") + amount
    for counter, delta in (extra_counters or {}).items():
        updates[counter] = F(counter) + delta

    with transaction.atomic():
        if not CustomUser.objects.filter(pk=user.pk).update(**updates):
            raise NotFound("User not found")
        txn = Transaction.objects.create(
            user=user,
            transaction_type=transaction_type,
            amount=amount,
            status=TransactionStatusChoices.COMPLETED,
            description=description,
            related_job=related_job,
            related_work=related_work,
            metadata=metadata,
            reference_id=reference_id,
            payment_method=payment_method,
        )

    _refresh_balances(user)
    logger.info(f"Credited {amount} to {account} balance of '{user.username}' ({transaction_type}, txn {txn.id})")
    return txn


def debit(user, account, amount, transaction_type, description, *, status=TransactionStatusChoices.COMPLETED,
          related_job=None, related_work=None, metadata=None, reference_id=None, payment_method=""):
    """
    Decrease one of the user's balances and append a Transaction for the same amount.

    The balance is only decremented when it covers the amount; otherwise InsufficientBalance is
    raised and nothing is written. A pending status is used for reservations (withdrawals)
    that an admin settles later with settle_pending or fail_pending.
    """
    amount = to_money(amount)
    metadata = validate_metadata(transaction_type, metadata)
    field = CustomUser.balance_field(account)

    with transaction.atomic():
        updated = CustomUser.objects.filter(pk=user.pk, **{f"{field}__gte": amount}).update(**{field: F(field) - amount})
        if not updated:
            if not CustomUser.objects.filter(pk=user.pk).exists():
                raise NotFound("User not found")
            raise InsufficientBalance(f"Insufficient {account} balance")
        txn = Transaction.objects.create(
            user=user,
            transaction_type=transaction_type,
            amount=amount,
            status=status,
            description=description,
            related_job=related_job,
            related_work=related_work,
            metadata=metadata,
            reference_id=reference_id,
            payment_method=payment_method,
        )

    _refresh_balances(user)
    logger.info(f"Debited {amount} from {account} balance of '{user.username}' ({transaction_type}, txn {txn.id})")
    return txn


def record_pending_credit(user, amount, transaction_type, description, *, reference_id=None, payment_method="", metadata=None):
    """Open a pending entry whose balance change happens only when it is settled (a deposit awaiting verification)"""
    if transaction_type not in PENDING_CREDIT_ACCOUNTS:
        raise InvalidState(f"{transaction_type} transactions cannot be recorded as pending credits")
    amount = to_money(amount)
    txn = Transaction.objects.create(
        user=user,
        transaction_type=transaction_type,
        amount=amount,
        status=TransactionStatusChoices.PENDING,
        description=description,
        reference_id=reference_id,
        payment_method=payment_method,
        metadata=validate_metadata(transaction_type, metadata),
    )
    logger.info(f"Recorded pending {transaction_type} of {amount} for '{user.username}' (txn {txn.id})")
    return txn


def _transition_pending(txn, new_status, metadata):
    locked = Transaction.objects.select_for_update().get(pk=txn.pk)
    merged = {**(locked.metadata or {}), **(metadata or {})}
    updated = Transaction.objects.filter(pk=txn.pk, status=TransactionStatusChoices.PENDING).update(
        status=new_status, metadata=merged, updated_at=timezone.now()
    )
    if not updated:
        raise AlreadyProcessed(f"Transaction has already been {locked.status}")
    return locked


def settle_pending(txn, *, metadata=None):
    """
    Move a pending Transaction to completed.

    For a pending credit (deposit awaiting approval) the balance is credited now; a pending
    debit (withdrawal) already had its amount reserved, so only the status changes.
    """
    with transaction.atomic():
        locked = _transition_pending(txn, TransactionStatusChoices.COMPLETED, metadata)
        account = PENDING_CREDIT_ACCOUNTS.get(locked.transaction_type)
        if account:
            field = CustomUser.balance_field(account)
            CustomUser.objects.filter(pk=locked.user_id).update(**{field: F(field) + locked.amount})

    txn.refresh_from_db()
    invalidate_user_transaction_cache(txn.user_id)
    logger.info(f"Settled pending {txn.transaction_type} txn {txn.id} of {txn.amount}")
    return txn


def fail_pending(txn, *, status=TransactionStatusChoices.FAILED, metadata=None):
    """
    Move a pending Transaction to failed or cancelled, merging a rejection annotation into its metadata.

    For a pending debit the reserved amount is credited back to the balance it was taken
    from; a pending credit never moved money, so nothing is refunded.
    """
    if status not in (TransactionStatusChoices.FAILED, TransactionStatusChoices.CANCELLED):
        raise InvalidState(f"A pending transaction cannot be failed into '{status}'")
    annotation = validate_rejection_metadata(metadata) if metadata else {}

    with transaction.atomic():
        locked = _transition_pending(txn, status, annotation)
        account = PENDING_DEBIT_ACCOUNTS.get(locked.transaction_type)
        if account:
            field = CustomUser.balance_field(account)
            CustomUser.objects.filter(pk=locked.user_id).update(**{field: F(field) + locked.amount})

    txn.refresh_from_db()
    invalidate_user_transaction_cache(txn.user_id)
    logger.info(f"Pending {txn.transaction_type} txn {txn.id} of {txn.amount} marked {status}")
    return txn


def convert_earning_to_deposit(user, amount, fee_rate):
    """
    Move amount out of the earning balance and amount less the fee into the deposit balance,
    recorded as a single conversion Transaction carrying the gross, fee and net amounts.
    """
    amount = to_money(amount)
    fee = (amount * Decimal(fee_rate)).quantize(MONEY_PLACES)
    net_amount = amount - fee
    metadata = validate_metadata(
        TransactionTypeChoices.CONVERSION,
        {"gross_amount": amount, "fee": fee, "net_amount": net_amount},
    )

    with transaction.atomic():
        updated = CustomUser.objects.filter(pk=user.pk, earning_balance__gte=amount).update(
            earning_balance=F("earning_balance") - amount,
            deposit_balance=F("deposit_balance") + net_amount,
        )
        if not updated:
            raise InsufficientBalance("Insufficient earning balance")
        txn = Transaction.objects.create(
            user=user,
            transaction_type=TransactionTypeChoices.CONVERSION,
            amount=amount,
            status=TransactionStatusChoices.COMPLETED,
            description=f"Converted ${amount} earnings to deposit balance (fee ${fee})",
            metadata=metadata,
        )

    _refresh_balances(user)
    logger.info(f"Converted {amount} earnings of '{user.username}' into {net_amount} deposit (fee {fee})")
    return txn
