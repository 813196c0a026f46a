import logging
from decimal import Decimal

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from account.choices import BalanceAccountChoices
from account.models import CustomUser
from alert.choices import NotificationTypeChoices
from alert.utils import create_notification
from common.exceptions import AlreadyProcessed, InvalidState, NotFound
from common.utils import get_ledger_setting
from payment import ledger
from payment.choices import TransactionTypeChoices
from referral.choices import ReferralSourceChoices, ReferralStatusChoices
from referral.models import Referral

logger = logging.getLogger(__name__)

SOURCE_FIELDS = {
    ReferralSourceChoices.DEPOSIT: ("deposit_earnings", "first_deposit_date"),
    ReferralSourceChoices.TASK: ("task_earnings", "first_task_date"),
}


def process_referral_earnings(user_id, source, amount):
    """
    Pay the referrer of user_id a commission on an amount the user was just credited.

    This runs after the triggering payout has committed and must never undo it: every error is
    logged and swallowed. Returns the commission Transaction, or None when nothing was paid.
    """
    try:
        user = CustomUser.objects.filter(pk=user_id).first()
        if user is None or not user.referred_by_id:
            return None
        referral = Referral.objects.select_related("referrer").filter(
            referred=user, status=ReferralStatusChoices.ACTIVE
        ).first()
        if referral is None:
            return None

        rate = get_ledger_setting("referral_commission_rate")
        commission = (Decimal(str(amount)) * rate).quantize(ledger.MONEY_PLACES)
        if commission <= 0:
            return None

        earnings_field, first_date_field = SOURCE_FIELDS[source]
        referred_name = user.name or user.username
        with transaction.atomic():
            Referral.objects.filter(pk=referral.pk).update(
                **{earnings_field: F(earnings_field) + commission, "total_earnings": F("total_earnings") + commission}
            )
            Referral.objects.filter(pk=referral.pk, **{f"{first_date_field}__isnull": True}).update(
                **{first_date_field: timezone.now()}
            )
            txn = ledger.credit(
                referral.referrer,
                BalanceAccountChoices.EARNING,
                commission,
                TransactionTypeChoices.REFERRAL,
                f"Referral commission from {referred_name}",
                increment_total_earnings=True,
                metadata={"referred_user_id": user.pk, "original_amount": amount, "source": source},
            )

        logger.info(f"Paid {commission} referral commission to '{referral.referrer.username}' for {source} of '{user.username}'")
        create_notification(
            referral.referrer_id,
            NotificationTypeChoices.REFERRAL,
            "Referral Commission",
            f"You earned ${commission} from referral!",
            link="/referrals",
        )
        return txn
    except Exception:
        logger.exception(f"Failed to process referral earnings for user {user_id} ({source}, {amount})")
        return None


def apply_referral_code(user, code) -> Referral:
    """Link user to the owner of code. A user can be referred once and never by themselves."""
    code = (code or "").strip().upper()
    referrer = CustomUser.objects.filter(referral_code=code).first()
    if referrer is None:
        raise NotFound("Invalid referral code")
    if referrer.pk == user.pk:
        raise InvalidState("You cannot use your own referral code")
    if referrer.referred_by_id == user.pk:
        raise InvalidState("You cannot use the code of a user you referred")

    with transaction.atomic():
        if not CustomUser.objects.filter(pk=user.pk, referred_by__isnull=True).update(referred_by=referrer):
            raise AlreadyProcessed("You have already used a referral code")
        if Referral.objects.filter(referred=user).exists():
            raise AlreadyProcessed("You have already used a referral code")
        referral = Referral.objects.create(referrer=referrer, referred=user, referral_code=code)

    user.refresh_from_db(fields=["referred_by"])
    logger.info(f"'{user.username}' joined through the referral code of '{referrer.username}'")
    create_notification(
        referrer.id,
        NotificationTypeChoices.REFERRAL,
        "New Referral",
        f"{user.name or user.username} joined using your referral code",
        link="/referrals",
    )
    return referral
