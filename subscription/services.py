import logging

from dateutil.relativedelta import relativedelta
from django.db import transaction
from django.utils import timezone

from account.choices import BalanceAccountChoices
from common.exceptions import InvalidState
from payment import ledger
from payment.choices import TransactionTypeChoices
from subscription.choices import SubscriptionPlanChoices, SubscriptionStatusChoices
from subscription.models import SubscriptionPlan, UserSubscription

logger = logging.getLogger(__name__)


def get_or_create_subscription(user) -> UserSubscription:
    """Return the user's subscription, starting them on the free basic plan when they have none"""
    subscription = UserSubscription.objects.select_related("plan").filter(user=user).first()
    if subscription:
        return subscription
    plan = SubscriptionPlan.objects.filter(name=SubscriptionPlanChoices.BASIC).first()
    if plan is None:
        plan = SubscriptionPlan.objects.create(name=SubscriptionPlanChoices.BASIC, price=0, features=["basic_job_posting", "limited_applications"])
    subscription, _ = UserSubscription.objects.get_or_create(user=user, defaults={"plan": plan})
    return subscription


def purchase_subscription(user, plan: SubscriptionPlan) -> UserSubscription:
    """
    Subscribe the user to plan for plan.duration_months. A paid plan debits its price from the
    deposit balance with one payment Transaction; a free plan writes nothing to the ledger.
    """
    if not plan.is_active:
        raise InvalidState("This plan is not available")

    now = timezone.now()
    with transaction.atomic():
        payment_txn = None
        if plan.price > 0:
            payment_txn = ledger.debit(
                user,
                BalanceAccountChoices.DEPOSIT,
                plan.price,
                TransactionTypeChoices.PAYMENT,
                f"Subscription payment for {plan.name} plan",
            )
        subscription, _ = UserSubscription.objects.update_or_create(
            user=user,
            defaults={
                "plan": plan,
                "status": SubscriptionStatusChoices.ACTIVE,
                "start_date": now,
                "end_date": now + relativedelta(months=plan.duration_months),
                "payment_transaction": payment_txn,
            },
        )

    logger.info(f"User '{user.username}' subscribed to plan '{plan.name}'")
    return subscription
