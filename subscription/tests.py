from decimal import Decimal

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from account.models import CustomUser
from common.exceptions import InsufficientBalance
from payment.choices import TransactionTypeChoices
from payment.models import Transaction
from subscription.choices import SubscriptionPlanChoices, SubscriptionStatusChoices
from subscription.models import SubscriptionPlan, UserSubscription
from subscription.services import purchase_subscription


def create_user(username, deposit=0):
    user = CustomUser.objects.create_user(username=username, email=f"{username}@gmail.com", password="123456789ASas@")
    CustomUser.objects.filter(pk=user.pk).update(deposit_balance=Decimal(deposit))
    user.refresh_from_db()
    return user


class PurchaseSubscriptionTestCase(TestCase):
    def setUp(self):
        call_command("seed_plans")
        self.user = create_user("subscriber", deposit="15")
        self.premium = SubscriptionPlan.objects.get(name=SubscriptionPlanChoices.PREMIUM)
        self.pro = SubscriptionPlan.objects.get(name=SubscriptionPlanChoices.PRO)

    def test_seeded_plans(self):
        self.assertEqual(SubscriptionPlan.objects.count(), 3)
        self.assertEqual(self.premium.price, Decimal("9.99"))
        self.assertIn("api_access", self.pro.features)

    def test_paid_plan_debits_deposit_balance(self):
        subscription = purchase_subscription(self.user, self.premium)

        self.user.refresh_from_db()
        self.assertEqual(self.user.deposit_balance, Decimal("5.01"))
        self.assertEqual(subscription.status, SubscriptionStatusChoices.ACTIVE)
        self.assertTrue(subscription.is_active())
        self.assertGreater(subscription.end_date, subscription.start_date)

        txn = subscription.payment_transaction
        self.assertEqual(txn.transaction_type, TransactionTypeChoices.PAYMENT)
        self.assertEqual(txn.amount, Decimal("9.99"))

    def test_insufficient_balance_keeps_current_plan(self):
        purchase_subscription(self.user, self.premium)

        with self.assertRaises(InsufficientBalance):
            purchase_subscription(self.user, self.pro)

        self.assertEqual(UserSubscription.objects.get(user=self.user).plan, self.premium)
        self.assertEqual(Transaction.objects.filter(user=self.user).count(), 1)

    def test_free_plan_writes_nothing_to_the_ledger(self):
        basic = SubscriptionPlan.objects.get(name=SubscriptionPlanChoices.BASIC)
        subscription = purchase_subscription(self.user, basic)

        self.assertIsNone(subscription.payment_transaction)
        self.assertFalse(Transaction.objects.exists())
        self.user.refresh_from_db()
        self.assertEqual(self.user.deposit_balance, Decimal("15"))


class SubscriptionApiTestCase(APITestCase):
    def setUp(self):
        cache.clear()
        call_command("seed_plans")
        self.user = create_user("subscriber", deposit="5")
        token = RefreshToken.for_user(self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")

    def test_list_plans_is_public(self):
        self.client.credentials()
        response = self.client.get(reverse("subscription:subscription-plans"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data["data"]), 3)

    def test_my_plan_defaults_to_basic(self):
        response = self.client.get(reverse("subscription:my-plan"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["plan"]["name"], "basic")

    def test_subscribe_without_funds(self):
        response = self.client.post(reverse("subscription:subscribe"), {"plan": "premium"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(UserSubscription.objects.filter(user=self.user).exists())

    def test_subscribe_to_unknown_plan(self):
        response = self.client.post(reverse("subscription:subscribe"), {"plan": "platinum"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
