from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from account.models import CustomUser
from alert.models import Notification
from common.exceptions import AlreadyProcessed, InvalidState, NotFound
from payment.choices import TransactionTypeChoices
from payment.models import Transaction
from referral.choices import ReferralSourceChoices, ReferralStatusChoices
from referral.models import Referral, ReferralSetting
from referral.services import apply_referral_code, process_referral_earnings


def create_user(username, **extra):
    return CustomUser.objects.create_user(username=username, email=f"{username}@gmail.com", password="123456789ASas@", **extra)


class ApplyReferralCodeTestCase(TestCase):
    def setUp(self):
        self.referrer = create_user("referrer", name="Ada Lovelace")
        self.user = create_user("newbie")

    def test_referral_code_format(self):
        self.assertTrue(self.referrer.referral_code.startswith("ADA"))
        self.assertEqual(len(self.referrer.referral_code), 9)
        self.assertEqual(self.referrer.referral_code, self.referrer.referral_code.upper())

    def test_apply_code_links_users(self):
        referral = apply_referral_code(self.user, self.referrer.referral_code.lower())

        self.assertEqual(referral.referrer, self.referrer)
        self.assertEqual(self.user.referred_by, self.referrer)
        self.assertEqual(referral.status, ReferralStatusChoices.ACTIVE)
        self.assertTrue(Notification.objects.filter(user=self.referrer, title="New Referral").exists())

    def test_invalid_code(self):
        with self.assertRaises(NotFound):
            apply_referral_code(self.user, "NOPE00000")

    def test_own_code_is_refused(self):
        with self.assertRaises(InvalidState):
            apply_referral_code(self.referrer, self.referrer.referral_code)

    def test_code_can_only_be_applied_once(self):
        other = create_user("other")
        apply_referral_code(self.user, self.referrer.referral_code)
        with self.assertRaises(AlreadyProcessed):
            apply_referral_code(self.user, other.referral_code)
        self.assertEqual(Referral.objects.filter(referred=self.user).count(), 1)

    def test_circular_referral_is_refused(self):
        apply_referral_code(self.user, self.referrer.referral_code)
        with self.assertRaises(InvalidState):
            apply_referral_code(self.referrer, self.user.referral_code)


class ReferralCommissionTestCase(TestCase):
    def setUp(self):
        self.referrer = create_user("referrer")
        self.user = create_user("newbie")
        apply_referral_code(self.user, self.referrer.referral_code)

    def test_commission_is_five_percent(self):
        txn = process_referral_earnings(self.user.id, ReferralSourceChoices.TASK, Decimal("0.05"))

        self.assertEqual(txn.amount, Decimal("0.0025"))
        self.assertEqual(txn.transaction_type, TransactionTypeChoices.REFERRAL)
        self.referrer.refresh_from_db()
        self.assertEqual(self.referrer.earning_balance, Decimal("0.0025"))
        self.assertEqual(self.referrer.total_earnings, Decimal("0.0025"))

        referral = Referral.objects.get(referred=self.user)
        self.assertEqual(referral.task_earnings, Decimal("0.0025"))
        self.assertEqual(referral.deposit_earnings, Decimal("0"))
        self.assertIsNotNone(referral.first_task_date)
        self.assertIsNone(referral.first_deposit_date)

    def test_first_date_is_only_stamped_once(self):
        process_referral_earnings(self.user.id, ReferralSourceChoices.DEPOSIT, Decimal("10"))
        first = Referral.objects.get(referred=self.user).first_deposit_date
        process_referral_earnings(self.user.id, ReferralSourceChoices.DEPOSIT, Decimal("10"))

        referral = Referral.objects.get(referred=self.user)
        self.assertEqual(referral.first_deposit_date, first)
        self.assertEqual(referral.deposit_earnings, Decimal("1"))

    def test_inactive_referral_earns_nothing(self):
        Referral.objects.filter(referred=self.user).update(status=ReferralStatusChoices.INACTIVE)
        self.assertIsNone(process_referral_earnings(self.user.id, ReferralSourceChoices.TASK, Decimal("1")))
        self.assertFalse(Transaction.objects.exists())

    def test_user_without_referrer_earns_nothing(self):
        self.assertIsNone(process_referral_earnings(self.referrer.id, ReferralSourceChoices.TASK, Decimal("1")))

    def test_tiny_amounts_round_to_nothing(self):
        self.assertIsNone(process_referral_earnings(self.user.id, ReferralSourceChoices.TASK, Decimal("0.001")))
        self.assertFalse(Transaction.objects.exists())


class ReferralApiTestCase(APITestCase):
    def setUp(self):
        self.referrer = create_user("referrer")
        self.user = create_user("newbie")
        token = RefreshToken.for_user(self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")

    def test_apply_code(self):
        response = self.client.post(
            reverse("referral:apply-referral-code"), {"referral_code": self.referrer.referral_code}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["referrer"], "referrer")

        response = self.client.post(
            reverse("referral:apply-referral-code"), {"referral_code": self.referrer.referral_code}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_unknown_code_is_not_found(self):
        response = self.client.post(reverse("referral:apply-referral-code"), {"referral_code": "XYZ123456"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_earnings_summary(self):
        apply_referral_code(self.user, self.referrer.referral_code)
        process_referral_earnings(self.user.id, ReferralSourceChoices.DEPOSIT, Decimal("20"))

        token = RefreshToken.for_user(self.referrer)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")
        response = self.client.get(reverse("referral:referral-earnings"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"]["total_referrals"], 1)
        self.assertEqual(Decimal(response.data["data"]["total_paid"]), Decimal("1"))

        response = self.client.get(reverse("referral:my-referrals"))
        self.assertEqual(response.data["count"], 1)

    def test_my_code(self):
        response = self.client.get(reverse("referral:my-referral-code"))
        self.assertEqual(response.data["data"]["referral_code"], self.user.referral_code)
        self.assertIn(self.user.referral_code, response.data["data"]["referral_link"])

    def test_generation_settings(self):
        ReferralSetting.objects.create(generation=1, percentage=Decimal("5"))
        response = self.client.get(reverse("referral:referral-settings"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"][0]["generation"], 1)
