from decimal import Decimal

from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from account.models import CustomUser
from common.exceptions import AlreadyProcessed, InsufficientBalance
from common.models import SystemSetting
from common.responses import format_first_error, ledger_error_response
from common.utils import get_ledger_setting


class LedgerSettingTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.addCleanup(cache.clear)

    def test_defaults_come_from_settings(self):
        self.assertEqual(get_ledger_setting("job_min_spend"), Decimal("0.80"))
        self.assertEqual(get_ledger_setting("referral_commission_rate"), Decimal("0.05"))

    def test_system_setting_overrides_default(self):
        get_ledger_setting("job_min_spend")
        setting = SystemSetting.objects.create(key="job_min_spend", value="2")
        self.assertEqual(get_ledger_setting("job_min_spend"), Decimal("2"))

        setting.delete()
        self.assertEqual(get_ledger_setting("job_min_spend"), Decimal("0.80"))

    def test_unparsable_override_is_ignored(self):
        SystemSetting.objects.create(key="conversion_fee_rate", value="ten percent")
        self.assertEqual(get_ledger_setting("conversion_fee_rate"), Decimal("0.10"))

    def test_seed_command(self):
        SystemSetting.objects.create(key="job_min_spend", value="3")
        call_command("seed_system_settings")
        self.assertEqual(SystemSetting.objects.count(), 4)
        self.assertEqual(SystemSetting.objects.get(key="job_min_spend").value, "3")

        call_command("seed_system_settings", "--overwrite")
        self.assertEqual(SystemSetting.objects.get(key="job_min_spend").value, "0.80")


class ResponseHelpersTestCase(TestCase):
    def test_ledger_error_response_uses_error_status(self):
        response = ledger_error_response(AlreadyProcessed())
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.data["error"], "Already processed")

        response = ledger_error_response(InsufficientBalance("Insufficient deposit balance"))
        self.assertEqual(response.status_code, 400)
        self.assertFalse(response.data["success"])

    def test_format_first_error(self):
        errors = {"amount": ["A valid number is required."]}
        self.assertEqual(format_first_error(errors), "(amount) A valid number is required.")
        self.assertEqual(format_first_error(errors, False), "A valid number is required.")


class LedgerSettingsApiTestCase(APITestCase):
    def test_effective_settings(self):
        cache.clear()
        self.addCleanup(cache.clear)
        user = CustomUser.objects.create_user(username="viewer", email="viewer@gmail.com", password="123456789ASas@")
        token = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")

        response = self.client.get(reverse("get-ledger-settings"))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["data"]["conversion_min_amount"]), Decimal("1"))
