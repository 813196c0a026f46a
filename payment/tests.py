from decimal import Decimal

from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from account.choices import BalanceAccountChoices, UserRoleChoices
from account.models import CustomUser
from common.exceptions import AlreadyProcessed, InsufficientBalance, InvalidAmount, InvalidMetadata, InvalidState
from common.models import SystemSetting
from payment import ledger, services
from payment.choices import TransactionStatusChoices, TransactionTypeChoices
from payment.metadata import validate_metadata
from payment.models import Transaction
from referral.models import Referral
from referral.services import apply_referral_code


def create_user(username, deposit=0, earning=0, **extra):
    user = CustomUser.objects.create_user(username=username, email=f"{username}@gmail.com", password="123456789ASas@", **extra)
    CustomUser.objects.filter(pk=user.pk).update(deposit_balance=Decimal(deposit), earning_balance=Decimal(earning))
    user.refresh_from_db()
    return user


class AuthenticatedTestCase(APITestCase):
    def authenticate(self, user):
        token = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")


class LedgerPrimitivesTestCase(TestCase):
    def setUp(self):
        self.user = create_user("ledger", deposit="5")

    def test_credit_pairs_balance_change_with_transaction(self):
        txn = ledger.credit(self.user, BalanceAccountChoices.EARNING, "1.5", TransactionTypeChoices.BONUS, "Welcome bonus")

        self.assertEqual(self.user.earning_balance, Decimal("1.5"))
        self.assertEqual(txn.amount, Decimal("1.5"))
        self.assertEqual(txn.status, TransactionStatusChoices.COMPLETED)
        self.assertEqual(Transaction.objects.filter(user=self.user).count(), 1)

    def test_debit_never_goes_negative(self):
        with self.assertRaises(InsufficientBalance):
            ledger.debit(self.user, BalanceAccountChoices.DEPOSIT, "5.0001", TransactionTypeChoices.PAYMENT, "Too much")

        self.user.refresh_from_db()
        self.assertEqual(self.user.deposit_balance, Decimal("5"))
        self.assertFalse(Transaction.objects.filter(user=self.user).exists())

    def test_debit_whole_balance(self):
        ledger.debit(self.user, BalanceAccountChoices.DEPOSIT, "5", TransactionTypeChoices.PAYMENT, "Everything")
        self.assertEqual(self.user.deposit_balance, Decimal("0"))

    def test_non_positive_amounts_are_rejected(self):
        for amount in ("0", "-1", "abc"):
            with self.assertRaises(InvalidAmount):
                ledger.credit(self.user, BalanceAccountChoices.DEPOSIT, amount, TransactionTypeChoices.BONUS, "Nope")
        self.assertFalse(Transaction.objects.exists())

    def test_metadata_is_checked_against_the_transaction_type(self):
        with self.assertRaises(InvalidMetadata):
            ledger.credit(
                self.user, BalanceAccountChoices.EARNING, "1", TransactionTypeChoices.EARNING, "Paid",
                metadata={"anything": "goes"},
            )
        with self.assertRaises(InvalidMetadata):
            ledger.debit(
                self.user, BalanceAccountChoices.DEPOSIT, "1", TransactionTypeChoices.WITHDRAWAL, "Payout",
                metadata={"payment_method": "bank"},
            )
        with self.assertRaises(InvalidMetadata):
            ledger.credit(
                self.user, BalanceAccountChoices.DEPOSIT, "1", TransactionTypeChoices.REFUND, "Refund",
                metadata={"reason": "ok", "extra": "not allowed"},
            )
        self.assertFalse(Transaction.objects.exists())

    def test_malformed_metadata_raises_invalid_metadata(self):
        with self.assertRaisesMessage(InvalidMetadata, "Unknown metadata keys: extra"):
            validate_metadata(TransactionTypeChoices.REFUND, {"reason": "ok", "extra": "not allowed"})
        with self.assertRaisesMessage(InvalidMetadata, "Metadata must be an object"):
            validate_metadata(TransactionTypeChoices.WITHDRAWAL, ["bank"])
        self.assertEqual(validate_metadata(TransactionTypeChoices.REFUND, {"reason": "ok"}), {"reason": "ok"})

    def test_fail_pending_only_accepts_terminal_failure_states(self):
        txn = ledger.record_pending_credit(self.user, "3", TransactionTypeChoices.DEPOSIT, "Pending deposit")
        with self.assertRaises(InvalidState):
            ledger.fail_pending(txn, status=TransactionStatusChoices.COMPLETED)

    def test_pending_credit_moves_money_only_when_settled(self):
        txn = ledger.record_pending_credit(self.user, "3", TransactionTypeChoices.DEPOSIT, "Pending deposit")
        self.user.refresh_from_db()
        self.assertEqual(self.user.deposit_balance, Decimal("5"))

        ledger.settle_pending(txn)
        self.user.refresh_from_db()
        self.assertEqual(self.user.deposit_balance, Decimal("8"))

        with self.assertRaises(AlreadyProcessed):
            ledger.settle_pending(txn)
        self.user.refresh_from_db()
        self.assertEqual(self.user.deposit_balance, Decimal("8"))


class WithdrawalTestCase(AuthenticatedTestCase):
    def setUp(self):
        self.worker = create_user("worker", earning="10")
        self.admin = create_user("admin", role=UserRoleChoices.ADMIN)
        self.withdraw_path = reverse("payment:withdraw")

    def request_withdrawal(self, amount="4"):
        self.authenticate(self.worker)
        return self.client.post(
            self.withdraw_path,
            {"amount": amount, "payment_method": "bank", "account_details": {"bank": "GTB", "account_number": "0123456789"}},
            format="json",
        )

    def test_withdrawal_reserves_earning_balance(self):
        response = self.request_withdrawal()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.earning_balance, Decimal("6"))
        txn = Transaction.objects.get(user=self.worker)
        self.assertEqual(txn.transaction_type, TransactionTypeChoices.WITHDRAWAL)
        self.assertEqual(txn.status, TransactionStatusChoices.PENDING)
        self.assertEqual(txn.metadata["account_details"]["bank"], "GTB")

    def test_withdrawal_above_balance_fails(self):
        response = self.request_withdrawal(amount="10.5")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["status"], "error")
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.earning_balance, Decimal("10"))
        self.assertFalse(Transaction.objects.exists())

    def test_admin_approves_withdrawal_once(self):
        self.request_withdrawal()
        txn = Transaction.objects.get(user=self.worker)
        path = reverse("payment:approve-withdrawal", kwargs={"transaction_id": txn.id})

        self.authenticate(self.admin)
        response = self.client.post(path)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        txn.refresh_from_db()
        self.assertEqual(txn.status, TransactionStatusChoices.COMPLETED)

        response = self.client.post(path)
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.earning_balance, Decimal("6"))

    def test_rejected_withdrawal_is_returned(self):
        self.request_withdrawal()
        txn = Transaction.objects.get(user=self.worker)

        self.authenticate(self.admin)
        response = self.client.post(
            reverse("payment:reject-withdrawal", kwargs={"transaction_id": txn.id}),
            {"reason": "Account name mismatch"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        txn.refresh_from_db()
        self.assertEqual(txn.status, TransactionStatusChoices.FAILED)
        self.assertEqual(txn.metadata["rejection_reason"], "Account name mismatch")
        self.assertEqual(txn.metadata["rejected_by"], self.admin.id)
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.earning_balance, Decimal("10"))
        # the pending row itself is failed, no second transaction is written
        self.assertEqual(Transaction.objects.filter(user=self.worker).count(), 1)

    def test_workers_cannot_settle_withdrawals(self):
        self.request_withdrawal()
        txn = Transaction.objects.get(user=self.worker)

        response = self.client.post(reverse("payment:approve-withdrawal", kwargs={"transaction_id": txn.id}))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        response = self.client.get(reverse("payment:admin-list-withdrawals"))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_lists_pending_withdrawals(self):
        self.request_withdrawal()
        self.authenticate(self.admin)
        response = self.client.get(reverse("payment:admin-list-withdrawals"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["user"]["username"], "worker")


class DepositTestCase(AuthenticatedTestCase):
    def setUp(self):
        self.referrer = create_user("referrer")
        self.user = create_user("depositor")
        self.admin = create_user("admin", role=UserRoleChoices.ADMIN)
        apply_referral_code(self.user, self.referrer.referral_code)

    def submit_deposit(self, amount="10", reference_id="PAY-001"):
        self.authenticate(self.user)
        return self.client.post(
            reverse("payment:deposit"),
            {"amount": amount, "payment_method": "bank_transfer", "reference_id": reference_id},
            format="json",
        )

    def test_deposit_waits_for_approval(self):
        response = self.submit_deposit()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.user.refresh_from_db()
        self.assertEqual(self.user.deposit_balance, Decimal("0"))
        self.assertEqual(Transaction.objects.get(user=self.user).status, TransactionStatusChoices.PENDING)

    def test_reference_cannot_be_reused(self):
        self.submit_deposit()
        response = self.submit_deposit()
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Transaction.objects.filter(user=self.user).count(), 1)

    def test_approved_deposit_credits_balance_and_pays_referrer(self):
        self.submit_deposit()
        txn = Transaction.objects.get(user=self.user)

        self.authenticate(self.admin)
        response = self.client.post(reverse("payment:approve-deposit", kwargs={"transaction_id": txn.id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.referrer.refresh_from_db()
        self.assertEqual(self.user.deposit_balance, Decimal("10"))
        self.assertEqual(self.referrer.earning_balance, Decimal("0.5"))
        self.assertEqual(self.referrer.total_earnings, Decimal("0.5"))

        commission = Transaction.objects.get(user=self.referrer, transaction_type=TransactionTypeChoices.REFERRAL)
        self.assertEqual(commission.amount, Decimal("0.5"))
        self.assertEqual(commission.metadata["source"], "deposit")
        referral = Referral.objects.get(referred=self.user)
        self.assertEqual(referral.deposit_earnings, Decimal("0.5"))
        self.assertIsNotNone(referral.first_deposit_date)

    def test_rejected_deposit_moves_no_money(self):
        self.submit_deposit()
        txn = Transaction.objects.get(user=self.user)

        services.reject_deposit(txn, self.admin, "No matching payment")

        txn.refresh_from_db()
        self.user.refresh_from_db()
        self.assertEqual(txn.status, TransactionStatusChoices.FAILED)
        self.assertEqual(self.user.deposit_balance, Decimal("0"))
        self.assertFalse(Transaction.objects.filter(user=self.referrer).exists())


class UpdateTransactionStatusTestCase(AuthenticatedTestCase):
    def setUp(self):
        self.worker = create_user("worker", earning="10")
        self.admin = create_user("admin", role=UserRoleChoices.ADMIN)
        self.txn = services.request_withdrawal(self.worker, Decimal("4"), "bank", {"account_number": "0123456789"})
        self.path = reverse("payment:update-transaction-status", kwargs={"transaction_id": self.txn.id})
        self.authenticate(self.admin)

    def test_cancelling_a_withdrawal_returns_the_funds(self):
        response = self.client.patch(self.path, {"status": "cancelled", "reason": "Requested by user"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.txn.refresh_from_db()
        self.worker.refresh_from_db()
        self.assertEqual(self.txn.status, TransactionStatusChoices.CANCELLED)
        self.assertEqual(self.worker.earning_balance, Decimal("10"))

    def test_settled_transactions_cannot_change(self):
        self.client.patch(self.path, {"status": "completed"}, format="json")
        response = self.client.patch(self.path, {"status": "failed"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.earning_balance, Decimal("6"))

    def test_pending_to_pending_is_invalid(self):
        response = self.client.patch(self.path, {"status": "pending"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_only_admins_can_override(self):
        self.authenticate(self.worker)
        response = self.client.patch(self.path, {"status": "completed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class ConvertEarningsTestCase(AuthenticatedTestCase):
    def setUp(self):
        self.user = create_user("converter", earning="10")
        self.authenticate(self.user)
        self.path = reverse("payment:convert-earnings")

    def test_conversion_charges_fee(self):
        response = self.client.post(self.path, {"amount": "5"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.earning_balance, Decimal("5"))
        self.assertEqual(self.user.deposit_balance, Decimal("4.5"))

        txn = Transaction.objects.get(user=self.user)
        self.assertEqual(txn.transaction_type, TransactionTypeChoices.CONVERSION)
        self.assertEqual(txn.amount, Decimal("5"))
        self.assertEqual(Decimal(txn.metadata["fee"]), Decimal("0.5"))
        self.assertEqual(Decimal(txn.metadata["net_amount"]), Decimal("4.5"))

    def test_below_minimum_is_rejected(self):
        response = self.client.post(self.path, {"amount": "0.5"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Transaction.objects.exists())

    def test_cannot_convert_more_than_earned(self):
        response = self.client.post(self.path, {"amount": "11"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertEqual(self.user.earning_balance, Decimal("10"))

    def test_fee_rate_follows_system_setting(self):
        self.addCleanup(cache.clear)
        SystemSetting.objects.create(key="conversion_fee_rate", value="0.2")

        services.convert_earnings(self.user, Decimal("5"))
        self.user.refresh_from_db()
        self.assertEqual(self.user.deposit_balance, Decimal("4"))


class TransactionHistoryTestCase(AuthenticatedTestCase):
    def setUp(self):
        cache.clear()
        self.user = create_user("history")
        self.other = create_user("other")
        ledger.credit(self.user, BalanceAccountChoices.EARNING, "1", TransactionTypeChoices.BONUS, "Bonus")
        ledger.credit(self.other, BalanceAccountChoices.EARNING, "2", TransactionTypeChoices.BONUS, "Bonus")
        self.authenticate(self.user)
        self.path = reverse("payment:fetch-user-transaction-history")

    def test_lists_only_own_transactions(self):
        response = self.client.get(self.path)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

    def test_new_transactions_show_up_after_cached_read(self):
        self.client.get(self.path)
        ledger.credit(self.user, BalanceAccountChoices.DEPOSIT, "3", TransactionTypeChoices.BONUS, "Another bonus")

        response = self.client.get(self.path)
        self.assertEqual(response.data["count"], 2)
