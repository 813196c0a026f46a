from decimal import Decimal

from django.urls import reverse
from rest_framework.test import APITestCase, APITransactionTestCase
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken

from account.choices import UserRoleChoices, UserStatusChoices
from account.models import CustomUser
from account.services import admin_update_user
from common.exceptions import InvalidAmount, Unauthorized
from referral.models import Referral


class RegisterTestCase(APITransactionTestCase):
    def setUp(self):
        self.register_path = reverse("account:register")
        CustomUser.objects.create_user(username='dama', email="test@gmail.com", name="Dama")

    def test_register_success(self):
        response = self.client.post(
            self.register_path, data={'username': 'dama1', "email": "test1@gmail.com", 'password': '123456789ASas@'}
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        for field in {"status", "user_data"}:
            self.assertTrue(field in response.data)

        user = CustomUser.objects.get(username='dama1')
        self.assertEqual(user.role, UserRoleChoices.USER)
        self.assertEqual(user.deposit_balance, 0)
        self.assertTrue(user.referral_code)

    def test_register_as_employer(self):
        response = self.client.post(
            self.register_path,
            data={'username': 'boss', "email": "boss@gmail.com", 'password': '123456789ASas@', 'role': 'employer'},
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(CustomUser.objects.get(username='boss').role, UserRoleChoices.EMPLOYER)

    def test_register_cannot_claim_admin_role(self):
        response = self.client.post(
            self.register_path,
            data={'username': 'sneaky', "email": "sneaky@gmail.com", 'password': '123456789ASas@', 'role': 'admin'},
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(CustomUser.objects.filter(username='sneaky').exists())

    def test_register_with_referral_code(self):
        referrer = CustomUser.objects.get(username='dama')
        response = self.client.post(
            self.register_path,
            data={
                'username': 'friend',
                "email": "friend@gmail.com",
                'password': '123456789ASas@',
                'referral_code': referrer.referral_code.lower(),
            },
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        friend = CustomUser.objects.get(username='friend')
        self.assertEqual(friend.referred_by, referrer)
        self.assertTrue(Referral.objects.filter(referrer=referrer, referred=friend).exists())

    def test_register_integrity_failure(self):
        response = self.client.post(
            self.register_path, data={'username': 'dama', "email": "test@gmail.com"}
        )
        self.assertEqual(
            response.data["status"], "error"
        )
        self.assertEqual(
            response.data["error"], "Username already exists"
        )

    def tearDown(self):
        Referral.objects.all().delete()
        CustomUser.objects.all().delete()


class LoginTestCase(APITransactionTestCase):
    def setUp(self):
        self.login_path = reverse('account:login')
        self.test_user = CustomUser.objects.create_user(
            username='testlogin',
            email="testlogin@gmail.com",
            password='123456789ASas@'
        )

    def test_login_success(self):
        response = self.client.post(
            self.login_path,
            {
                'username': 'testlogin',
                'password': '123456789ASas@'
            },
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(
            response.data['user_data']['username'],
            self.test_user.username
        )

    def test_login_with_email(self):
        response = self.client.post(
            self.login_path, {'username': 'testlogin@gmail.com', 'password': '123456789ASas@'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_login_wrong_password(self):
        response = self.client.post(
            self.login_path, {'username': 'testlogin', 'password': 'wrongpass'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['status'], 'error')

    def test_suspended_user_cannot_login(self):
        self.test_user.status = UserStatusChoices.SUSPENDED
        self.test_user.save()
        response = self.client.post(
            self.login_path, {'username': 'testlogin', 'password': '123456789ASas@'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def tearDown(self):
        CustomUser.objects.all().delete()


class WalletTestCase(APITestCase):
    def setUp(self):
        self.user = CustomUser.objects.create_user(username='wallet', email='wallet@gmail.com', password='123456789ASas@')
        CustomUser.objects.filter(pk=self.user.pk).update(deposit_balance=Decimal('12.5'), earning_balance=Decimal('3'))
        token = RefreshToken.for_user(self.user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")

    def test_wallet_shows_both_balances(self):
        response = self.client.get(reverse('account:wallet'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['data']['deposit_balance']), Decimal('12.5'))
        self.assertEqual(Decimal(response.data['data']['earning_balance']), Decimal('3'))

    def test_wallet_requires_authentication(self):
        self.client.credentials()
        response = self.client.get(reverse('account:wallet'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class AdminUpdateUserTestCase(APITestCase):
    def setUp(self):
        self.admin = CustomUser.objects.create_user(
            username='admin', email='admin@gmail.com', password='123456789ASas@', role=UserRoleChoices.ADMIN
        )
        self.user = CustomUser.objects.create_user(username='member', email='member@gmail.com', password='123456789ASas@')
        self.path = reverse('account:admin-update-user', kwargs={'user_id': self.user.id})

    def authenticate(self, user):
        token = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")

    def test_admin_can_overwrite_balances(self):
        self.authenticate(self.admin)
        with self.assertLogs('account.services', level='WARNING'):
            response = self.client.patch(self.path, {'deposit_balance': '20.0000', 'status': 'suspended'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.deposit_balance, Decimal('20'))
        self.assertEqual(self.user.status, UserStatusChoices.SUSPENDED)

    def test_negative_balance_is_rejected(self):
        self.authenticate(self.admin)
        response = self.client.patch(self.path, {'earning_balance': '-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_regular_user_cannot_edit_users(self):
        self.authenticate(self.user)
        response = self.client.patch(self.path, {'deposit_balance': '1000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.user.refresh_from_db()
        self.assertEqual(self.user.deposit_balance, 0)

    def test_service_rejects_non_admin_and_negative_values(self):
        with self.assertRaises(Unauthorized):
            admin_update_user(self.user, self.user, deposit_balance=Decimal('5'))
        with self.assertRaises(InvalidAmount):
            admin_update_user(self.admin, self.user, total_earnings=Decimal('-5'))

    def test_unknown_fields_are_ignored(self):
        user = admin_update_user(self.admin, self.user, referral_code='HACKED', name='Renamed')
        self.assertEqual(user.name, 'Renamed')
        self.assertNotEqual(user.referral_code, 'HACKED')
