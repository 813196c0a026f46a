import uuid

from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.db import models
from django.utils.crypto import get_random_string

from account.choices import BalanceAccountChoices, UserRoleChoices, UserStatusChoices

REFERRAL_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"


def generate_referral_code(name):
    """Three letter prefix from the user's name followed by six random upper-case alphanumerics"""
    prefix = "".join(c for c in (name or "") if c.isalpha())[:3].upper() or "USR"
    return f"{prefix}{get_random_string(6, REFERRAL_CODE_ALPHABET)}"


class CustomUserManager(BaseUserManager):
    """Manager for custom user model"""
    def create_user(self, username, email, password=None, **extra_fields):
        if not username:
            raise ValueError('Username is required')
        if not email:
            raise ValueError('Email is required')

        email = self.normalize_email(email)
        user = self.model(username=username, email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, username, email, password=None):
        user = self.create_user(username, email, password, role=UserRoleChoices.SUPERADMIN)
        user.is_staff = True
        user.is_admin = True
        user.is_superuser = True
        user.save(using=self._db)
        return user


class CustomUser(AbstractBaseUser, PermissionsMixin):
    """
    A platform user. Every user can act as a worker; employers post jobs and admins settle them.

    Users are the only holders of money on the platform. The two balances are only ever
    changed through payment.ledger so that every change is paired with a Transaction row.
    """
    username = models.CharField(max_length=255, unique=True)
    pid = models.UUIDField(default=uuid.uuid4, unique=True, editable=False)
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True, default="")
    password = models.CharField(max_length=255)
    role = models.CharField(max_length=20, choices=UserRoleChoices.choices, default=UserRoleChoices.USER)
    status = models.CharField(max_length=20, choices=UserStatusChoices.choices, default=UserStatusChoices.ACTIVE)
    is_active = models.BooleanField(default=True)
    is_admin = models.BooleanField(default=False)
    is_staff = models.BooleanField(default=False)
    is_superuser = models.BooleanField(default=False)
    date_joined = models.DateTimeField(auto_now_add=True)
    last_activity = models.DateTimeField(auto_now=True, help_text="Last time the user was active")

    deposit_balance = models.DecimalField(max_digits=14, decimal_places=4, default=0, help_text="Funds deposited by the user, spent on job postings and subscriptions")
    earning_balance = models.DecimalField(max_digits=14, decimal_places=4, default=0, help_text="Funds earned by the user from approved work and referrals")
    total_earnings = models.DecimalField(max_digits=14, decimal_places=4, default=0, help_text="Lifetime earnings, never decreases")
    completed_jobs = models.PositiveIntegerField(default=0)
    active_jobs = models.PositiveIntegerField(default=0)

    referral_code = models.CharField(max_length=20, unique=True, blank=True)
    referred_by = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='referred_users')

    objects = CustomUserManager()

    USERNAME_FIELD = 'username'
    REQUIRED_FIELDS = ['email']

    class Meta:
        constraints = [
            models.CheckConstraint(condition=models.Q(deposit_balance__gte=0), name='deposit_balance_non_negative'),
            models.CheckConstraint(condition=models.Q(earning_balance__gte=0), name='earning_balance_non_negative'),
        ]

    def __str__(self):
        return self.username

    def save(self, *args, **kwargs):
        if not self.referral_code:
            code = generate_referral_code(self.name or self.username)
            while CustomUser.objects.filter(referral_code=code).exists():
                code = generate_referral_code(self.name or self.username)
            self.referral_code = code
        super().save(*args, **kwargs)

    @property
    def is_platform_admin(self):
        return self.is_admin or self.role in (UserRoleChoices.ADMIN, UserRoleChoices.SUPERADMIN)

    @staticmethod
    def balance_field(account):
        """Name of the model field that holds the given BalanceAccountChoices value"""
        if account == BalanceAccountChoices.DEPOSIT:
            return 'deposit_balance'
        if account == BalanceAccountChoices.EARNING:
            return 'earning_balance'
        raise ValueError(f"Unknown balance account '{account}'")
