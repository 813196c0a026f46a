from django.db import models


class UserRoleChoices(models.TextChoices):
    USER = 'user', 'User'
    EMPLOYER = 'employer', 'Employer'
    ADMIN = 'admin', 'Admin'
    SUPERADMIN = 'superadmin', 'Super admin'


class UserStatusChoices(models.TextChoices):
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'
    SUSPENDED = 'suspended', 'Suspended'


class BalanceAccountChoices(models.TextChoices):
    DEPOSIT = 'deposit', 'Deposit balance' # funds a user has put in, spent on job postings and subscriptions
    EARNING = 'earning', 'Earning balance' # funds a user has been paid, withdrawable or convertible
