from django.db import models


class ReferralStatusChoices(models.TextChoices):
    ACTIVE = 'active', 'Active'
    INACTIVE = 'inactive', 'Inactive'


class ReferralSourceChoices(models.TextChoices):
    DEPOSIT = 'deposit', 'Deposit' #commission on a referred user's approved deposit
    TASK = 'task', 'Task' #commission on a referred user's approved work payout
