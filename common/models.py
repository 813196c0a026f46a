from decimal import Decimal, InvalidOperation

from django.db import models


class SystemSetting(models.Model):
    """
    A system setting is a key-value pair used to override a ledger constant at runtime
    without a deploy, for example the minimum job spend or the referral commission rate.
    Keys are the lower-cased names of the entries in settings.LEDGER (e.g. job_min_spend).
    """
    key = models.CharField(max_length=50, unique=True) # example: referral_commission_rate
    value = models.CharField(max_length=100) # example: 0.05

    def __str__(self):
        return f"{self.key} → {self.value}"

    def as_decimal(self):
        try:
            return Decimal(self.value)
        except (InvalidOperation, TypeError):
            return None
