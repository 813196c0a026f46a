from django.db import models

from account.models import CustomUser
from referral.choices import ReferralStatusChoices


class Referral(models.Model):
    """
    Link between a referrer and the user who signed up with their code.

    The earnings fields are a running record of the commission paid for this link; the money
    itself goes straight into the referrer's earning balance when it is paid.
    """
    referrer = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='referrals')
    referred = models.OneToOneField(CustomUser, on_delete=models.CASCADE, related_name='referral')
    referral_code = models.CharField(max_length=20)
    deposit_earnings = models.DecimalField(max_digits=14, decimal_places=4, default=0)
    task_earnings = models.DecimalField(max_digits=14, decimal_places=4, default=0)
    total_earnings = models.DecimalField(max_digits=14, decimal_places=4, default=0)
    status = models.CharField(max_length=20, choices=ReferralStatusChoices.choices, default=ReferralStatusChoices.ACTIVE)
    first_deposit_date = models.DateTimeField(null=True, blank=True)
    first_task_date = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.referrer.username} referred {self.referred.username}"


class ReferralSetting(models.Model):
    """Commission percentage per referral generation. Only the first generation is paid at the moment."""
    generation = models.PositiveSmallIntegerField(unique=True)
    percentage = models.DecimalField(max_digits=6, decimal_places=3)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['generation']

    def __str__(self):
        return f"Generation {self.generation}: {self.percentage}%"
