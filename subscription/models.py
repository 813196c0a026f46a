from django.db import models
from django.utils import timezone

from account.models import CustomUser
from subscription.choices import SubscriptionPlanChoices, SubscriptionStatusChoices


class SubscriptionPlan(models.Model):
    name = models.CharField(max_length=50, choices=SubscriptionPlanChoices.choices, unique=True)
    price = models.DecimalField(max_digits=14, decimal_places=4, default=0)
    duration_months = models.PositiveSmallIntegerField(default=1)
    features = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ['price']

    def __str__(self):
        return f"{self.name} (${self.price})"


class UserSubscription(models.Model):
    """The plan a user is currently subscribed to. Paid plans are bought from the deposit balance."""

    user = models.OneToOneField(CustomUser, on_delete=models.CASCADE, related_name='subscription')
    plan = models.ForeignKey(SubscriptionPlan, on_delete=models.PROTECT)
    status = models.CharField(max_length=20, choices=SubscriptionStatusChoices.choices, default=SubscriptionStatusChoices.ACTIVE)
    start_date = models.DateTimeField(default=timezone.now)
    end_date = models.DateTimeField(null=True, blank=True)
    payment_transaction = models.ForeignKey('payment.Transaction', on_delete=models.SET_NULL, null=True, blank=True)

    def is_active(self):
        return self.status == SubscriptionStatusChoices.ACTIVE and (self.end_date is None or self.end_date > timezone.now())

    def __str__(self):
        return f"{self.user.username} - {self.plan.name}"
