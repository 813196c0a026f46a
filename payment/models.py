import uuid

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models

from account.models import CustomUser
from payment.choices import TransactionStatusChoices, TransactionTypeChoices


class Transaction(models.Model):
    """
    Append-only ledger entry. Every change to a user's deposit or earning balance is paired
    with exactly one Transaction; once it leaves the pending status only its metadata may change.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='transactions')
    transaction_type = models.CharField(max_length=50, choices=TransactionTypeChoices.choices)
    amount = models.DecimalField(max_digits=14, decimal_places=4)
    status = models.CharField(max_length=50, default=TransactionStatusChoices.COMPLETED, choices=TransactionStatusChoices.choices)
    description = models.TextField(blank=True, default="", help_text="The description of the transaction")
    reference_id = models.CharField(max_length=255, null=True, blank=True, unique=True, help_text="External payment reference, unique when present")
    payment_method = models.CharField(max_length=100, blank=True, default="")
    related_job = models.ForeignKey('job.Job', on_delete=models.SET_NULL, null=True, blank=True, related_name='transactions')
    related_work = models.ForeignKey('job.Work', on_delete=models.SET_NULL, null=True, blank=True, related_name='transactions')
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(condition=models.Q(amount__gt=0), name='transaction_amount_positive'),
        ]

    @property
    def is_pending(self):
        return self.status == TransactionStatusChoices.PENDING

    def __str__(self):
        return f"{self.transaction_type} transaction of ${self.amount} by {self.user.username} - {self.status}"
