from django.db import models

from account.models import CustomUser
from job.choices import (
    JobAdminStatusChoices,
    JobApplicationStatusChoices,
    JobStatusChoices,
    WorkPaymentStatusChoices,
    WorkStatusChoices,
)


class Job(models.Model):
    """
    A micro-job posted by an employer. The full budget (worker_need x worker_earn) is taken
    from the employer's deposit balance when the job is posted and held until it is paid out
    to workers or refunded.
    """
    title = models.CharField(max_length=255)
    description = models.TextField()
    category = models.CharField(max_length=100, blank=True, default="")
    employer = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='posted_jobs')
    worker_need = models.PositiveIntegerField(help_text="Number of workers the job pays for")
    worker_earn = models.DecimalField(max_digits=14, decimal_places=4, help_text="Amount paid to each worker")
    budget = models.DecimalField(max_digits=14, decimal_places=4, help_text="worker_need x worker_earn, escrowed at posting")
    current_participants = models.PositiveIntegerField(default=0, help_text="Number of approved submissions")
    status = models.CharField(max_length=20, choices=JobStatusChoices.choices, default=JobStatusChoices.PENDING_APPROVAL)
    admin_status = models.CharField(max_length=20, choices=JobAdminStatusChoices.choices, default=JobAdminStatusChoices.PENDING)
    admin_remark = models.TextField(blank=True, default="")
    assigned_to = models.ForeignKey(CustomUser, on_delete=models.SET_NULL, null=True, blank=True, related_name='assigned_jobs')
    assigned_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    task_instructions = models.TextField(blank=True, default="")
    required_proof = models.TextField(blank=True, default="", help_text="What a worker must submit as proof of completion")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(condition=models.Q(worker_need__gt=0), name='job_worker_need_positive'),
            models.CheckConstraint(condition=models.Q(worker_earn__gt=0), name='job_worker_earn_positive'),
            models.CheckConstraint(condition=models.Q(current_participants__lte=models.F('worker_need')), name='job_participants_within_need'),
        ]

    @property
    def remaining_slots(self):
        return max(self.worker_need - self.current_participants, 0)

    @property
    def is_full(self):
        return self.current_participants >= self.worker_need

    def __str__(self):
        return self.title


class Work(models.Model):
    """A worker's participation in a job, from assignment or submission through payout"""
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='works')
    worker = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='works')
    employer = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='employer_works')
    status = models.CharField(max_length=20, choices=WorkStatusChoices.choices, default=WorkStatusChoices.PENDING)
    submission_proof = models.TextField(blank=True, default="")
    submission_message = models.TextField(blank=True, default="")
    submission_files = models.JSONField(default=list, blank=True)
    submission_date = models.DateTimeField(null=True, blank=True)
    payment_amount = models.DecimalField(max_digits=14, decimal_places=4, help_text="Fixed from job.worker_earn when the work is created")
    payment_status = models.CharField(max_length=20, choices=WorkPaymentStatusChoices.choices, default=WorkPaymentStatusChoices.PENDING)
    paid_at = models.DateTimeField(null=True, blank=True)
    employer_feedback = models.TextField(blank=True, default="")
    rating = models.PositiveSmallIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['job', 'worker'], name='one_work_per_worker_per_job'),
            models.CheckConstraint(condition=models.Q(rating__isnull=True) | models.Q(rating__lte=5), name='work_rating_at_most_5'),
        ]

    def __str__(self):
        return f"{self.worker.username} on '{self.job.title}' - {self.status}"


class JobApplication(models.Model):
    """A worker's request to be assigned an open job. Employers assign jobs from these."""
    job = models.ForeignKey(Job, on_delete=models.CASCADE, related_name='applications')
    applicant = models.ForeignKey(CustomUser, on_delete=models.CASCADE, related_name='job_applications')
    message = models.TextField(blank=True, default="")
    status = models.CharField(max_length=20, choices=JobApplicationStatusChoices.choices, default=JobApplicationStatusChoices.PENDING)
    applied_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['applied_at']
        constraints = [
            models.UniqueConstraint(fields=['job', 'applicant'], name='one_application_per_worker_per_job'),
        ]

    def __str__(self):
        return f"{self.applicant.username} applied for '{self.job.title}'"
