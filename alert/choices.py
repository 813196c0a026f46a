from django.db import models


class NotificationTypeChoices(models.TextChoices):
    JOB_ASSIGNED = 'job_assigned', 'Job Assigned'
    JOB_COMPLETED = 'job_completed', 'Job Completed'
    PAYMENT = 'payment', 'Payment'
    MESSAGE = 'message', 'Message'
    SYSTEM = 'system', 'System'
    WORK_SUBMITTED = 'work_submitted', 'Work Submitted'
    WORK_APPROVED = 'work_approved', 'Work Approved'
    WORK_REJECTED = 'work_rejected', 'Work Rejected'
    REFERRAL = 'referral', 'Referral'


class ActivityTypeChoices(models.TextChoices):
    JOB_APPLIED = 'job_applied', 'Job Applied'
    JOB_COMPLETED = 'job_completed', 'Job Completed'
    WORK_SUBMITTED = 'work_submitted', 'Work Submitted'
    WORK_APPROVED = 'work_approved', 'Work Approved'
    PAYMENT_RECEIVED = 'payment_received', 'Payment Received'
    JOB_POSTED = 'job_posted', 'Job Posted'
    JOB_ASSIGNED = 'job_assigned', 'Job Assigned'
