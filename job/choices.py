from django.db import models


class JobStatusChoices(models.TextChoices):
    PENDING_APPROVAL = 'pending-approval', 'Pending approval' #posted and escrowed, waiting for an admin
    OPEN = 'open', 'Open' #approved, workers can take it
    IN_PROGRESS = 'in-progress', 'In progress' #assigned to a worker
    COMPLETED = 'completed', 'Completed' #every slot has an approved submission
    CANCELLED = 'cancelled', 'Cancelled' #rejected by an admin, escrow refunded


class JobAdminStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class WorkStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending' #assigned by the employer, not started
    IN_PROGRESS = 'in-progress', 'In progress'
    SUBMITTED = 'submitted', 'Submitted' #proof submitted, waiting for the employer
    APPROVED = 'approved', 'Approved' #worker has been paid
    REJECTED = 'rejected', 'Rejected'


class JobApplicationStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted' #the employer assigned the job to this applicant


class WorkPaymentStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'
    REFUNDED = 'refunded', 'Refunded'


# Allowed Work status moves. Approved and rejected are terminal.
WORK_TRANSITIONS = {
    WorkStatusChoices.PENDING: {WorkStatusChoices.IN_PROGRESS, WorkStatusChoices.SUBMITTED},
    WorkStatusChoices.IN_PROGRESS: {WorkStatusChoices.SUBMITTED},
    WorkStatusChoices.SUBMITTED: {WorkStatusChoices.APPROVED, WorkStatusChoices.REJECTED},
    WorkStatusChoices.APPROVED: set(),
    WorkStatusChoices.REJECTED: set(),
}


def can_transition(current, target):
    return target in WORK_TRANSITIONS.get(current, set())
