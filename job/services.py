"""
Job escrow and work settlement.

Every function validates its preconditions and raises a common.exceptions.LedgerError before
writing anything. Status changes are compare-and-swap updates keyed on the current status, so
two concurrent approvals of the same work cannot both pay out. Notifications, activity,
referral commissions and the admin stats broadcast run after the money has moved and never
undo it.
"""

import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from account.choices import BalanceAccountChoices
from account.models import CustomUser
from alert.choices import ActivityTypeChoices, NotificationTypeChoices
from alert.tasks import queue_admin_stats_broadcast
from alert.utils import create_activity, create_notification
from common.exceptions import (
    AlreadyProcessed,
    BelowMinimumSpend,
    InsufficientBalance,
    InvalidAmount,
    InvalidState,
    NotFound,
    Unauthorized,
)
from common.utils import get_ledger_setting
from job.choices import (
    JobAdminStatusChoices,
    JobApplicationStatusChoices,
    JobStatusChoices,
    WorkPaymentStatusChoices,
    WorkStatusChoices,
    can_transition,
)
from job.models import Job, JobApplication, Work
from payment import ledger
from payment.choices import TransactionTypeChoices
from referral.choices import ReferralSourceChoices
from referral.services import process_referral_earnings

logger = logging.getLogger(__name__)

# Fields an employer may change after posting. Budget fields are fixed once the escrow is taken.
EDITABLE_JOB_FIELDS = ("title", "description", "category", "task_instructions", "required_proof")


def _display_name(user):
    return user.name or user.username


def _ensure_admin(user):
    if not user.is_platform_admin:
        raise Unauthorized("Only admins can moderate jobs")


def _ensure_employer_or_admin(job, user):
    if job.employer_id != user.pk and not user.is_platform_admin:
        raise Unauthorized("Only the job's employer or an admin can do this")


def _decrement_active_jobs(worker_id):
    CustomUser.objects.filter(pk=worker_id, active_jobs__gt=0).update(active_jobs=F("active_jobs") - 1)


def _to_worker_count(worker_need):
    try:
        value = Decimal(str(worker_need))
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Invalid worker_need: {worker_need}")
    if not value.is_finite() or value != value.to_integral_value():
        raise InvalidAmount("worker_need must be a whole number")
    if value <= 0:
        raise InvalidAmount("worker_need must be at least 1")
    return int(value)


# Job posting and moderation
# ==========================


def create_job(employer, *, title, description, worker_need, worker_earn, category="", task_instructions="", required_proof="") -> Job:
    """
    Post a job and escrow its whole budget from the employer's deposit balance.

    The job starts in pending-approval and is only visible to workers once an admin approves it.
    """
    worker_earn = ledger.to_money(worker_earn)
    worker_need = _to_worker_count(worker_need)

    budget = (worker_earn * worker_need).quantize(ledger.MONEY_PLACES)
    min_spend = get_ledger_setting("job_min_spend")
    if budget < min_spend:
        raise BelowMinimumSpend(f"Minimum spend for a job is ${min_spend}")
    if employer.deposit_balance < budget:
        raise InsufficientBalance("Insufficient deposit balance to fund this job")

    with transaction.atomic():
        job = Job.objects.create(
            title=title,
            description=description,
            category=category,
            employer=employer,
            worker_need=worker_need,
            worker_earn=worker_earn,
            budget=budget,
            task_instructions=task_instructions,
            required_proof=required_proof,
        )
        ledger.debit(
            employer,
            BalanceAccountChoices.DEPOSIT,
            budget,
            TransactionTypeChoices.PAYMENT,
            f"Job posting: {title}",
            related_job=job,
        )

    logger.info(f"Job {job.id} '{title}' posted by '{employer.username}', {budget} escrowed")
    create_activity(
        employer.id,
        ActivityTypeChoices.JOB_POSTED,
        job=job,
        message=f"{_display_name(employer)} posted a new job: {title}",
        amount=budget,
        is_public=True,
    )
    queue_admin_stats_broadcast()
    return job


def approve_job(job, admin, remark="") -> Job:
    """Publish a pending job. No money moves; the budget was escrowed when it was posted."""
    _ensure_admin(admin)
    updated = Job.objects.filter(pk=job.pk, admin_status=JobAdminStatusChoices.PENDING).update(
        admin_status=JobAdminStatusChoices.APPROVED,
        status=JobStatusChoices.OPEN,
        admin_remark=remark,
        updated_at=timezone.now(),
    )
    job.refresh_from_db()
    if not updated:
        raise InvalidState(f"Only pending jobs can be approved, this job is {job.admin_status}")

    logger.info(f"Job {job.id} approved by '{admin.username}'")
    create_notification(
        job.employer_id,
        NotificationTypeChoices.SYSTEM,
        "Job Approved",
        f"Your job '{job.title}' has been approved and is now open to workers",
        link=f"/jobs/{job.id}",
        related_job=job,
    )
    queue_admin_stats_broadcast()
    return job


def reject_job(job, admin, reason="") -> Job:
    """
    Reject a pending job and return its whole budget to the employer's deposit balance.

    Rejecting an already rejected job is a no-op, so the escrow can never be refunded twice.
    An approved job cannot be rejected; deleting it refunds the slots that were not paid out.
    """
    _ensure_admin(admin)
    with transaction.atomic():
        updated = Job.objects.filter(pk=job.pk, admin_status=JobAdminStatusChoices.PENDING).update(
            admin_status=JobAdminStatusChoices.REJECTED,
            status=JobStatusChoices.CANCELLED,
            admin_remark=reason,
            updated_at=timezone.now(),
        )
        job.refresh_from_db()
        if not updated:
            if job.admin_status == JobAdminStatusChoices.REJECTED:
                logger.info(f"Job {job.id} is already rejected, nothing to refund")
                return job
            raise InvalidState("Approved jobs cannot be rejected, delete the job to refund its remaining budget")

        ledger.credit(
            job.employer,
            BalanceAccountChoices.DEPOSIT,
            job.budget,
            TransactionTypeChoices.DEPOSIT,
            f"Refund for rejected job: {job.title}",
            related_job=job,
            metadata={"reason": reason},
        )

    logger.info(f"Job {job.id} rejected by '{admin.username}', {job.budget} refunded to '{job.employer.username}'")
    create_notification(
        job.employer_id,
        NotificationTypeChoices.SYSTEM,
        "Job Rejected",
        f"Your job '{job.title}' was rejected and ${job.budget} was refunded. {reason}".strip(),
        link="/wallet",
        related_job=job,
    )
    queue_admin_stats_broadcast()
    return job


def update_job(job, actor, **fields) -> Job:
    """
    Edit the descriptive fields of a job (employer or admin).

    worker_need, worker_earn and the budget were fixed when the escrow was taken, so trying to
    change them raises InvalidState instead of silently desynchronising the escrow.
    """
    _ensure_employer_or_admin(job, actor)
    locked_fields = sorted(set(fields) - set(EDITABLE_JOB_FIELDS))
    if locked_fields:
        raise InvalidState(f"These job fields cannot be edited: {', '.join(locked_fields)}")
    if not fields:
        return job

    for field, value in fields.items():
        setattr(job, field, value)
    job.save(update_fields=[*fields, "updated_at"])
    logger.info(f"Job {job.id} updated by '{actor.username}': {', '.join(sorted(fields))}")
    return job


def delete_job(job, actor):
    """
    Delete a job and refund the budget of its unfilled slots to the employer.

    The refund and the deletion happen in one database transaction. A rejected job was already
    refunded in full, so deleting it returns nothing. Returns the refund Transaction or None.
    """
    _ensure_employer_or_admin(job, actor)
    refund_txn = None
    with transaction.atomic():
        locked = Job.objects.select_for_update().select_related("employer").filter(pk=job.pk).first()
        if locked is None:
            raise NotFound("Job not found")

        if locked.admin_status != JobAdminStatusChoices.REJECTED:
            refund = (locked.remaining_slots * locked.worker_earn).quantize(ledger.MONEY_PLACES)
            if refund > 0:
                refund_txn = ledger.credit(
                    locked.employer,
                    BalanceAccountChoices.DEPOSIT,
                    refund,
                    TransactionTypeChoices.DEPOSIT,
                    f"Refund for deleted job: {locked.title}",
                    related_job=locked,
                    metadata={"reason": "Job deleted"},
                )

        if locked.assigned_to_id and locked.works.filter(
            worker_id=locked.assigned_to_id,
            status__in=[WorkStatusChoices.PENDING, WorkStatusChoices.IN_PROGRESS, WorkStatusChoices.SUBMITTED],
        ).exists():
            _decrement_active_jobs(locked.assigned_to_id)
        locked.delete()

    logger.info(
        f"Job {job.id} '{job.title}' deleted by '{actor.username}'"
        + (f", {refund_txn.amount} refunded" if refund_txn else ", nothing refunded")
    )
    queue_admin_stats_broadcast()
    return refund_txn


# Applications
# ============


def apply_for_job(job, worker, message="") -> JobApplication:
    """Ask to be assigned an open job. The employer is notified and picks from the applicants."""
    if worker.pk == job.employer_id:
        raise InvalidState("Employers cannot apply for their own jobs")
    if job.status != JobStatusChoices.OPEN or job.admin_status != JobAdminStatusChoices.APPROVED:
        raise InvalidState("Job is not open for applications")
    if JobApplication.objects.filter(job=job, applicant=worker).exists():
        raise AlreadyProcessed("You have already applied for this job")
    if Work.objects.filter(job=job, worker=worker).exists():
        raise AlreadyProcessed("You already have work on this job")

    application = JobApplication.objects.create(job=job, applicant=worker, message=message)
    logger.info(f"'{worker.username}' applied for job {job.id}")
    create_activity(
        worker.id,
        ActivityTypeChoices.JOB_APPLIED,
        job=job,
        message=f"Applied for job: {job.title}",
        is_public=True,
    )
    create_notification(
        job.employer_id,
        NotificationTypeChoices.SYSTEM,
        "New Job Application",
        f"{_display_name(worker)} applied for your job: {job.title}",
        link=f"/jobs/{job.id}",
        related_job=job,
    )
    return application


def list_applicants(job, actor):
    _ensure_employer_or_admin(job, actor)
    return JobApplication.objects.select_related("applicant").filter(job=job)


# Work lifecycle
# ==============


def assign_job(job, worker, actor) -> Work:
    """
    Assign an open job to one of its applicants. The work starts pending, the application is
    accepted and the job moves to in-progress.
    """
    _ensure_employer_or_admin(job, actor)
    if worker.pk == job.employer_id:
        raise InvalidState("Employers cannot be assigned to their own jobs")
    if not JobApplication.objects.filter(job=job, applicant=worker).exists():
        raise InvalidState("Jobs can only be assigned to workers who applied for them")

    with transaction.atomic():
        now = timezone.now()
        updated = Job.objects.filter(
            pk=job.pk,
            status=JobStatusChoices.OPEN,
            admin_status=JobAdminStatusChoices.APPROVED,
            current_participants__lt=F("worker_need"),
        ).update(assigned_to=worker, assigned_at=now, status=JobStatusChoices.IN_PROGRESS, updated_at=now)
        if not updated:
            raise InvalidState("Job is not open for assignment")
        if Work.objects.filter(job=job, worker=worker).exists():
            raise AlreadyProcessed("This worker already has work on this job")

        job.refresh_from_db()
        work = Work.objects.create(
            job=job,
            worker=worker,
            employer_id=job.employer_id,
            status=WorkStatusChoices.PENDING,
            payment_amount=job.worker_earn,
        )
        JobApplication.objects.filter(job=job, applicant=worker).update(status=JobApplicationStatusChoices.ACCEPTED)
        CustomUser.objects.filter(pk=worker.pk).update(active_jobs=F("active_jobs") + 1)

    logger.info(f"Job {job.id} assigned to '{worker.username}' by '{actor.username}'")
    create_notification(
        worker.id,
        NotificationTypeChoices.JOB_ASSIGNED,
        "New Job Assigned",
        f"You have been assigned to: {job.title}",
        link=f"/works/{work.id}",
        related_job=job,
        related_work=work,
    )
    create_activity(worker.id, ActivityTypeChoices.JOB_ASSIGNED, job=job, work=work, message=f"Assigned to {job.title}")
    return work


def submit_for_job(job, worker, *, proof="", message="", files=None) -> Work:
    """
    Take a slot on an open job by submitting proof directly. The work is created already
    submitted and waits for the employer's approval.
    """
    if worker.pk == job.employer_id:
        raise InvalidState("Employers cannot submit work for their own jobs")

    with transaction.atomic():
        locked = Job.objects.select_for_update().filter(pk=job.pk).first()
        if locked is None:
            raise NotFound("Job not found")
        if locked.status != JobStatusChoices.OPEN or locked.admin_status != JobAdminStatusChoices.APPROVED:
            raise InvalidState("This job is not accepting submissions")
        if locked.is_full:
            raise InvalidState("This job has reached its worker limit")
        if Work.objects.filter(job=locked, worker=worker).exists():
            raise AlreadyProcessed("You have already submitted work for this job")

        work = Work.objects.create(
            job=locked,
            worker=worker,
            employer_id=locked.employer_id,
            status=WorkStatusChoices.SUBMITTED,
            submission_proof=proof,
            submission_message=message,
            submission_files=files or [],
            submission_date=timezone.now(),
            payment_amount=locked.worker_earn,
        )

    logger.info(f"'{worker.username}' submitted work {work.id} for job {locked.id}")
    _notify_submission(work, locked, worker)
    return work


def _notify_submission(work, job, worker):
    create_notification(
        job.employer_id,
        NotificationTypeChoices.WORK_SUBMITTED,
        "New Work Submission",
        f"{_display_name(worker)} submitted work for: {job.title}",
        link=f"/works/{work.id}",
        related_job=job,
        related_work=work,
    )
    create_activity(worker.id, ActivityTypeChoices.WORK_SUBMITTED, job=job, work=work, message=f"Submitted work for {job.title}")


def _move_work(work, target, **fields):
    if not can_transition(work.status, target):
        raise InvalidState(f"Work cannot move from {work.status} to {target}")
    updated = Work.objects.filter(pk=work.pk, status=work.status).update(status=target, updated_at=timezone.now(), **fields)
    if not updated:
        raise InvalidState("Work was changed by someone else, reload it and try again")
    work.refresh_from_db()
    return work


def start_work(work, worker) -> Work:
    if work.worker_id != worker.pk:
        raise Unauthorized("This work is assigned to someone else")
    return _move_work(work, WorkStatusChoices.IN_PROGRESS)


def submit_work(work, worker, *, proof="", message="", files=None) -> Work:
    """Submit proof for assigned work (pending or in-progress)"""
    if work.worker_id != worker.pk:
        raise Unauthorized("This work is assigned to someone else")
    work = _move_work(
        work,
        WorkStatusChoices.SUBMITTED,
        submission_proof=proof,
        submission_message=message,
        submission_files=files or [],
        submission_date=timezone.now(),
    )
    logger.info(f"'{worker.username}' submitted assigned work {work.id}")
    _notify_submission(work, work.job, worker)
    return work


def approve_work(work, actor, rating=5, feedback="") -> Work:
    """
    Approve submitted work and pay the worker from the job's escrow.

    The status change, the job's participant count and the payout commit together; a second
    approval raises AlreadyProcessed without paying again. The referral commission and the
    notifications follow the payout and cannot roll it back.
    """
    if work.employer_id != actor.pk and not actor.is_platform_admin:
        raise Unauthorized("Only the job's employer or an admin can approve work")
    if rating is None:
        rating = 5
    if not 0 <= int(rating) <= 5:
        raise InvalidAmount("Rating must be between 0 and 5")

    with transaction.atomic():
        now = timezone.now()
        updated = Work.objects.filter(pk=work.pk, status=WorkStatusChoices.SUBMITTED).update(
            status=WorkStatusChoices.APPROVED,
            rating=int(rating),
            employer_feedback=feedback,
            payment_status=WorkPaymentStatusChoices.PAID,
            paid_at=now,
            updated_at=now,
        )
        if not updated:
            current = Work.objects.filter(pk=work.pk).values_list("status", flat=True).first()
            if current is None:
                raise NotFound("Work not found")
            if current == WorkStatusChoices.APPROVED:
                raise AlreadyProcessed("This work has already been approved")
            raise InvalidState(f"Only submitted work can be approved, this work is {current}")

        if not Job.objects.filter(pk=work.job_id, current_participants__lt=F("worker_need")).update(
            current_participants=F("current_participants") + 1, updated_at=now
        ):
            raise InvalidState("This job has no unpaid slots left")
        Job.objects.filter(pk=work.job_id, current_participants__gte=F("worker_need")).update(
            status=JobStatusChoices.COMPLETED, completed_at=now
        )

        job = Job.objects.get(pk=work.job_id)
        worker = CustomUser.objects.get(pk=work.worker_id)
        ledger.credit(
            worker,
            BalanceAccountChoices.EARNING,
            work.payment_amount,
            TransactionTypeChoices.EARNING,
            f"Earned from job: {job.title}",
            related_job=job,
            related_work=work,
            increment_total_earnings=True,
            extra_counters={"completed_jobs": 1},
        )
        if job.assigned_to_id == worker.pk:
            _decrement_active_jobs(worker.pk)
            # the assignment is done; a job with slots left goes back to open
            Job.objects.filter(pk=job.pk, status=JobStatusChoices.IN_PROGRESS).update(
                status=JobStatusChoices.OPEN, assigned_to=None, assigned_at=None
            )
            job.refresh_from_db()

    work.refresh_from_db()
    logger.info(f"Work {work.id} approved by '{actor.username}', {work.payment_amount} paid to '{worker.username}'")

    process_referral_earnings(worker.pk, ReferralSourceChoices.TASK, work.payment_amount)
    create_notification(
        worker.pk,
        NotificationTypeChoices.WORK_APPROVED,
        "Work Approved!",
        f"Your work for '{job.title}' was approved. You earned ${work.payment_amount}",
        link=f"/works/{work.id}",
        related_job=job,
        related_work=work,
    )
    create_activity(
        worker.pk,
        ActivityTypeChoices.WORK_APPROVED,
        job=job,
        work=work,
        message=f"{_display_name(worker)} earned ${work.payment_amount} from {job.title}",
        amount=work.payment_amount,
        is_public=True,
    )
    if job.status == JobStatusChoices.COMPLETED:
        create_notification(
            job.employer_id,
            NotificationTypeChoices.JOB_COMPLETED,
            "Job Completed",
            f"All {job.worker_need} slots of '{job.title}' have been filled",
            link=f"/jobs/{job.id}",
            related_job=job,
        )
        create_activity(job.employer_id, ActivityTypeChoices.JOB_COMPLETED, job=job, message=f"{job.title} was completed")
    queue_admin_stats_broadcast()
    return work


def reject_work(work, actor, feedback="") -> Work:
    """
    Reject submitted work. No money moves: the slot stays in escrow. When the rejected worker
    held the job's assignment, the assignment is released and an in-progress job reopens.
    """
    if work.employer_id != actor.pk:
        raise Unauthorized("Only the job's employer can reject work")

    with transaction.atomic():
        now = timezone.now()
        updated = Work.objects.filter(pk=work.pk, status=WorkStatusChoices.SUBMITTED).update(
            status=WorkStatusChoices.REJECTED, employer_feedback=feedback, updated_at=now
        )
        if not updated:
            current = Work.objects.filter(pk=work.pk).values_list("status", flat=True).first()
            if current is None:
                raise NotFound("Work not found")
            if current == WorkStatusChoices.REJECTED:
                raise AlreadyProcessed("This work has already been rejected")
            raise InvalidState(f"Only submitted work can be rejected, this work is {current}")

        # a direct submission leaves another worker's assignment alone
        if Job.objects.filter(pk=work.job_id, assigned_to_id=work.worker_id).exists():
            Job.objects.filter(pk=work.job_id, status=JobStatusChoices.IN_PROGRESS).update(status=JobStatusChoices.OPEN)
            Job.objects.filter(pk=work.job_id).update(assigned_to=None, assigned_at=None, updated_at=now)
            _decrement_active_jobs(work.worker_id)

    work.refresh_from_db()
    logger.info(f"Work {work.id} rejected by '{actor.username}'")
    create_notification(
        work.worker_id,
        NotificationTypeChoices.WORK_REJECTED,
        "Work Rejected",
        f"Your work for '{work.job.title}' was rejected. {feedback}".strip(),
        link=f"/works/{work.id}",
        related_job=work.job,
        related_work=work,
    )
    return work
