from decimal import Decimal
from unittest import mock

from django.db.models import Sum
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase
from rest_framework_simplejwt.tokens import RefreshToken

from account.choices import UserRoleChoices
from account.models import CustomUser
from alert.models import Activity, Notification
from common.exceptions import (
    AlreadyProcessed,
    BelowMinimumSpend,
    InsufficientBalance,
    InvalidAmount,
    InvalidState,
    Unauthorized,
)
from job import services
from job.choices import (
    JobAdminStatusChoices,
    JobApplicationStatusChoices,
    JobStatusChoices,
    WorkPaymentStatusChoices,
    WorkStatusChoices,
)
from job.models import Job, JobApplication, Work
from payment.choices import TransactionTypeChoices
from payment.models import Transaction
from referral.services import apply_referral_code


def create_user(username, deposit=0, earning=0, **extra):
    user = CustomUser.objects.create_user(username=username, email=f"{username}@gmail.com", password="123456789ASas@", **extra)
    CustomUser.objects.filter(pk=user.pk).update(deposit_balance=Decimal(deposit), earning_balance=Decimal(earning))
    user.refresh_from_db()
    return user


def post_job(employer, worker_need=5, worker_earn="1.5", title="Follow our page"):
    return services.create_job(
        employer,
        title=title,
        description="Follow the page and send a screenshot",
        worker_need=worker_need,
        worker_earn=Decimal(worker_earn),
        category="social",
        required_proof="Screenshot",
    )


class JobEscrowTestCase(TestCase):
    def setUp(self):
        self.employer = create_user("employer", deposit="10", role=UserRoleChoices.EMPLOYER)
        self.admin = create_user("admin", role=UserRoleChoices.ADMIN)

    def test_posting_a_job_escrows_the_budget(self):
        job = post_job(self.employer)

        self.employer.refresh_from_db()
        self.assertEqual(self.employer.deposit_balance, Decimal("2.5"))
        self.assertEqual(job.budget, Decimal("7.5"))
        self.assertEqual(job.status, JobStatusChoices.PENDING_APPROVAL)
        self.assertEqual(job.admin_status, JobAdminStatusChoices.PENDING)

        txn = Transaction.objects.get(user=self.employer)
        self.assertEqual(txn.transaction_type, TransactionTypeChoices.PAYMENT)
        self.assertEqual(txn.amount, Decimal("7.5"))
        self.assertEqual(txn.related_job, job)
        self.assertTrue(Activity.objects.filter(job=job, is_public=True).exists())

    def test_budget_below_minimum_spend(self):
        with self.assertRaises(BelowMinimumSpend):
            post_job(self.employer, worker_need=3, worker_earn="0.2")
        self.assertFalse(Job.objects.exists())
        self.employer.refresh_from_db()
        self.assertEqual(self.employer.deposit_balance, Decimal("10"))

    def test_budget_above_deposit_balance(self):
        with self.assertRaises(InsufficientBalance):
            post_job(self.employer, worker_need=10, worker_earn="1.5")
        self.assertFalse(Job.objects.exists())
        self.assertFalse(Transaction.objects.exists())

    def test_worker_need_must_be_a_whole_number(self):
        for worker_need in (2.5, "3.2", "abc", 0, -1):
            with self.assertRaises(InvalidAmount):
                post_job(self.employer, worker_need=worker_need, worker_earn="1")
        self.assertEqual(post_job(self.employer, worker_need="2", worker_earn="1").worker_need, 2)

    def test_rejecting_a_pending_job_refunds_once(self):
        job = post_job(self.employer)

        services.reject_job(job, self.admin, "Not allowed")
        services.reject_job(job, self.admin, "Not allowed")

        self.employer.refresh_from_db()
        self.assertEqual(self.employer.deposit_balance, Decimal("10"))
        refunds = Transaction.objects.filter(user=self.employer, transaction_type=TransactionTypeChoices.DEPOSIT)
        self.assertEqual(refunds.count(), 1)
        self.assertEqual(refunds.get().amount, Decimal("7.5"))
        self.assertIn("Refund", refunds.get().description)
        job.refresh_from_db()
        self.assertEqual(job.status, JobStatusChoices.CANCELLED)

    def test_rejected_job_cannot_be_approved(self):
        job = post_job(self.employer)
        services.reject_job(job, self.admin)
        with self.assertRaises(InvalidState):
            services.approve_job(job, self.admin)

    def test_approved_job_cannot_be_rejected(self):
        job = post_job(self.employer)
        services.approve_job(job, self.admin)
        self.assertEqual(job.status, JobStatusChoices.OPEN)

        with self.assertRaises(InvalidState):
            services.reject_job(job, self.admin)
        self.employer.refresh_from_db()
        self.assertEqual(self.employer.deposit_balance, Decimal("2.5"))

    def test_only_admins_moderate_jobs(self):
        job = post_job(self.employer)
        with self.assertRaises(Unauthorized):
            services.approve_job(job, self.employer)
        with self.assertRaises(Unauthorized):
            services.reject_job(job, self.employer)

    def test_deleting_a_pending_job_refunds_everything(self):
        job = post_job(self.employer)

        refund = services.delete_job(job, self.employer)

        self.assertEqual(refund.amount, Decimal("7.5"))
        self.assertFalse(Job.objects.filter(pk=job.pk).exists())
        self.employer.refresh_from_db()
        self.assertEqual(self.employer.deposit_balance, Decimal("10"))

    def test_deleting_a_rejected_job_refunds_nothing(self):
        job = post_job(self.employer)
        services.reject_job(job, self.admin)

        refund = services.delete_job(job, self.employer)

        self.assertIsNone(refund)
        self.employer.refresh_from_db()
        self.assertEqual(self.employer.deposit_balance, Decimal("10"))

    def test_strangers_cannot_delete_jobs(self):
        job = post_job(self.employer)
        stranger = create_user("stranger")
        with self.assertRaises(Unauthorized):
            services.delete_job(job, stranger)
        self.assertTrue(Job.objects.filter(pk=job.pk).exists())


class WorkSettlementTestCase(TestCase):
    def setUp(self):
        self.employer = create_user("employer", deposit="10", role=UserRoleChoices.EMPLOYER)
        self.admin = create_user("admin", role=UserRoleChoices.ADMIN)
        self.referrer = create_user("referrer")
        self.worker = create_user("worker")
        apply_referral_code(self.worker, self.referrer.referral_code)

        self.job = post_job(self.employer, worker_need=20, worker_earn="0.05")
        services.approve_job(self.job, self.admin)

    def test_approved_work_pays_worker_and_referrer(self):
        work = services.submit_for_job(self.job, self.worker, proof="https://example.com/proof.png")
        self.assertEqual(work.status, WorkStatusChoices.SUBMITTED)

        services.approve_work(work, self.employer, rating=5)

        self.worker.refresh_from_db()
        self.assertEqual(self.worker.earning_balance, Decimal("0.05"))
        self.assertEqual(self.worker.total_earnings, Decimal("0.05"))
        self.assertEqual(self.worker.completed_jobs, 1)
        earning = Transaction.objects.get(user=self.worker, transaction_type=TransactionTypeChoices.EARNING)
        self.assertEqual(earning.amount, Decimal("0.05"))
        self.assertEqual(earning.related_work, work)

        self.referrer.refresh_from_db()
        self.assertEqual(self.referrer.earning_balance, Decimal("0.0025"))
        commission = Transaction.objects.get(user=self.referrer, transaction_type=TransactionTypeChoices.REFERRAL)
        self.assertEqual(commission.amount, Decimal("0.0025"))
        self.assertEqual(commission.metadata["source"], "task")

        work.refresh_from_db()
        self.assertEqual(work.payment_status, WorkPaymentStatusChoices.PAID)
        self.job.refresh_from_db()
        self.assertEqual(self.job.current_participants, 1)
        self.assertTrue(Notification.objects.filter(user=self.worker, related_work=work).exists())

    def test_work_is_paid_only_once(self):
        work = services.submit_for_job(self.job, self.worker, proof="proof")
        services.approve_work(work, self.employer)

        with self.assertRaises(AlreadyProcessed):
            services.approve_work(work, self.employer)
        with self.assertRaises(AlreadyProcessed):
            services.approve_work(work, self.admin)

        self.worker.refresh_from_db()
        self.assertEqual(self.worker.earning_balance, Decimal("0.05"))
        self.assertEqual(Transaction.objects.filter(user=self.worker).count(), 1)
        self.job.refresh_from_db()
        self.assertEqual(self.job.current_participants, 1)

    def test_referral_failure_does_not_undo_payout(self):
        work = services.submit_for_job(self.job, self.worker, proof="proof")

        with mock.patch("referral.services.get_ledger_setting", side_effect=RuntimeError("settings unavailable")):
            with self.assertLogs("referral.services", level="ERROR"):
                services.approve_work(work, self.employer)

        self.worker.refresh_from_db()
        self.referrer.refresh_from_db()
        self.assertEqual(self.worker.earning_balance, Decimal("0.05"))
        self.assertEqual(self.referrer.earning_balance, Decimal("0"))
        self.assertFalse(Transaction.objects.filter(user=self.referrer).exists())

    def test_only_employer_or_admin_approves(self):
        work = services.submit_for_job(self.job, self.worker, proof="proof")
        with self.assertRaises(Unauthorized):
            services.approve_work(work, self.worker)
        with self.assertRaises(Unauthorized):
            services.reject_work(work, self.admin)

    def test_rejected_work_moves_no_money(self):
        work = services.submit_for_job(self.job, self.worker, proof="proof")

        services.reject_work(work, self.employer, "Screenshot is blurry")

        work.refresh_from_db()
        self.assertEqual(work.status, WorkStatusChoices.REJECTED)
        self.assertEqual(work.employer_feedback, "Screenshot is blurry")
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.earning_balance, Decimal("0"))
        with self.assertRaises(AlreadyProcessed):
            services.reject_work(work, self.employer)
        with self.assertRaises(InvalidState):
            services.approve_work(work, self.employer)

    def test_submitting_twice_is_refused(self):
        services.submit_for_job(self.job, self.worker, proof="proof")
        with self.assertRaises(AlreadyProcessed):
            services.submit_for_job(self.job, self.worker, proof="proof again")

    def test_employers_cannot_work_their_own_jobs(self):
        with self.assertRaises(InvalidState):
            services.submit_for_job(self.job, self.employer, proof="proof")

    def test_unapproved_jobs_take_no_submissions(self):
        pending = post_job(self.employer, worker_need=1, worker_earn="1")
        with self.assertRaises(InvalidState):
            services.submit_for_job(pending, self.worker, proof="proof")


class EscrowConservationTestCase(TestCase):
    def setUp(self):
        self.employer = create_user("employer", deposit="10", role=UserRoleChoices.EMPLOYER)
        self.admin = create_user("admin", role=UserRoleChoices.ADMIN)
        self.workers = [create_user(f"worker{i}") for i in range(3)]
        self.job = post_job(self.employer, worker_need=3, worker_earn="1.5")
        services.approve_job(self.job, self.admin)

    def test_payouts_plus_refund_equal_budget(self):
        for worker in self.workers[:2]:
            work = services.submit_for_job(self.job, worker, proof="proof")
            services.approve_work(work, self.employer)

        refund = services.delete_job(self.job, self.employer)

        self.assertEqual(refund.amount, Decimal("1.5"))
        paid = Transaction.objects.filter(transaction_type=TransactionTypeChoices.EARNING).aggregate(total=Sum("amount"))["total"]
        self.assertEqual(paid + refund.amount, Decimal("4.5"))
        self.employer.refresh_from_db()
        earned = sum((CustomUser.objects.get(pk=w.pk).earning_balance for w in self.workers), Decimal("0"))
        self.assertEqual(self.employer.deposit_balance + earned, Decimal("10"))

    def test_job_completes_when_every_slot_is_paid(self):
        for worker in self.workers:
            work = services.submit_for_job(self.job, worker, proof="proof")
            services.approve_work(work, self.employer)

        self.job.refresh_from_db()
        self.assertEqual(self.job.status, JobStatusChoices.COMPLETED)
        self.assertIsNotNone(self.job.completed_at)
        self.assertEqual(services.delete_job(self.job, self.employer), None)
        self.employer.refresh_from_db()
        self.assertEqual(self.employer.deposit_balance, Decimal("5.5"))

    def test_completed_job_takes_no_more_submissions(self):
        for worker in self.workers:
            work = services.submit_for_job(self.job, worker, proof="proof")
            services.approve_work(work, self.employer)

        late = create_user("late")
        with self.assertRaises(InvalidState):
            services.submit_for_job(self.job, late, proof="proof")


class AssignedWorkTestCase(TestCase):
    def setUp(self):
        self.employer = create_user("employer", deposit="10", role=UserRoleChoices.EMPLOYER)
        self.admin = create_user("admin", role=UserRoleChoices.ADMIN)
        self.worker = create_user("worker")
        self.job = post_job(self.employer, worker_need=2, worker_earn="1")
        services.approve_job(self.job, self.admin)

    def assign(self, worker):
        services.apply_for_job(self.job, worker)
        return services.assign_job(self.job, worker, self.employer)

    def test_assigned_work_lifecycle(self):
        work = self.assign(self.worker)

        self.job.refresh_from_db()
        self.worker.refresh_from_db()
        self.assertEqual(work.status, WorkStatusChoices.PENDING)
        self.assertEqual(self.job.status, JobStatusChoices.IN_PROGRESS)
        self.assertEqual(self.job.assigned_to, self.worker)
        self.assertEqual(self.worker.active_jobs, 1)

        services.start_work(work, self.worker)
        self.assertEqual(work.status, WorkStatusChoices.IN_PROGRESS)
        services.submit_work(work, self.worker, proof="done")
        self.assertEqual(work.status, WorkStatusChoices.SUBMITTED)
        services.approve_work(work, self.employer, rating=4)

        self.worker.refresh_from_db()
        self.job.refresh_from_db()
        self.assertEqual(self.worker.active_jobs, 0)
        self.assertEqual(self.worker.earning_balance, Decimal("1"))
        self.assertEqual(self.job.status, JobStatusChoices.OPEN)
        self.assertIsNone(self.job.assigned_to)
        self.assertEqual(self.job.current_participants, 1)

    def test_pending_work_cannot_be_approved(self):
        work = self.assign(self.worker)
        with self.assertRaises(InvalidState):
            services.approve_work(work, self.employer)

    def test_only_the_assignee_submits(self):
        work = self.assign(self.worker)
        stranger = create_user("stranger")
        with self.assertRaises(Unauthorized):
            services.submit_work(work, stranger, proof="mine now")

    def test_in_progress_job_cannot_be_assigned_again(self):
        other = create_user("other")
        services.apply_for_job(self.job, other)
        self.assign(self.worker)
        with self.assertRaises(InvalidState):
            services.assign_job(self.job, other, self.employer)

    def test_rejecting_assigned_work_reopens_job(self):
        work = self.assign(self.worker)
        services.submit_work(work, self.worker, proof="done")
        services.reject_work(work, self.employer)

        self.job.refresh_from_db()
        self.worker.refresh_from_db()
        self.assertEqual(self.job.status, JobStatusChoices.OPEN)
        self.assertEqual(self.worker.active_jobs, 0)

    def test_deleting_assigned_job_releases_worker(self):
        self.assign(self.worker)

        refund = services.delete_job(self.job, self.employer)

        self.assertEqual(refund.amount, Decimal("2"))
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.active_jobs, 0)
        self.assertFalse(Work.objects.exists())

    def test_rejecting_a_direct_submission_keeps_another_workers_assignment(self):
        walk_in = create_user("walkin")
        direct = services.submit_for_job(self.job, walk_in, proof="screenshot")
        assigned = self.assign(self.worker)

        services.reject_work(direct, self.employer)

        self.job.refresh_from_db()
        self.worker.refresh_from_db()
        self.assertEqual(self.job.status, JobStatusChoices.IN_PROGRESS)
        self.assertEqual(self.job.assigned_to, self.worker)
        self.assertEqual(self.worker.active_jobs, 1)

        services.submit_work(assigned, self.worker, proof="done")
        services.approve_work(assigned, self.employer)
        self.worker.refresh_from_db()
        self.assertEqual(self.worker.active_jobs, 0)

    def test_only_applicants_can_be_assigned(self):
        stranger = create_user("stranger")
        with self.assertRaises(InvalidState):
            services.assign_job(self.job, stranger, self.employer)
        self.assertFalse(Work.objects.exists())
        self.job.refresh_from_db()
        self.assertEqual(self.job.status, JobStatusChoices.OPEN)

    def test_assignment_accepts_the_application(self):
        self.assign(self.worker)
        application = JobApplication.objects.get(job=self.job, applicant=self.worker)
        self.assertEqual(application.status, JobApplicationStatusChoices.ACCEPTED)


class JobApplicationTestCase(TestCase):
    def setUp(self):
        self.employer = create_user("employer", deposit="10", role=UserRoleChoices.EMPLOYER)
        self.admin = create_user("admin", role=UserRoleChoices.ADMIN)
        self.worker = create_user("worker")
        self.job = post_job(self.employer, worker_need=2, worker_earn="1")

    def test_pending_jobs_take_no_applications(self):
        with self.assertRaises(InvalidState):
            services.apply_for_job(self.job, self.worker)

    def test_worker_applies_once_and_employer_is_notified(self):
        services.approve_job(self.job, self.admin)

        application = services.apply_for_job(self.job, self.worker, message="I can do this today")

        self.assertEqual(application.status, JobApplicationStatusChoices.PENDING)
        self.assertTrue(Notification.objects.filter(user=self.employer, title="New Job Application").exists())
        with self.assertRaises(AlreadyProcessed):
            services.apply_for_job(self.job, self.worker)

    def test_employer_cannot_apply_for_own_job(self):
        services.approve_job(self.job, self.admin)
        with self.assertRaises(InvalidState):
            services.apply_for_job(self.job, self.employer)

    def test_applicants_are_visible_to_employer_and_admin_only(self):
        services.approve_job(self.job, self.admin)
        services.apply_for_job(self.job, self.worker)

        self.assertEqual([a.applicant for a in services.list_applicants(self.job, self.employer)], [self.worker])
        self.assertEqual(services.list_applicants(self.job, self.admin).count(), 1)
        with self.assertRaises(Unauthorized):
            services.list_applicants(self.job, self.worker)


class JobUpdateTestCase(TestCase):
    def setUp(self):
        self.employer = create_user("employer", deposit="10", role=UserRoleChoices.EMPLOYER)
        self.admin = create_user("admin", role=UserRoleChoices.ADMIN)
        self.job = post_job(self.employer, worker_need=2, worker_earn="1")

    def test_employer_and_admin_edit_descriptive_fields(self):
        services.update_job(self.job, self.employer, title="Like our page", required_proof="Link")
        services.update_job(self.job, self.admin, category="marketing")

        self.job.refresh_from_db()
        self.assertEqual(self.job.title, "Like our page")
        self.assertEqual(self.job.required_proof, "Link")
        self.assertEqual(self.job.category, "marketing")

    def test_budget_fields_cannot_be_edited(self):
        with self.assertRaises(InvalidState):
            services.update_job(self.job, self.employer, title="Cheaper", worker_earn=Decimal("0.01"))

        self.job.refresh_from_db()
        self.assertEqual(self.job.title, "Follow our page")
        self.assertEqual(self.job.worker_earn, Decimal("1"))
        self.assertEqual(self.job.budget, Decimal("2"))

    def test_strangers_cannot_edit_jobs(self):
        with self.assertRaises(Unauthorized):
            services.update_job(self.job, create_user("stranger"), title="Mine")


class JobApiTestCase(APITestCase):
    def setUp(self):
        self.employer = create_user("employer", deposit="10", role=UserRoleChoices.EMPLOYER)
        self.admin = create_user("admin", role=UserRoleChoices.ADMIN)
        self.worker = create_user("worker")

    def authenticate(self, user):
        token = RefreshToken.for_user(user)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token.access_token}")

    def create_job(self, **overrides):
        data = {
            "title": "Review our app",
            "description": "Leave an honest review",
            "worker_need": 5,
            "worker_earn": "1.5",
        }
        data.update(overrides)
        self.authenticate(self.employer)
        return self.client.post(reverse("job:create-job"), data, format="json")

    def test_employer_posts_job(self):
        response = self.create_job()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data["data"]["budget"]), Decimal("7.5"))
        self.employer.refresh_from_db()
        self.assertEqual(self.employer.deposit_balance, Decimal("2.5"))

    def test_insufficient_balance_is_a_bad_request(self):
        response = self.create_job(worker_need=100)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["status"], "error")

    def test_pending_jobs_are_not_listed_to_workers(self):
        self.create_job()
        self.authenticate(self.worker)
        response = self.client.get(reverse("job:available-jobs"))
        self.assertEqual(response.data["count"], 0)

    def test_admin_approval_publishes_job(self):
        job_id = self.create_job().data["data"]["id"]

        self.authenticate(self.worker)
        response = self.client.post(reverse("job:admin-approve-job", kwargs={"job_id": job_id}))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.admin)
        response = self.client.post(reverse("job:admin-approve-job", kwargs={"job_id": job_id}), {"remark": "Looks good"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.authenticate(self.worker)
        response = self.client.get(reverse("job:available-jobs"))
        self.assertEqual(response.data["count"], 1)

    def test_submit_and_approve_over_http(self):
        job_id = self.create_job().data["data"]["id"]
        services.approve_job(Job.objects.get(pk=job_id), self.admin)

        self.authenticate(self.worker)
        response = self.client.post(reverse("job:submit-for-job", kwargs={"job_id": job_id}), {"proof": "link"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        work_id = response.data["data"]["id"]

        response = self.client.post(reverse("job:approve-work", kwargs={"work_id": work_id}), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.employer)
        response = self.client.post(reverse("job:approve-work", kwargs={"work_id": work_id}), {"rating": 5}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        response = self.client.post(reverse("job:approve-work", kwargs={"work_id": work_id}), {"rating": 5}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

        self.worker.refresh_from_db()
        self.assertEqual(self.worker.earning_balance, Decimal("1.5"))

    def test_submission_needs_proof(self):
        job_id = self.create_job().data["data"]["id"]
        services.approve_job(Job.objects.get(pk=job_id), self.admin)

        self.authenticate(self.worker)
        response = self.client.post(reverse("job:submit-for-job", kwargs={"job_id": job_id}), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Work.objects.exists())

    def test_employer_deletes_job_over_http(self):
        job_id = self.create_job().data["data"]["id"]

        response = self.client.delete(reverse("job:job-detail", kwargs={"job_id": job_id}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data["data"]["refunded"]), Decimal("7.5"))
        self.employer.refresh_from_db()
        self.assertEqual(self.employer.deposit_balance, Decimal("10"))

    def test_apply_and_assign_over_http(self):
        job_id = self.create_job().data["data"]["id"]
        services.approve_job(Job.objects.get(pk=job_id), self.admin)

        self.authenticate(self.worker)
        response = self.client.post(reverse("job:apply-job", kwargs={"job_id": job_id}), {"message": "Ready"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post(reverse("job:apply-job", kwargs={"job_id": job_id}), {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        response = self.client.get(reverse("job:job-applicants", kwargs={"job_id": job_id}))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.authenticate(self.employer)
        response = self.client.get(reverse("job:job-applicants", kwargs={"job_id": job_id}))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["data"][0]["applicant"]["id"], self.worker.id)

        response = self.client.post(reverse("job:assign-job", kwargs={"job_id": job_id}), {"worker_id": self.worker.id}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["data"]["status"], WorkStatusChoices.PENDING)

    def test_edit_job_over_http_leaves_budget_alone(self):
        job_id = self.create_job().data["data"]["id"]

        response = self.client.patch(
            reverse("job:job-detail", kwargs={"job_id": job_id}),
            {"title": "Review our new app", "worker_earn": "0.01"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        job = Job.objects.get(pk=job_id)
        self.assertEqual(job.title, "Review our new app")
        self.assertEqual(job.worker_earn, Decimal("1.5"))

        self.authenticate(self.worker)
        response = self.client.patch(reverse("job:job-detail", kwargs={"job_id": job_id}), {"title": "Mine"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_rejecting_twice_reports_no_second_refund(self):
        job_id = self.create_job().data["data"]["id"]
        path = reverse("job:admin-reject-job", kwargs={"job_id": job_id})

        self.authenticate(self.admin)
        response = self.client.post(path, {"remark": "Spam"}, format="json")
        self.assertEqual(response.data["message"], "Job rejected and budget refunded")
        response = self.client.post(path, {"remark": "Spam"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["message"], "Job was already rejected, nothing was refunded")
        self.employer.refresh_from_db()
        self.assertEqual(self.employer.deposit_balance, Decimal("10"))
