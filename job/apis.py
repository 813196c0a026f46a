import logging

from django.db.models import Q
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import IsAuthenticated

from account.utils import IsAdminUser
from common.exceptions import LedgerError
from common.responses import ErrorResponse, SuccessResponse, format_first_error, ledger_error_response
from job import services
from job.choices import JobAdminStatusChoices, JobStatusChoices
from job.models import Job, Work
from job.serializers import (
    AdminJobDecisionSerializer,
    ApproveWorkSerializer,
    AssignJobSerializer,
    FeedbackSerializer,
    JobCreateSerializer,
    JobApplicationSerializer,
    JobApplySerializer,
    JobDetailSerializer,
    JobListSerializer,
    JobUpdateSerializer,
    WorkSerializer,
    WorkSubmissionSerializer,
)

logger = logging.getLogger(__name__)


class JobCreateView(generics.GenericAPIView):
    serializer_class = JobCreateSerializer

    @extend_schema(
        summary="Post a new job",
        description="The job budget (worker_need x worker_earn) is taken from the deposit balance and held until it is paid to workers or refunded. The job is visible once an admin approves it.",
        responses={201: JobDetailSerializer},
    )
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors, False))

        try:
            job = services.create_job(request.user, **serializer.validated_data)
        except LedgerError as e:
            return ledger_error_response(e)
        except Exception as e:
            logger.error(f"Error creating job for user {request.user.id}: {str(e)}", exc_info=True)
            return ErrorResponse(message="Could not create job", status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return SuccessResponse(message="Job posted and awaiting approval", data=JobDetailSerializer(job).data, status=status.HTTP_201_CREATED)


class AvailableJobsView(generics.ListAPIView):
    serializer_class = JobListSerializer

    def get_queryset(self):
        queryset = Job.objects.select_related("employer").filter(
            status=JobStatusChoices.OPEN, admin_status=JobAdminStatusChoices.APPROVED
        ).exclude(Q(employer=self.request.user) | Q(works__worker=self.request.user))
        category = self.request.query_params.get("category")
        if category:
            queryset = queryset.filter(category=category)
        return queryset

    @extend_schema(summary="List open jobs the current user can still work on")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class MyJobsView(generics.ListAPIView):
    serializer_class = JobListSerializer

    def get_queryset(self):
        return Job.objects.select_related("employer").filter(employer=self.request.user)

    @extend_schema(summary="List the jobs posted by the current user")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class JobDetailView(generics.GenericAPIView):
    serializer_class = JobDetailSerializer

    def get_job(self, job_id):
        return Job.objects.select_related("employer", "assigned_to").filter(id=job_id).first()

    @extend_schema(summary="Get a job's detail")
    def get(self, request, *args, **kwargs):
        job = self.get_job(kwargs.get("job_id"))
        if not job:
            return ErrorResponse(message="Job not found", status=status.HTTP_404_NOT_FOUND)
        return SuccessResponse(message="Job detail", data=self.get_serializer(job).data)

    @extend_schema(summary="Edit a job's title, description or instructions (employer or admin)", request=JobUpdateSerializer)
    def patch(self, request, *args, **kwargs):
        job = self.get_job(kwargs.get("job_id"))
        if not job:
            return ErrorResponse(message="Job not found", status=status.HTTP_404_NOT_FOUND)

        serializer = JobUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors, False))

        try:
            job = services.update_job(job, request.user, **serializer.validated_data)
        except LedgerError as e:
            return ledger_error_response(e)
        return SuccessResponse(message="Job updated", data=self.get_serializer(job).data)

    @extend_schema(summary="Delete a job and refund the budget of its unfilled slots")
    def delete(self, request, *args, **kwargs):
        job = self.get_job(kwargs.get("job_id"))
        if not job:
            return ErrorResponse(message="Job not found", status=status.HTTP_404_NOT_FOUND)

        try:
            refund = services.delete_job(job, request.user)
        except LedgerError as e:
            return ledger_error_response(e)
        return SuccessResponse(message="Job deleted", data={"refunded": str(refund.amount) if refund else "0"})


class ApplyJobView(generics.GenericAPIView):
    serializer_class = JobApplySerializer

    @extend_schema(summary="Apply to be assigned an open job", responses={201: JobApplicationSerializer})
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors, False))

        job = Job.objects.filter(id=kwargs.get("job_id")).first()
        if not job:
            return ErrorResponse(message="Job not found", status=status.HTTP_404_NOT_FOUND)

        try:
            application = services.apply_for_job(job, request.user, **serializer.validated_data)
        except LedgerError as e:
            return ledger_error_response(e)
        return SuccessResponse(message="Application submitted", data=JobApplicationSerializer(application).data, status=status.HTTP_201_CREATED)


class JobApplicantsView(generics.GenericAPIView):
    serializer_class = JobApplicationSerializer

    @extend_schema(summary="List the applicants of a job (employer or admin)")
    def get(self, request, *args, **kwargs):
        job = Job.objects.filter(id=kwargs.get("job_id")).first()
        if not job:
            return ErrorResponse(message="Job not found", status=status.HTTP_404_NOT_FOUND)

        try:
            applicants = services.list_applicants(job, request.user)
        except LedgerError as e:
            return ledger_error_response(e)
        return SuccessResponse(message="Job applicants", data=self.get_serializer(applicants, many=True).data)


class AssignJobView(generics.GenericAPIView):
    serializer_class = AssignJobSerializer

    @extend_schema(summary="Assign an open job to one of its applicants (employer or admin)", responses={201: WorkSerializer})
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors, False))

        job = Job.objects.filter(id=kwargs.get("job_id")).first()
        if not job:
            return ErrorResponse(message="Job not found", status=status.HTTP_404_NOT_FOUND)

        try:
            work = services.assign_job(job, serializer.validated_data["worker_id"], request.user)
        except LedgerError as e:
            return ledger_error_response(e)
        return SuccessResponse(message="Job assigned", data=WorkSerializer(work).data, status=status.HTTP_201_CREATED)


class SubmitForJobView(generics.GenericAPIView):
    serializer_class = WorkSubmissionSerializer

    @extend_schema(summary="Submit proof of work for an open job", responses={201: WorkSerializer})
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors, False))

        job = Job.objects.filter(id=kwargs.get("job_id")).first()
        if not job:
            return ErrorResponse(message="Job not found", status=status.HTTP_404_NOT_FOUND)

        try:
            work = services.submit_for_job(job, request.user, **serializer.validated_data)
        except LedgerError as e:
            return ledger_error_response(e)
        return SuccessResponse(message="Work submitted", data=WorkSerializer(work).data, status=status.HTTP_201_CREATED)


class MyWorksView(generics.ListAPIView):
    serializer_class = WorkSerializer

    def get_queryset(self):
        queryset = Work.objects.select_related("job", "job__employer", "worker").filter(worker=self.request.user)
        work_status = self.request.query_params.get("status")
        if work_status:
            queryset = queryset.filter(status=work_status)
        return queryset

    @extend_schema(summary="List the current user's works")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class EmployerWorksView(generics.ListAPIView):
    serializer_class = WorkSerializer

    def get_queryset(self):
        queryset = Work.objects.select_related("job", "job__employer", "worker").filter(employer=self.request.user)
        work_status = self.request.query_params.get("status")
        if work_status:
            queryset = queryset.filter(status=work_status)
        job_id = self.request.query_params.get("job")
        if job_id:
            queryset = queryset.filter(job_id=job_id)
        return queryset

    @extend_schema(summary="List works submitted for the current user's jobs")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class WorkActionView(generics.GenericAPIView):
    """Base view for the actions taken on a single work"""
    success_message = None

    def get_work(self, work_id):
        return Work.objects.select_related("job", "worker").filter(id=work_id).first()

    def perform(self, request, work, data):
        raise NotImplementedError

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors, False))

        work = self.get_work(kwargs.get("work_id"))
        if not work:
            return ErrorResponse(message="Work not found", status=status.HTTP_404_NOT_FOUND)

        try:
            work = self.perform(request, work, serializer.validated_data)
        except LedgerError as e:
            return ledger_error_response(e)
        except Exception as e:
            logger.error(f"Error processing work {work.id}: {str(e)}", exc_info=True)
            return ErrorResponse(message="Could not process work", status=status.HTTP_500_INTERNAL_SERVER_ERROR)
        return SuccessResponse(message=self.success_message, data=WorkSerializer(work).data)


class StartWorkView(WorkActionView):
    serializer_class = FeedbackSerializer
    success_message = "Work started"

    @extend_schema(summary="Start assigned work", request=None)
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def perform(self, request, work, data):
        return services.start_work(work, request.user)


class SubmitWorkView(WorkActionView):
    serializer_class = WorkSubmissionSerializer
    success_message = "Work submitted"

    @extend_schema(summary="Submit proof for assigned work")
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def perform(self, request, work, data):
        return services.submit_work(work, request.user, **data)


class ApproveWorkView(WorkActionView):
    serializer_class = ApproveWorkSerializer
    success_message = "Work approved and worker paid"

    @extend_schema(summary="Approve submitted work and pay the worker (employer or admin)")
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def perform(self, request, work, data):
        return services.approve_work(work, request.user, rating=data["rating"], feedback=data["feedback"])


class RejectWorkView(WorkActionView):
    serializer_class = FeedbackSerializer
    success_message = "Work rejected"

    @extend_schema(summary="Reject submitted work (employer only)")
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)

    def perform(self, request, work, data):
        return services.reject_work(work, request.user, feedback=data["feedback"])


class AdminPendingJobsView(generics.ListAPIView):
    permission_classes = [IsAuthenticated, IsAdminUser]
    serializer_class = JobDetailSerializer

    def get_queryset(self):
        return Job.objects.select_related("employer", "assigned_to").filter(admin_status=JobAdminStatusChoices.PENDING)

    @extend_schema(summary="List jobs waiting for approval (admin only)")
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)


class AdminJobDecisionView(generics.GenericAPIView):
    permission_classes = [IsAuthenticated, IsAdminUser]
    serializer_class = AdminJobDecisionSerializer
    approve = True

    @extend_schema(summary="Approve or reject a pending job (admin only)", description="Rejecting a job refunds its budget to the employer's deposit balance")
    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        if not serializer.is_valid():
            return ErrorResponse(message=format_first_error(serializer.errors, False))

        job = Job.objects.filter(id=kwargs.get("job_id")).first()
        if not job:
            return ErrorResponse(message="Job not found", status=status.HTTP_404_NOT_FOUND)

        remark = serializer.validated_data["remark"]
        try:
            if self.approve:
                job = services.approve_job(job, request.user, remark)
                message = "Job approved"
            else:
                already_rejected = job.admin_status == JobAdminStatusChoices.REJECTED
                job = services.reject_job(job, request.user, remark)
                message = "Job was already rejected, nothing was refunded" if already_rejected else "Job rejected and budget refunded"
        except LedgerError as e:
            return ledger_error_response(e)
        return SuccessResponse(message=message, data=JobDetailSerializer(job).data)
