from rest_framework import serializers

from account.models import CustomUser
from account.serializers import SimpleUserSerializer
from .models import Job, JobApplication, Work


class JobCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField()
    category = serializers.CharField(max_length=100, required=False, allow_blank=True, default="")
    worker_need = serializers.IntegerField(min_value=1)
    worker_earn = serializers.DecimalField(max_digits=14, decimal_places=4, min_value=0)
    task_instructions = serializers.CharField(required=False, allow_blank=True, default="")
    required_proof = serializers.CharField(required=False, allow_blank=True, default="")


class JobUpdateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False)
    description = serializers.CharField(required=False)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    task_instructions = serializers.CharField(required=False, allow_blank=True)
    required_proof = serializers.CharField(required=False, allow_blank=True)


class JobListSerializer(serializers.ModelSerializer):
    employer = SimpleUserSerializer(read_only=True)
    remaining_slots = serializers.IntegerField(read_only=True)

    class Meta:
        model = Job
        fields = [
            "id",
            "title",
            "category",
            "employer",
            "worker_need",
            "worker_earn",
            "current_participants",
            "remaining_slots",
            "status",
            "admin_status",
            "created_at",
        ]


class JobDetailSerializer(serializers.ModelSerializer):
    """
    Complete job serializer including the employer, moderation fields and the
    currently assigned worker.
    """
    employer = SimpleUserSerializer(read_only=True)
    assigned_to = SimpleUserSerializer(read_only=True)
    remaining_slots = serializers.IntegerField(read_only=True)

    class Meta:
        model = Job
        fields = "__all__"


class WorkSerializer(serializers.ModelSerializer):
    worker = SimpleUserSerializer(read_only=True)
    job = JobListSerializer(read_only=True)

    class Meta:
        model = Work
        fields = "__all__"


class JobApplySerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, default="")


class JobApplicationSerializer(serializers.ModelSerializer):
    applicant = SimpleUserSerializer(read_only=True)

    class Meta:
        model = JobApplication
        fields = ["id", "job", "applicant", "message", "status", "applied_at"]


class AssignJobSerializer(serializers.Serializer):
    worker_id = serializers.IntegerField()

    def validate_worker_id(self, value):
        try:
            return CustomUser.objects.get(id=value, is_active=True)
        except CustomUser.DoesNotExist:
            raise serializers.ValidationError("Worker not found")


class WorkSubmissionSerializer(serializers.Serializer):
    proof = serializers.CharField(required=False, allow_blank=True, default="")
    message = serializers.CharField(required=False, allow_blank=True, default="")
    files = serializers.ListField(child=serializers.CharField(), required=False, default=list)

    def validate(self, attrs):
        if not attrs.get("proof") and not attrs.get("files"):
            raise serializers.ValidationError("Submission proof or files are required")
        return attrs


class ApproveWorkSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=0, max_value=5, required=False, default=5)
    feedback = serializers.CharField(required=False, allow_blank=True, default="")


class FeedbackSerializer(serializers.Serializer):
    feedback = serializers.CharField(required=False, allow_blank=True, default="")


class AdminJobDecisionSerializer(serializers.Serializer):
    remark = serializers.CharField(required=False, allow_blank=True, default="")
