from django.contrib import admin

from .models import Job, JobApplication, Work


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ("title", "employer", "worker_need", "worker_earn", "budget", "current_participants", "status", "admin_status")
    list_filter = ("status", "admin_status", "category")
    search_fields = ("title", "employer__username")
    readonly_fields = ("budget", "current_participants")


@admin.register(Work)
class WorkAdmin(admin.ModelAdmin):
    list_display = ("job", "worker", "status", "payment_amount", "payment_status", "submission_date")
    list_filter = ("status", "payment_status")
    search_fields = ("job__title", "worker__username")
    readonly_fields = ("payment_amount", "payment_status", "paid_at")


@admin.register(JobApplication)
class JobApplicationAdmin(admin.ModelAdmin):
    list_display = ("job", "applicant", "status", "applied_at")
    list_filter = ("status",)
    search_fields = ("job__title", "applicant__username")
