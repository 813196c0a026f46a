from django.urls import path
from . import apis

app_name = 'job'
urlpatterns = [
    path('', apis.AvailableJobsView.as_view(), name='available-jobs'),
    path('create/', apis.JobCreateView.as_view(), name='create-job'),
    path('mine/', apis.MyJobsView.as_view(), name='my-jobs'),
    path('<int:job_id>/', apis.JobDetailView.as_view(), name='job-detail'),
    path('<int:job_id>/apply/', apis.ApplyJobView.as_view(), name='apply-job'),
    path('<int:job_id>/applicants/', apis.JobApplicantsView.as_view(), name='job-applicants'),
    path('<int:job_id>/assign/', apis.AssignJobView.as_view(), name='assign-job'),
    path('<int:job_id>/submit/', apis.SubmitForJobView.as_view(), name='submit-for-job'),
    path('works/mine/', apis.MyWorksView.as_view(), name='my-works'),
    path('works/employer/', apis.EmployerWorksView.as_view(), name='employer-works'),
    path('works/<int:work_id>/start/', apis.StartWorkView.as_view(), name='start-work'),
    path('works/<int:work_id>/submit/', apis.SubmitWorkView.as_view(), name='submit-work'),
    path('works/<int:work_id>/approve/', apis.ApproveWorkView.as_view(), name='approve-work'),
    path('works/<int:work_id>/reject/', apis.RejectWorkView.as_view(), name='reject-work'),
    # Admin moderation
    path('admin/pending/', apis.AdminPendingJobsView.as_view(), name='admin-pending-jobs'),
    path('admin/<int:job_id>/approve/', apis.AdminJobDecisionView.as_view(approve=True), name='admin-approve-job'),
    path('admin/<int:job_id>/reject/', apis.AdminJobDecisionView.as_view(approve=False), name='admin-reject-job'),
]
