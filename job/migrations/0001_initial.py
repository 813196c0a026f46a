# Generated manually

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Job',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField()),
                ('category', models.CharField(blank=True, default='', max_length=100)),
                ('worker_need', models.PositiveIntegerField(help_text='Number of workers the job pays for')),
                ('worker_earn', models.DecimalField(decimal_places=4, help_text='Amount paid to each worker', max_digits=14)),
                ('budget', models.DecimalField(decimal_places=4, help_text='worker_need x worker_earn, escrowed at posting', max_digits=14)),
                ('current_participants', models.PositiveIntegerField(default=0, help_text='Number of approved submissions')),
                ('status', models.CharField(choices=[('pending-approval', 'Pending approval'), ('open', 'Open'), ('in-progress', 'In progress'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='pending-approval', max_length=20)),
                ('admin_status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('admin_remark', models.TextField(blank=True, default='')),
                ('assigned_at', models.DateTimeField(blank=True, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('task_instructions', models.TextField(blank=True, default='')),
                ('required_proof', models.TextField(blank=True, default='', help_text='What a worker must submit as proof of completion')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('assigned_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_jobs', to=settings.AUTH_USER_MODEL)),
                ('employer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='posted_jobs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('worker_need__gt', 0)), name='job_worker_need_positive'),
                    models.CheckConstraint(condition=models.Q(('worker_earn__gt', 0)), name='job_worker_earn_positive'),
                    models.CheckConstraint(condition=models.Q(('current_participants__lte', models.F('worker_need'))), name='job_participants_within_need'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Work',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('in-progress', 'In progress'), ('submitted', 'Submitted'), ('approved', 'Approved'), ('rejected', 'Rejected')], default='pending', max_length=20)),
                ('submission_proof', models.TextField(blank=True, default='')),
                ('submission_message', models.TextField(blank=True, default='')),
                ('submission_files', models.JSONField(blank=True, default=list)),
                ('submission_date', models.DateTimeField(blank=True, null=True)),
                ('payment_amount', models.DecimalField(decimal_places=4, help_text='Fixed from job.worker_earn when the work is created', max_digits=14)),
                ('payment_status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('refunded', 'Refunded')], default='pending', max_length=20)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('employer_feedback', models.TextField(blank=True, default='')),
                ('rating', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='employer_works', to=settings.AUTH_USER_MODEL)),
                ('job', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='works', to='job.job')),
                ('worker', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='works', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('job', 'worker'), name='one_work_per_worker_per_job'),
                    models.CheckConstraint(condition=models.Q(('rating__isnull', True), ('rating__lte', 5), _connector='OR'), name='work_rating_at_most_5'),
                ],
            },
        ),
    ]
