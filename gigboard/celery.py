import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'gigboard.settings')

celery_app = Celery('gigboard')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
celery_app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django app configs.
celery_app.autodiscover_tasks()

# Keep the admin dashboard warm even when nothing is settling
celery_app.conf.beat_schedule = {
    'broadcast-admin-stats': {
        'task': 'alert.tasks.broadcast_admin_stats',
        'schedule': crontab(minute='*/5'),
    },
}

# Configure better error handling
celery_app.conf.broker_connection_retry = True
celery_app.conf.broker_connection_retry_on_startup = True
celery_app.conf.broker_connection_max_retries = 3
celery_app.conf.task_acks_late = True
celery_app.conf.task_reject_on_worker_lost = True

celery_app.conf.task_routes = {
    'alert.tasks.broadcast_admin_stats': {'queue': 'default'},
}
