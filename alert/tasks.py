from datetime import timedelta

from asgiref.sync import async_to_sync
from celery import shared_task
from celery.utils.log import get_task_logger
from channels.layers import get_channel_layer
from django.db.models import Sum
from django.utils import timezone

from account.models import CustomUser
from job.choices import JobStatusChoices, WorkStatusChoices
from job.models import Job, Work
from payment.choices import TransactionStatusChoices, TransactionTypeChoices
from payment.models import Transaction

logger = get_task_logger(__name__)

ADMIN_STATS_GROUP = "admin_stats"


def _sum_amount(queryset):
    return queryset.aggregate(total=Sum("amount"))["total"] or 0


def collect_admin_stats():
    completed = Transaction.objects.filter(status=TransactionStatusChoices.COMPLETED)
    today = timezone.localdate()

    graph_data = []
    for days_ago in range(6, -1, -1):
        day = today - timedelta(days=days_ago)
        graph_data.append({
            "date": day.strftime("%a"),
            "users": CustomUser.objects.filter(date_joined__date=day).count(),
            "earnings": str(_sum_amount(completed.filter(transaction_type=TransactionTypeChoices.EARNING, created_at__date=day))),
        })

    return {
        "users": {"total": CustomUser.objects.count()},
        "jobs": {"active": Job.objects.filter(status__in=[JobStatusChoices.OPEN, JobStatusChoices.IN_PROGRESS]).count()},
        "works": {"pending": Work.objects.filter(status=WorkStatusChoices.SUBMITTED).count()},
        "transactions": {"total_volume": str(_sum_amount(completed))},
        "graph_data": graph_data,
    }


@shared_task
def broadcast_admin_stats():
    """Push dashboard totals to every connected admin"""
    try:
        stats = collect_admin_stats()
        channel_layer = get_channel_layer()
        async_to_sync(channel_layer.group_send)(
            ADMIN_STATS_GROUP,
            {"type": "stats.message", "text": {"action": "admin_stats_update", **stats}},
        )
        logger.info("Broadcasted admin stats")
        return {"status": "success"}
    except Exception as e:
        logger.error(f"Error broadcasting admin stats: {str(e)}", exc_info=True)
        return {"status": "error", "message": str(e)}


def queue_admin_stats_broadcast():
    try:
        broadcast_admin_stats.delay()
    except Exception as e:
        logger.warning(f"Could not queue admin stats broadcast: {e}")
