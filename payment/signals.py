from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from common.caching import invalidate_cache_pattern
from payment.models import Transaction


def invalidate_user_transaction_cache(user_id):
    invalidate_cache_pattern(f"*user_transaction_history_{user_id}*")


@receiver([post_save, post_delete], sender=Transaction)
def invalidate_transaction_cache(sender, instance, **kwargs):
    invalidate_user_transaction_cache(instance.user_id)
