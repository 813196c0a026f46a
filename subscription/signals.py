from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from common.caching import invalidate_cache_pattern
from subscription.models import SubscriptionPlan


@receiver([post_save, post_delete], sender=SubscriptionPlan)
def invalidate_plan_cache(sender, instance, **kwargs):
    invalidate_cache_pattern("*subscription_plans*")
