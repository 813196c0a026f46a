from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .models import SystemSetting
from .utils import SYSTEM_SETTINGS_CACHE_KEY


@receiver([post_save, post_delete], sender=SystemSetting)
def clear_system_settings_cache(sender, instance, **kwargs):
    cache.delete(SYSTEM_SETTINGS_CACHE_KEY)
