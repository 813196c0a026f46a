from decimal import Decimal

from django.conf import settings
from django.core.cache import cache

SYSTEM_SETTINGS_CACHE_KEY = "ledger_system_settings"


def get_system_settings():
    """
    Retrieve every SystemSetting row as a dict of key -> Decimal value (None when unparsable).

    The dict is kept in the django cache so the database is not hit each time a ledger
    constant is read; common.signals drops the entry whenever a setting changes.
    """
    cached = cache.get(SYSTEM_SETTINGS_CACHE_KEY)
    if cached is None:
        from django.apps import apps
        SystemSetting = apps.get_model("common", "SystemSetting")
        cached = {s.key: s.as_decimal() for s in SystemSetting.objects.all()}
        cache.set(SYSTEM_SETTINGS_CACHE_KEY, cached, None)
    return cached


def get_ledger_setting(key: str) -> Decimal:
    """
    Resolve a ledger constant such as 'job_min_spend' or 'referral_commission_rate'.

    A SystemSetting with the same key overrides the value from settings.LEDGER, whose keys
    are the upper-cased form (JOB_MIN_SPEND). Unparsable overrides are ignored.
    """
    override = get_system_settings().get(key)
    if override is not None:
        return override
    return Decimal(settings.LEDGER[key.upper()])
