import logging

from django.db import transaction

from account.models import CustomUser
from common.exceptions import InvalidAmount, Unauthorized

logger = logging.getLogger(__name__)

ADMIN_EDITABLE_FIELDS = (
    "name",
    "email",
    "role",
    "status",
    "is_active",
    "deposit_balance",
    "earning_balance",
    "total_earnings",
    "completed_jobs",
    "active_jobs",
)


def admin_update_user(admin, user: CustomUser, **fields) -> CustomUser:
    """
    Privileged overwrite of a user's profile, counters and balances.

    This is the one place where balances change without a paired Transaction. It exists for
    manual corrections, so every call is logged at WARNING with the before and after values.
    """
    if not admin.is_platform_admin:
        raise Unauthorized("Only admins can edit users")

    changes = {key: value for key, value in fields.items() if key in ADMIN_EDITABLE_FIELDS}
    for key in ("deposit_balance", "earning_balance", "total_earnings"):
        if key in changes and changes[key] < 0:
            raise InvalidAmount(f"{key} cannot be negative")

    with transaction.atomic():
        user = CustomUser.objects.select_for_update().get(pk=user.pk)
        before = {key: getattr(user, key) for key in changes}
        for key, value in changes.items():
            setattr(user, key, value)
        user.save(update_fields=list(changes.keys()) or None)

    logger.warning(
        f"Admin '{admin.username}' edited user '{user.username}': before={before} after={changes}"
    )
    return user
