"""Account roles.

Roles form a closed set; authorization rules reference them through
``modules.accounts.policies.OPERATION_ROLES`` rather than comparing
strings at call sites.
"""

from django.db import models


class Role(models.TextChoices):
    USER = "user", "User"
    ADMIN = "admin", "Administrator"
    SUPERADMIN = "superadmin", "Super administrator"


ADMIN_ROLES: frozenset[str] = frozenset({Role.ADMIN, Role.SUPERADMIN})

PHONE_NUMBER_PATTERN = r"^\+?\d{10,15}$"
