"""Account model.

The token layer (SimpleJWT) authenticates against this model; the orders
module only needs ``id``, ``email`` and ``role`` from it, plus the display
fields (``name``, ``phone_number``) joined into the admin order listing.
"""

from __future__ import annotations

import uuid6
from django.contrib.auth.models import AbstractUser
from django.core.validators import RegexValidator
from django.db import models

from modules.accounts.constants import ADMIN_ROLES, PHONE_NUMBER_PATTERN, Role


class User(AbstractUser):
    id = models.UUIDField(primary_key=True, default=uuid6.uuid7, editable=False)
    name = models.CharField(max_length=150, blank=True, default="")
    email = models.EmailField(unique=True)
    phone_number = models.CharField(
        max_length=16,
        blank=True,
        default="",
        validators=[
            RegexValidator(PHONE_NUMBER_PATTERN, "Please provide a valid phone number.")
        ],
    )
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.USER)

    class Meta:
        db_table = "users"
        ordering = ["-date_joined"]

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def __str__(self) -> str:
        return f"{self.name or self.username} <{self.email}> ({self.role})"
