"""
Authentication models.

User is the single account table for customers, moving providers and
platform admins. The role decides which API operations a user may call
(see authentication.permissions); the status gates access entirely.

Related files:
    - managers.py: email-based user creation
    - permissions.py: role policy layer
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager


class UserRole(models.TextChoices):
    """Marketplace roles."""

    CUSTOMER = "CUSTOMER", "Customer"
    PROVIDER = "PROVIDER", "Provider"
    ADMIN = "ADMIN", "Admin"


class UserStatus(models.TextChoices):
    """
    Account status.

    Only ACTIVE accounts pass the role policy layer; anything else gets
    403 "Account not active" even with a valid token.
    """

    ACTIVE = "ACTIVE", "Active"
    SUSPENDED = "SUSPENDED", "Suspended"
    DEACTIVATED = "DEACTIVATED", "Deactivated"


class User(AbstractBaseUser, PermissionsMixin):
    """
    Custom User model using email as the primary identifier.

    Fields:
        email: Login identifier and notification address
        first_name / last_name: Used in notification greetings
        role: CUSTOMER, PROVIDER or ADMIN
        status: ACTIVE, SUSPENDED or DEACTIVATED
        is_active / is_staff: Django auth and admin-site flags
    """

    email = models.EmailField(
        unique=True,
        db_index=True,
        max_length=254,
        help_text="User's email address (primary identifier)",
    )
    first_name = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Given name used in notifications",
    )
    last_name = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Family name",
    )
    phone = models.CharField(
        max_length=32,
        blank=True,
        default="",
        help_text="Contact phone number",
    )

    # =========================================================================
    # Access control
    # =========================================================================

    role = models.CharField(
        max_length=16,
        choices=UserRole.choices,
        default=UserRole.CUSTOMER,
        db_index=True,
        help_text="Marketplace role deciding which operations are allowed",
    )
    status = models.CharField(
        max_length=16,
        choices=UserStatus.choices,
        default=UserStatus.ACTIVE,
        help_text="Account status; only ACTIVE accounts may use the API",
    )
    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user can access the admin site.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"

    def __str__(self):
        return self.email

    @property
    def display_name(self) -> str:
        """First name if set, otherwise the email local part."""
        return self.first_name or self.email.split("@")[0]

    @property
    def is_account_active(self) -> bool:
        return self.is_active and self.status == UserStatus.ACTIVE

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
