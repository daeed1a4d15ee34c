import uuid
from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import (
    AbstractBaseUser,
    BaseUserManager,
    PermissionsMixin,
)
from django.db import models
from django.utils import timezone

from core.files import UploadPath, validate_image_upload


class UserManager(BaseUserManager):
    """Custom manager for the User model that uses email as the unique identifier."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError("An email address is required.")
        email = self.normalize_email(email)
        extra_fields.setdefault("is_active", True)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault("role", User.Role.ADMIN)
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    CRM user.

    Uses email as the login identifier.  Leads reference users by
    ``full_name`` (employee, assignee, processor), so the full name is the
    user's public handle inside the pipeline.
    """

    class Role(models.TextChoices):
        ADMIN = "ADMIN", "Admin"
        MANAGER = "MANAGER", "Manager"
        EMPLOYEE = "EMPLOYEE", "Employee"

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )
    email = models.EmailField(
        "email address",
        unique=True,
        error_messages={
            "unique": "Email already exists.",
        },
    )
    full_name = models.CharField("full name", max_length=255, db_index=True)
    phone = models.CharField("phone", max_length=30, blank=True, default="")
    image = models.ImageField(
        "profile image",
        upload_to=UploadPath("users/images", "image"),
        validators=[validate_image_upload],
        blank=True,
        null=True,
    )
    role = models.CharField(
        "role",
        max_length=20,
        choices=Role.choices,
        default=Role.EMPLOYEE,
        db_index=True,
    )
    is_active = models.BooleanField("active", default=True, db_index=True)
    is_staff = models.BooleanField("staff status", default=False)
    date_joined = models.DateTimeField("date joined", default=timezone.now)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["full_name"]

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["full_name"]

    def __str__(self):
        return self.full_name or self.email

    def get_full_name(self):
        return self.full_name.strip()

    def get_short_name(self):
        return self.full_name.split(" ")[0] if self.full_name else self.email

    # ------------------------------------------------------------------
    # Role helper properties
    # ------------------------------------------------------------------

    @property
    def is_admin(self):
        return self.role == self.Role.ADMIN

    @property
    def is_manager(self):
        return self.role == self.Role.MANAGER

    @property
    def is_employee(self):
        return self.role == self.Role.EMPLOYEE

    @property
    def sees_all_leads(self):
        return self.is_superuser or self.role in (self.Role.ADMIN, self.Role.MANAGER)


def _default_reset_expiry():
    minutes = getattr(settings, "PASSWORD_RESET_CODE_TTL_MINUTES", 15)
    return timezone.now() + timedelta(minutes=minutes)


class PasswordReset(models.Model):
    """A one-time numeric code mailed to a user who forgot their password."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField("email", db_index=True)
    code = models.CharField("code", max_length=6)
    is_used = models.BooleanField("used", default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    expires_at = models.DateTimeField("expires at", default=_default_reset_expiry)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "password reset"
        verbose_name_plural = "password resets"

    def __str__(self):
        return f"{self.email} ({'used' if self.is_used else 'pending'})"

    @property
    def is_expired(self):
        return timezone.now() > self.expires_at
