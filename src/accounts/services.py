"""Account-related helper services."""

from __future__ import annotations

import logging
import secrets

from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils import timezone

from accounts.models import PasswordReset, User
from core.exceptions import Conflict, ValidationFailed

logger = logging.getLogger("crm")


class UserDirectory:
    """Snapshot of every user, indexed by full name.

    Leads point at users through free-text names.  When two users share a
    full name the earliest-joined one wins, so a lookup is stable for the
    lifetime of the snapshot.
    """

    def __init__(self, users):
        self.users = list(users)
        self._by_name = {}
        for user in self.users:
            self._by_name.setdefault(user.full_name, user)

    @classmethod
    def load(cls):
        return cls(User.objects.order_by("date_joined", "id"))

    @property
    def names(self):
        return [user.full_name for user in self.users]

    def find(self, full_name):
        if not full_name:
            return None
        return self._by_name.get(full_name)

    def __contains__(self, full_name):
        return full_name in self._by_name


def find_user_by_full_name(full_name):
    """Return the earliest-joined user with this exact full name, or ``None``."""
    if not full_name:
        return None
    return User.objects.filter(full_name=full_name).order_by("date_joined", "id").first()


def _check_password_strength(password, user=None):
    try:
        validate_password(password, user=user)
    except DjangoValidationError as exc:
        raise ValidationFailed(exc.messages[0], details={"password": list(exc.messages)})


@transaction.atomic
def register_user(*, full_name, email, phone, password, image=None):
    """Self-service sign-up.

    The very first account becomes the administrator; everyone after that
    joins as an employee and is promoted by an admin.
    """
    if User.objects.filter(email__iexact=email).exists():
        raise Conflict("Email already exists")
    _check_password_strength(password)

    is_first_user = not User.objects.exists()
    user = User.objects.create_user(
        email=email,
        password=password,
        full_name=full_name.strip(),
        phone=phone,
        image=image,
        role=User.Role.ADMIN if is_first_user else User.Role.EMPLOYEE,
        is_staff=is_first_user,
    )
    logger.info("User registered: %s (%s)", user.email, user.role)
    return user


def _generate_reset_code():
    return f"{secrets.randbelow(10**6):06d}"


def request_password_reset(email):
    """Issue a fresh reset code for *email* and queue the email.

    Returns the ``PasswordReset`` row, or ``None`` when no active account
    matches.  Callers must answer identically in both cases.
    """
    from accounts.tasks import send_password_reset_code

    user = User.objects.filter(email__iexact=email, is_active=True).first()
    if user is None:
        logger.info("Password reset requested for unknown email %s", email)
        return None

    with transaction.atomic():
        PasswordReset.objects.filter(email=user.email, is_used=False).update(is_used=True)
        reset = PasswordReset.objects.create(email=user.email, code=_generate_reset_code())

    try:
        send_password_reset_code.delay(str(reset.pk))
    except Exception as exc:
        logger.error("Could not queue password reset email for %s: %s", user.email, exc)
    return reset


def verify_reset_code(email, code):
    reset = (
        PasswordReset.objects
        .filter(email__iexact=email, code=code, is_used=False)
        .order_by("-created_at")
        .first()
    )
    if reset is None:
        raise ValidationFailed("Invalid or expired verification code")
    if reset.is_expired:
        raise ValidationFailed("Verification code has expired")
    return reset


@transaction.atomic
def reset_password(email, code, new_password):
    reset = verify_reset_code(email, code)
    user = User.objects.filter(email__iexact=reset.email, is_active=True).first()
    if user is None:
        raise ValidationFailed("Invalid or expired verification code")
    _check_password_strength(new_password, user=user)

    user.set_password(new_password)
    user.save(update_fields=["password"])
    reset.is_used = True
    reset.save(update_fields=["is_used"])
    logger.info("Password reset completed for %s", user.email)
    return user


def purge_stale_password_resets():
    """Delete used or expired reset codes. Returns the number removed."""
    deleted, _ = PasswordReset.objects.filter(
        is_used=True,
    ).delete()
    expired, _ = PasswordReset.objects.filter(
        expires_at__lt=timezone.now(),
    ).delete()
    return deleted + expired
