"""Celery tasks for account housekeeping and reset-code delivery."""
import logging

from celery import shared_task
from django.conf import settings

from accounts.models import PasswordReset, User
from accounts.services import purge_stale_password_resets
from core.email import send_branded_email

logger = logging.getLogger("crm")


@shared_task(name="accounts.send_password_reset_code")
def send_password_reset_code(reset_id):
    """Mail the verification code of one ``PasswordReset`` row.

    Delivery problems are logged, never raised: the requester always gets
    the same answer whether or not the email went out.
    """
    reset = PasswordReset.objects.filter(pk=reset_id).first()
    if reset is None:
        logger.warning("Password reset %s vanished before the email was sent", reset_id)
        return False

    user = User.objects.filter(email__iexact=reset.email).first()
    try:
        send_branded_email(
            subject="Your password reset code",
            template_name="emails/password_reset_code",
            context={
                "greeting": (user.full_name if user else "") or reset.email,
                "code": reset.code,
                "ttl_minutes": settings.PASSWORD_RESET_CODE_TTL_MINUTES,
            },
            recipient_list=[reset.email],
        )
    except Exception as exc:
        logger.error("Password reset email failed for %s: %s", reset.email, exc)
        return False
    return True


@shared_task(name="accounts.purge_password_resets")
def purge_password_resets():
    """Drop used and expired reset codes (runs daily)."""
    removed = purge_stale_password_resets()
    logger.info("Purged %d stale password reset code(s)", removed)
    return removed
