"""Service functions for the notifications app."""
import logging

from django.db import transaction
from django.utils import timezone

from notifications.models import LeadNotification

logger = logging.getLogger("crm")


def notify_lead_assignment(lead, user=None, directory=None):
    """Create an unread notification for the lead's assignee.

    Parameters
    ----------
    lead : leads.models.Lead
        The lead that was created or reassigned.
    user : accounts.models.User, optional
        Recipient.  Resolved from ``lead.assign_team_member`` when omitted.
    directory : accounts.services.UserDirectory, optional
        Pre-loaded user snapshot used for the name lookup (bulk import).

    Returns
    -------
    LeadNotification or None
        ``None`` when nobody matches the assignee name or creation failed.
        Failures are logged, never raised: a missing notification must not
        undo the lead write.
    """
    from accounts.services import find_user_by_full_name

    if not lead.assign_team_member:
        return None
    try:
        if user is None:
            if directory is not None:
                user = directory.find(lead.assign_team_member)
            else:
                user = find_user_by_full_name(lead.assign_team_member)
        if user is None:
            logger.info(
                "No user named %r to notify for lead %s",
                lead.assign_team_member, lead.pk,
            )
            return None
        with transaction.atomic():
            notification = LeadNotification.objects.create(lead=lead, user=user, is_viewed=False)
    except Exception:
        logger.exception("Failed to create notification for lead %s", lead.pk)
        return None

    logger.info("Lead %s assigned to %s", lead.pk, user.full_name)
    return notification


def mark_all_viewed(user):
    """Mark every unread notification of *user* as viewed. Returns the count."""
    return LeadNotification.objects.filter(user=user, is_viewed=False).update(
        is_viewed=True,
        viewed_at=timezone.now(),
    )
