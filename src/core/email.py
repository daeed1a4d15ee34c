"""Email helpers: HTML message with plain-text fallback."""

from __future__ import annotations

import logging
from typing import Sequence

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

logger = logging.getLogger("crm")


def send_branded_email(
    *,
    subject: str,
    template_name: str,
    context: dict,
    recipient_list: Sequence[str],
    from_email: str | None = None,
) -> int:
    """Render ``<template_name>.txt`` and ``<template_name>.html`` and send them.

    ``APP_NAME`` and ``FRONTEND_URL`` are injected into the template context.
    Delivery errors propagate; callers decide whether a failed email matters.
    """
    sender = from_email or settings.DEFAULT_FROM_EMAIL
    full_context = {
        "app_name": getattr(settings, "APP_NAME", "Lead CRM"),
        "frontend_url": getattr(settings, "FRONTEND_URL", ""),
        **context,
    }

    text_body = render_to_string(f"{template_name}.txt", full_context).strip()
    html_body = render_to_string(f"{template_name}.html", full_context)

    msg = EmailMultiAlternatives(
        subject=subject,
        body=text_body,
        from_email=sender,
        to=list(recipient_list),
    )
    msg.attach_alternative(html_body, "text/html")
    sent = msg.send(fail_silently=False)
    logger.info("Email '%s' sent to %d recipient(s)", template_name, len(recipient_list))
    return sent
