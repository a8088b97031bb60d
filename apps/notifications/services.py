"""Notification services: in-app notifications and email."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

from django.conf import settings  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.db import DatabaseError  # type: ignore
from django.utils.html import strip_tags  # type: ignore

from .models import Notification

if TYPE_CHECKING:  # pragma: no cover
    from apps.bookings.models import Booking

logger = logging.getLogger(__name__)


@dataclass
class NotificationResult:
    success: bool
    message: str
    notification_ids: List[int] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.notification_ids)


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(recipient_email: str, subject: str, *, message: str = "", html_message: str | None = None) -> bool:
    """
    Send one email.

    Returns:
        bool: True if the mail backend accepted the message
    """
    if not recipient_email:
        return False
    try:
        send_mail(
            subject=subject,
            message=strip_tags(html_message) if html_message else message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception:
        logger.warning("Failed to send email to %s: %s", recipient_email, subject, exc_info=True)
        return False

    logger.info("Email sent to %s: %s", recipient_email, subject)
    return True


# ============================================================================
# IN-APP NOTIFICATIONS
# ============================================================================

def send_notification(
    admin,
    title: str,
    user=None,
    description: Optional[str] = None,
    image: Optional[str] = None,
    type: str = Notification.Type.SINGLE,
) -> NotificationResult:
    """
    Create in-app notifications.

    A single notification goes to ``user``. A broadcast, or a single
    notification without a user, goes to every active user. Never raises:
    failures are logged and reported in the result.
    """
    if admin is None or not title:
        logger.warning("Notification skipped: admin and title are required (title=%r)", title)
        return NotificationResult(False, "admin and title are required")

    common = {
        "admin": admin,
        "title": title[:150],
        "description": (description or "")[:500],
        "image": image or "",
    }
    try:
        if type == Notification.Type.SINGLE and user is not None:
            notification = Notification.objects.create(user=user, type=Notification.Type.SINGLE, **common)
            return NotificationResult(True, "Notification sent to user", [notification.pk])

        recipients = list(get_user_model().objects.filter(is_active=True).values_list("pk", flat=True))
        if not recipients:
            return NotificationResult(False, "No users found to broadcast")
        created = Notification.objects.bulk_create(
            [Notification(user_id=pk, type=Notification.Type.BROADCAST, **common) for pk in recipients]
        )
    except DatabaseError as exc:
        logger.warning("Failed to create notification %r: %s", title, exc, exc_info=True)
        return NotificationResult(False, str(exc))

    logger.info("Broadcast %r sent to %s users", title, len(created))
    return NotificationResult(True, f"Broadcast sent to {len(created)} users", [n.pk for n in created if n.pk])


# ============================================================================
# BOOKING NOTIFICATIONS
# ============================================================================

BOOKING_MESSAGES = {
    "BookingCreated": ("Your booking at {venue} is created", "Booking {code} is {status}. Total {total} {currency}."),
    "BookingConfirmed": ("Booking {code} confirmed", "Payment received for your booking at {venue}."),
    "BookingCancelled": ("Booking {code} cancelled", "Your booking at {venue} was cancelled."),
    "BookingExpired": ("Booking {code} expired", "Payment for your booking at {venue} was not received in time."),
    "BookingCompleted": ("Thank you for visiting {venue}", "Booking {code} is completed."),
}


def notify_booking_event(event_type: str, booking: "Booking") -> NotificationResult:
    """In-app notification from the venue owner plus an email to the guest."""
    templates = BOOKING_MESSAGES.get(event_type)
    if templates is None:
        return NotificationResult(False, f"No notification for {event_type}")

    context = {
        "venue": booking.venue.name,
        "code": booking.booking_code,
        "status": booking.get_status_display(),
        "total": booking.total_amount,
        "currency": booking.currency,
    }
    title = templates[0].format(**context)
    description = templates[1].format(**context)

    result = send_notification(
        admin=booking.owner,
        title=title,
        user=booking.user,
        description=description,
        image=booking.venue.featured_image or None,
    )
    send_email_notification(booking.user.email, title, message=description)
    return result
