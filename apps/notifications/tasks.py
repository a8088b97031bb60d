"""Celery tasks for notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore

logger = logging.getLogger(__name__)


@shared_task(name="notifications.dispatch_booking_notification")
def dispatch_booking_notification(event_type: str, booking_id: int) -> bool:
    """Notify the guest about something that happened to their booking."""
    from apps.bookings.models import Booking

    from .services import notify_booking_event

    booking = Booking.objects.select_related("venue", "user", "owner").filter(pk=booking_id).first()
    if booking is None:
        logger.info("Booking %s gone, %s notification dropped", booking_id, event_type)
        return False

    result = notify_booking_event(event_type, booking)
    if not result.success:
        logger.warning("Notification for booking %s (%s) not sent: %s", booking.booking_code, event_type, result.message)
    return result.success
