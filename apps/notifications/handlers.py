"""Message bus handlers: booking events become guest notifications."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingCreated,
    BookingEvent,
    BookingExpired,
)
from shared.application.message_bus import message_bus

from .tasks import dispatch_booking_notification

logger = logging.getLogger(__name__)


@message_bus.subscribe(BookingCreated, BookingConfirmed, BookingCancelled, BookingExpired, BookingCompleted)
def queue_booking_notification(event: BookingEvent) -> None:
    try:
        dispatch_booking_notification.delay(event.event_type, event.booking_id)
    except Exception:
        logger.warning("Could not queue %s notification for booking %s", event.event_type, event.booking_id, exc_info=True)
