"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging

from celery import current_app, shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from .application.command_handlers import ExpireHoldCommand, ExpireHoldHandler
from .domain.entities import BookingStatus, PaymentStatus
from .models import Booking

logger = logging.getLogger(__name__)


def hold_task_id(booking_id: int) -> str:
    """Deterministic task id so a hold timer can be revoked and never queued twice."""
    return f"booking-hold-{booking_id}"


def schedule_hold_expiry(booking_id: int) -> None:
    """Start the payment hold timer. Called after the booking commits."""
    try:
        expire_unpaid_booking.apply_async(
            args=[booking_id],
            countdown=settings.BOOKING_HOLD_TIMEOUT_SECONDS,
            task_id=hold_task_id(booking_id),
        )
    except Exception:
        # The overdue sweep picks the booking up from expires_at
        logger.warning("Could not schedule hold expiry for booking %s", booking_id, exc_info=True)


def revoke_hold_expiry(booking_id: int) -> None:
    """Best-effort cancel of the hold timer once it is no longer needed."""
    if current_app.conf.task_always_eager:
        return
    try:
        current_app.control.revoke(hold_task_id(booking_id))
    except Exception:
        logger.warning("Could not revoke hold expiry for booking %s", booking_id, exc_info=True)


@shared_task(name="bookings.expire_unpaid_booking")
def expire_unpaid_booking(booking_id: int) -> bool:
    """Cancel the booking if it is still waiting for payment past its deadline."""
    return ExpireHoldHandler().handle(ExpireHoldCommand(booking_id=booking_id))


# ============================================================================
# PERIODIC TASKS (run by Celery Beat)
# ============================================================================

@shared_task(name="bookings.expire_overdue_holds")
def expire_overdue_holds() -> dict[str, int]:
    """
    Recover payment holds whose timer was lost.

    Finds pending bookings past expires_at and runs each through the same
    handler as the timer. Runs every minute.

    Returns:
        dict: {"expired": number of bookings cancelled}
    """
    overdue_ids = list(
        Booking.objects.filter(
            status=BookingStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            expires_at__lte=timezone.now(),
        ).values_list("pk", flat=True)
    )

    handler = ExpireHoldHandler()
    expired_count = 0
    for booking_id in overdue_ids:
        try:
            if handler.handle(ExpireHoldCommand(booking_id=booking_id)):
                expired_count += 1
        except Exception:
            logger.error("Error expiring booking %s", booking_id, exc_info=True)

    if expired_count:
        logger.info("Expired %s overdue booking holds", expired_count)

    return {"expired": expired_count}
