"""Booking model shared by every vertical."""

from __future__ import annotations

import secrets
from datetime import datetime
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils import timezone  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from shared.domain.base import EventRecorder
from shared.domain.exceptions import InvalidTransitionError

from .domain.entities import (
    PAYMENT_STATUS_ON_TRANSITION,
    RELEASING_STATUSES,
    BookingStatus,
    PaymentStatus,
    VenueType,
    assert_transition,
)
from .domain import events as booking_events


class Booking(EventRecorder, models.Model):
    """A reservation of a table, room, hall or cafe slot.

    Aggregate root of the booking domain: status changes go through the
    methods below, which validate the transition and record events.
    """

    booking_code = models.CharField(max_length=16, unique=True, editable=False)
    venue_type = models.CharField(max_length=16, choices=VenueType.choices())
    venue = models.ForeignKey("venues.Venue", on_delete=models.PROTECT, related_name="bookings")
    table = models.ForeignKey(
        "venues.Table",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bookings",
    )
    room = models.ForeignKey(
        "venues.Room",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="bookings",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings",
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="owned_bookings",
        help_text=_("Venue admin at booking time."),
    )

    # Schedule: tables and cafes use booking_date + times, halls and hotels use the date range
    booking_date = models.DateField(null=True, blank=True)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    start_date = models.DateField(null=True, blank=True)
    end_date = models.DateField(null=True, blank=True)
    guests_count = models.PositiveSmallIntegerField(default=1)
    quantity = models.PositiveSmallIntegerField(
        default=1,
        help_text=_("Tables, hall units or rooms held by this booking."),
    )

    status = models.CharField(
        max_length=16,
        choices=BookingStatus.choices(),
        default=BookingStatus.PENDING.value,
    )

    # Payment
    payment_status = models.CharField(
        max_length=16,
        choices=PaymentStatus.choices(),
        default=PaymentStatus.PENDING.value,
    )
    payment_method = models.CharField(max_length=32, blank=True)
    transaction_id = models.CharField(max_length=128, blank=True)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    paid_at = models.DateTimeField(null=True, blank=True)

    # Pricing snapshot
    pricing = models.JSONField(default=dict, blank=True)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    currency = models.CharField(max_length=3, default="INR")
    coupon_code = models.CharField(max_length=32, blank=True)

    expires_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text=_("Payment hold deadline for pending bookings."),
    )

    # Timeline
    confirmed_at = models.DateTimeField(null=True, blank=True)
    checked_in_at = models.DateTimeField(null=True, blank=True)
    checked_out_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.CharField(max_length=255, blank=True)
    refund_amount = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    special_requests = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Booking")
        verbose_name_plural = _("Bookings")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["venue", "booking_date"], name="booking_venue_date_idx"),
            models.Index(fields=["venue", "start_date", "end_date"], name="booking_venue_range_idx"),
            models.Index(fields=["status", "expires_at"], name="booking_status_expiry_idx"),
            models.Index(fields=["user", "status"], name="booking_user_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_code} ({self.venue_type})"

    def save(self, *args, **kwargs):  # type: ignore
        if self._state.adding and not self.booking_code:
            self.booking_code = self.generate_booking_code()
        super().save(*args, **kwargs)

    @staticmethod
    def generate_booking_code() -> str:
        return f"BK{secrets.token_hex(5).upper()}"

    # ----- queries -----

    @property
    def status_enum(self) -> BookingStatus:
        return BookingStatus(self.status)

    def is_stakeholder(self, user) -> bool:
        return bool(user and (user.is_staff or user.pk in (self.user_id, self.owner_id)))

    def is_managed_by(self, user) -> bool:
        return bool(user and (user.is_staff or user.pk == self.owner_id))

    def is_hold_overdue(self, now: datetime | None = None) -> bool:
        now = now or timezone.now()
        return (
            self.status == BookingStatus.PENDING.value
            and self.payment_status == PaymentStatus.PENDING.value
            and self.expires_at is not None
            and self.expires_at <= now
        )

    # ----- state changes -----

    def _event_fields(self) -> dict:
        return {
            "aggregate_id": self.pk,
            "booking_id": self.pk,
            "booking_code": self.booking_code,
            "venue_id": self.venue_id,
            "venue_type": self.venue_type,
            "user_id": self.user_id,
            "owner_id": self.owner_id,
        }

    def _transition(self, target, now: datetime) -> bool:
        """Move to target status. Returns True when the resource must be released."""
        target = assert_transition(self.status, target)
        self.status = target.value
        if target == BookingStatus.CONFIRMED:
            self.confirmed_at = now
        elif target == BookingStatus.COMPLETED:
            self.completed_at = now
        elif target == BookingStatus.CANCELLED:
            self.cancelled_at = now
        if target in RELEASING_STATUSES:
            self.expires_at = None
        return target in RELEASING_STATUSES

    def record_created(self):
        self.add_event(booking_events.BookingCreated(
            **self._event_fields(),
            status=self.status,
            total_amount=self.total_amount,
            currency=self.currency,
        ))

    def confirm_payment(self, transaction_id: str, method: str = "", amount: Decimal | None = None, now=None):
        """PENDING/UPCOMING -> CONFIRMED with payment completed."""
        now = now or timezone.now()
        if self.payment_status == PaymentStatus.COMPLETED.value and self.status == BookingStatus.CONFIRMED.value:
            raise InvalidTransitionError("Payment already recorded", code="already_paid")
        if self.status != BookingStatus.CONFIRMED.value:
            self._transition(BookingStatus.CONFIRMED, now)
        self.payment_status = PaymentStatus.COMPLETED.value
        self.transaction_id = transaction_id
        self.payment_method = method or self.payment_method
        self.paid_amount = self.total_amount if amount is None else amount
        self.paid_at = now
        self.expires_at = None
        self.add_event(booking_events.BookingConfirmed(
            **self._event_fields(),
            transaction_id=transaction_id,
            paid_amount=self.paid_amount,
        ))

    def cancel(self, actor=None, reason: str = "", now=None) -> bool:
        now = now or timezone.now()
        release = self._transition(BookingStatus.CANCELLED, now)
        self.payment_status = PaymentStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.add_event(booking_events.BookingCancelled(
            **self._event_fields(),
            cancelled_by_id=getattr(actor, "pk", None),
            reason=reason,
        ))
        return release

    def change_status(self, target, now=None) -> bool:
        """Admin status change with the payment side effects of the target."""
        now = now or timezone.now()
        old_status = self.status
        release = self._transition(target, now)
        target = self.status_enum
        payment_status = PAYMENT_STATUS_ON_TRANSITION.get(target)
        if payment_status is not None:
            self.payment_status = payment_status.value
        if target == BookingStatus.REFUNDED:
            self.refund_amount = self.paid_amount
        self.add_event(booking_events.BookingStatusChanged(
            **self._event_fields(),
            old_status=old_status,
            new_status=self.status,
        ))
        return release

    def check_in(self, now=None):
        now = now or timezone.now()
        if self.venue_type != VenueType.RESTAURANT.value:
            raise InvalidTransitionError("Check-in is only available for restaurant bookings")
        if self.status not in (BookingStatus.CONFIRMED.value, BookingStatus.UPCOMING.value):
            raise InvalidTransitionError(
                f"Cannot check in a {self.status} booking",
                details={"status": self.status},
            )
        if self.checked_in_at is not None:
            raise InvalidTransitionError("Booking is already checked in", code="already_checked_in")
        self.checked_in_at = now
        self.add_event(booking_events.BookingCheckedIn(**self._event_fields()))

    def check_out(self, now=None) -> bool:
        now = now or timezone.now()
        if self.venue_type != VenueType.RESTAURANT.value:
            raise InvalidTransitionError("Check-out is only available for restaurant bookings")
        if self.checked_in_at is None:
            raise InvalidTransitionError("Booking has not been checked in", code="not_checked_in")
        release = self._transition(BookingStatus.COMPLETED, now)
        self.checked_out_at = now
        self.payment_status = PaymentStatus.COMPLETED.value
        self.add_event(booking_events.BookingCompleted(**self._event_fields()))
        return release

    def expire(self, now=None) -> bool:
        now = now or timezone.now()
        release = self._transition(BookingStatus.CANCELLED, now)
        self.payment_status = PaymentStatus.FAILED.value
        self.cancellation_reason = "Payment not received in time"
        self.add_event(booking_events.BookingExpired(**self._event_fields()))
        return release
