"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingEvent(DomainEvent):
    """Fields every booking event carries"""
    booking_id: int
    booking_code: str
    venue_id: int
    venue_type: str
    user_id: int
    owner_id: Optional[int] = None


# ===== Booking Events =====

@dataclass(kw_only=True)
class BookingCreated(BookingEvent):
    """
    Event: A new booking was created

    Triggers:
    - Notify the venue owner
    - Send confirmation email to guest
    """
    status: str
    total_amount: Decimal
    currency: str


@dataclass(kw_only=True)
class BookingConfirmed(BookingEvent):
    """
    Event: Booking payment confirmed (PENDING -> CONFIRMED)

    Triggers:
    - Notify guest and venue owner
    """
    transaction_id: str
    paid_amount: Decimal


@dataclass(kw_only=True)
class BookingCancelled(BookingEvent):
    """
    Event: Booking cancelled by a stakeholder

    Triggers:
    - Notify the other side of the booking
    """
    cancelled_by_id: Optional[int] = None
    reason: str = ''


@dataclass(kw_only=True)
class BookingStatusChanged(BookingEvent):
    """Event: Platform admin moved the booking to another status"""
    old_status: str
    new_status: str


@dataclass(kw_only=True)
class BookingCheckedIn(BookingEvent):
    """Event: Guest has checked in at a restaurant"""
    pass


@dataclass(kw_only=True)
class BookingCompleted(BookingEvent):
    """Event: Guest has checked out, table released"""
    pass


@dataclass(kw_only=True)
class BookingExpired(BookingEvent):
    """
    Event: Payment hold timed out (PENDING -> CANCELLED)

    Triggers:
    - Notify guest that the hold was released
    """
    pass
