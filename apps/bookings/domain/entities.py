"""
Booking Domain Entities

Core vocabulary of the booking domain:
- VenueType: The four bookable verticals
- BookingStatus: FSM states for booking lifecycle
- PaymentStatus: Payment state tracking
- assert_transition: The single place the state machine is enforced
"""

from enum import Enum
from typing import Dict, FrozenSet

from shared.domain.exceptions import AlreadyCancelledError, InvalidTransitionError


class VenueType(str, Enum):
    HOTEL = 'hotel'
    CAFE = 'cafe'
    RESTAURANT = 'restaurant'
    HALL = 'hall'

    @classmethod
    def choices(cls):
        return [(member.value, member.name.title()) for member in cls]


class BookingStatus(str, Enum):
    """
    Booking Status Finite State Machine

    State transitions:
    - PENDING -> CONFIRMED (payment succeeded)
    - PENDING -> UPCOMING (cafe booking paid up front)
    - PENDING -> CANCELLED (user cancelled or hold timed out)
    - UPCOMING -> CONFIRMED (payment recorded)
    - CONFIRMED/UPCOMING -> COMPLETED (checked out / visit finished)
    - CONFIRMED/UPCOMING -> NO_SHOW (guest never arrived)
    - any non-terminal -> REFUNDED (admin refund)
    """
    PENDING = 'pending'          # Waiting for payment, resource held
    CONFIRMED = 'confirmed'      # Paid and confirmed
    UPCOMING = 'upcoming'        # Cafe visit scheduled
    COMPLETED = 'completed'      # Visit finished
    CANCELLED = 'cancelled'      # Cancelled by a stakeholder or expired
    REFUNDED = 'refunded'        # Money returned
    NO_SHOW = 'no_show'          # Guest did not arrive

    @classmethod
    def choices(cls):
        return [(member.value, member.name.replace('_', ' ').title()) for member in cls]


class PaymentStatus(str, Enum):
    """Payment status tracking"""
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
    CANCELLED = 'cancelled'
    REFUNDED = 'refunded'

    @classmethod
    def choices(cls):
        return [(member.value, member.name.title()) for member in cls]


TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.UPCOMING,
        BookingStatus.CANCELLED,
        BookingStatus.REFUNDED,
    }),
    BookingStatus.UPCOMING: frozenset({
        BookingStatus.CONFIRMED,
        BookingStatus.COMPLETED,
        BookingStatus.CANCELLED,
        BookingStatus.REFUNDED,
        BookingStatus.NO_SHOW,
    }),
    BookingStatus.CONFIRMED: frozenset({
        BookingStatus.COMPLETED,
        BookingStatus.CANCELLED,
        BookingStatus.REFUNDED,
        BookingStatus.NO_SHOW,
    }),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.REFUNDED: frozenset(),
    BookingStatus.NO_SHOW: frozenset(),
}

# Statuses that keep a resource occupied
BLOCKING_STATUSES = frozenset({
    BookingStatus.PENDING,
    BookingStatus.CONFIRMED,
    BookingStatus.UPCOMING,
})

# Entering one of these gives the resource back
RELEASING_STATUSES = frozenset({
    BookingStatus.CANCELLED,
    BookingStatus.REFUNDED,
    BookingStatus.COMPLETED,
    BookingStatus.NO_SHOW,
})

# Payment side effects of admin status changes
PAYMENT_STATUS_ON_TRANSITION = {
    BookingStatus.REFUNDED: PaymentStatus.REFUNDED,
    BookingStatus.NO_SHOW: PaymentStatus.FAILED,
    BookingStatus.COMPLETED: PaymentStatus.COMPLETED,
    BookingStatus.CANCELLED: PaymentStatus.CANCELLED,
}


def is_terminal(status: BookingStatus) -> bool:
    return not TRANSITIONS[BookingStatus(status)]


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return BookingStatus(target) in TRANSITIONS[BookingStatus(current)]


def assert_transition(current, target) -> BookingStatus:
    """
    Validate a status change and return the target as a BookingStatus.

    Raises AlreadyCancelledError when cancelling a cancelled booking and
    InvalidTransitionError for every other move the machine does not allow.
    """
    try:
        current = BookingStatus(current)
        target = BookingStatus(target)
    except ValueError as exc:
        raise InvalidTransitionError(str(exc), details={'from': str(current), 'to': str(target)})

    if current == BookingStatus.CANCELLED and target == BookingStatus.CANCELLED:
        raise AlreadyCancelledError("Booking is already cancelled")

    if target not in TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Cannot move booking from {current.value} to {target.value}",
            details={'from': current.value, 'to': target.value},
        )
    return target
