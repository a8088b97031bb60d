"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations within transactions.

Commands:
- PreviewBookingCommand: Price a booking without holding anything
- CreateBookingCommand: Create a booking and claim its resource
- ConfirmPaymentCommand: Record payment for a booking
- CancelBookingCommand: Cancel a booking
- ChangeBookingStatusCommand: Admin status change
- CheckInCommand / CheckOutCommand: Restaurant visit timeline
- ExpireHoldCommand: Cancel a pending booking whose payment hold ran out
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Callable, Optional, Tuple, Union
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Avg, Count, Q, Sum
from django.utils import timezone

from apps.bookings.domain.entities import BLOCKING_STATUSES, BookingStatus, PaymentStatus, VenueType
from apps.bookings.domain.pricing import PricingBreakdown, PricingRequest, calculate_breakdown
from apps.bookings.models import Booking
from apps.bookings.services import ResourceAvailabilityStore, _lock_queryset_if_possible
from apps.coupons.domain import CouponDiscount
from apps.coupons.services import CouponResolver
from apps.venues.models import Room, Table, Venue
from shared.application.uow import DjangoUnitOfWork
from shared.domain.exceptions import (
    AuthorizationError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from shared.domain.value_objects import DateRange, TimeWindow, quantize_money

logger = logging.getLogger(__name__)

BLOCKING_STATUS_VALUES = [status.value for status in BLOCKING_STATUSES]
ZERO_MONEY = Decimal('0')


# ===== Commands =====

@dataclass
class PreviewBookingCommand:
    """
    Everything needed to price a booking.

    Restaurants and cafes use booking_date with start/end time, halls and
    hotels use start_date/end_date (halls may add a daily start/end time).
    quantity is cafe tables or hall units; restaurants and hotels hold one
    table or room.
    """
    venue_type: str
    venue_id: int
    user_id: Optional[int] = None
    booking_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    guests_count: int = 1
    quantity: int = 1
    table_id: Optional[int] = None
    room_id: Optional[int] = None
    coupon_code: str = ''


@dataclass
class CreateBookingCommand(PreviewBookingCommand):
    """
    Command to create a new booking

    With a transaction_id the booking is paid up front; without one it is
    held as pending until payment arrives or the hold expires.
    """
    transaction_id: str = ''
    payment_method: str = ''
    special_requests: str = ''


@dataclass
class ConfirmPaymentCommand:
    """Command to confirm a booking after successful payment"""
    booking_id: int
    actor_id: int
    transaction_id: str
    payment_method: str = ''
    amount: Optional[Decimal] = None


@dataclass
class CancelBookingCommand:
    """Command to cancel a booking"""
    booking_id: int
    actor_id: int
    reason: str = ''


@dataclass
class ChangeBookingStatusCommand:
    booking_id: int
    actor_id: int
    status: str


@dataclass
class CheckInCommand:
    booking_id: int
    actor_id: int


@dataclass
class CheckOutCommand:
    booking_id: int
    actor_id: int


@dataclass
class ExpireHoldCommand:
    """Issued by the hold timer and the overdue sweep"""
    booking_id: int


# ===== Shared helpers =====

@dataclass
class BookingQuote:
    """Validated booking request with its price."""
    venue: Venue
    vertical: VenueType
    breakdown: PricingBreakdown
    units: int = 1
    window: Union[DateRange, TimeWindow, None] = None
    table: Optional[Table] = None
    room: Optional[Room] = None
    coupon: Optional[CouponDiscount] = field(default=None)


def _get_user(user_id):
    user = get_user_model().objects.filter(pk=user_id).first()
    if user is None:
        raise NotFoundError("User not found", details={'user_id': user_id})
    return user


def _get_locked_booking(booking_id) -> Booking:
    booking = _lock_queryset_if_possible(Booking.objects.filter(pk=booking_id)).first()
    if booking is None:
        raise NotFoundError("Booking not found", details={'booking_id': booking_id})
    return booking


def _hours_between(start: time, end: time) -> Decimal:
    anchor = date(2000, 1, 1)
    seconds = (datetime.combine(anchor, end) - datetime.combine(anchor, start)).total_seconds()
    return Decimal(int(seconds)) / Decimal(3600)


def _schedule_on_commit(func: Callable, *args):
    transaction.on_commit(lambda: func(*args))


class BookingQuoter:
    """
    Validates a booking request and prices it.

    Shared by preview and create so both see the same rules and numbers.
    """

    def __init__(self, coupon_resolver: Optional[CouponResolver] = None, clock=timezone.now):
        self.coupon_resolver = coupon_resolver or CouponResolver(clock=clock)
        self.clock = clock

    def quote(self, command: PreviewBookingCommand) -> BookingQuote:
        try:
            vertical = VenueType(command.venue_type)
        except ValueError:
            raise ValidationError(f"Unknown venue type: {command.venue_type}", code='invalid_venue_type')

        venue = Venue.objects.filter(pk=command.venue_id, kind=vertical.value).first()
        if venue is None:
            raise NotFoundError(f"{vertical.value.title()} not found", details={'venue_id': command.venue_id})
        if not venue.is_available:
            raise ValidationError(f"{venue.name} is not available for booking", code='venue_unavailable')

        if command.guests_count < 1:
            raise InvalidInputError("At least one guest is required", details={'guests_count': command.guests_count})
        if command.quantity < 1:
            raise InvalidInputError("Quantity must be positive", details={'quantity': command.quantity})

        if vertical in (VenueType.RESTAURANT, VenueType.CAFE):
            return self._quote_timed(command, venue, vertical)
        return self._quote_dated(command, venue, vertical)

    # ----- restaurants and cafes -----

    def _time_window(self, command: PreviewBookingCommand) -> TimeWindow:
        if not (command.booking_date and command.start_time and command.end_time):
            raise ValidationError("Booking date, start time and end time are required", code='missing_schedule')
        try:
            window = TimeWindow(command.booking_date, command.start_time, command.end_time)
        except ValueError:
            raise ValidationError("End time must be after start time", code='invalid_time_range')

        now = timezone.localtime(self.clock())
        if command.booking_date < now.date():
            raise ValidationError("Booking date cannot be in the past", code='date_in_past')
        if command.booking_date == now.date() and command.start_time <= now.time():
            raise ValidationError("Start time must be in the future", code='time_in_past')
        return window

    def _quote_timed(self, command, venue: Venue, vertical: VenueType) -> BookingQuote:
        window = self._time_window(command)
        hours = window.duration_hours
        table = None

        if vertical == VenueType.RESTAURANT:
            if command.quantity != 1:
                raise InvalidInputError("A restaurant booking holds a single table", details={'quantity': command.quantity})
            if command.table_id is not None:
                table = Table.objects.select_related('group').filter(pk=command.table_id, group__venue=venue).first()
                if table is None:
                    raise NotFoundError("Table not found", details={'table_id': command.table_id})
                if table.group.capacity < command.guests_count:
                    raise ValidationError(
                        f"Table {table.table_number} seats {table.group.capacity} guests",
                        code='capacity_exceeded',
                    )
            elif not venue.table_groups.filter(capacity__gte=command.guests_count).exists():
                raise ValidationError(
                    f"No table seats {command.guests_count} guests",
                    code='capacity_exceeded',
                )
            unit_rate = venue.per_guest_rate
            quantity = Decimal(command.guests_count)
            is_first = not Booking.objects.filter(
                venue=venue,
                booking_date=command.booking_date,
                status__in=BLOCKING_STATUS_VALUES,
            ).exists()
        else:
            self._check_capacity(venue, command)
            if command.quantity > venue.units:
                raise InvalidInputError(
                    f"{venue.name} has only {venue.units} tables",
                    details={'quantity': command.quantity, 'units': venue.units},
                )
            unit_rate = Decimal(venue.unit_rate)
            quantity = hours * command.quantity
            is_first = False

        coupon = self._resolve_coupon(command.coupon_code, unit_rate * quantity)
        breakdown = calculate_breakdown(PricingRequest(
            vertical=vertical,
            unit_rate=unit_rate,
            quantity=quantity,
            duration=hours,
            units=command.quantity,
            guests_count=command.guests_count,
            booking_date=command.booking_date,
            end_time=command.end_time,
            is_first_booking_of_day=is_first,
            coupon=coupon,
            currency=venue.currency,
        ))
        return BookingQuote(
            venue=venue,
            vertical=vertical,
            breakdown=breakdown,
            units=command.quantity,
            window=window,
            table=table,
            coupon=coupon,
        )

    # ----- halls and hotels -----

    def _quote_dated(self, command, venue: Venue, vertical: VenueType) -> BookingQuote:
        if not (command.start_date and command.end_date):
            raise ValidationError("Start date and end date are required", code='missing_schedule')
        try:
            window = DateRange(command.start_date, command.end_date)
        except ValueError:
            raise ValidationError("End date must be after start date", code='invalid_date_range')
        if command.start_date < timezone.localdate(self.clock()):
            raise ValidationError("Start date cannot be in the past", code='date_in_past')

        days = Decimal(len(window))
        room = None
        daily_hours = None

        if vertical == VenueType.HALL:
            self._check_capacity(venue, command)
            if command.quantity > venue.units:
                raise InvalidInputError(
                    f"{venue.name} has only {venue.units} units",
                    details={'quantity': command.quantity, 'units': venue.units},
                )
            if command.start_time and command.end_time:
                daily_hours = _hours_between(command.start_time, command.end_time)
            unit_rate = Decimal(venue.unit_rate)
            quantity = days * command.quantity
            units = command.quantity
        else:
            if command.quantity != 1:
                raise InvalidInputError("A hotel booking holds a single room", details={'quantity': command.quantity})
            if command.room_id is None:
                raise ValidationError("room_id is required for hotel bookings", code='missing_room')
            room = Room.objects.filter(pk=command.room_id, venue=venue).first()
            if room is None:
                raise NotFoundError("Room not found", details={'room_id': command.room_id})
            if command.guests_count > room.max_guests:
                raise ValidationError(f"Room fits {room.max_guests} guests", code='capacity_exceeded')
            unit_rate = Decimal(room.price_per_night)
            quantity = days
            units = 1

        coupon = self._resolve_coupon(command.coupon_code, unit_rate * quantity)
        breakdown = calculate_breakdown(PricingRequest(
            vertical=vertical,
            unit_rate=unit_rate,
            quantity=quantity,
            duration=days,
            units=units,
            guests_count=command.guests_count,
            booking_date=command.start_date,
            end_time=command.end_time,
            daily_hours=daily_hours,
            coupon=coupon,
            currency=venue.currency,
        ))
        return BookingQuote(
            venue=venue,
            vertical=vertical,
            breakdown=breakdown,
            units=units,
            window=window,
            room=room,
            coupon=coupon,
        )

    def _check_capacity(self, venue: Venue, command):
        if command.guests_count > venue.capacity:
            raise ValidationError(
                f"{venue.name} fits {venue.capacity} guests",
                code='capacity_exceeded',
                details={'guests_count': command.guests_count, 'capacity': venue.capacity},
            )

    def _resolve_coupon(self, code: str, context_amount: Decimal) -> Optional[CouponDiscount]:
        if not code:
            return None
        return self.coupon_resolver.resolve(code, context_amount).raise_for_status()


# ===== Command Handlers =====

class PreviewBookingHandler:
    """Price a booking: no claim, nothing persisted"""

    def __init__(self, quoter: Optional[BookingQuoter] = None):
        self.quoter = quoter or BookingQuoter()

    def handle(self, command: PreviewBookingCommand) -> PricingBreakdown:
        return self.quoter.quote(command).breakdown.rounded()


class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Strategy:
    1. Inside one unit of work: validate and price, insert the booking,
       then claim the resource
    2. Restaurants lock the venue row first, so the first-booking-of-day
       discount goes to one booking only
    3. A failed claim raises ConflictError, rolling back the insert
    4. After commit: publish BookingCreated, start the payment hold timer
    """

    def __init__(
        self,
        quoter: Optional[BookingQuoter] = None,
        store: Optional[ResourceAvailabilityStore] = None,
        clock=timezone.now,
    ):
        self.quoter = quoter or BookingQuoter(clock=clock)
        self.store = store or ResourceAvailabilityStore()
        self.clock = clock

    def handle(self, command: CreateBookingCommand) -> Tuple[Booking, PricingBreakdown]:
        """
        Handle booking creation

        Returns: (Booking, rounded PricingBreakdown)

        Raises:
            ValidationError, NotFoundError: invalid request
            ConflictError: the resource is already taken
        """
        logger.info(
            "Creating %s booking for venue %s, user %s",
            command.venue_type, command.venue_id, command.user_id,
        )
        now = self.clock()
        paid = bool(command.transaction_id)

        with DjangoUnitOfWork() as uow:
            if command.venue_type == VenueType.RESTAURANT.value:
                _lock_queryset_if_possible(Venue.objects.filter(pk=command.venue_id)).first()
            quote = self.quoter.quote(command)
            breakdown = quote.breakdown.rounded()

            booking = self._build_booking(command, quote, breakdown, now, paid)
            booking.save()
            uow.add_compensation(lambda: self.store.release(booking))

            self._claim(quote, command, booking)

            booking.record_created()
            uow.collect_events(booking)

            if not paid:
                from apps.bookings.tasks import schedule_hold_expiry
                _schedule_on_commit(schedule_hold_expiry, booking.pk)

        logger.info(
            "Booking %s created (%s) total %s %s",
            booking.booking_code, booking.status, booking.total_amount, booking.currency,
        )
        return booking, breakdown

    def _build_booking(self, command, quote: BookingQuote, breakdown: PricingBreakdown, now, paid: bool) -> Booking:
        venue = quote.venue
        booking = Booking(
            venue_type=quote.vertical.value,
            venue=venue,
            table=quote.table,
            room=quote.room,
            user_id=command.user_id,
            owner_id=venue.owner_id,
            guests_count=command.guests_count,
            quantity=quote.units,
            pricing=breakdown.to_snapshot(),
            total_amount=breakdown.total,
            currency=breakdown.currency,
            coupon_code=quote.coupon.code if quote.coupon else '',
            special_requests=command.special_requests,
        )
        if isinstance(quote.window, TimeWindow):
            booking.booking_date = quote.window.day
            booking.start_time = quote.window.start_time
            booking.end_time = quote.window.end_time
        else:
            booking.start_date = quote.window.start_date
            booking.end_date = quote.window.end_date
            booking.start_time = command.start_time
            booking.end_time = command.end_time

        if paid:
            if quote.vertical == VenueType.CAFE:
                booking.status = BookingStatus.UPCOMING.value
            else:
                booking.status = BookingStatus.CONFIRMED.value
                booking.confirmed_at = now
            booking.payment_status = PaymentStatus.COMPLETED.value
            booking.transaction_id = command.transaction_id
            booking.payment_method = command.payment_method
            booking.paid_amount = breakdown.total
            booking.paid_at = now
        else:
            booking.status = BookingStatus.PENDING.value
            booking.payment_status = PaymentStatus.PENDING.value
            booking.expires_at = now + timedelta(seconds=settings.BOOKING_HOLD_TIMEOUT_SECONDS)
        return booking

    def _claim(self, quote: BookingQuote, command, booking: Booking):
        if quote.vertical == VenueType.RESTAURANT:
            if quote.table is not None:
                self.store.claim_table(quote.table, booking)
            else:
                table = self.store.claim_any_table(quote.venue, command.guests_count, booking)
                booking.table = table
                booking.save(update_fields=['table', 'updated_at'])
        elif quote.vertical == VenueType.HOTEL:
            self.store.claim_room(quote.room, booking)
        else:
            self.store.claim_range(quote.venue, quote.window, quote.units, booking)


class ConfirmPaymentHandler:
    """PENDING/UPCOMING -> CONFIRMED, cancels the hold timer"""

    def __init__(self, clock=timezone.now):
        self.clock = clock

    def handle(self, command: ConfirmPaymentCommand) -> Booking:
        actor = _get_user(command.actor_id)
        now = self.clock()
        with DjangoUnitOfWork() as uow:
            booking = _get_locked_booking(command.booking_id)
            if not (actor.is_staff or actor.pk == booking.user_id):
                raise AuthorizationError("Only the guest or a platform admin can record payment")
            if booking.is_hold_overdue(now):
                raise InvalidTransitionError("Payment hold has expired", code='hold_expired')

            booking.confirm_payment(
                command.transaction_id,
                method=command.payment_method,
                amount=command.amount,
                now=now,
            )
            booking.save()
            uow.collect_events(booking)

            from apps.bookings.tasks import revoke_hold_expiry
            _schedule_on_commit(revoke_hold_expiry, booking.pk)

        logger.info("Payment %s recorded for booking %s", command.transaction_id, booking.booking_code)
        return booking


class CancelBookingHandler:
    """
    Cancel a booking on behalf of its guest, the venue owner or an admin.

    Authorization is checked before any state is touched.
    """

    def __init__(self, store: Optional[ResourceAvailabilityStore] = None, clock=timezone.now):
        self.store = store or ResourceAvailabilityStore()
        self.clock = clock

    def handle(self, command: CancelBookingCommand) -> Booking:
        actor = _get_user(command.actor_id)
        with DjangoUnitOfWork() as uow:
            booking = _get_locked_booking(command.booking_id)
            if not booking.is_stakeholder(actor):
                raise AuthorizationError("You cannot cancel this booking")

            if booking.cancel(actor=actor, reason=command.reason, now=self.clock()):
                self.store.release(booking)
            booking.save()
            uow.collect_events(booking)

            from apps.bookings.tasks import revoke_hold_expiry
            _schedule_on_commit(revoke_hold_expiry, booking.pk)

        logger.info("Booking %s cancelled by user %s", booking.booking_code, actor.pk)
        return booking


class ChangeBookingStatusHandler:
    """Platform admin status change, validated against the state machine"""

    def __init__(self, store: Optional[ResourceAvailabilityStore] = None, clock=timezone.now):
        self.store = store or ResourceAvailabilityStore()
        self.clock = clock

    def handle(self, command: ChangeBookingStatusCommand) -> Booking:
        actor = _get_user(command.actor_id)
        if not actor.is_staff:
            raise AuthorizationError("Only platform admins can change booking status")

        with DjangoUnitOfWork() as uow:
            booking = _get_locked_booking(command.booking_id)
            old_status = booking.status
            if booking.change_status(command.status, now=self.clock()):
                self.store.release(booking)
            booking.save()
            uow.collect_events(booking)

        logger.info("Booking %s status %s -> %s by admin %s", booking.booking_code, old_status, booking.status, actor.pk)
        return booking


class CheckInHandler:
    def __init__(self, clock=timezone.now):
        self.clock = clock

    def handle(self, command: CheckInCommand) -> Booking:
        actor = _get_user(command.actor_id)
        with DjangoUnitOfWork() as uow:
            booking = _get_locked_booking(command.booking_id)
            if not booking.is_managed_by(actor):
                raise AuthorizationError("Only the venue owner or an admin can check guests in")
            booking.check_in(now=self.clock())
            booking.save()
            uow.collect_events(booking)

        logger.info("Booking %s checked in", booking.booking_code)
        return booking


class CheckOutHandler:
    def __init__(self, store: Optional[ResourceAvailabilityStore] = None, clock=timezone.now):
        self.store = store or ResourceAvailabilityStore()
        self.clock = clock

    def handle(self, command: CheckOutCommand) -> Booking:
        actor = _get_user(command.actor_id)
        with DjangoUnitOfWork() as uow:
            booking = _get_locked_booking(command.booking_id)
            if not booking.is_managed_by(actor):
                raise AuthorizationError("Only the venue owner or an admin can check guests out")
            if booking.check_out(now=self.clock()):
                self.store.release(booking)
            booking.save()
            uow.collect_events(booking)

        logger.info("Booking %s checked out, table released", booking.booking_code)
        return booking


class ExpireHoldHandler:
    """
    Cancel a pending booking whose payment hold has run out.

    Re-reads the booking under lock: a booking that was paid, cancelled or
    whose deadline is still ahead is left alone, so firing twice or after
    payment is harmless.
    """

    def __init__(self, store: Optional[ResourceAvailabilityStore] = None, clock=timezone.now):
        self.store = store or ResourceAvailabilityStore()
        self.clock = clock

    def handle(self, command: ExpireHoldCommand) -> bool:
        now = self.clock()
        with DjangoUnitOfWork() as uow:
            booking = _lock_queryset_if_possible(Booking.objects.filter(pk=command.booking_id)).first()
            if booking is None:
                logger.info("Hold expiry for missing booking %s skipped", command.booking_id)
                return False
            if not booking.is_hold_overdue(now):
                logger.debug("Booking %s not overdue (%s), expiry skipped", booking.booking_code, booking.status)
                return False

            booking.expire(now=now)
            self.store.release(booking)
            booking.save()
            uow.collect_events(booking)

        logger.info("Booking %s expired, payment not received", booking.booking_code)
        return True


# ===== Queries =====

def _get_managed_venue(user, venue_id) -> Venue:
    venue = Venue.objects.filter(pk=venue_id).first()
    if venue is None:
        raise NotFoundError("Venue not found", details={'venue_id': venue_id})
    if not (user.is_staff or venue.owner_id == user.pk):
        raise AuthorizationError("Only the venue owner or an admin can see its bookings")
    return venue


def _validated_status(status: Optional[str]) -> Optional[str]:
    if not status or status == 'all':
        return None
    try:
        return BookingStatus(status).value
    except ValueError:
        raise ValidationError(f"Unknown booking status: {status}", code='invalid_status')


def list_bookings_for_user(user, status: Optional[str] = None):
    """Bookings of one user across every vertical, newest first."""
    queryset = Booking.objects.filter(user=user).select_related('venue', 'table', 'room')
    status = _validated_status(status)
    if status:
        queryset = queryset.filter(status=status)
    return queryset.order_by('-created_at')


def get_booking_for(user, booking_id) -> Booking:
    """Booking visible to user: its guest, the venue owner or an admin."""
    booking = Booking.objects.select_related('venue', 'table', 'room', 'user').filter(pk=booking_id).first()
    if booking is None:
        raise NotFoundError("Booking not found", details={'booking_id': booking_id})
    if not booking.is_stakeholder(user):
        raise AuthorizationError("You cannot view this booking")
    return booking


def list_bookings_for_venue(user, venue_id, status: Optional[str] = None):
    """Bookings of one venue for its owner or an admin, in schedule order."""
    venue = _get_managed_venue(user, venue_id)
    queryset = Booking.objects.filter(venue=venue).select_related('venue', 'table', 'room', 'user')
    status = _validated_status(status)
    if status:
        queryset = queryset.filter(status=status)
    return queryset.order_by('booking_date', 'start_date', 'start_time', 'created_at')


def venue_booking_statistics(
    user,
    venue_id,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    today: Optional[date] = None,
) -> dict:
    """
    Booking counts and revenue of one venue, per status and overall.

    Revenue is the sum of booking totals, whatever their status. With both
    date_from and date_to only bookings starting in that range are counted.
    todays_bookings ignores the range.
    """
    venue = _get_managed_venue(user, venue_id)
    bookings = Booking.objects.filter(venue=venue)
    today = today or timezone.localdate()
    todays_bookings = bookings.filter(Q(booking_date=today) | Q(start_date=today)).count()

    if date_from and date_to:
        if date_to < date_from:
            raise ValidationError("date_to must not be before date_from", code='invalid_date_range')
        bookings = bookings.filter(
            Q(booking_date__range=(date_from, date_to)) | Q(start_date__range=(date_from, date_to))
        )

    per_status = (
        bookings.values('status')
        .annotate(count=Count('id'), revenue=Sum('total_amount'), average=Avg('total_amount'))
        .order_by('status')
    )
    totals = bookings.aggregate(count=Count('id'), revenue=Sum('total_amount'), average=Avg('total_amount'))

    return {
        'venue_id': venue.pk,
        'total_bookings': totals['count'],
        'total_revenue': str(quantize_money(totals['revenue'] or ZERO_MONEY)),
        'average_booking_value': str(quantize_money(totals['average'] or ZERO_MONEY)),
        'status_counts': [
            {
                'status': row['status'],
                'count': row['count'],
                'revenue': str(quantize_money(row['revenue'] or ZERO_MONEY)),
                'average_value': str(quantize_money(row['average'] or ZERO_MONEY)),
            }
            for row in per_status
        ],
        'todays_bookings': todays_bookings,
    }
