"""Tests for the booking command handlers and hold expiry tasks."""

from __future__ import annotations

from datetime import time, timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.db import connection
from django.utils import timezone

from apps.bookings.application import command_handlers
from apps.bookings.application.command_handlers import (
    BookingQuoter,
    CancelBookingCommand,
    CancelBookingHandler,
    ChangeBookingStatusCommand,
    ChangeBookingStatusHandler,
    CheckInCommand,
    CheckInHandler,
    CheckOutCommand,
    CheckOutHandler,
    ConfirmPaymentCommand,
    ConfirmPaymentHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    ExpireHoldCommand,
    ExpireHoldHandler,
    PreviewBookingCommand,
    PreviewBookingHandler,
    list_bookings_for_user,
    list_bookings_for_venue,
    venue_booking_statistics,
)
from apps.bookings.models import Booking
from apps.bookings.tasks import expire_overdue_holds, expire_unpaid_booking, hold_task_id
from apps.coupons.models import Coupon
from apps.venues.models import Room, Table, Venue
from shared.domain.exceptions import (
    AlreadyCancelledError,
    AuthorizationError,
    ConflictError,
    InvalidCouponError,
    InvalidInputError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

pytestmark = pytest.mark.django_db


def _restaurant_command(restaurant, guest, day, **overrides):
    values = dict(
        venue_type="restaurant",
        venue_id=restaurant.pk,
        user_id=guest.pk,
        booking_date=day,
        start_time=time(18, 0),
        end_time=time(20, 0),
        guests_count=6,
    )
    values.update(overrides)
    return CreateBookingCommand(**values)


def _create_restaurant_booking(restaurant, guest, day, **overrides):
    booking, _ = CreateBookingHandler().handle(_restaurant_command(restaurant, guest, day, **overrides))
    return booking


# ----- create -----

def test_restaurant_booking_is_held_pending(restaurant, table, guest, wednesday):
    booking, breakdown = CreateBookingHandler().handle(_restaurant_command(restaurant, guest, wednesday))

    assert booking.status == "pending"
    assert booking.payment_status == "pending"
    assert booking.table_id == table.pk
    assert booking.expires_at is not None
    assert booking.total_amount == Decimal("1246.48")
    assert booking.pricing["total"] == "1246.48"
    assert breakdown.total == Decimal("1246.48")

    table.refresh_from_db()
    assert table.is_booked is True
    assert table.current_booking_id == booking.pk


def test_second_booking_for_the_only_table_conflicts(restaurant, table, guest, other_guest, wednesday):
    _create_restaurant_booking(restaurant, guest, wednesday)

    with pytest.raises(ConflictError):
        _create_restaurant_booking(restaurant, other_guest, wednesday, table_id=table.pk)

    assert Booking.objects.count() == 1


def test_paid_up_front_booking_is_confirmed(hall, guest, wednesday):
    booking, _ = CreateBookingHandler().handle(CreateBookingCommand(
        venue_type="hall",
        venue_id=hall.pk,
        user_id=guest.pk,
        start_date=wednesday,
        end_date=wednesday + timedelta(days=3),
        guests_count=150,
        transaction_id="txn_1",
        payment_method="card",
    ))

    assert booking.status == "confirmed"
    assert booking.payment_status == "completed"
    assert booking.paid_amount == Decimal("3124.00")
    assert booking.expires_at is None


def test_paid_cafe_booking_is_upcoming(cafe, guest, wednesday):
    booking, _ = CreateBookingHandler().handle(CreateBookingCommand(
        venue_type="cafe",
        venue_id=cafe.pk,
        user_id=guest.pk,
        booking_date=wednesday,
        start_time=time(10, 0),
        end_time=time(12, 0),
        guests_count=4,
        quantity=2,
        transaction_id="txn_2",
    ))
    assert booking.status == "upcoming"
    assert booking.quantity == 2


def test_hotel_booking_claims_room(hotel, room, guest, wednesday):
    booking, breakdown = CreateBookingHandler().handle(CreateBookingCommand(
        venue_type="hotel",
        venue_id=hotel.pk,
        user_id=guest.pk,
        start_date=wednesday,
        end_date=wednesday + timedelta(days=2),
        guests_count=2,
        room_id=room.pk,
    ))
    assert Room.objects.get(pk=room.pk).current_booking_id == booking.pk
    assert breakdown.total == Decimal("3510.00")  # 3000 + 12% tax + 150 fees


@pytest.mark.parametrize(
    "overrides, error, code",
    [
        ({"booking_date": timezone.localdate() - timedelta(days=1)}, ValidationError, "date_in_past"),
        ({"start_time": time(20, 0), "end_time": time(18, 0)}, ValidationError, "invalid_time_range"),
        ({"guests_count": 8}, ValidationError, "capacity_exceeded"),
        ({"quantity": 2}, InvalidInputError, "invalid_input"),
        ({"end_time": None}, ValidationError, "missing_schedule"),
        ({"venue_type": "boat"}, ValidationError, "invalid_venue_type"),
    ],
)
def test_invalid_requests_are_rejected_before_claiming(restaurant, table, guest, wednesday, overrides, error, code):
    with pytest.raises(error) as excinfo:
        _create_restaurant_booking(restaurant, guest, wednesday, **overrides)
    assert excinfo.value.code == code
    assert not Table.objects.get(pk=table.pk).is_booked


def test_unknown_venue_is_not_found(guest, wednesday):
    with pytest.raises(NotFoundError):
        PreviewBookingHandler().handle(PreviewBookingCommand(
            venue_type="hall", venue_id=999, start_date=wednesday, end_date=wednesday + timedelta(days=1)
        ))


def test_hotel_requires_room(hotel, guest, wednesday):
    with pytest.raises(ValidationError) as excinfo:
        PreviewBookingHandler().handle(PreviewBookingCommand(
            venue_type="hotel", venue_id=hotel.pk, start_date=wednesday, end_date=wednesday + timedelta(days=1)
        ))
    assert excinfo.value.code == "missing_room"


def test_preview_applies_coupon_without_holding_anything(hall, guest, wednesday):
    Coupon.objects.create(code="HALF", discount_type="percentage", value=Decimal("50"), expires_at=timezone.now() + timedelta(days=1))

    breakdown = PreviewBookingHandler().handle(PreviewBookingCommand(
        venue_type="hall",
        venue_id=hall.pk,
        start_date=wednesday,
        end_date=wednesday + timedelta(days=3),
        coupon_code="half",
    ))

    assert breakdown.discount_amount == Decimal("1650.00")
    assert breakdown.coupon_code == "HALF"
    assert Booking.objects.count() == 0


def test_preview_rejects_unknown_coupon(hall, wednesday):
    with pytest.raises(InvalidCouponError):
        PreviewBookingHandler().handle(PreviewBookingCommand(
            venue_type="hall",
            venue_id=hall.pk,
            start_date=wednesday,
            end_date=wednesday + timedelta(days=1),
            coupon_code="NOPE",
        ))


# ----- payment, cancel, status -----

def test_payment_confirms_booking(restaurant, table, guest, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)

    confirmed = ConfirmPaymentHandler().handle(ConfirmPaymentCommand(
        booking_id=booking.pk, actor_id=guest.pk, transaction_id="txn_9", payment_method="upi"
    ))

    assert confirmed.status == "confirmed"
    assert confirmed.payment_status == "completed"
    assert confirmed.paid_amount == Decimal("1246.48")
    assert confirmed.expires_at is None


def test_payment_twice_is_rejected(restaurant, table, guest, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    command = ConfirmPaymentCommand(booking_id=booking.pk, actor_id=guest.pk, transaction_id="txn_9")
    ConfirmPaymentHandler().handle(command)

    with pytest.raises(InvalidTransitionError) as excinfo:
        ConfirmPaymentHandler().handle(command)
    assert excinfo.value.code == "already_paid"


def test_payment_after_hold_deadline_is_rejected(restaurant, table, guest, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    later = timezone.now() + timedelta(seconds=301)

    with pytest.raises(InvalidTransitionError) as excinfo:
        ConfirmPaymentHandler(clock=lambda: later).handle(
            ConfirmPaymentCommand(booking_id=booking.pk, actor_id=guest.pk, transaction_id="late")
        )
    assert excinfo.value.code == "hold_expired"


def test_cancel_releases_table_and_second_cancel_fails(restaurant, table, guest, other_guest, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)

    cancelled = CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=guest.pk, reason="plans changed"))
    assert cancelled.status == "cancelled"
    assert cancelled.payment_status == "cancelled"
    assert not Table.objects.get(pk=table.pk).is_booked

    rebooked = _create_restaurant_booking(restaurant, other_guest, wednesday)
    with pytest.raises(AlreadyCancelledError):
        CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=guest.pk))
    assert Table.objects.get(pk=table.pk).current_booking_id == rebooked.pk


def test_stranger_cannot_cancel(restaurant, table, guest, other_guest, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)

    with pytest.raises(AuthorizationError):
        CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=other_guest.pk))

    booking.refresh_from_db()
    assert booking.status == "pending"
    assert Table.objects.get(pk=table.pk).is_booked


def test_venue_owner_can_cancel(restaurant, table, guest, owner, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    cancelled = CancelBookingHandler().handle(CancelBookingCommand(booking_id=booking.pk, actor_id=owner.pk))
    assert cancelled.status == "cancelled"


def test_admin_status_change_applies_payment_side_effects(restaurant, table, guest, admin_user, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday, transaction_id="txn_3")

    no_show = ChangeBookingStatusHandler().handle(
        ChangeBookingStatusCommand(booking_id=booking.pk, actor_id=admin_user.pk, status="no_show")
    )

    assert no_show.status == "no_show"
    assert no_show.payment_status == "failed"
    assert not Table.objects.get(pk=table.pk).is_booked


def test_refund_records_refund_amount(hall, guest, admin_user, wednesday):
    booking, _ = CreateBookingHandler().handle(CreateBookingCommand(
        venue_type="hall", venue_id=hall.pk, user_id=guest.pk,
        start_date=wednesday, end_date=wednesday + timedelta(days=3), transaction_id="txn_4",
    ))
    refunded = ChangeBookingStatusHandler().handle(
        ChangeBookingStatusCommand(booking_id=booking.pk, actor_id=admin_user.pk, status="refunded")
    )
    assert refunded.payment_status == "refunded"
    assert refunded.refund_amount == Decimal("3124.00")


def test_only_admins_change_status(restaurant, table, guest, owner, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    with pytest.raises(AuthorizationError):
        ChangeBookingStatusHandler().handle(
            ChangeBookingStatusCommand(booking_id=booking.pk, actor_id=owner.pk, status="confirmed")
        )


def test_invalid_admin_transition(restaurant, table, guest, admin_user, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    with pytest.raises(InvalidTransitionError):
        ChangeBookingStatusHandler().handle(
            ChangeBookingStatusCommand(booking_id=booking.pk, actor_id=admin_user.pk, status="completed")
        )


# ----- restaurant timeline -----

def test_check_in_and_out_complete_the_visit(restaurant, table, guest, owner, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday, transaction_id="txn_5")

    with pytest.raises(InvalidTransitionError):
        CheckOutHandler().handle(CheckOutCommand(booking_id=booking.pk, actor_id=owner.pk))

    checked_in = CheckInHandler().handle(CheckInCommand(booking_id=booking.pk, actor_id=owner.pk))
    assert checked_in.checked_in_at is not None
    with pytest.raises(InvalidTransitionError):
        CheckInHandler().handle(CheckInCommand(booking_id=booking.pk, actor_id=owner.pk))

    completed = CheckOutHandler().handle(CheckOutCommand(booking_id=booking.pk, actor_id=owner.pk))
    assert completed.status == "completed"
    assert not Table.objects.get(pk=table.pk).is_booked


def test_guest_cannot_check_in(restaurant, table, guest, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday, transaction_id="txn_6")
    with pytest.raises(AuthorizationError):
        CheckInHandler().handle(CheckInCommand(booking_id=booking.pk, actor_id=guest.pk))


def test_pending_booking_cannot_check_in(restaurant, table, guest, owner, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    with pytest.raises(InvalidTransitionError):
        CheckInHandler().handle(CheckInCommand(booking_id=booking.pk, actor_id=owner.pk))


# ----- hold expiry -----

def test_overdue_hold_is_cancelled_and_table_freed(restaurant, table, guest, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    later = timezone.now() + timedelta(seconds=301)

    assert ExpireHoldHandler(clock=lambda: later).handle(ExpireHoldCommand(booking_id=booking.pk)) is True

    booking.refresh_from_db()
    assert booking.status == "cancelled"
    assert booking.payment_status == "failed"
    assert not Table.objects.get(pk=table.pk).is_booked


def test_expiry_after_payment_is_a_no_op(restaurant, table, guest, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    ConfirmPaymentHandler().handle(ConfirmPaymentCommand(booking_id=booking.pk, actor_id=guest.pk, transaction_id="t"))
    later = timezone.now() + timedelta(seconds=301)

    assert ExpireHoldHandler(clock=lambda: later).handle(ExpireHoldCommand(booking_id=booking.pk)) is False
    booking.refresh_from_db()
    assert booking.status == "confirmed"
    assert Table.objects.get(pk=table.pk).current_booking_id == booking.pk


def test_expiry_before_deadline_is_a_no_op(restaurant, table, guest, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    assert expire_unpaid_booking(booking.pk) is False
    assert expire_unpaid_booking(987654) is False


def test_overdue_sweep_expires_missed_holds(restaurant, table, guest, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    Booking.objects.filter(pk=booking.pk).update(expires_at=timezone.now() - timedelta(seconds=1))

    assert expire_overdue_holds() == {"expired": 1}
    assert expire_overdue_holds() == {"expired": 0}
    assert not Table.objects.get(pk=table.pk).is_booked


def test_hold_timer_is_scheduled_after_commit(restaurant, table, guest, wednesday, django_capture_on_commit_callbacks):
    with mock.patch("apps.bookings.tasks.expire_unpaid_booking") as task:
        with django_capture_on_commit_callbacks(execute=True):
            booking = _create_restaurant_booking(restaurant, guest, wednesday)

    task.apply_async.assert_called_once_with(args=[booking.pk], countdown=300, task_id=hold_task_id(booking.pk))


def test_my_bookings_filters_by_status(restaurant, table, hall, guest, wednesday):
    _create_restaurant_booking(restaurant, guest, wednesday)
    CreateBookingHandler().handle(CreateBookingCommand(
        venue_type="hall", venue_id=hall.pk, user_id=guest.pk,
        start_date=wednesday, end_date=wednesday + timedelta(days=1), transaction_id="t",
    ))

    assert list_bookings_for_user(guest).count() == 2
    assert [b.venue_type for b in list_bookings_for_user(guest, status="confirmed")] == ["hall"]
    with pytest.raises(ValidationError):
        list_bookings_for_user(guest, status="archived")


def test_first_booking_of_day_is_priced_under_the_venue_lock(restaurant, table, guest, wednesday):
    calls = []
    outer_depth = len(connection.savepoint_ids)
    real_lock = command_handlers._lock_queryset_if_possible
    real_quote = BookingQuoter.quote

    def lock(queryset):
        calls.append(("lock", queryset.model))
        return real_lock(queryset)

    def quote(self, command):
        calls.append(("quote", len(connection.savepoint_ids) > outer_depth))
        return real_quote(self, command)

    with mock.patch.object(command_handlers, "_lock_queryset_if_possible", side_effect=lock), \
            mock.patch.object(BookingQuoter, "quote", autospec=True, side_effect=quote):
        _create_restaurant_booking(restaurant, guest, wednesday)

    assert calls[:2] == [("lock", Venue), ("quote", True)]


def test_payment_after_admin_confirmation_completes_payment(restaurant, table, guest, admin_user, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    ChangeBookingStatusHandler().handle(
        ChangeBookingStatusCommand(booking_id=booking.pk, actor_id=admin_user.pk, status="confirmed")
    )

    paid = ConfirmPaymentHandler().handle(ConfirmPaymentCommand(
        booking_id=booking.pk, actor_id=guest.pk, transaction_id="txn_late", payment_method="card"
    ))

    assert paid.status == "confirmed"
    assert paid.payment_status == "completed"
    assert paid.transaction_id == "txn_late"
    assert paid.paid_amount == paid.total_amount

    with pytest.raises(InvalidTransitionError) as excinfo:
        ConfirmPaymentHandler().handle(ConfirmPaymentCommand(booking_id=booking.pk, actor_id=guest.pk, transaction_id="again"))
    assert excinfo.value.code == "already_paid"


def test_deleting_the_guest_frees_the_table(restaurant, table, guest, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)

    guest.delete()

    assert not Booking.objects.filter(pk=booking.pk).exists()
    freed = Table.objects.get(pk=table.pk)
    assert freed.is_booked is False
    assert freed.current_booking_id is None


# ----- venue queries -----

def test_venue_bookings_are_for_owner_and_admins(restaurant, table, hall, guest, owner, admin_user, wednesday):
    booking = _create_restaurant_booking(restaurant, guest, wednesday)
    CreateBookingHandler().handle(CreateBookingCommand(
        venue_type="hall", venue_id=hall.pk, user_id=guest.pk,
        start_date=wednesday, end_date=wednesday + timedelta(days=1),
    ))

    assert [b.pk for b in list_bookings_for_venue(owner, restaurant.pk)] == [booking.pk]
    assert list_bookings_for_venue(admin_user, restaurant.pk).count() == 1
    assert list_bookings_for_venue(owner, restaurant.pk, status="confirmed").count() == 0

    with pytest.raises(AuthorizationError):
        list_bookings_for_venue(guest, restaurant.pk)
    with pytest.raises(NotFoundError):
        list_bookings_for_venue(owner, 999999)
    with pytest.raises(ValidationError):
        list_bookings_for_venue(owner, restaurant.pk, status="archived")


def test_venue_statistics_count_and_sum_per_status(hall, guest, other_guest, owner, wednesday):
    def book(user, start, **extra):
        booking, _ = CreateBookingHandler().handle(CreateBookingCommand(
            venue_type="hall", venue_id=hall.pk, user_id=user.pk,
            start_date=start, end_date=start + timedelta(days=3), **extra
        ))
        return booking

    book(guest, wednesday, transaction_id="txn_a")
    pending = book(other_guest, wednesday + timedelta(days=7))
    CancelBookingHandler().handle(CancelBookingCommand(booking_id=pending.pk, actor_id=other_guest.pk))
    book(other_guest, wednesday + timedelta(days=7))

    stats = venue_booking_statistics(owner, hall.pk, today=wednesday)

    assert stats["venue_id"] == hall.pk
    assert stats["total_bookings"] == 3
    assert stats["total_revenue"] == "9372.00"
    assert stats["average_booking_value"] == "3124.00"
    assert stats["status_counts"] == [
        {"status": "cancelled", "count": 1, "revenue": "3124.00", "average_value": "3124.00"},
        {"status": "confirmed", "count": 1, "revenue": "3124.00", "average_value": "3124.00"},
        {"status": "pending", "count": 1, "revenue": "3124.00", "average_value": "3124.00"},
    ]
    assert stats["todays_bookings"] == 1

    ranged = venue_booking_statistics(owner, hall.pk, date_from=wednesday, date_to=wednesday + timedelta(days=1))
    assert ranged["total_bookings"] == 1
    assert ranged["status_counts"][0]["status"] == "confirmed"


def test_venue_statistics_reject_strangers_and_reversed_ranges(hall, guest, owner, wednesday):
    with pytest.raises(AuthorizationError):
        venue_booking_statistics(guest, hall.pk)

    with pytest.raises(ValidationError) as excinfo:
        venue_booking_statistics(owner, hall.pk, date_from=wednesday, date_to=wednesday - timedelta(days=1))
    assert excinfo.value.code == "invalid_date_range"

    empty = venue_booking_statistics(owner, hall.pk)
    assert empty["total_bookings"] == 0
    assert empty["total_revenue"] == "0.00"
    assert empty["status_counts"] == []
