"""Fixtures shared by the booking tests."""

from __future__ import annotations

from datetime import date, time, timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.bookings.models import Booking
from apps.venues.models import Room, Table, TableGroup, Venue


def next_weekday(weekday: int, after: date | None = None) -> date:
    """First date strictly after ``after`` (default today) falling on weekday (Mon=0)."""
    day = (after or timezone.localdate()) + timedelta(days=1)
    while day.weekday() != weekday:
        day += timedelta(days=1)
    return day


@pytest.fixture
def wednesday():
    return next_weekday(2)


@pytest.fixture
def guest(db):
    return get_user_model().objects.create_user("guest", "guest@example.com", "GuestPass123")


@pytest.fixture
def other_guest(db):
    return get_user_model().objects.create_user("other", "other@example.com", "OtherPass123")


@pytest.fixture
def owner(db):
    return get_user_model().objects.create_user("owner", "owner@example.com", "OwnerPass123")


@pytest.fixture
def admin_user(db):
    return get_user_model().objects.create_user("admin", "admin@example.com", "AdminPass123", is_staff=True)


@pytest.fixture
def restaurant(owner):
    venue = Venue.objects.create(
        kind=Venue.Kind.RESTAURANT,
        name="Spice Route",
        owner=owner,
        average_cost_for_two=Decimal("400"),
        capacity=20,
        opening_time=time(10, 0),
        closing_time=time(23, 0),
    )
    group = TableGroup.objects.create(venue=venue, capacity=6)
    Table.objects.create(group=group, table_number=1)
    return venue


@pytest.fixture
def table(restaurant):
    return Table.objects.get(group__venue=restaurant)


@pytest.fixture
def cafe(owner):
    return Venue.objects.create(
        kind=Venue.Kind.CAFE,
        name="Bean There",
        owner=owner,
        unit_rate=Decimal("100"),
        capacity=12,
        units=2,
        opening_time=time(9, 0),
        closing_time=time(21, 0),
    )


@pytest.fixture
def hall(owner):
    return Venue.objects.create(
        kind=Venue.Kind.HALL,
        name="Grand Hall",
        owner=owner,
        unit_rate=Decimal("1000"),
        capacity=300,
        units=1,
    )


@pytest.fixture
def hotel(owner):
    return Venue.objects.create(kind=Venue.Kind.HOTEL, name="Lake View", owner=owner, capacity=4)


@pytest.fixture
def room(hotel):
    return Room.objects.create(venue=hotel, room_type="Deluxe", price_per_night=Decimal("1500"), max_guests=2)


@pytest.fixture
def make_booking(guest):
    def _make(venue, **fields):
        values = {
            "venue_type": venue.kind,
            "venue": venue,
            "user": guest,
            "owner": venue.owner,
            "status": "pending",
        }
        values.update(fields)
        return Booking.objects.create(**values)

    return _make
