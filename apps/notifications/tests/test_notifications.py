"""Tests for in-app notifications, email and the booking event pipeline."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from unittest import mock

import pytest
from django.contrib.auth import get_user_model
from django.core import mail
from django.db import DatabaseError
from django.urls import reverse
from django.utils import timezone
from rest_framework.test import APIClient

from apps.bookings.application.command_handlers import CreateBookingCommand, CreateBookingHandler
from apps.notifications.models import Notification
from apps.notifications.services import notify_booking_event, send_email_notification, send_notification
from apps.notifications.tasks import dispatch_booking_notification
from apps.venues.models import Venue

pytestmark = pytest.mark.django_db

User = get_user_model()


@pytest.fixture
def owner():
    return User.objects.create_user("owner", "owner@example.com", "OwnerPass123")


@pytest.fixture
def guest():
    return User.objects.create_user("guest", "guest@example.com", "GuestPass123")


@pytest.fixture
def hall(owner):
    return Venue.objects.create(
        kind=Venue.Kind.HALL,
        name="Grand Hall",
        owner=owner,
        unit_rate=Decimal("1000"),
        capacity=300,
    )


def _book_hall(hall, guest, **extra):
    start = timezone.localdate() + timedelta(days=5)
    booking, _ = CreateBookingHandler().handle(CreateBookingCommand(
        venue_type="hall",
        venue_id=hall.pk,
        user_id=guest.pk,
        start_date=start,
        end_date=start + timedelta(days=1),
        **extra,
    ))
    return booking


def test_single_notification_goes_to_one_user(owner, guest):
    result = send_notification(owner, "Hello", user=guest, description="Welcome")

    assert result.success
    assert result.count == 1
    notification = Notification.objects.get(pk=result.notification_ids[0])
    assert notification.user == guest
    assert notification.type == Notification.Type.SINGLE


def test_broadcast_reaches_every_active_user(owner, guest):
    User.objects.create_user("inactive", "inactive@example.com", "InactivePass123", is_active=False)

    result = send_notification(owner, "Maintenance tonight", type=Notification.Type.BROADCAST)

    assert result.success
    assert set(Notification.objects.values_list("user__username", flat=True)) == {"owner", "guest"}
    assert set(Notification.objects.values_list("type", flat=True)) == {"broadcast"}


def test_missing_admin_or_title_is_reported_not_raised(owner, guest):
    assert send_notification(None, "Hello", user=guest).success is False
    assert send_notification(owner, "", user=guest).success is False
    assert Notification.objects.count() == 0


def test_database_failure_is_reported_not_raised(owner, guest):
    with mock.patch.object(Notification.objects, "create", side_effect=DatabaseError("db down")):
        result = send_notification(owner, "Hello", user=guest)

    assert result.success is False
    assert "db down" in result.message


def test_email_failure_returns_false():
    with mock.patch("apps.notifications.services.send_mail", side_effect=OSError("smtp down")):
        assert send_email_notification("guest@example.com", "Subject", message="Body") is False
    assert send_email_notification("", "Subject") is False


def test_booking_event_notifies_guest_in_app_and_by_email(hall, guest):
    booking = _book_hall(hall, guest)
    mail.outbox.clear()

    result = notify_booking_event("BookingCreated", booking)

    assert result.success
    notification = Notification.objects.get(user=guest)
    assert notification.admin == hall.owner
    assert booking.booking_code in notification.description
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == ["guest@example.com"]


def test_unknown_event_sends_nothing(hall, guest):
    booking = _book_hall(hall, guest)
    assert notify_booking_event("BookingCheckedIn", booking).success is False
    assert dispatch_booking_notification("BookingCreated", 424242) is False


def test_created_booking_notifies_after_commit(hall, guest, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True):
        booking = _book_hall(hall, guest, transaction_id="txn_1")

    notification = Notification.objects.get(user=guest)
    assert booking.booking_code in notification.description
    assert any(booking.booking_code in message.body for message in mail.outbox)


def test_no_notification_before_commit(hall, guest):
    _book_hall(hall, guest, transaction_id="txn_2")
    assert Notification.objects.count() == 0


def test_api_lists_and_marks_own_notifications(owner, guest):
    send_notification(owner, "First", user=guest)
    send_notification(owner, "Second", user=guest)
    send_notification(guest, "For the owner", user=owner)

    client = APIClient()
    client.force_authenticate(guest)

    listing = client.get(reverse("notification-list"))
    assert listing.status_code == 200
    assert listing.data["count"] == 2

    first_id = listing.data["results"][0]["id"]
    assert client.post(reverse("notification-mark-read", args=[first_id])).status_code == 200
    assert Notification.objects.get(pk=first_id).is_read

    marked = client.post(reverse("notification-mark-all-read"))
    assert marked.data == {"updated": 1}

    foreign = Notification.objects.get(user=owner)
    assert client.get(reverse("notification-detail", args=[foreign.pk])).status_code == 404
