"""Integration tests for booking API endpoints."""

from __future__ import annotations

from datetime import time, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from apps.bookings.models import Booking
from apps.venues.models import Table, TableGroup, Venue

User = get_user_model()


class BookingAPITests(APITestCase):
    """Covers creating, conflicting, cancelling and reading bookings over HTTP."""

    def setUp(self) -> None:
        self.guest = User.objects.create_user("guest", "guest@example.com", "GuestPass123")
        self.stranger = User.objects.create_user("stranger", "stranger@example.com", "StrangerPass123")
        self.owner = User.objects.create_user("owner", "owner@example.com", "OwnerPass123")
        self.admin = User.objects.create_user("admin", "admin@example.com", "AdminPass123", is_staff=True)

        self.restaurant = Venue.objects.create(
            kind=Venue.Kind.RESTAURANT,
            name="Spice Route",
            owner=self.owner,
            average_cost_for_two=Decimal("400"),
            capacity=20,
            opening_time=time(10, 0),
            closing_time=time(23, 0),
        )
        group = TableGroup.objects.create(venue=self.restaurant, capacity=4)
        self.table = Table.objects.create(group=group, table_number=7)

        self.hall = Venue.objects.create(
            kind=Venue.Kind.HALL,
            name="Grand Hall",
            owner=self.owner,
            unit_rate=Decimal("1000"),
            capacity=300,
            units=1,
        )
        self.day = timezone.localdate() + timedelta(days=7)
        self.client.force_authenticate(self.guest)

    def _restaurant_url(self, name: str = "venue-booking") -> str:
        return reverse(name, kwargs={"venue_type": "restaurant", "venue_id": self.restaurant.pk})

    def _payload(self, **overrides) -> dict:
        payload = {
            "booking_date": self.day.isoformat(),
            "start_time": "12:00",
            "end_time": "14:00",
            "guests_count": 2,
            "table_id": self.table.pk,
        }
        payload.update(overrides)
        return payload

    def _create(self, **overrides) -> dict:
        response = self.client.post(self._restaurant_url(), self._payload(**overrides), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        return response.data["booking"]

    def test_guest_can_create_booking(self) -> None:
        response = self.client.post(self._restaurant_url(), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED, response.data)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["booking"]["status"], "pending")
        self.assertEqual(response.data["booking"]["table_number"], 7)
        self.assertEqual(response.data["pricing"]["total"], response.data["booking"]["total_amount"])
        self.assertEqual(Booking.objects.count(), 1)

    def test_same_table_twice_is_a_conflict(self) -> None:
        self._create()

        self.client.force_authenticate(self.stranger)
        response = self.client.post(self._restaurant_url(), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT, response.data)
        self.assertFalse(response.data["success"])
        self.assertEqual(response.data["code"], "resource_unavailable")
        self.assertEqual(Booking.objects.count(), 1)

    def test_invalid_payload_uses_error_envelope(self) -> None:
        response = self.client.post(self._restaurant_url(), self._payload(guests_count=0), format="json")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "validation_error")
        self.assertIn("guests_count", response.data["details"])

    def test_anonymous_cannot_book(self) -> None:
        self.client.force_authenticate(None)
        response = self.client.post(self._restaurant_url(), self._payload(), format="json")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_preview_does_not_hold_the_table(self) -> None:
        response = self.client.post(self._restaurant_url("booking-preview"), self._payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertIn("total", response.data["pricing"])
        self.assertEqual(Booking.objects.count(), 0)
        self.assertFalse(Table.objects.get(pk=self.table.pk).is_booked)

    def test_availability_is_public(self) -> None:
        self.client.force_authenticate(None)
        url = reverse("venue-availability", kwargs={"venue_type": "hall", "venue_id": self.hall.pk})

        response = self.client.get(url, {"date": self.day.isoformat()})

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["slots"], [
            {"date": self.day.isoformat(), "start_time": None, "end_time": None, "remaining": 1},
        ])

    def test_availability_of_wrong_vertical_is_404(self) -> None:
        url = reverse("venue-availability", kwargs={"venue_type": "cafe", "venue_id": self.hall.pk})
        response = self.client.get(url, {"date": self.day.isoformat()})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_guest_can_cancel_once(self) -> None:
        booking = self._create()
        cancel_url = reverse("booking-cancel", args=[booking["id"]])

        response = self.client.patch(cancel_url, {"reason": "Plans changed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking"]["status"], "cancelled")
        self.assertFalse(Table.objects.get(pk=self.table.pk).is_booked)

        again = self.client.patch(cancel_url, {}, format="json")
        self.assertEqual(again.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(again.data["code"], "already_cancelled")

    def test_stranger_cannot_cancel_or_view(self) -> None:
        booking = self._create()

        self.client.force_authenticate(self.stranger)
        cancel = self.client.patch(reverse("booking-cancel", args=[booking["id"]]), {}, format="json")
        detail = self.client.get(reverse("booking-detail", args=[booking["id"]]))

        self.assertEqual(cancel.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(detail.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Booking.objects.get(pk=booking["id"]).status, "pending")

    def test_payment_confirms_booking(self) -> None:
        booking = self._create()

        response = self.client.patch(
            reverse("booking-payment", args=[booking["id"]]),
            {"transaction_id": "txn_42", "payment_method": "card"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking"]["status"], "confirmed")
        self.assertEqual(response.data["booking"]["payment_status"], "completed")

    def test_only_admin_changes_status(self) -> None:
        booking = self._create(transaction_id="txn_1")
        url = reverse("booking-change-status", args=[booking["id"]])

        forbidden = self.client.patch(url, {"status": "no_show"}, format="json")
        self.assertEqual(forbidden.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.patch(url, {"status": "no_show"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["booking"]["payment_status"], "failed")

    def test_owner_checks_guest_in_and_out(self) -> None:
        booking = self._create(transaction_id="txn_2")

        self.client.force_authenticate(self.owner)
        checked_in = self.client.post(reverse("booking-check-in", args=[booking["id"]]))
        checked_out = self.client.post(reverse("booking-check-out", args=[booking["id"]]))

        self.assertEqual(checked_in.status_code, status.HTTP_200_OK, checked_in.data)
        self.assertEqual(checked_out.status_code, status.HTTP_200_OK, checked_out.data)
        self.assertEqual(checked_out.data["booking"]["status"], "completed")

    def test_my_bookings_lists_only_mine(self) -> None:
        self._create()
        hall_url = reverse("venue-booking", kwargs={"venue_type": "hall", "venue_id": self.hall.pk})
        self.client.post(
            hall_url,
            {
                "start_date": self.day.isoformat(),
                "end_date": (self.day + timedelta(days=1)).isoformat(),
                "transaction_id": "txn_3",
            },
            format="json",
        )

        response = self.client.get(reverse("booking-mine"))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)

        confirmed = self.client.get(reverse("booking-mine"), {"status": "confirmed"})
        self.assertEqual([b["venue_type"] for b in confirmed.data["results"]], ["hall"])

        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.get(reverse("booking-mine")).data["count"], 0)

    def test_invoice_is_a_pdf(self) -> None:
        booking = self._create()

        response = self.client.get(reverse("booking-invoice", args=[booking["id"]]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response["Content-Type"], "application/pdf")
        self.assertIn(booking["booking_code"], response["Content-Disposition"])
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_owner_lists_venue_bookings(self) -> None:
        self._create()
        url = reverse("venue-booking-list", kwargs={"venue_id": self.restaurant.pk})

        self.client.force_authenticate(self.owner)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["table_number"], 7)

        on_day = self.client.get(url, {"date": self.day.isoformat()})
        self.assertEqual(on_day.data["count"], 1)
        confirmed = self.client.get(url, {"status": "confirmed"})
        self.assertEqual(confirmed.data["count"], 0)

        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

    def test_venue_statistics_for_owner_only(self) -> None:
        self._create(transaction_id="txn_4")
        url = reverse("venue-booking-statistics", kwargs={"venue_id": self.restaurant.pk})

        self.client.force_authenticate(self.owner)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK, response.data)
        self.assertTrue(response.data["success"])
        stats = response.data["statistics"]
        self.assertEqual(stats["total_bookings"], 1)
        self.assertEqual(stats["status_counts"][0]["status"], "confirmed")
        self.assertEqual(stats["total_revenue"], stats["status_counts"][0]["revenue"])

        reversed_range = self.client.get(
            url, {"date_from": self.day.isoformat(), "date_to": (self.day - timedelta(days=1)).isoformat()}
        )
        self.assertEqual(reversed_range.status_code, status.HTTP_400_BAD_REQUEST)

        self.client.force_authenticate(self.stranger)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)
