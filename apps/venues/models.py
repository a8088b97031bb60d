"""Venue models: the bookable places and their sub-resources."""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Venue(models.Model):
    """A hotel, cafe, restaurant or hall that accepts bookings."""

    class Kind(models.TextChoices):
        HOTEL = "hotel", _("Hotel")
        CAFE = "cafe", _("Cafe")
        RESTAURANT = "restaurant", _("Restaurant")
        HALL = "hall", _("Hall")

    kind = models.CharField(max_length=16, choices=Kind.choices, db_index=True)
    name = models.CharField(max_length=255)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="venues",
        help_text=_("Venue admin who receives booking notifications."),
    )
    description = models.TextField(blank=True)
    address = models.CharField(max_length=255, blank=True)
    city = models.CharField(max_length=120, blank=True)
    currency = models.CharField(max_length=3, default="INR")
    unit_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Price per night (hotel), per hour per table (cafe) or per day (hall)."),
    )
    average_cost_for_two = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text=_("Restaurants charge half of this per guest."),
    )
    capacity = models.PositiveIntegerField(default=1, help_text=_("Maximum guests per booking."))
    units = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        help_text=_("Parallel bookable units: cafe tables or identical hall units."),
    )
    opening_time = models.TimeField(null=True, blank=True)
    closing_time = models.TimeField(null=True, blank=True)
    slot_duration_minutes = models.PositiveSmallIntegerField(default=60, validators=[MinValueValidator(15)])
    is_available = models.BooleanField(default=True)
    latitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    longitude = models.DecimalField(max_digits=9, decimal_places=6, null=True, blank=True)
    featured_image = models.URLField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Venue")
        verbose_name_plural = _("Venues")
        ordering = ["name"]
        indexes = [
            models.Index(fields=["kind", "is_available"], name="venue_kind_available_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.get_kind_display()}: {self.name}"

    @property
    def per_guest_rate(self) -> Decimal:
        return Decimal(self.average_cost_for_two) / Decimal(2)


class TableGroup(models.Model):
    """Restaurant tables of one size."""

    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="table_groups")
    capacity = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(20)])

    class Meta:
        verbose_name = _("Table group")
        verbose_name_plural = _("Table groups")
        ordering = ["capacity"]

    def __str__(self) -> str:
        return f"{self.venue_id}: tables for {self.capacity}"


class Table(models.Model):
    """A single restaurant table.

    ``is_booked`` and ``current_booking`` are written only by
    ``ResourceAvailabilityStore``.
    """

    group = models.ForeignKey(TableGroup, on_delete=models.CASCADE, related_name="tables")
    table_number = models.PositiveIntegerField()
    is_booked = models.BooleanField(default=False)
    current_booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    version = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Table")
        verbose_name_plural = _("Tables")
        ordering = ["group__capacity", "table_number"]
        constraints = [
            models.UniqueConstraint(fields=["group", "table_number"], name="unique_table_number_per_group"),
        ]

    def __str__(self) -> str:
        return f"Table {self.table_number} (seats {self.group.capacity})"


class Room(models.Model):
    """A hotel room. Same claim rules as restaurant tables."""

    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="rooms")
    room_type = models.CharField(max_length=64)
    price_per_night = models.DecimalField(max_digits=10, decimal_places=2)
    max_guests = models.PositiveSmallIntegerField(default=2)
    is_booked = models.BooleanField(default=False)
    current_booking = models.ForeignKey(
        "bookings.Booking",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    version = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["price_per_night", "id"]

    def __str__(self) -> str:
        return f"{self.room_type} @ {self.venue_id}"
