"""Admin registration for bookings."""

from __future__ import annotations

from django.contrib import admin

from .models import Booking


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "booking_code",
        "venue_type",
        "venue",
        "user",
        "status",
        "payment_status",
        "booking_date",
        "start_date",
        "total_amount",
        "created_at",
    )
    list_filter = ("venue_type", "status", "payment_status", "booking_date")
    search_fields = ("booking_code", "venue__name", "user__email", "transaction_id")
    # Resource links and status are owned by the booking lifecycle
    readonly_fields = (
        "booking_code",
        "status",
        "payment_status",
        "table",
        "room",
        "pricing",
        "total_amount",
        "expires_at",
        "created_at",
        "updated_at",
    )
