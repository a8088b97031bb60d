"""Admin registrations for venues."""

from __future__ import annotations

from django.contrib import admin

from .models import Room, Table, TableGroup, Venue


class TableGroupInline(admin.TabularInline):
    model = TableGroup
    extra = 0
    fields = ("capacity",)


class RoomInline(admin.TabularInline):
    model = Room
    extra = 0
    fields = ("room_type", "price_per_night", "max_guests", "is_booked")
    readonly_fields = ("is_booked",)


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ("name", "kind", "city", "owner", "unit_rate", "units", "is_available")
    list_filter = ("kind", "is_available", "city")
    search_fields = ("name", "city", "owner__email")
    inlines = [TableGroupInline, RoomInline]


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ("table_number", "group", "is_booked", "current_booking", "version")
    list_filter = ("is_booked", "group__venue")
    readonly_fields = ("is_booked", "current_booking", "version")
