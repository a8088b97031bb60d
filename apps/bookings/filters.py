"""FilterSet definitions for booking lists."""

from __future__ import annotations

import django_filters  # type: ignore

from .domain.entities import VenueType
from .models import Booking


class BookingFilterSet(django_filters.FilterSet):
    """Filters for booking lists. Status is handled by the query itself."""

    venue_type = django_filters.ChoiceFilter(field_name="venue_type", choices=VenueType.choices())
    venue = django_filters.NumberFilter(field_name="venue_id", lookup_expr="exact")
    date = django_filters.DateFilter(method="filter_date")
    date_from = django_filters.DateFilter(method="filter_date_from")
    date_to = django_filters.DateFilter(method="filter_date_to")

    class Meta:
        model = Booking
        fields = ["venue_type", "venue"]

    def filter_date(self, queryset, name, value):  # type: ignore
        return queryset.filter(booking_date=value) | queryset.filter(start_date__lte=value, end_date__gte=value)

    def filter_date_from(self, queryset, name, value):  # type: ignore
        return queryset.filter(booking_date__gte=value) | queryset.filter(start_date__gte=value)

    def filter_date_to(self, queryset, name, value):  # type: ignore
        return queryset.filter(booking_date__lte=value) | queryset.filter(end_date__lte=value)
