"""URL routing for the booking domain."""

from __future__ import annotations

from django.urls import include, path, re_path  # type: ignore
from rest_framework.routers import DefaultRouter  # type: ignore

from .views import (
    BookingPreviewView,
    BookingViewSet,
    VenueAvailabilityView,
    VenueBookingListView,
    VenueBookingStatisticsView,
    VenueBookingView,
)

VENUE_PREFIX = r"^(?P<venue_type>hotel|cafe|restaurant|hall)/(?P<venue_id>\d+)/"

router = DefaultRouter()
router.register(r"", BookingViewSet, basename="booking")

urlpatterns = [
    re_path(VENUE_PREFIX + r"preview/$", BookingPreviewView.as_view(), name="booking-preview"),
    re_path(VENUE_PREFIX + r"availability/$", VenueAvailabilityView.as_view(), name="venue-availability"),
    re_path(VENUE_PREFIX + r"$", VenueBookingView.as_view(), name="venue-booking"),
    path("venue/<int:venue_id>/", VenueBookingListView.as_view(), name="venue-booking-list"),
    path("venue/<int:venue_id>/statistics/", VenueBookingStatisticsView.as_view(), name="venue-booking-statistics"),
    path("", include(router.urls)),
]
