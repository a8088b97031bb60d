"""URL routing for venues."""

from __future__ import annotations

from django.urls import path  # type: ignore

from .views import CitiesView, GeocodeView, VenueImageUploadView

urlpatterns = [
    path("geocode/", GeocodeView.as_view(), name="venue-geocode"),
    path("cities/", CitiesView.as_view(), name="venue-cities"),
    path("<int:pk>/image/", VenueImageUploadView.as_view(), name="venue-image"),
]
