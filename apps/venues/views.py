"""Venue API views: featured image upload and geodata lookups."""

from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import permissions, serializers  # type: ignore
from rest_framework.parsers import FormParser, MultiPartParser  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.domain.exceptions import DomainError
from shared.infrastructure.storage import delete_from_s3, optimize_image, upload_to_s3

from .geodata import get_geodata_client
from .models import Venue

logger = logging.getLogger(__name__)


class IsVenueOwnerOrAdmin(permissions.BasePermission):
    """Venue owner or platform staff."""

    def has_object_permission(self, request, view, obj: Venue):  # type: ignore
        user = request.user
        if getattr(user, "is_staff", False) or getattr(user, "is_superuser", False):
            return True
        return obj.owner_id == user.id


class VenueImageSerializer(serializers.Serializer):
    image = serializers.FileField()


class VenueImageUploadView(APIView):
    """Replace the featured image of a venue."""

    permission_classes = [permissions.IsAuthenticated, IsVenueOwnerOrAdmin]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request, pk):  # type: ignore
        venue = get_object_or_404(Venue, pk=pk)
        self.check_object_permissions(request, venue)

        serializer = VenueImageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        upload = serializer.validated_data["image"]

        content, mimetype = optimize_image(upload.read())
        url = upload_to_s3(content, upload.name, mimetype=mimetype, folder=f"venues/{venue.pk}")

        previous = venue.featured_image
        venue.featured_image = url
        venue.save(update_fields=["featured_image", "updated_at"])

        if previous:
            try:
                delete_from_s3(previous)
            except DomainError as exc:
                logger.warning("Could not delete previous image of venue %s: %s (%s)", venue.pk, previous, exc.code)

        return Response({"success": True, "venue_id": venue.pk, "featured_image": url})


class GeocodeView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        results = get_geodata_client().geocode(request.query_params.get("q", ""))
        return Response({"results": results})


class CitiesView(APIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):  # type: ignore
        cities = get_geodata_client().cities_by_country(request.query_params.get("country", ""))
        return Response({"cities": cities})
