"""API views for the booking domain."""

from __future__ import annotations

from django.http import HttpResponse  # type: ignore
from django.shortcuts import get_object_or_404  # type: ignore
from rest_framework import generics, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from apps.venues.models import Venue

from .application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    ChangeBookingStatusCommand,
    ChangeBookingStatusHandler,
    CheckInCommand,
    CheckInHandler,
    CheckOutCommand,
    CheckOutHandler,
    ConfirmPaymentCommand,
    ConfirmPaymentHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    PreviewBookingCommand,
    PreviewBookingHandler,
    get_booking_for,
    list_bookings_for_user,
    list_bookings_for_venue,
    venue_booking_statistics,
)
from .filters import BookingFilterSet
from .invoice import render_invoice_pdf
from .serializers import (
    AvailabilityQuerySerializer,
    BookingRequestSerializer,
    BookingSerializer,
    CancelSerializer,
    PaymentSerializer,
    StatisticsQuerySerializer,
    StatusChangeSerializer,
)
from .services import ResourceAvailabilityStore


class IsPlatformAdmin(permissions.BasePermission):
    """Only staff accounts may change a booking status directly."""

    def has_permission(self, request, view):  # type: ignore
        user = request.user
        return bool(user and user.is_authenticated and user.is_staff)


def _command_kwargs(venue_type: str, venue_id: int, user_id, data: dict) -> dict:
    kwargs = dict(data)
    kwargs.update(venue_type=venue_type, venue_id=int(venue_id), user_id=user_id)
    return kwargs


class BookingPreviewView(APIView):
    """Price a booking without holding anything."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, venue_type, venue_id):  # type: ignore
        serializer = BookingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        for key in ("transaction_id", "payment_method", "special_requests"):
            data.pop(key, None)

        breakdown = PreviewBookingHandler().handle(
            PreviewBookingCommand(**_command_kwargs(venue_type, venue_id, request.user.pk, data))
        )
        return Response({"success": True, "pricing": breakdown.to_snapshot()})


class VenueBookingView(APIView):
    """Create a booking for any vertical."""

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, venue_type, venue_id):  # type: ignore
        serializer = BookingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking, breakdown = CreateBookingHandler().handle(
            CreateBookingCommand(**_command_kwargs(venue_type, venue_id, request.user.pk, serializer.validated_data))
        )
        return Response(
            {
                "success": True,
                "booking": BookingSerializer(booking).data,
                "pricing": breakdown.to_snapshot(),
            },
            status=status.HTTP_201_CREATED,
        )


class VenueAvailabilityView(APIView):
    """Free slots of a venue on one day."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, venue_type, venue_id):  # type: ignore
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        venue = get_object_or_404(Venue, pk=venue_id, kind=venue_type)

        slots = ResourceAvailabilityStore().list_available_slots(
            venue,
            query.validated_data["date"],
            party_size=query.validated_data["party_size"],
        )
        return Response({"venue_id": venue.pk, "slots": [slot.to_dict() for slot in slots]})


class VenueBookingListView(generics.GenericAPIView):
    """Bookings of one venue, for its owner or an admin."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, venue_id):  # type: ignore
        queryset = list_bookings_for_venue(request.user, venue_id, status=request.query_params.get("status"))
        queryset = BookingFilterSet(request.query_params, queryset=queryset).qs

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(BookingSerializer(page, many=True).data)
        return Response(BookingSerializer(queryset, many=True).data)


class VenueBookingStatisticsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, venue_id):  # type: ignore
        query = StatisticsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        stats = venue_booking_statistics(request.user, venue_id, **query.validated_data)
        return Response({"success": True, "statistics": stats})


class BookingViewSet(viewsets.GenericViewSet):
    """Booking detail and lifecycle actions. Every change goes through a command handler."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_queryset(self):  # type: ignore
        return list_bookings_for_user(self.request.user)

    def _respond(self, booking):
        return Response({"success": True, "booking": BookingSerializer(booking).data})

    def retrieve(self, request, pk=None):  # type: ignore
        return Response(BookingSerializer(get_booking_for(request.user, pk)).data)

    @action(detail=False, methods=["get"])
    def mine(self, request):  # type: ignore
        queryset = list_bookings_for_user(request.user, status=request.query_params.get("status"))
        queryset = BookingFilterSet(request.query_params, queryset=queryset).qs

        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(BookingSerializer(page, many=True).data)
        return Response(BookingSerializer(queryset, many=True).data)

    @action(detail=True, methods=["patch"], url_path="status", permission_classes=[IsPlatformAdmin])
    def change_status(self, request, pk=None):  # type: ignore
        serializer = StatusChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = ChangeBookingStatusHandler().handle(
            ChangeBookingStatusCommand(
                booking_id=int(pk),
                actor_id=request.user.pk,
                status=serializer.validated_data["status"],
            )
        )
        return self._respond(booking)

    @action(detail=True, methods=["patch"])
    def cancel(self, request, pk=None):  # type: ignore
        serializer = CancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = CancelBookingHandler().handle(
            CancelBookingCommand(
                booking_id=int(pk),
                actor_id=request.user.pk,
                reason=serializer.validated_data["reason"],
            )
        )
        return self._respond(booking)

    @action(detail=True, methods=["patch"])
    def payment(self, request, pk=None):  # type: ignore
        serializer = PaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = ConfirmPaymentHandler().handle(
            ConfirmPaymentCommand(booking_id=int(pk), actor_id=request.user.pk, **serializer.validated_data)
        )
        return self._respond(booking)

    @action(detail=True, methods=["post"], url_path="check-in")
    def check_in(self, request, pk=None):  # type: ignore
        booking = CheckInHandler().handle(CheckInCommand(booking_id=int(pk), actor_id=request.user.pk))
        return self._respond(booking)

    @action(detail=True, methods=["post"], url_path="check-out")
    def check_out(self, request, pk=None):  # type: ignore
        booking = CheckOutHandler().handle(CheckOutCommand(booking_id=int(pk), actor_id=request.user.pk))
        return self._respond(booking)

    @action(detail=True, methods=["get"])
    def invoice(self, request, pk=None):  # type: ignore
        booking = get_booking_for(request.user, pk)
        response = HttpResponse(render_invoice_pdf(booking), content_type="application/pdf")
        response["Content-Disposition"] = f'attachment; filename="invoice_{booking.booking_code}.pdf"'
        return response
