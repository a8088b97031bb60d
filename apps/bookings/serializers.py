"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .domain.entities import BookingStatus
from .models import Booking

DATE_INPUT_FORMATS = ["iso-8601", "%d-%m-%Y"]


class BookingRequestSerializer(serializers.Serializer):
    """Body of preview and create requests for every vertical."""

    booking_date = serializers.DateField(required=False, input_formats=DATE_INPUT_FORMATS)
    start_time = serializers.TimeField(required=False)
    end_time = serializers.TimeField(required=False)
    start_date = serializers.DateField(required=False, input_formats=DATE_INPUT_FORMATS)
    end_date = serializers.DateField(required=False, input_formats=DATE_INPUT_FORMATS)
    guests_count = serializers.IntegerField(min_value=1, default=1)
    quantity = serializers.IntegerField(min_value=1, default=1)
    table_id = serializers.IntegerField(required=False, allow_null=True)
    room_id = serializers.IntegerField(required=False, allow_null=True)
    coupon_code = serializers.CharField(required=False, allow_blank=True, default="", max_length=32)
    transaction_id = serializers.CharField(required=False, allow_blank=True, default="", max_length=128)
    payment_method = serializers.CharField(required=False, allow_blank=True, default="", max_length=32)
    special_requests = serializers.CharField(required=False, allow_blank=True, default="")


class AvailabilityQuerySerializer(serializers.Serializer):
    date = serializers.DateField(input_formats=DATE_INPUT_FORMATS)
    party_size = serializers.IntegerField(min_value=1, default=1)


class StatisticsQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False, input_formats=DATE_INPUT_FORMATS)
    date_to = serializers.DateField(required=False, input_formats=DATE_INPUT_FORMATS)


class StatusChangeSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=BookingStatus.choices())


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="", max_length=255)


class PaymentSerializer(serializers.Serializer):
    transaction_id = serializers.CharField(max_length=128)
    payment_method = serializers.CharField(required=False, allow_blank=True, default="", max_length=32)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)


class BookingSerializer(serializers.ModelSerializer):
    """Booking as returned by every endpoint."""

    venue_id = serializers.ReadOnlyField(source="venue.id")
    venue_name = serializers.ReadOnlyField(source="venue.name")
    user_id = serializers.ReadOnlyField(source="user.id")
    table_number = serializers.SerializerMethodField()

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_code",
            "venue_type",
            "venue_id",
            "venue_name",
            "user_id",
            "table",
            "table_number",
            "room",
            "booking_date",
            "start_time",
            "end_time",
            "start_date",
            "end_date",
            "guests_count",
            "quantity",
            "status",
            "payment_status",
            "payment_method",
            "transaction_id",
            "paid_amount",
            "paid_at",
            "pricing",
            "total_amount",
            "currency",
            "coupon_code",
            "expires_at",
            "confirmed_at",
            "checked_in_at",
            "checked_out_at",
            "cancelled_at",
            "completed_at",
            "cancellation_reason",
            "refund_amount",
            "special_requests",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_table_number(self, obj: Booking):  # type: ignore
        return obj.table.table_number if obj.table_id else None
