"""Domain services for booking workflows.

``ResourceAvailabilityStore`` is the only code that marks tables and rooms
as booked or free, and the only code that decides whether a hall date range
or cafe time window still has room.

Discrete resources (tables, rooms) are claimed with one conditional UPDATE
that succeeds only while the row is still free. Range resources (halls,
cafes) lock the venue row and count overlapping active bookings.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, TYPE_CHECKING, Union

from django.db import transaction  # type: ignore
from django.db.models import F, Q, Sum  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore
from django.utils import timezone  # type: ignore

from apps.venues.models import Room, Table, Venue
from shared.domain.exceptions import ConflictError
from shared.domain.value_objects import DateRange, TimeWindow

from .domain.entities import BLOCKING_STATUSES, VenueType

if TYPE_CHECKING:  # pragma: no cover - type checking only
    from .models import Booking

logger = logging.getLogger(__name__)

BLOCKING_STATUS_VALUES = [status.value for status in BLOCKING_STATUSES]


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


@dataclass(frozen=True)
class AvailableSlot:
    date: date
    start_time: Optional[time]
    end_time: Optional[time]
    remaining: int

    def to_dict(self) -> dict:
        return {
            "date": self.date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M") if self.start_time else None,
            "end_time": self.end_time.strftime("%H:%M") if self.end_time else None,
            "remaining": self.remaining,
        }


class ResourceAvailabilityStore:
    """Claims, releases and reports availability of bookable resources."""

    # ----- discrete resources -----

    def _free_tables(self, venue: Venue, party_size: int):
        return Table.objects.filter(
            group__venue=venue,
            group__capacity__gte=party_size,
            is_booked=False,
        ).order_by("group__capacity", "table_number")

    def _claim_discrete(self, model, pk: int, booking: "Booking") -> bool:
        updated = model.objects.filter(pk=pk, is_booked=False).update(
            is_booked=True,
            current_booking=booking,
            version=F("version") + 1,
        )
        return updated == 1

    def claim_table(self, table: Table, booking: "Booking") -> Table:
        if not self._claim_discrete(Table, table.pk, booking):
            logger.info("Table %s already booked, claim by booking %s rejected", table.pk, booking.pk)
            raise ConflictError(
                f"Table {table.table_number} is already booked",
                details={"table_id": table.pk},
            )
        table.refresh_from_db(fields=["is_booked", "current_booking", "version"])
        logger.info("Booking %s claimed table %s", booking.pk, table.pk)
        return table

    def claim_any_table(self, venue: Venue, party_size: int, booking: "Booking") -> Table:
        """Claim the smallest free table that seats the party."""
        candidates = list(self._free_tables(venue, party_size).values_list("pk", flat=True))
        for table_pk in candidates:
            if self._claim_discrete(Table, table_pk, booking):
                logger.info("Booking %s claimed table %s", booking.pk, table_pk)
                return Table.objects.select_related("group").get(pk=table_pk)
        raise ConflictError(
            f"No table available for {party_size} guests",
            details={"venue_id": venue.pk, "party_size": party_size},
        )

    def claim_room(self, room: Room, booking: "Booking") -> Room:
        if not self._claim_discrete(Room, room.pk, booking):
            logger.info("Room %s already booked, claim by booking %s rejected", room.pk, booking.pk)
            raise ConflictError("Room is already booked", details={"room_id": room.pk})
        room.refresh_from_db(fields=["is_booked", "current_booking", "version"])
        logger.info("Booking %s claimed room %s", booking.pk, room.pk)
        return room

    # ----- range resources -----

    def _overlap_filter(self, window: Union[DateRange, TimeWindow, date]) -> Q:
        if isinstance(window, date):
            return Q(start_date__lte=window, end_date__gte=window)
        if isinstance(window, DateRange):
            # Inclusive: sharing a boundary day is a clash
            return Q(start_date__lte=window.end_date, end_date__gte=window.start_date)
        return Q(
            booking_date=window.day,
            start_time__lt=window.end_time,
            end_time__gt=window.start_time,
        )

    def used_units(self, venue: Venue, window: Union[DateRange, TimeWindow, date], exclude_booking_id=None) -> int:
        from .models import Booking  # Local import to prevent circular dependency

        overlapping = Booking.objects.filter(
            venue=venue,
            status__in=BLOCKING_STATUS_VALUES,
        ).filter(self._overlap_filter(window))
        if exclude_booking_id is not None:
            overlapping = overlapping.exclude(pk=exclude_booking_id)
        return overlapping.aggregate(used=Sum("quantity"))["used"] or 0

    def claim_range(
        self,
        venue: Venue,
        window: Union[DateRange, TimeWindow],
        quantity: int,
        booking: "Booking",
    ) -> None:
        locked_venue = _lock_queryset_if_possible(Venue.objects.filter(pk=venue.pk)).get()
        used = self.used_units(locked_venue, window, exclude_booking_id=booking.pk)
        if used + quantity > locked_venue.units:
            logger.info(
                "Venue %s full for %s: %s of %s units in use, %s requested",
                venue.pk, window, used, locked_venue.units, quantity,
            )
            raise ConflictError(
                f"{locked_venue.name} is not available for {window}",
                details={
                    "venue_id": venue.pk,
                    "requested": quantity,
                    "remaining": max(0, locked_venue.units - used),
                },
            )
        logger.info("Booking %s claimed %s unit(s) of venue %s for %s", booking.pk, quantity, venue.pk, window)

    # ----- release -----

    def release(self, booking: "Booking") -> bool:
        """
        Free the table or room held by booking.

        Only rows still pointing at this booking are touched, so releasing
        twice, or releasing a resource someone else holds now, is a no-op.
        Range resources need nothing here: they free up as soon as the
        booking leaves a blocking status.
        """
        released = 0
        for model in (Table, Room):
            released += model.objects.filter(current_booking_id=booking.pk, is_booked=True).update(
                is_booked=False,
                current_booking=None,
                version=F("version") + 1,
            )
        if released:
            logger.info("Released %s resource(s) held by booking %s", released, booking.pk)
        return bool(released)

    # ----- availability -----

    def _slot_windows(self, venue: Venue, day: date) -> List[TimeWindow]:
        opening = venue.opening_time or time(0, 0)
        closing = venue.closing_time or time(23, 59)
        step = timedelta(minutes=venue.slot_duration_minutes or 60)
        windows = []
        cursor = datetime.combine(day, opening)
        end_of_day = datetime.combine(day, closing)
        while cursor + step <= end_of_day:
            windows.append(TimeWindow(day, cursor.time(), (cursor + step).time()))
            cursor += step
        return windows

    def list_available_slots(self, venue: Venue, day: date, party_size: int = 1) -> List[AvailableSlot]:
        """Read-only availability for one day. Full and past slots are left out."""
        kind = VenueType(venue.kind)
        if kind in (VenueType.HALL, VenueType.CAFE) and venue.capacity and party_size > venue.capacity:
            return []

        if kind == VenueType.HOTEL:
            remaining = Room.objects.filter(venue=venue, max_guests__gte=party_size, is_booked=False).count()
            slots = [AvailableSlot(day, None, None, remaining)]
        elif kind == VenueType.HALL:
            used = self.used_units(venue, day)
            slots = [AvailableSlot(day, None, None, venue.units - used)]
        elif kind == VenueType.RESTAURANT:
            free_tables = self._free_tables(venue, party_size).count()
            slots = [
                AvailableSlot(day, window.start_time, window.end_time, free_tables)
                for window in self._slot_windows(venue, day)
            ]
        else:
            slots = [
                AvailableSlot(day, window.start_time, window.end_time, venue.units - self.used_units(venue, window))
                for window in self._slot_windows(venue, day)
            ]

        now = timezone.localtime()
        if day == now.date():
            slots = [slot for slot in slots if slot.start_time is None or slot.start_time > now.time()]
        return [slot for slot in slots if slot.remaining > 0]
