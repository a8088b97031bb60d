"""Model signal handlers for bookings."""

from django.db.models.signals import pre_delete
from django.dispatch import receiver

from .models import Booking
from .services import ResourceAvailabilityStore


@receiver(pre_delete, sender=Booking)
def release_resource_on_delete(sender, instance, **kwargs):
    """Free the table or room before the booking row goes, also when a deleted guest account cascades to it."""
    ResourceAvailabilityStore().release(instance)
