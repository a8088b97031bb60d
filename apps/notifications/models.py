"""Notification model.

In-app notifications created when something happens to a booking. The
sender is the venue admin the booking belongs to; ``user`` is the recipient
(one row per recipient for broadcasts). Each notification can be marked as
read.
"""

from __future__ import annotations

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore


class Notification(models.Model):
    """A message sent to a user about some event."""

    class Type(models.TextChoices):
        SINGLE = 'single', 'Single'
        BROADCAST = 'broadcast', 'Broadcast'

    admin = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sent_notifications'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='notifications',
    )
    title = models.CharField(max_length=150)
    description = models.CharField(max_length=500, blank=True)
    image = models.URLField(max_length=500, blank=True)
    type = models.CharField(max_length=16, choices=Type.choices, default=Type.SINGLE)
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [models.Index(fields=['user', 'is_read'], name='notification_user_read_idx')]

    def __str__(self) -> str:
        return f"Notification to {self.user_id}: {self.title}"
