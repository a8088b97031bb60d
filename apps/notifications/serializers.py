"""Serializers for notifications."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Notification as shown to its recipient."""

    class Meta:
        model = Notification
        fields = ['id', 'title', 'description', 'image', 'type', 'is_read', 'created_at']
        read_only_fields = fields
