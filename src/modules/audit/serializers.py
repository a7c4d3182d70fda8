"""Audit DRF serializers for API output."""

from __future__ import annotations

from rest_framework import serializers

from modules.audit.models import ActivityLogEntry


class ActivityLogEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = ActivityLogEntry
        fields = [
            "id",
            "timestamp",
            "user",
            "action",
            "entity_type",
            "entity_id",
            "details",
        ]
        read_only_fields = fields
