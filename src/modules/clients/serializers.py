"""Client DRF serializers for API output."""

from __future__ import annotations

from rest_framework import serializers

from modules.clients.models import Client


class ClientSerializer(serializers.ModelSerializer):
    class Meta:
        model = Client
        fields = [
            "id",
            "name",
            "phone",
            "whatsapp_number",
            "address",
            "gender",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
