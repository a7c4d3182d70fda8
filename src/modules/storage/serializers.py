"""Storage DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.storage.models import StorageDrawer


class CreateDrawerSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=16)
    rows = serializers.IntegerField(min_value=1, required=False, default=1)
    columns = serializers.IntegerField(min_value=1, required=False, default=1)
    capacity = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    position = serializers.IntegerField(min_value=0, required=False, default=0)


class StorageDrawerSerializer(serializers.ModelSerializer):
    class Meta:
        model = StorageDrawer
        fields = ["id", "name", "capacity", "rows", "columns", "position", "created_at"]
        read_only_fields = fields


class DrawerOccupancySerializer(serializers.Serializer):
    name = serializers.CharField()
    capacity = serializers.IntegerField()
    occupied = serializers.IntegerField()
    free = serializers.IntegerField()
    fill_ratio = serializers.FloatField()
    occupied_slots = serializers.ListField(child=serializers.CharField())
