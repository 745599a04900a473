from rest_framework import serializers
from .models import Station


class StationSerializer(serializers.ModelSerializer):
    """Station as seen by its staff."""

    owner_name = serializers.CharField(source='owner.get_display_name', read_only=True)

    class Meta:
        model = Station
        fields = [
            'id',
            'name',
            'code',
            'city',
            'owner',
            'owner_name',
            'is_active',
            'created_at',
        ]
        read_only_fields = fields
