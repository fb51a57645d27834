"""
Serializers for the flock-level timeline.
"""

from rest_framework import serializers

from .models import FlockEvent


class FlockEventSerializer(serializers.ModelSerializer):
    """Read-only serializer for flock timeline entries"""
    type_display = serializers.CharField(source='get_type_display', read_only=True)

    class Meta:
        model = FlockEvent
        fields = [
            'id', 'flock_profile_id', 'source_event', 'date', 'type', 'type_display',
            'description', 'affected_birds', 'notes', 'created_at', 'updated_at'
        ]
        read_only_fields = fields
