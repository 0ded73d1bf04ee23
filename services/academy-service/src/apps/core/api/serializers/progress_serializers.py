# services/academy-service/src/apps/core/api/serializers/progress_serializers.py
"""
Progress Serializers
"""

from rest_framework import serializers

from ...models import ChapterProgress


class ProgressUpdateSerializer(serializers.Serializer):
    """Serializer for a playback progress ping."""

    chapter_id = serializers.UUIDField()
    completed = serializers.BooleanField(required=False, allow_null=True, default=None)
    progress_percent = serializers.IntegerField(required=False, allow_null=True)
    last_position_seconds = serializers.IntegerField(required=False, allow_null=True, min_value=0)


class ChapterProgressSerializer(serializers.ModelSerializer):
    """Serializer for a chapter progress row."""

    class Meta:
        model = ChapterProgress
        fields = [
            'id',
            'chapter_id',
            'course_id',
            'completed',
            'progress_percent',
            'last_position_seconds',
            'completed_at',
            'updated_at',
        ]
        read_only_fields = fields
