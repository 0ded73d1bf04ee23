# services/academy-service/src/apps/core/api/serializers/exam_serializers.py
"""
Exam Serializers
"""

from rest_framework import serializers

from ...models import ExamAttempt


class ExamSubmitSerializer(serializers.Serializer):
    """
    Serializer for exam submissions.

    The answers map is passed through untouched; its shape is validated
    by the attempt service so malformed maps are rejected, not coerced.
    """

    answers = serializers.JSONField()


class ExamAttemptListSerializer(serializers.ModelSerializer):
    """Serializer for attempt history."""

    class Meta:
        model = ExamAttempt
        fields = [
            'id',
            'score',
            'total_questions',
            'percentage',
            'passed',
            'passing_percentage',
            'completed_at',
            'created_at',
        ]
        read_only_fields = fields


class ExamAttemptResultSerializer(serializers.ModelSerializer):
    """Serializer for a graded attempt with its per-question breakdown."""

    attempt_id = serializers.UUIDField(source='id', read_only=True)
    exam_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = ExamAttempt
        fields = [
            'attempt_id',
            'exam_id',
            'score',
            'total_questions',
            'percentage',
            'passed',
            'passing_percentage',
            'answers',
            'question_results',
            'completed_at',
        ]
        read_only_fields = fields
