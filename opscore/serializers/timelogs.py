from rest_framework import serializers

from opscore.models import TimeLog
from opscore.serializers.shifts import clean_text
from opscore.services.attendance import MAX_BREAK_MINUTES


class ClockInSerializer(serializers.Serializer):
    location = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)

    def validate_location(self, v):
        return clean_text(v) or None


class ClockOutSerializer(serializers.Serializer):
    timeLogId = serializers.IntegerField(required=False, min_value=1)
    breakMinutes = serializers.IntegerField(required=False, default=0, min_value=0, max_value=MAX_BREAK_MINUTES)
    location = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)

    def validate_location(self, v):
        return clean_text(v) or None


class DisputeSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=2000)

    def validate_reason(self, v):
        v = clean_text(v)
        if not v:
            raise serializers.ValidationError('reason is required')
        return v


class TimeLogListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in TimeLog.STATUS_CHOICES], required=False)
    userId = serializers.IntegerField(required=False, min_value=1)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=100)
