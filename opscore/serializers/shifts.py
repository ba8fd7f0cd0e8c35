import bleach
from rest_framework import serializers

from opscore.models import WorkShift


def clean_text(v):
    return bleach.clean((v or '').strip(), tags=set(), strip=True)


class ShiftStartSerializer(serializers.Serializer):
    shiftType = serializers.ChoiceField(choices=[c[0] for c in WorkShift.TYPE_CHOICES])
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate_notes(self, v):
        return clean_text(v)


class ShiftEndSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000)

    def validate_notes(self, v):
        return clean_text(v)


class ShiftListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in WorkShift.STATUS_CHOICES], required=False)
    userId = serializers.IntegerField(required=False, min_value=1)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=100)
