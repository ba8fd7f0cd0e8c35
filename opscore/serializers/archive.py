from rest_framework import serializers

from opscore.services.snapshots import RECORD_TYPES


class ArchiveSearchQuerySerializer(serializers.Serializer):
    # length is checked by the search service against ARCHIVE_SEARCH_MIN_LENGTH
    q = serializers.CharField(allow_blank=True, max_length=200)
    recordType = serializers.ChoiceField(choices=RECORD_TYPES, required=False)
    patientId = serializers.IntegerField(required=False, min_value=1)
    shiftId = serializers.IntegerField(required=False, min_value=1)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=100)
