import bleach
from rest_framework import serializers

from opscore.models import Tenant


class TenantCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    kind = serializers.ChoiceField(choices=[c[0] for c in Tenant.KIND_CHOICES])

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), tags=set(), strip=True)
        if len(v) < 2:
            raise serializers.ValidationError('name must be at least 2 characters')
        if Tenant.objects.filter(name__iexact=v).exists():
            raise serializers.ValidationError('an organisation with this name already exists')
        return v


class TenantUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(required=False, max_length=255)
    status = serializers.ChoiceField(choices=[c[0] for c in Tenant.STATUS_CHOICES], required=False)
    kind = serializers.CharField(required=False)

    def validate_name(self, v):
        v = bleach.clean((v or '').strip(), tags=set(), strip=True)
        if len(v) < 2:
            raise serializers.ValidationError('name must be at least 2 characters')
        return v

    def validate_kind(self, v):
        raise serializers.ValidationError('organisation kind cannot be changed')
