"""
Platform administration: onboarding and suspending organisations.

Only ``super_admin`` sessions reach these views.  An organisation's kind
is fixed once created.
"""
from __future__ import annotations

import logging

from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from opscore.exceptions import NotFound
from opscore.models import Tenant
from opscore.permissions import Capability, capability_required
from opscore.serializers.platform import TenantCreateSerializer, TenantUpdateSerializer
from opscore.services.audit import log_action

logger = logging.getLogger(__name__)


def _serialize_tenant(t: Tenant) -> dict:
    return {
        'id': str(t.id),
        'name': t.name,
        'kind': t.kind,
        'status': t.status,
        'createdAt': t.created_at.isoformat(),
        'userCount': t.users.count(),
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, capability_required(Capability.PLATFORM_ADMINISTER)])
def tenants(request):
    if request.method == 'POST':
        s = TenantCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        tenant = Tenant.objects.create(name=s.validated_data['name'], kind=s.validated_data['kind'])
        logger.info('tenant %s (%s) created by %s', tenant.id, tenant.kind, request.user.user_id)
        log_action(ctx=request.user, action='tenant_create', object_type='tenant', object_id=tenant.id,
                   detail={'name': tenant.name, 'kind': tenant.kind})
        return Response({'ok': True, 'data': _serialize_tenant(tenant)}, status=201)

    qs = Tenant.objects.order_by('name')
    kind = request.query_params.get('kind')
    if kind:
        qs = qs.filter(kind=kind)
    return Response({'ok': True, 'data': [_serialize_tenant(t) for t in qs]})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, capability_required(Capability.PLATFORM_ADMINISTER)])
def tenant_detail(request, tenant_id):
    tenant = Tenant.objects.filter(pk=tenant_id).first()
    if tenant is None:
        raise NotFound()
    s = TenantUpdateSerializer(data=request.data, partial=True)
    s.is_valid(raise_exception=True)
    vd = s.validated_data

    changed = []
    if 'name' in vd and vd['name'] != tenant.name:
        if Tenant.objects.filter(name__iexact=vd['name']).exclude(pk=tenant.pk).exists():
            raise serializers.ValidationError({'name': ['an organisation with this name already exists']})
        tenant.name = vd['name']
        changed.append('name')
    if 'status' in vd and vd['status'] != tenant.status:
        tenant.status = vd['status']
        changed.append('status')
    if changed:
        tenant.save(update_fields=changed)
        log_action(ctx=request.user, action='tenant_update', object_type='tenant', object_id=tenant.id,
                   detail={'fields': changed})
    return Response({'ok': True, 'data': _serialize_tenant(tenant)})
