"""
Work shift endpoints.

Identity comes only from the session token; bodies carry the shift type
and notes, never a user or tenant.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from opscore.models import WorkShift
from opscore.permissions import Capability, capability_required
from opscore.serializers.shifts import ShiftEndSerializer, ShiftListQuerySerializer, ShiftStartSerializer
from opscore.services import shifts as shift_service


def _serialize_shift(s: WorkShift) -> dict:
    return {
        'id': s.id,
        'tenantId': str(s.tenant_id),
        'userId': s.user_id,
        'shiftType': s.shift_type,
        'status': s.status,
        'startTime': s.start_time.isoformat(),
        'endTime': s.end_time.isoformat() if s.end_time else None,
        'notes': s.notes,
        'summary': s.summary or {},
        'archiveStatus': s.archive_status,
        'archivedAt': s.archived_at.isoformat() if s.archived_at else None,
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, capability_required(Capability.SHIFT_OWN)])
def shifts(request):
    if request.method == 'POST':
        s = ShiftStartSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        shift = shift_service.start_shift(
            request.user, s.validated_data['shiftType'], s.validated_data.get('notes', ''),
        )
        return Response({'ok': True, 'data': _serialize_shift(shift)}, status=201)

    q = ShiftListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    items, total = shift_service.list_shifts(
        request.user,
        status=vd.get('status'),
        user_id=vd.get('userId'),
        page=vd.get('page', 1),
        page_size=vd.get('pageSize', 20),
    )
    return Response({
        'ok': True,
        'data': [_serialize_shift(s) for s in items],
        'pagination': {'total': total, 'page': vd.get('page', 1), 'pageSize': vd.get('pageSize', 20)},
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, capability_required(Capability.SHIFT_OWN)])
def active_shift(request):
    shift = shift_service.active_shift(request.user)
    return Response({'ok': True, 'data': _serialize_shift(shift) if shift else None})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, capability_required(Capability.SHIFT_OWN)])
def end_shift(request, shift_id: int):
    s = ShiftEndSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    shift = shift_service.end_shift(request.user, shift_id, notes=s.validated_data.get('notes'))
    return Response({'ok': True, 'data': _serialize_shift(shift)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, capability_required(Capability.SHIFT_OWN)])
def retry_archive(request, shift_id: int):
    shift = shift_service.retry_archival(request.user, shift_id)
    return Response({'ok': True, 'data': _serialize_shift(shift)})
