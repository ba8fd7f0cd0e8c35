from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from opscore.models import TimeLog
from opscore.permissions import Capability, capability_required
from opscore.serializers.timelogs import (
    ClockInSerializer,
    ClockOutSerializer,
    DisputeSerializer,
    TimeLogListQuerySerializer,
)
from opscore.services import attendance


def _hours(v):
    return float(v) if v is not None else None


def _serialize_log(t: TimeLog) -> dict:
    return {
        'id': t.id,
        'tenantId': str(t.tenant_id),
        'userId': t.user_id,
        'clockInTime': t.clock_in_time.isoformat(),
        'clockInLocation': t.clock_in_location,
        'clockOutTime': t.clock_out_time.isoformat() if t.clock_out_time else None,
        'clockOutLocation': t.clock_out_location,
        'breakMinutes': t.break_minutes,
        'totalHours': _hours(t.total_hours),
        'overtimeHours': _hours(t.overtime_hours),
        'status': t.status,
        'approvedBy': t.approved_by_id,
        'approvedAt': t.approved_at.isoformat() if t.approved_at else None,
        'disputeReason': t.dispute_reason or None,
    }


@api_view(['POST'])
@permission_classes([IsAuthenticated, capability_required(Capability.ATTENDANCE_OWN)])
def clock_in(request):
    s = ClockInSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    log = attendance.clock_in(request.user, s.validated_data.get('location'))
    return Response({'ok': True, 'data': _serialize_log(log)}, status=201)


@api_view(['POST'])
@permission_classes([IsAuthenticated, capability_required(Capability.ATTENDANCE_OWN)])
def clock_out(request):
    s = ClockOutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    log = attendance.clock_out(
        request.user,
        time_log_id=vd.get('timeLogId'),
        break_minutes=vd.get('breakMinutes', 0),
        location=vd.get('location'),
    )
    return Response({'ok': True, 'data': _serialize_log(log)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, capability_required(Capability.ATTENDANCE_OWN)])
def list_time_logs(request):
    q = TimeLogListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    items, total = attendance.list_time_logs(
        request.user,
        status=vd.get('status'),
        user_id=vd.get('userId'),
        page=vd.get('page', 1),
        page_size=vd.get('pageSize', 20),
    )
    return Response({
        'ok': True,
        'data': [_serialize_log(t) for t in items],
        'pagination': {'total': total, 'page': vd.get('page', 1), 'pageSize': vd.get('pageSize', 20)},
    })


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, capability_required(Capability.ATTENDANCE_APPROVE)])
def approve_time_log(request, log_id: int):
    log = attendance.approve(request.user, log_id)
    return Response({'ok': True, 'data': _serialize_log(log)})


@api_view(['PATCH'])
@permission_classes([IsAuthenticated, capability_required(Capability.ATTENDANCE_OWN)])
def dispute_time_log(request, log_id: int):
    s = DisputeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    log = attendance.dispute(request.user, log_id, s.validated_data['reason'])
    return Response({'ok': True, 'data': _serialize_log(log)})


@api_view(['GET'])
@permission_classes([IsAuthenticated, capability_required(Capability.ATTENDANCE_OWN)])
def weekly_summary(request):
    return Response({'ok': True, 'data': attendance.weekly_summary(request.user)})
