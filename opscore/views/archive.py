"""
Archived record search and retrieval.  Every read is counted and audited.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from opscore.models import ArchivedRecord
from opscore.permissions import Capability, capability_required
from opscore.serializers.archive import ArchiveSearchQuerySerializer
from opscore.services import archive as archive_service


def _serialize_record(r: ArchivedRecord, with_snapshot: bool = False) -> dict:
    data = {
        'id': r.id,
        'tenantId': str(r.tenant_id),
        'workShiftId': r.work_shift_id,
        'recordType': r.record_type,
        'recordId': r.record_id,
        'patientId': r.patient_id,
        'patientName': r.patient_name,
        'patientMrn': r.patient_mrn,
        'tags': r.tags or [],
        'archivedBy': r.archived_by_id,
        'archivedAt': r.archived_at.isoformat(),
        'lastAccessedBy': r.last_accessed_by_id,
        'lastAccessedAt': r.last_accessed_at.isoformat() if r.last_accessed_at else None,
        'accessCount': r.access_count,
        'retentionPeriod': r.retention_period,
        'redacted': r.redacted_at is not None,
    }
    if with_snapshot:
        data['originalData'] = r.snapshot()
    else:
        data['originalData'] = r.original_data
    return data


@api_view(['GET'])
@permission_classes([IsAuthenticated, capability_required(Capability.ARCHIVE_SEARCH)])
def search_archived_records(request):
    q = ArchiveSearchQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    items, total = archive_service.search_archive(
        request.user,
        vd['q'],
        record_type=vd.get('recordType'),
        patient_id=vd.get('patientId'),
        shift_id=vd.get('shiftId'),
        page=vd.get('page', 1),
        page_size=vd.get('pageSize', 20),
    )
    return Response({
        'ok': True,
        'data': [_serialize_record(r) for r in items],
        'pagination': {'total': total, 'page': vd.get('page', 1), 'pageSize': vd.get('pageSize', 20)},
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated, capability_required(Capability.ARCHIVE_SEARCH)])
def archived_record_detail(request, record_id: int):
    record = archive_service.read_archived_record(request.user, record_id)
    return Response({'ok': True, 'data': _serialize_record(record, with_snapshot=True)})
