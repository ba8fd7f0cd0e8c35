"""
Shift archival pipeline and archive read path.

``archive_shift`` snapshots every record the shift's user modified inside
the frozen shift window.  It is keyed on ``(work_shift, record_type,
record_id)`` so re-running it for the same shift adds nothing.  Reads
through ``search_archive`` / ``read_archived_record`` bump the access
counters with a single ``UPDATE ... SET access_count = access_count + 1``.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Optional, Tuple

from django.conf import settings
from django.db import transaction
from django.db.models import F, QuerySet
from django.utils import timezone
from rest_framework import serializers

from opscore.models import ArchivedRecord, WorkShift
from opscore.permissions import Capability, has_capability
from opscore.exceptions import Forbidden
from opscore.services.audit import log_action
from opscore.services.notifications import notify_tenant
from opscore.services.snapshots import ARCHIVE_SOURCES, dump_snapshot, searchable_text
from opscore.services.tenancy import TenantGuard
from opscore.services.tokens import SessionContext

logger = logging.getLogger(__name__)


def retention_days() -> int:
    return max(1, int(getattr(settings, 'ARCHIVE_RETENTION_DAYS', 2555)))


def _window_queryset(source, shift: WorkShift) -> QuerySet:
    qs = source.model._default_manager.filter(
        tenant_id=shift.tenant_id,
        last_modified_by_id=shift.user_id,
        updated_at__gte=shift.start_time,
        updated_at__lte=shift.end_time,
    )
    if source.select_related:
        qs = qs.select_related(*source.select_related)
    return qs.order_by('pk')


@transaction.atomic
def archive_shift(shift: WorkShift, archived_by_id: Optional[int] = None) -> int:
    """Archive the records touched during ``shift``; return how many rows were added.

    The shift must already be ended: the scan uses its stored ``end_time``
    so edits made after the shift closed are never captured.
    """
    if shift.status != WorkShift.STATUS_ENDED or shift.end_time is None:
        raise ValueError(f'shift {shift.pk} is not ended')

    existing = set(
        ArchivedRecord.objects.filter(work_shift=shift).values_list('record_type', 'record_id')
    )
    days = retention_days()
    pending = []
    for source in ARCHIVE_SOURCES:
        for obj in _window_queryset(source, shift):
            key = (source.record_type, str(obj.pk))
            if key in existing:
                continue
            existing.add(key)
            patient = source.patient_of(obj)
            pending.append(ArchivedRecord(
                tenant_id=shift.tenant_id,
                work_shift=shift,
                patient=patient,
                record_type=source.record_type,
                record_id=str(obj.pk),
                patient_name=patient.full_name if patient else '',
                patient_mrn=patient.mrn if patient else '',
                tags=[source.record_type, shift.shift_type],
                original_data=dump_snapshot(source, obj),
                searchable_content=searchable_text(source, obj),
                archived_by_id=archived_by_id or shift.user_id,
                retention_period=days,
            ))

    ArchivedRecord.objects.bulk_create(pending, ignore_conflicts=True)

    counts = Counter(
        ArchivedRecord.objects.filter(work_shift=shift).values_list('record_type', flat=True)
    )
    shift.summary = {'archived': dict(counts), 'total': sum(counts.values())}
    shift.archive_status = WorkShift.ARCHIVE_COMPLETED
    shift.archive_error = ''
    shift.archived_at = timezone.now()
    shift.save(update_fields=['summary', 'archive_status', 'archive_error', 'archived_at', 'updated_at'])

    logger.info('archived shift %s: %d new records (%d total)', shift.pk, len(pending), shift.summary['total'])
    transaction.on_commit(lambda: notify_tenant(shift.tenant_id, {
        'type': 'shift.archived',
        'shiftId': shift.pk,
        'userId': shift.user_id,
        'total': shift.summary['total'],
    }))
    return len(pending)


def run_archival(shift: WorkShift, archived_by_id: Optional[int] = None) -> bool:
    """Archive ``shift`` and record the outcome on it.

    Failures do not undo the shift's end; they leave
    ``archive_status='failed'`` for a later retry.
    """
    try:
        archive_shift(shift, archived_by_id=archived_by_id)
        return True
    except Exception as exc:
        logger.exception('archival failed for shift %s', shift.pk)
        WorkShift.objects.filter(pk=shift.pk).update(
            archive_status=WorkShift.ARCHIVE_FAILED,
            archive_error=f'{type(exc).__name__}: {exc}'[:2000],
            updated_at=timezone.now(),
        )
        shift.archive_status = WorkShift.ARCHIVE_FAILED
        return False


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------

def _touch(ctx: SessionContext, ids: list) -> None:
    if not ids:
        return
    ArchivedRecord.objects.filter(pk__in=ids).update(
        access_count=F('access_count') + 1,
        last_accessed_by_id=ctx.user_id,
        last_accessed_at=timezone.now(),
    )


def search_archive(ctx: SessionContext, q: str, *, record_type: Optional[str] = None,
                   patient_id: Optional[int] = None, shift_id: Optional[int] = None,
                   page: int = 1, page_size: int = 20) -> Tuple[list, int]:
    if not has_capability(ctx.role, Capability.ARCHIVE_SEARCH):
        raise Forbidden()
    min_length = getattr(settings, 'ARCHIVE_SEARCH_MIN_LENGTH', 3)
    term = (q or '').strip()
    if len(term) < min_length:
        raise serializers.ValidationError({'q': [f'search term must be at least {min_length} characters']})

    qs = TenantGuard(ctx).scoped(ArchivedRecord).filter(
        redacted_at__isnull=True,
        searchable_content__icontains=term.lower(),
    )
    if record_type:
        qs = qs.filter(record_type=record_type)
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    if shift_id:
        qs = qs.filter(work_shift_id=shift_id)

    total = qs.count()
    page = max(1, int(page or 1))
    page_size = min(100, max(1, int(page_size or 20)))
    start = (page - 1) * page_size
    ids = list(qs.order_by('-archived_at', '-id').values_list('pk', flat=True)[start:start + page_size])

    with transaction.atomic():
        _touch(ctx, ids)
    records = list(ArchivedRecord.objects.filter(pk__in=ids).order_by('-archived_at', '-id'))

    if ids:
        log_action(ctx=ctx, action='archive_access', object_type='archived_record',
                   detail={'query': term, 'ids': ids})
    return records, total


def read_archived_record(ctx: SessionContext, pk: int) -> ArchivedRecord:
    if not has_capability(ctx.role, Capability.ARCHIVE_SEARCH):
        raise Forbidden()
    guard = TenantGuard(ctx)
    record = guard.get(ArchivedRecord, pk)
    # a snapshot that fails validation is not counted as read
    record.snapshot()
    with transaction.atomic():
        _touch(ctx, [record.pk])
    record.refresh_from_db()
    log_action(ctx=ctx, action='archive_access', object_type='archived_record', object_id=record.pk)
    return record


# ---------------------------------------------------------------------------
# Retention
# ---------------------------------------------------------------------------

def redact_expired_archives(now: Optional[datetime] = None, batch_size: int = 500) -> int:
    """Redact archived records whose retention period has lapsed.

    The row itself is kept (who archived it, when, how often it was read)
    but the clinical snapshot and patient identifiers are cleared.
    """
    now = now or timezone.now()
    redacted = 0
    candidates = (
        ArchivedRecord.objects.filter(redacted_at__isnull=True)
        .only('pk', 'archived_at', 'retention_period')
        .order_by('pk')
    )
    expired = [
        rec.pk for rec in candidates.iterator(chunk_size=batch_size)
        if rec.archived_at + timedelta(days=rec.retention_period) <= now
    ]
    for start in range(0, len(expired), batch_size):
        chunk = expired[start:start + batch_size]
        with transaction.atomic():
            redacted += ArchivedRecord.objects.filter(pk__in=chunk, redacted_at__isnull=True).update(
                original_data={},
                searchable_content='',
                patient_name='',
                patient_mrn='',
                patient=None,
                redacted_at=now,
            )
    if redacted:
        logger.info('redacted %d archived records past retention', redacted)
    return redacted
