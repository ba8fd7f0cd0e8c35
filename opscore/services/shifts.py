"""
Work shift lifecycle: start, end, list, archival retry.

A user holds at most one active shift per tenant.  The pre-check gives a
clean 409 in the common case; the partial unique index decides when two
requests race.  Ending is a compare-and-set on ``status`` so only one
caller wins the transition and archival runs once per shift.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Tuple

from django.db import IntegrityError, transaction
from django.utils import timezone

from opscore.exceptions import Conflict, Forbidden, NoActiveShift, ShiftAlreadyActive
from opscore.models import WorkShift
from opscore.permissions import Capability, has_capability
from opscore.services.archive import run_archival
from opscore.services.tenancy import TenantGuard
from opscore.services.tokens import SessionContext

logger = logging.getLogger(__name__)


def _has_active(ctx: SessionContext) -> bool:
    return TenantGuard(ctx).own(WorkShift).filter(status=WorkShift.STATUS_ACTIVE).exists()


def start_shift(ctx: SessionContext, shift_type: str, notes: str = '',
                at: Optional[datetime] = None) -> WorkShift:
    if _has_active(ctx):
        raise ShiftAlreadyActive()
    try:
        with transaction.atomic():
            shift = TenantGuard(ctx).create(
                WorkShift,
                user_id=ctx.user_id,
                shift_type=shift_type,
                start_time=at or timezone.now(),
                status=WorkShift.STATUS_ACTIVE,
                notes=notes or '',
            )
    except IntegrityError as exc:
        raise ShiftAlreadyActive() from exc
    logger.info('shift %s started by user %s (%s)', shift.pk, ctx.user_id, shift_type)
    return shift


def active_shift(ctx: SessionContext) -> Optional[WorkShift]:
    return TenantGuard(ctx).own(WorkShift).filter(status=WorkShift.STATUS_ACTIVE).first()


def _can_manage(ctx: SessionContext, shift: WorkShift) -> bool:
    return shift.user_id == ctx.user_id or has_capability(ctx.role, Capability.SHIFT_ADMINISTER)


def end_shift(ctx: SessionContext, shift_id: Optional[int] = None, notes: Optional[str] = None,
              at: Optional[datetime] = None) -> WorkShift:
    """End a shift and archive what was touched during it.

    Without ``shift_id`` the caller's own active shift is ended.  The
    returned shift carries the archival outcome in ``archive_status``.
    """
    guard = TenantGuard(ctx)
    if shift_id is None:
        shift = active_shift(ctx)
        if shift is None:
            raise NoActiveShift()
    else:
        shift = guard.get(WorkShift, shift_id)
        if not _can_manage(ctx, shift):
            raise Forbidden()

    end_time = at or timezone.now()
    if end_time < shift.start_time:
        end_time = shift.start_time
    changes = {'status': WorkShift.STATUS_ENDED, 'end_time': end_time, 'updated_at': timezone.now()}
    if notes is not None:
        changes['notes'] = notes
    with transaction.atomic():
        won = WorkShift.objects.filter(pk=shift.pk, status=WorkShift.STATUS_ACTIVE).update(**changes)
    if not won:
        raise NoActiveShift()

    shift.refresh_from_db()
    logger.info('shift %s ended by user %s', shift.pk, ctx.user_id)
    run_archival(shift, archived_by_id=ctx.user_id)
    shift.refresh_from_db()
    return shift


def retry_archival(ctx: SessionContext, shift_id: int) -> WorkShift:
    shift = TenantGuard(ctx).get(WorkShift, shift_id)
    if not _can_manage(ctx, shift):
        raise Forbidden()
    if shift.status != WorkShift.STATUS_ENDED:
        raise Conflict('Shift has not ended yet.')
    run_archival(shift, archived_by_id=ctx.user_id)
    shift.refresh_from_db()
    return shift


def retry_failed_archivals(limit: int = 100) -> Tuple[int, int]:
    """Re-run archival for ended shifts still pending or failed.  Returns (ok, failed)."""
    ok = failed = 0
    qs = (
        WorkShift.objects.filter(status=WorkShift.STATUS_ENDED)
        .exclude(archive_status=WorkShift.ARCHIVE_COMPLETED)
        .order_by('end_time')[:limit]
    )
    for shift in qs:
        if run_archival(shift):
            ok += 1
        else:
            failed += 1
    return ok, failed


def list_shifts(ctx: SessionContext, *, status: Optional[str] = None, user_id: Optional[int] = None,
                page: int = 1, page_size: int = 20) -> Tuple[list, int]:
    guard = TenantGuard(ctx)
    if has_capability(ctx.role, Capability.SHIFT_VIEW_ALL):
        qs = guard.scoped(WorkShift)
        if user_id:
            qs = qs.filter(user_id=user_id)
    else:
        qs = guard.own(WorkShift)
    if status:
        qs = qs.filter(status=status)

    total = qs.count()
    page = max(1, int(page or 1))
    page_size = min(100, max(1, int(page_size or 20)))
    start = (page - 1) * page_size
    items = list(qs.order_by('-start_time', '-id')[start:start + page_size])
    return items, total
