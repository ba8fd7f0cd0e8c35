"""
Time & attendance: clock in/out, hours math, approval and weekly totals.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone
from rest_framework import serializers

from opscore.exceptions import AlreadyClockedIn, Forbidden, InvalidTransition, NotClockedIn
from opscore.models import TimeLog
from opscore.permissions import Capability, has_capability
from opscore.services.tenancy import TenantGuard
from opscore.services.tokens import SessionContext

logger = logging.getLogger(__name__)

TWO_PLACES = Decimal('0.01')
MAX_BREAK_MINUTES = 1440


def _q(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def overtime_threshold() -> Decimal:
    return Decimal(getattr(settings, 'OVERTIME_THRESHOLD_HOURS', 8))


def compute_hours(clock_in: datetime, clock_out: datetime, break_minutes: int = 0) -> Tuple[Decimal, Decimal]:
    """Return ``(total_hours, overtime_hours)`` rounded half-up to 2 places.

    >>> compute_hours(datetime(2024, 1, 1, 8), datetime(2024, 1, 1, 17, 0), 30)
    (Decimal('8.50'), Decimal('0.50'))
    """
    elapsed = Decimal(int((clock_out - clock_in).total_seconds())) / Decimal(3600)
    worked = max(Decimal(0), elapsed - Decimal(break_minutes) / Decimal(60))
    total = _q(worked)
    overtime = _q(max(Decimal(0), total - overtime_threshold()))
    return total, overtime


def clock_in(ctx: SessionContext, location: Optional[str] = None, at: Optional[datetime] = None) -> TimeLog:
    guard = TenantGuard(ctx)
    if guard.own(TimeLog).filter(status=TimeLog.STATUS_CLOCKED_IN).exists():
        raise AlreadyClockedIn()
    try:
        with transaction.atomic():
            log = guard.create(
                TimeLog,
                user_id=ctx.user_id,
                clock_in_time=at or timezone.now(),
                clock_in_location=location or None,
                status=TimeLog.STATUS_CLOCKED_IN,
            )
    except IntegrityError as exc:
        raise AlreadyClockedIn() from exc
    logger.info('user %s clocked in (log %s)', ctx.user_id, log.pk)
    return log


def clock_out(ctx: SessionContext, time_log_id: Optional[int] = None, break_minutes: int = 0,
              location: Optional[str] = None, at: Optional[datetime] = None) -> TimeLog:
    if not 0 <= int(break_minutes) <= MAX_BREAK_MINUTES:
        raise serializers.ValidationError({'breakMinutes': [f'must be between 0 and {MAX_BREAK_MINUTES}']})
    guard = TenantGuard(ctx)
    with transaction.atomic():
        if time_log_id is None:
            log = guard.own(TimeLog).select_for_update().filter(status=TimeLog.STATUS_CLOCKED_IN).first()
            if log is None:
                raise NotClockedIn()
        else:
            log = guard.get(TimeLog, time_log_id, for_update=True)
            if log.user_id != ctx.user_id:
                raise Forbidden()
            if log.status != TimeLog.STATUS_CLOCKED_IN:
                raise NotClockedIn()

        out = at or timezone.now()
        if out < log.clock_in_time:
            out = log.clock_in_time
        total, overtime = compute_hours(log.clock_in_time, out, int(break_minutes))
        log.clock_out_time = out
        log.clock_out_location = location or None
        log.break_minutes = int(break_minutes)
        log.total_hours = total
        log.overtime_hours = overtime
        log.status = TimeLog.STATUS_CLOCKED_OUT
        log.save(update_fields=[
            'clock_out_time', 'clock_out_location', 'break_minutes',
            'total_hours', 'overtime_hours', 'status',
        ])
    logger.info('user %s clocked out (log %s, %s h, %s overtime)', ctx.user_id, log.pk, total, overtime)
    return log


def approve(ctx: SessionContext, time_log_id: int) -> TimeLog:
    if not has_capability(ctx.role, Capability.ATTENDANCE_APPROVE):
        raise Forbidden()
    with transaction.atomic():
        log = TenantGuard(ctx).get(TimeLog, time_log_id, for_update=True)
        if log.status != TimeLog.STATUS_CLOCKED_OUT:
            raise InvalidTransition(f'Cannot approve a time log that is {log.status}.')
        log.status = TimeLog.STATUS_APPROVED
        log.approved_by_id = ctx.user_id
        log.approved_at = timezone.now()
        log.save(update_fields=['status', 'approved_by', 'approved_at'])
    logger.info('time log %s approved by %s', log.pk, ctx.user_id)
    return log


def dispute(ctx: SessionContext, time_log_id: int, reason: str) -> TimeLog:
    with transaction.atomic():
        log = TenantGuard(ctx).get(TimeLog, time_log_id, for_update=True)
        if log.user_id != ctx.user_id and not has_capability(ctx.role, Capability.ATTENDANCE_APPROVE):
            raise Forbidden()
        if log.status != TimeLog.STATUS_CLOCKED_OUT:
            raise InvalidTransition(f'Cannot dispute a time log that is {log.status}.')
        log.status = TimeLog.STATUS_DISPUTED
        log.dispute_reason = reason
        log.save(update_fields=['status', 'dispute_reason'])
    logger.info('time log %s disputed by %s', log.pk, ctx.user_id)
    return log


def week_bounds(at: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Monday 00:00 to the next Monday 00:00, in the project time zone."""
    local = timezone.localtime(at or timezone.now())
    start = local.replace(hour=0, minute=0, second=0, microsecond=0) - timedelta(days=local.weekday())
    return start, start + timedelta(days=7)


def weekly_summary(ctx: SessionContext, at: Optional[datetime] = None) -> dict:
    start, end = week_bounds(at)
    logs = TenantGuard(ctx).own(TimeLog).filter(clock_in_time__gte=start, clock_in_time__lt=end)
    agg = logs.aggregate(total=Sum('total_hours'), overtime=Sum('overtime_hours'))
    return {
        'weekStart': start.isoformat(),
        'weekEnd': end.isoformat(),
        'totalHours': float(_q(agg['total'] or Decimal(0))),
        'overtimeHours': float(_q(agg['overtime'] or Decimal(0))),
        'entries': logs.count(),
        'open': logs.filter(status=TimeLog.STATUS_CLOCKED_IN).count(),
    }


def list_time_logs(ctx: SessionContext, *, status: Optional[str] = None, user_id: Optional[int] = None,
                   page: int = 1, page_size: int = 20) -> Tuple[list, int]:
    guard = TenantGuard(ctx)
    if has_capability(ctx.role, Capability.ATTENDANCE_VIEW_ALL):
        qs = guard.scoped(TimeLog)
        if user_id:
            qs = qs.filter(user_id=user_id)
    else:
        qs = guard.own(TimeLog)
    if status:
        qs = qs.filter(status=status)

    total = qs.count()
    page = max(1, int(page or 1))
    page_size = min(100, max(1, int(page_size or 20)))
    start = (page - 1) * page_size
    items = list(qs.order_by('-clock_in_time', '-id')[start:start + page_size])
    return items, total
