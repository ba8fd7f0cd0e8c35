from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction
from django.urls import reverse
from django.utils import timezone

from opscore.exceptions import AlreadyClockedIn, Forbidden, InvalidTransition, NotClockedIn
from opscore.models import TimeLog
from opscore.services import attendance
from opscore.services.tokens import SessionContext

pytestmark = pytest.mark.django_db


def test_compute_hours_with_break_and_overtime():
    start = datetime(2024, 3, 4, 8, 0)
    total, overtime = attendance.compute_hours(start, start + timedelta(hours=9), 30)
    assert total == Decimal('8.50')
    assert overtime == Decimal('0.50')


def test_compute_hours_never_negative():
    start = datetime(2024, 3, 4, 8, 0)
    assert attendance.compute_hours(start, start + timedelta(minutes=20), 60) == (Decimal('0.00'), Decimal('0.00'))


def test_compute_hours_rounds_half_up():
    start = datetime(2024, 3, 4, 8, 0)
    # 18 seconds is exactly 0.005 h
    total, _ = attendance.compute_hours(start, start + timedelta(hours=1, seconds=18), 0)
    assert total == Decimal('1.01')


def test_clock_in_then_out_over_api(auth_client, nurse):
    client = auth_client(nurse)
    r = client.post(reverse('clock_in'), {'location': 'Ward <script>x</script>3'}, format='json')
    assert r.status_code == 201
    assert r.data['data']['status'] == 'clocked_in'
    assert '<script>' not in r.data['data']['clockInLocation']

    r = client.post(reverse('clock_in'), {}, format='json')
    assert r.status_code == 409
    assert r.data['error']['code'] == 'already_clocked_in'

    log = TimeLog.objects.get(user=nurse)
    log.clock_in_time = timezone.now() - timedelta(hours=9)
    log.save(update_fields=['clock_in_time'])

    r = client.post(reverse('clock_out'), {'breakMinutes': 30}, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == 'clocked_out'
    assert r.data['data']['totalHours'] == pytest.approx(8.5, abs=0.01)
    assert r.data['data']['overtimeHours'] == pytest.approx(0.5, abs=0.01)


def test_clock_out_exact_hours(nurse):
    ctx = SessionContext.for_user(nurse)
    start = timezone.now() - timedelta(days=1)
    attendance.clock_in(ctx, at=start)
    log = attendance.clock_out(ctx, break_minutes=30, at=start + timedelta(hours=9))
    assert log.total_hours == Decimal('8.50')
    assert log.overtime_hours == Decimal('0.50')


def test_clock_out_without_clock_in(auth_client, nurse):
    r = auth_client(nurse).post(reverse('clock_out'), {}, format='json')
    assert r.status_code == 409
    assert r.data['error']['code'] == 'not_clocked_in'


def test_break_minutes_validated(auth_client, nurse):
    ctx = SessionContext.for_user(nurse)
    attendance.clock_in(ctx)
    r = auth_client(nurse).post(reverse('clock_out'), {'breakMinutes': 1441}, format='json')
    assert r.status_code == 400


def test_constraint_backstops_double_clock_in(nurse, tenant_a):
    ctx = SessionContext.for_user(nurse)
    attendance.clock_in(ctx)
    with pytest.raises(AlreadyClockedIn):
        attendance.clock_in(ctx)
    with pytest.raises(IntegrityError), transaction.atomic():
        TimeLog.objects.create(tenant=tenant_a, user=nurse, clock_in_time=timezone.now())
    assert TimeLog.objects.filter(user=nurse, status='clocked_in').count() == 1


def test_cannot_clock_out_someone_elses_log(nurse, make_user, tenant_a):
    other = make_user(tenant_a, 'nurse')
    log = attendance.clock_in(SessionContext.for_user(other))
    with pytest.raises(Forbidden):
        attendance.clock_out(SessionContext.for_user(nurse), time_log_id=log.pk)
    with pytest.raises(NotClockedIn):
        attendance.clock_out(SessionContext.for_user(nurse))


def _clocked_out(user, hours=8):
    ctx = SessionContext.for_user(user)
    start = timezone.now() - timedelta(hours=hours)
    attendance.clock_in(ctx, at=start)
    return attendance.clock_out(ctx, at=start + timedelta(hours=hours))


def test_approve_flow(auth_client, nurse, admin_a):
    log = _clocked_out(nurse)

    r = auth_client(nurse).patch(reverse('approve_time_log', args=[log.pk]))
    assert r.status_code == 403

    r = auth_client(admin_a).patch(reverse('approve_time_log', args=[log.pk]))
    assert r.status_code == 200
    assert r.data['data']['status'] == 'approved'
    assert r.data['data']['approvedBy'] == admin_a.id

    r = auth_client(admin_a).patch(reverse('approve_time_log', args=[log.pk]))
    assert r.status_code == 409
    assert r.data['error']['code'] == 'invalid_transition'


def test_open_log_cannot_be_approved(nurse, admin_a):
    log = attendance.clock_in(SessionContext.for_user(nurse))
    with pytest.raises(InvalidTransition):
        attendance.approve(SessionContext.for_user(admin_a), log.pk)


def test_dispute_by_owner(auth_client, nurse):
    log = _clocked_out(nurse)
    r = auth_client(nurse).patch(reverse('dispute_time_log', args=[log.pk]), {'reason': 'Forgot to clock out'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == 'disputed'
    assert r.data['data']['disputeReason'] == 'Forgot to clock out'


def test_weekly_summary(nurse):
    ctx = SessionContext.for_user(nurse)
    monday = timezone.make_aware(datetime(2024, 3, 4, 9, 0))
    for day in range(3):
        start = monday + timedelta(days=day)
        attendance.clock_in(ctx, at=start)
        attendance.clock_out(ctx, at=start + timedelta(hours=9), break_minutes=30)
    # previous week, excluded
    prev = monday - timedelta(days=2)
    attendance.clock_in(ctx, at=prev)
    attendance.clock_out(ctx, at=prev + timedelta(hours=4))

    summary = attendance.weekly_summary(ctx, at=monday + timedelta(days=4))
    assert summary['totalHours'] == 25.5
    assert summary['overtimeHours'] == 1.5
    assert summary['entries'] == 3


def test_weekly_summary_endpoint(auth_client, nurse):
    r = auth_client(nurse).get(reverse('weekly_summary'))
    assert r.status_code == 200
    assert r.data['data']['totalHours'] == 0


def test_list_time_logs_scope(auth_client, nurse, admin_a, make_user, tenant_a):
    other = make_user(tenant_a, 'nurse')
    _clocked_out(nurse)
    _clocked_out(other)
    assert [t['userId'] for t in auth_client(nurse).get(reverse('list_time_logs')).data['data']] == [nurse.id]
    everyone = auth_client(admin_a).get(reverse('list_time_logs')).data['data']
    assert {t['userId'] for t in everyone} == {nurse.id, other.id}
