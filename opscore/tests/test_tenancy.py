import logging
from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from opscore.exceptions import Forbidden, NotFound
from opscore.models import ArchivedRecord, Patient, TimeLog, WorkShift
from opscore.services import attendance
from opscore.services.shifts import end_shift, start_shift
from opscore.services.tenancy import TenantGuard
from opscore.services.tokens import SessionContext

pytestmark = pytest.mark.django_db


def _ended_shift_with_patient(user, mrn):
    ctx = SessionContext.for_user(user)
    start_shift(ctx, 'morning', at=timezone.now() - timedelta(hours=1))
    Patient.objects.create(
        tenant_id=user.tenant_id, last_modified_by=user, mrn=mrn, first_name='Grace', last_name='Hopper',
    )
    return end_shift(ctx)


def _clocked_out_log(user):
    ctx = SessionContext.for_user(user)
    now = timezone.now()
    attendance.clock_in(ctx, at=now - timedelta(hours=2))
    return attendance.clock_out(ctx, at=now)


def test_guard_rejects_cross_tenant_row_and_logs(nurse, nurse_b, caplog):
    foreign = start_shift(SessionContext.for_user(nurse_b), 'night')
    guard = TenantGuard(SessionContext.for_user(nurse))

    with caplog.at_level(logging.WARNING, logger='opscore.services.tenancy'):
        with pytest.raises(NotFound):
            guard.get(WorkShift, foreign.pk)
    assert 'tenant isolation violation' in caplog.text
    assert str(nurse_b.tenant_id) in caplog.text

    with pytest.raises(Forbidden):
        guard.get(WorkShift, foreign.pk, reveal=True)


def test_guard_create_stamps_session_tenant(nurse, tenant_b):
    guard = TenantGuard(SessionContext.for_user(nurse))
    log = guard.create(TimeLog, tenant=tenant_b, user_id=nurse.id, clock_in_time=timezone.now())
    assert log.tenant_id == nurse.tenant_id


def test_cross_tenant_shift_is_not_found(auth_client, admin_a, nurse_b):
    foreign = start_shift(SessionContext.for_user(nurse_b), 'evening')
    r = auth_client(admin_a).patch(reverse('end_shift', args=[foreign.pk]), {}, format='json')
    assert r.status_code == 404
    foreign.refresh_from_db()
    assert foreign.status == WorkShift.STATUS_ACTIVE

    r = auth_client(admin_a).post(reverse('retry_archive', args=[foreign.pk]))
    assert r.status_code == 404


def test_cross_tenant_shift_list_excludes_foreign_rows(auth_client, admin_a, nurse, nurse_b):
    start_shift(SessionContext.for_user(nurse), 'morning')
    start_shift(SessionContext.for_user(nurse_b), 'morning')
    r = auth_client(admin_a).get(reverse('shifts'))
    assert r.status_code == 200
    assert {s['tenantId'] for s in r.data['data']} == {str(admin_a.tenant_id)}

    r = auth_client(admin_a).get(reverse('shifts'), {'userId': nurse_b.id})
    assert r.data['data'] == []


def test_cross_tenant_archived_record_is_not_found(auth_client, nurse, nurse_b):
    _ended_shift_with_patient(nurse_b, 'MRN-B-1')
    record = ArchivedRecord.objects.get(tenant_id=nurse_b.tenant_id)

    r = auth_client(nurse).get(reverse('archived_record_detail', args=[record.pk]))
    assert r.status_code == 404
    r = auth_client(nurse).get(reverse('search_archived_records'), {'q': 'MRN-B-1'})
    assert r.status_code == 200
    assert r.data['data'] == []

    record.refresh_from_db()
    assert record.access_count == 0


def test_cross_tenant_time_log_is_not_found(auth_client, admin_a, nurse_b):
    log = _clocked_out_log(nurse_b)
    assert auth_client(admin_a).patch(reverse('approve_time_log', args=[log.pk])).status_code == 404
    r = auth_client(admin_a).patch(reverse('dispute_time_log', args=[log.pk]), {'reason': 'late'}, format='json')
    assert r.status_code == 404
    r = auth_client(admin_a).get(reverse('list_time_logs'), {'userId': nurse_b.id})
    assert r.data['data'] == []
    log.refresh_from_db()
    assert log.status == TimeLog.STATUS_CLOCKED_OUT


def test_body_cannot_override_identity(auth_client, nurse, tenant_b):
    r = auth_client(nurse).post(reverse('shifts'), {
        'shiftType': 'morning', 'tenantId': str(tenant_b.id), 'userId': 999,
    }, format='json')
    assert r.status_code == 201
    assert r.data['data']['tenantId'] == str(nurse.tenant_id)
    assert r.data['data']['userId'] == nurse.id


def test_super_admin_sees_all_tenants(auth_client, super_admin, nurse, nurse_b):
    start_shift(SessionContext.for_user(nurse), 'morning')
    start_shift(SessionContext.for_user(nurse_b), 'morning')
    r = auth_client(super_admin).get(reverse('shifts'))
    assert {s['tenantId'] for s in r.data['data']} == {str(nurse.tenant_id), str(nurse_b.tenant_id)}
