from datetime import timedelta

import pytest
from django.core.management import call_command
from django.urls import reverse
from django.utils import timezone
from rest_framework import serializers

from opscore.exceptions import Forbidden
from opscore.models import ArchivedRecord, AuditEvent, LabOrder, Patient
from opscore.services import archive as archive_service
from opscore.services.shifts import end_shift, start_shift
from opscore.services.snapshots import load_snapshot
from opscore.services.tokens import SessionContext

pytestmark = pytest.mark.django_db


@pytest.fixture
def archived(nurse, tenant_a):
    ctx = SessionContext.for_user(nurse)
    start_shift(ctx, 'night', at=timezone.now() - timedelta(hours=6))
    patient = Patient.objects.create(
        tenant=tenant_a, last_modified_by=nurse, mrn='MRN-7788', first_name='Rosalind', last_name='Franklin',
    )
    LabOrder.objects.create(
        tenant=tenant_a, last_modified_by=nurse, patient=patient, order_number='LAB-1', test_name='Full blood count',
    )
    return end_shift(ctx)


def test_search_requires_three_characters(auth_client, nurse, archived):
    r = auth_client(nurse).get(reverse('search_archived_records'), {'q': 'MR'})
    assert r.status_code == 400
    assert r.data['error']['code'] == 'invalid'
    assert ArchivedRecord.objects.filter(access_count__gt=0).count() == 0


def test_search_by_mrn_counts_each_hit_once(auth_client, nurse, archived):
    r = auth_client(nurse).get(reverse('search_archived_records'), {'q': 'mrn-7788'})
    assert r.status_code == 200
    assert r.data['pagination']['total'] == 2
    assert {d['recordType'] for d in r.data['data']} == {'patient', 'lab_order'}
    assert all(d['accessCount'] == 1 for d in r.data['data'])

    for rec in ArchivedRecord.objects.filter(work_shift=archived):
        assert rec.access_count == 1
        assert rec.last_accessed_by_id == nurse.id
        assert rec.last_accessed_at is not None

    event = AuditEvent.objects.get(action='archive_access')
    assert event.user_id == nurse.id
    assert sorted(event.detail['ids']) == sorted(d['id'] for d in r.data['data'])


def test_search_filters_by_record_type(auth_client, nurse, archived):
    r = auth_client(nurse).get(reverse('search_archived_records'), {'q': 'franklin', 'recordType': 'lab_order'})
    assert [d['recordType'] for d in r.data['data']] == ['lab_order']
    assert r.data['data'][0]['originalData']['testName'] == 'Full blood count'


def test_detail_returns_validated_snapshot_and_counts(auth_client, nurse, archived):
    rec = ArchivedRecord.objects.get(work_shift=archived, record_type='patient')
    client = auth_client(nurse)
    r = client.get(reverse('archived_record_detail', args=[rec.pk]))
    assert r.status_code == 200
    assert r.data['data']['originalData']['mrn'] == 'MRN-7788'
    assert r.data['data']['originalData']['recordType'] == 'patient'
    client.get(reverse('archived_record_detail', args=[rec.pk]))
    rec.refresh_from_db()
    assert rec.access_count == 2


def test_search_requires_capability(auth_client, make_user, tenant_a, archived):
    billing = make_user(tenant_a, 'billing_staff')
    r = auth_client(billing).get(reverse('search_archived_records'), {'q': 'franklin'})
    assert r.status_code == 403


def test_detail_of_single_name_patient(auth_client, nurse, tenant_a):
    ctx = SessionContext.for_user(nurse)
    start_shift(ctx, 'morning', at=timezone.now() - timedelta(hours=2))
    Patient.objects.create(tenant=tenant_a, last_modified_by=nurse, mrn='MRN-0042', first_name='Cher', last_name='')
    shift = end_shift(ctx)

    rec = ArchivedRecord.objects.get(work_shift=shift, record_type='patient')
    r = auth_client(nurse).get(reverse('archived_record_detail', args=[rec.pk]))
    assert r.status_code == 200
    assert r.data['data']['originalData']['lastName'] == ''
    assert r.data['data']['accessCount'] == 1


def test_detail_with_invalid_snapshot_is_not_counted(auth_client, nurse, archived):
    rec = ArchivedRecord.objects.get(work_shift=archived, record_type='patient')
    ArchivedRecord.objects.filter(pk=rec.pk).update(original_data={'recordType': 'patient', 'id': 'not-a-number'})

    r = auth_client(nurse).get(reverse('archived_record_detail', args=[rec.pk]))
    assert r.status_code == 400
    rec.refresh_from_db()
    assert rec.access_count == 0
    assert rec.last_accessed_at is None
    assert not AuditEvent.objects.filter(action='archive_access').exists()


def test_short_query_without_capability_is_forbidden(make_user, tenant_a, archived):
    billing = make_user(tenant_a, 'billing_staff')
    with pytest.raises(Forbidden):
        archive_service.search_archive(SessionContext.for_user(billing), 'ab')


def test_snapshot_original_data_is_untouched_by_later_edits(nurse, archived):
    patient = Patient.objects.get(mrn='MRN-7788')
    patient.first_name = 'Changed'
    patient.save()
    rec = ArchivedRecord.objects.get(work_shift=archived, record_type='patient')
    assert rec.original_data['firstName'] == 'Rosalind'


def test_unknown_snapshot_variant_rejected():
    with pytest.raises(serializers.ValidationError):
        load_snapshot({'recordType': 'invoice', 'id': 1})


def test_expired_records_are_redacted_not_deleted(auth_client, nurse, archived):
    rec = ArchivedRecord.objects.get(work_shift=archived, record_type='patient')
    later = rec.archived_at + timedelta(days=rec.retention_period, seconds=1)

    assert archive_service.redact_expired_archives(now=rec.archived_at) == 0
    assert archive_service.redact_expired_archives(now=later) == 2
    rec.refresh_from_db()
    assert rec.redacted_at == later
    assert rec.original_data == {}
    assert rec.patient_mrn == ''

    r = auth_client(nurse).get(reverse('search_archived_records'), {'q': 'franklin'})
    assert r.data['data'] == []
    assert archive_service.redact_expired_archives(now=later) == 0


def test_purge_command_runs(archived):
    call_command('purge_archives')
    assert ArchivedRecord.objects.filter(redacted_at__isnull=True).count() == 2
