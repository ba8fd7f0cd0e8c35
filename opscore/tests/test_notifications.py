from datetime import timedelta

import pytest
from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

from opscore.models import Patient
from opscore.services import archive as archive_service
from opscore.services.notifications import notify_tenant, tenant_group
from opscore.services.shifts import end_shift, start_shift
from opscore.services.tokens import SessionContext

pytestmark = pytest.mark.django_db


def test_notify_tenant_reaches_group(tenant_a):
    layer = get_channel_layer()
    channel = async_to_sync(layer.new_channel)()
    async_to_sync(layer.group_add)(tenant_group(tenant_a.id), channel)

    notify_tenant(tenant_a.id, {'type': 'shift.archived', 'shiftId': 7})
    msg = async_to_sync(layer.receive)(channel)
    assert msg == {'type': 'shift.archived', 'shiftId': 7}


def test_archival_broadcasts_after_commit(nurse, tenant_a, monkeypatch, django_capture_on_commit_callbacks):
    sent = []
    monkeypatch.setattr(archive_service, 'notify_tenant', lambda tenant_id, payload: sent.append((tenant_id, payload)))

    ctx = SessionContext.for_user(nurse)
    start_shift(ctx, 'morning', at=timezone.now() - timedelta(hours=1))
    Patient.objects.create(tenant=tenant_a, last_modified_by=nurse, mrn='MRN-9', first_name='M', last_name='N')
    with django_capture_on_commit_callbacks(execute=True):
        shift = end_shift(ctx)

    assert sent == [(tenant_a.id, {'type': 'shift.archived', 'shiftId': shift.pk, 'userId': nurse.id, 'total': 1})]
