import pytest
from django.urls import reverse

from opscore.models import Tenant

pytestmark = pytest.mark.django_db


def test_super_admin_onboards_tenant(auth_client, super_admin):
    r = auth_client(super_admin).post(reverse('tenants'), {'name': 'Eastside Lab', 'kind': 'laboratory'}, format='json')
    assert r.status_code == 201
    assert r.data['data']['kind'] == 'laboratory'
    assert Tenant.objects.filter(name='Eastside Lab').exists()

    r = auth_client(super_admin).post(reverse('tenants'), {'name': 'eastside lab', 'kind': 'clinic'}, format='json')
    assert r.status_code == 400


def test_markup_is_stripped_from_tenant_names(auth_client, super_admin):
    r = auth_client(super_admin).post(reverse('tenants'), {'name': '<b>Riverside</b> Clinic', 'kind': 'clinic'}, format='json')
    assert r.status_code == 201
    assert r.data['data']['name'] == 'Riverside Clinic'


def test_tenant_kind_is_immutable(auth_client, super_admin, tenant_a):
    url = reverse('tenant_detail', args=[tenant_a.id])
    r = auth_client(super_admin).patch(url, {'kind': 'pharmacy'}, format='json')
    assert r.status_code == 400
    tenant_a.refresh_from_db()
    assert tenant_a.kind == Tenant.KIND_HOSPITAL

    tenant_a.kind = Tenant.KIND_PHARMACY
    with pytest.raises(ValueError):
        tenant_a.save()


def test_suspend_tenant(auth_client, super_admin, tenant_a):
    r = auth_client(super_admin).patch(reverse('tenant_detail', args=[tenant_a.id]), {'status': 'suspended'}, format='json')
    assert r.status_code == 200
    assert r.data['data']['status'] == 'suspended'


def test_tenant_admin_cannot_use_platform_endpoints(auth_client, admin_a, tenant_b):
    client = auth_client(admin_a)
    assert client.get(reverse('tenants')).status_code == 403
    r = client.patch(reverse('tenant_detail', args=[tenant_b.id]), {'status': 'suspended'}, format='json')
    assert r.status_code == 403
    tenant_b.refresh_from_db()
    assert tenant_b.status == Tenant.STATUS_ACTIVE
