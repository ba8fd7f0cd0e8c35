import pytest
from django.core.cache import cache
from rest_framework.test import APIClient

from opscore.models import Patient, Tenant, User
from opscore.services.tokens import issue_session_token

PASSWORD = 'P@ssw0rd1'


@pytest.fixture(autouse=True)
def _clear_cache():
    # throttle counters live in the cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def tenant_a(db):
    return Tenant.objects.create(name='St Mary Hospital', kind=Tenant.KIND_HOSPITAL)


@pytest.fixture
def tenant_b(db):
    return Tenant.objects.create(name='Northside Pharmacy', kind=Tenant.KIND_PHARMACY)


@pytest.fixture
def platform_tenant(db):
    return Tenant.objects.create(name='Platform', kind=Tenant.KIND_PLATFORM)


@pytest.fixture
def make_user(db):
    counter = {'n': 0}

    def _make(tenant, role=User.ROLE_NURSE, email=None, password=PASSWORD, **extra):
        counter['n'] += 1
        email = email or f'{role}{counter["n"]}@{tenant.name.split()[0].lower()}.example.com'
        return User.objects.create_user(
            username=email, email=email, password=password, tenant=tenant, role=role, **extra,
        )
    return _make


@pytest.fixture
def nurse(make_user, tenant_a):
    return make_user(tenant_a, User.ROLE_NURSE, email='nurse@stmary.example.com')


@pytest.fixture
def admin_a(make_user, tenant_a):
    return make_user(tenant_a, User.ROLE_TENANT_ADMIN, email='admin@stmary.example.com')


@pytest.fixture
def nurse_b(make_user, tenant_b):
    return make_user(tenant_b, User.ROLE_NURSE, email='nurse@northside.example.com')


@pytest.fixture
def super_admin(make_user, platform_tenant):
    return make_user(platform_tenant, User.ROLE_SUPER_ADMIN, email='root@platform.example.com')


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def auth_client():
    def _client(user):
        c = APIClient()
        c.credentials(HTTP_AUTHORIZATION=f'Bearer {issue_session_token(user).token}')
        return c
    return _client


@pytest.fixture
def patient_a(tenant_a, nurse):
    return Patient.objects.create(
        tenant=tenant_a, last_modified_by=nurse, mrn='MRN-1001', first_name='Ada', last_name='Lovelace',
    )
