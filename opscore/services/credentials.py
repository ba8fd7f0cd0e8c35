"""
Credential verification for the login endpoints.

Every failure after the tenant lookup raises the same
:class:`InvalidCredentials`, so a caller cannot learn whether the email
exists, belongs to another organisation or simply had the wrong
password.
"""
from __future__ import annotations

import uuid
from typing import Iterable, Optional, Tuple

from django.contrib.auth import get_user_model

from opscore.exceptions import InvalidCredentials, TenantNotFound
from opscore.models import Tenant
from opscore.services.tokens import IssuedToken, issue_session_token

User = get_user_model()


def resolve_tenant(selector: str) -> Tenant:
    selector = (selector or '').strip()
    if not selector:
        raise TenantNotFound()
    tenant = None
    try:
        tenant = Tenant.objects.filter(pk=uuid.UUID(selector)).first()
    except ValueError:
        pass
    if tenant is None:
        tenant = Tenant.objects.filter(name__iexact=selector).first()
    if tenant is None:
        raise TenantNotFound()
    return tenant


def verify_credentials(email: str, password: str, tenant: Tenant,
                       allowed_roles: Optional[Iterable[str]] = None) -> User:
    user = User.objects.filter(email__iexact=(email or '').strip()).first()
    if user is None:
        # Run the hasher anyway so unknown emails cost the same time.
        User().set_password(password)
        raise InvalidCredentials()
    if not user.check_password(password):
        raise InvalidCredentials()
    if user.tenant_id != tenant.id or not user.is_active or not tenant.is_active:
        raise InvalidCredentials()
    if allowed_roles is not None and user.role not in set(allowed_roles):
        raise InvalidCredentials()
    return user


def login(email: str, password: str, tenant_selector: str,
          allowed_roles: Optional[Iterable[str]] = None) -> Tuple[IssuedToken, User, Tenant]:
    tenant = resolve_tenant(tenant_selector)
    user = verify_credentials(email, password, tenant, allowed_roles=allowed_roles)
    return issue_session_token(user), user, tenant
