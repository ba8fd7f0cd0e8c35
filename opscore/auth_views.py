"""
Authentication views.

``login_view`` exchanges email, password and organisation for a bearer
session token.  ``patient_login_view`` is the patient portal entry point
and admits only the ``patient`` role.  Failures are audited with the
attempted email but never the password.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle

from opscore.exceptions import InvalidCredentials, TenantNotFound
from opscore.models import Tenant, User
from opscore.permissions import capabilities_for
from opscore.serializers.auth import LoginSerializer
from opscore.services import credentials
from opscore.services.audit import log_action


class LoginRateThrottle(AnonRateThrottle):
    scope = 'login'


def _serialize_user(user: User) -> dict:
    return {
        'id': user.id,
        'email': user.email,
        'name': user.get_full_name() or user.username,
        'role': user.role,
    }


def _serialize_tenant(tenant: Tenant) -> dict:
    return {
        'id': str(tenant.id),
        'name': tenant.name,
        'kind': tenant.kind,
    }


def _login(request, allowed_roles=None, channel='staff'):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    ip = request.META.get('REMOTE_ADDR')

    try:
        issued, user, tenant = credentials.login(
            vd['email'], vd['password'], vd['tenant'], allowed_roles=allowed_roles,
        )
    except (InvalidCredentials, TenantNotFound) as exc:
        log_action(action='login', object_type='user',
                   detail={'result': 'fail', 'email': vd['email'], 'channel': channel,
                           'reason': exc.default_code, 'ip': ip})
        raise

    log_action(tenant_id=tenant.id, user_id=user.id, action='login', object_type='user', object_id=user.id,
               detail={'result': 'ok', 'channel': channel, 'ip': ip})

    return Response({
        'ok': True,
        'token': issued.token,
        'tokenType': 'Bearer',
        'expiresAt': issued.expires_at.isoformat(),
        'user': _serialize_user(user),
        'tenant': _serialize_tenant(tenant),
    }, status=200)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    return _login(request)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def patient_login_view(request):
    return _login(request, allowed_roles=[User.ROLE_PATIENT], channel='patient_portal')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    ctx = request.user
    return Response({
        'ok': True,
        'data': {
            'userId': ctx.user_id,
            'tenantId': str(ctx.tenant_id),
            'role': ctx.role,
            'capabilities': sorted(capabilities_for(ctx.role)),
        },
    })
