"""
Session token issuance and verification.

Tokens are self-contained HS256 JWTs carrying the user, tenant and role.
Nothing is stored server-side, so a token cannot be revoked before it
expires; the lifetime is therefore capped at 24 hours.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone as dt_timezone

from django.conf import settings
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from opscore.exceptions import InvalidToken

MAX_TOKEN_LIFETIME = timedelta(hours=24)


@dataclass(frozen=True)
class SessionContext:
    """Identity of the caller, derived only from a verified token.

    Instances are passed explicitly to every service function; the
    ``is_authenticated`` / ``pk`` attributes let DRF use it as
    ``request.user``.
    """
    user_id: int
    tenant_id: uuid.UUID
    role: str

    is_authenticated = True
    is_anonymous = False

    @property
    def pk(self) -> int:
        return self.user_id

    @property
    def id(self) -> int:
        return self.user_id

    @property
    def is_super_admin(self) -> bool:
        return self.role == 'super_admin'

    @classmethod
    def for_user(cls, user) -> 'SessionContext':
        return cls(user_id=user.id, tenant_id=user.tenant_id, role=user.role)


@dataclass(frozen=True)
class IssuedToken:
    token: str
    issued_at: datetime
    expires_at: datetime


def token_lifetime() -> timedelta:
    hours = getattr(settings, 'SESSION_TOKEN_LIFETIME_HOURS', 24)
    return min(timedelta(hours=hours), MAX_TOKEN_LIFETIME)


def issue_session_token(user) -> IssuedToken:
    token = AccessToken()
    token.set_exp(lifetime=token_lifetime())
    token['user_id'] = user.id
    token['tenant_id'] = str(user.tenant_id)
    token['role'] = user.role
    if 'iat' not in token:
        token.set_iat()
    return IssuedToken(
        token=str(token),
        issued_at=datetime.fromtimestamp(token['iat'], tz=dt_timezone.utc),
        expires_at=datetime.fromtimestamp(token['exp'], tz=dt_timezone.utc),
    )


def decode_session_token(raw: str) -> SessionContext:
    """Verify ``raw`` and return its session triple.

    Bad signatures, expired tokens, missing claims and tokens minted with
    a lifetime over 24 hours all raise :class:`InvalidToken`.
    """
    try:
        token = AccessToken(raw)
    except TokenError as exc:
        raise InvalidToken() from exc

    try:
        user_id = int(token['user_id'])
        tenant_id = uuid.UUID(str(token['tenant_id']))
        role = str(token['role'])
        issued_at = int(token['iat'])
        expires_at = int(token['exp'])
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidToken() from exc

    if expires_at - issued_at > MAX_TOKEN_LIFETIME.total_seconds():
        raise InvalidToken()
    return SessionContext(user_id=user_id, tenant_id=tenant_id, role=role)
