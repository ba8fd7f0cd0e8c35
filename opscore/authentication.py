"""
Bearer-token authentication for Django REST framework.

The authenticator only verifies the token; it never touches the
database.  ``request.user`` becomes the immutable
:class:`~opscore.services.tokens.SessionContext` decoded from the token and
``request.auth`` the raw token string.  Views and services must take
identity from there and never from request bodies.
"""
from __future__ import annotations

from rest_framework import authentication

from opscore.exceptions import InvalidToken
from opscore.services.tokens import decode_session_token


class SessionTokenAuthentication(authentication.BaseAuthentication):
    keyword = 'Bearer'

    def authenticate(self, request):
        header = authentication.get_authorization_header(request).split()
        if not header:
            return None
        if header[0].decode('latin-1').lower() != self.keyword.lower():
            raise InvalidToken()
        if len(header) != 2:
            raise InvalidToken()
        try:
            raw = header[1].decode('ascii')
        except UnicodeError as exc:
            raise InvalidToken() from exc
        return decode_session_token(raw), raw

    def authenticate_header(self, request) -> str:
        return f'{self.keyword} realm="api"'
