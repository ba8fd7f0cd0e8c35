"""
Project-wide DRF exception handler.

Every error leaves the service as ``{'ok': False, 'error': {'code',
'message'}}`` with the status code of the exception that produced it.
Kept apart from :mod:`opscore.exceptions` because ``rest_framework.views``
loads the authentication classes at import time.
"""
import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from opscore.exceptions import AuthenticationRequired, Forbidden

logger = logging.getLogger(__name__)


def _error_code(exc: exceptions.APIException) -> str:
    codes = exc.get_codes()
    if isinstance(codes, str):
        return codes
    if isinstance(exc, exceptions.ValidationError):
        return 'invalid'
    return exc.default_code


def api_exception_handler(exc, context):
    if isinstance(exc, exceptions.NotAuthenticated) and not isinstance(exc, AuthenticationRequired):
        auth_header = getattr(exc, 'auth_header', None)
        exc = AuthenticationRequired()
        exc.auth_header = auth_header
    elif isinstance(exc, exceptions.PermissionDenied) and not isinstance(exc, Forbidden):
        exc = Forbidden(str(exc.detail))

    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('unhandled error in %s', view.__class__.__name__ if view else 'view', exc_info=exc)
        return Response(
            {'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error'}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, exceptions.ValidationError):
        message = resp.data
    elif isinstance(resp.data, dict):
        message = resp.data.get('detail') or resp.data
    else:
        message = str(resp.data)
    payload = {'ok': False, 'error': {'code': _error_code(exc), 'message': message}}
    return Response(payload, status=resp.status_code, headers=_passthrough_headers(resp))


def _passthrough_headers(resp) -> dict:
    headers = {}
    for name in ('WWW-Authenticate', 'Retry-After'):
        if name in resp:
            headers[name] = resp[name]
    return headers
