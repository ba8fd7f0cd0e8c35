"""
Error taxonomy for the API.

The envelope these become is built in :mod:`opscore.handlers`.
"""
from rest_framework import exceptions, status


class AuthenticationRequired(exceptions.NotAuthenticated):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authentication credentials were not provided.'
    default_code = 'authentication_required'


class InvalidToken(exceptions.AuthenticationFailed):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Session token is invalid or expired.'
    default_code = 'invalid_token'


class InvalidCredentials(exceptions.AuthenticationFailed):
    """Raised for every login failure so callers cannot tell which check failed."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Invalid email, password or organisation.'
    default_code = 'invalid_credentials'


class TenantNotFound(exceptions.APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Organisation not found.'
    default_code = 'tenant_not_found'


class Forbidden(exceptions.PermissionDenied):
    default_detail = 'You do not have permission to perform this action.'
    default_code = 'forbidden'


class NotFound(exceptions.NotFound):
    default_detail = 'Not found.'
    default_code = 'not_found'


class Conflict(exceptions.APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The resource is not in a state that allows this operation.'
    default_code = 'conflict'


class ShiftAlreadyActive(Conflict):
    default_detail = 'A shift is already active for this user.'
    default_code = 'shift_already_active'


class NoActiveShift(Conflict):
    default_detail = 'There is no active shift to end.'
    default_code = 'no_active_shift'


class AlreadyClockedIn(Conflict):
    default_detail = 'Already clocked in.'
    default_code = 'already_clocked_in'


class NotClockedIn(Conflict):
    default_detail = 'Not clocked in.'
    default_code = 'not_clocked_in'


class InvalidTransition(Conflict):
    default_detail = 'Status transition not allowed.'
    default_code = 'invalid_transition'
