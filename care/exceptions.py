"""
API error types and the DRF exception handler.

Every error leaves the API as
``{"ok": false, "error": {"code": ..., "message": ..., "fields": ...}}``;
``fields`` is only present for validation failures.
"""
from __future__ import annotations

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

GENERIC_ERROR = 'Internal server error'


class BadRequest(exceptions.APIException):
    """Request rejected before touching the database (e.g. id mismatch)."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Bad request.'
    default_code = 'bad_request'


class PersistenceFailed(exceptions.APIException):
    """A repository write reported failure; the cause was logged there."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = GENERIC_ERROR
    default_code = 'server_error'


_CODES_BY_STATUS = {
    400: 'invalid',
    401: 'not_authenticated',
    403: 'permission_denied',
    404: 'not_found',
    405: 'method_not_allowed',
    429: 'throttled',
}


def _code_for(exc, status_code: int) -> str:
    if isinstance(exc, exceptions.APIException) and not isinstance(exc, exceptions.ValidationError):
        return exc.default_code
    return _CODES_BY_STATUS.get(status_code, 'api_error')


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        request = context.get('request')
        logger.exception('Unhandled error on %s %s', getattr(request, 'method', '?'), getattr(request, 'path', '?'))
        return Response(
            {'ok': False, 'error': {'code': 'server_error', 'message': GENERIC_ERROR}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    error: dict = {'code': _code_for(exc, resp.status_code)}
    if isinstance(exc, exceptions.ValidationError):
        error['message'] = exceptions.ValidationError.default_detail
        if isinstance(resp.data, dict):
            error['fields'] = resp.data
        else:
            error['fields'] = {'non_field_errors': resp.data}
    elif isinstance(resp.data, dict):
        error['message'] = resp.data.get('detail') or resp.data
    else:
        error['message'] = str(resp.data)
    headers = {k: resp[k] for k in ('WWW-Authenticate', 'Retry-After') if resp.has_header(k)}
    return Response({'ok': False, 'error': error}, status=resp.status_code, headers=headers)
