"""
Unified API error handling.

Every error leaves the API as ``{"error": <message>}`` (plus ``fields``
for validation failures).  Unhandled exceptions are logged with their
traceback and reported as a generic 500.
"""
import logging

from django.db.models import ProtectedError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class Conflict(exceptions.APIException):
    """The request clashes with the current state of a record."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'conflict with current state'
    default_code = 'conflict'


def api_exception_handler(exc, context):
    if isinstance(exc, ProtectedError):
        exc = Conflict('record is still referenced by other records')

    resp = drf_exception_handler(exc, context)
    if resp is None:
        request = context.get('request')
        logger.exception('unhandled error on %s %s', getattr(request, 'method', '?'), getattr(request, 'path', '?'))
        return Response({'error': 'internal server error'}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    # normalize response; keep headers such as WWW-Authenticate
    if isinstance(exc, exceptions.ValidationError):
        resp.data = {'error': 'invalid request', 'fields': resp.data}
    elif isinstance(resp.data, dict) and 'detail' in resp.data:
        resp.data = {'error': str(resp.data['detail'])}
    else:
        resp.data = {'error': str(resp.data)}
    if resp.status_code >= 500:
        logger.error('api error %s: %s', resp.status_code, resp.data['error'])
    return resp
