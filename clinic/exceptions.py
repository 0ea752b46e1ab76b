"""
API error envelope.

Every failed call answers ``{"success": false, "error": "<message>"}`` so
the dashboards can branch on ``success`` and show ``error`` in a toast.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class Conflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The requested slot conflicts with an existing booking.'
    default_code = 'conflict'


class TransitionNotAllowed(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Status transition not allowed.'
    default_code = 'invalid_transition'


def _flatten(detail) -> str:
    if isinstance(detail, dict):
        if 'detail' in detail:
            return _flatten(detail['detail'])
        return '; '.join(f"{k}: {_flatten(v)}" for k, v in detail.items())
    if isinstance(detail, (list, tuple)):
        return ' '.join(_flatten(d) for d in detail)
    return str(detail)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('Unhandled error in %s', getattr(view, '__name__', view.__class__.__name__))
        return Response({'success': False, 'error': 'Internal server error'}, status=500)
    headers = {k: resp[k] for k in ('WWW-Authenticate', 'Retry-After') if resp.has_header(k)}
    return Response({'success': False, 'error': _flatten(resp.data)}, status=resp.status_code, headers=headers)
