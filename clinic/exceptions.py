import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class QueueConflict(APIException):
    """The queue entry is not in a state that allows the request."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'queue entry is not in a valid state for this operation'
    default_code = 'queue_conflict'


def api_exception_handler(exc, context):
    if isinstance(exc, DjangoValidationError):
        detail = getattr(exc, 'message_dict', None) or {'detail': exc.messages}
        return Response({'ok': False, 'error': {'code': 'invalid', 'message': detail}}, status=400)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get('view')
        logger.exception('unhandled error in %s', view.__class__.__name__ if view else 'api view')
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = getattr(exc, 'default_code', None) or 'api_error'
    normalized = Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
    for header in ('WWW-Authenticate', 'Retry-After'):
        if header in resp:
            normalized[header] = resp[header]
    return normalized
