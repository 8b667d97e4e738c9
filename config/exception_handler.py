"""
DRF exception handler rendering every API error as ``{error, status}``.

``config.exceptions`` must not import ``rest_framework.views``: the default
authentication class imports the taxonomy while DRF builds ``APIView``.
"""

import logging

from rest_framework.exceptions import AuthenticationFailed, NotAuthenticated
from rest_framework.response import Response
from rest_framework.views import exception_handler

from config.exceptions import DomainError, UnauthorizedError

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        if isinstance(exc, UnauthorizedError):
            logger.info("Rejected credentials: %s", exc.__class__.__name__)
        return _error_response(exc.public_message, exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, AuthenticationFailed):
        response.data = {'error': UnauthorizedError.default_message, 'status': response.status_code}
    elif isinstance(exc, NotAuthenticated):
        response.data = {'error': str(exc.detail), 'status': response.status_code}
    return response


def _error_response(message, status_code):
    return Response({'error': message, 'status': status_code}, status=status_code)
