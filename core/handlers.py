"""
CORE App - API Exception Handler

Wired through REST_FRAMEWORK['EXCEPTION_HANDLER'].
"""

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import ServiceError

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    """
    DRF exception handler.

    ServiceError -> {"message", "error"} with the error's status code.
    DRF exceptions keep their status and are reshaped to carry "message".
    """
    if isinstance(exc, ServiceError):
        view = context.get('view')
        view_name = view.__class__.__name__ if view else 'unknown'
        if exc.status_code >= 500:
            logger.error(f"[API] {view_name}: {exc.message} ({exc.error})")
        else:
            logger.info(f"[API] {view_name}: {exc.message}")
        return Response(exc.to_dict(), status=exc.status_code)

    response = exception_handler(exc, context)
    if response is None:
        return None

    data = response.data
    if isinstance(data, dict) and 'detail' in data:
        response.data = {'message': str(data['detail'])}
    elif isinstance(data, (dict, list)):
        response.data = {'message': 'Datos inválidos', 'errors': data}
    return response
