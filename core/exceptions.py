"""
CORE App - Service Errors

Services raise ServiceError subclasses; core.handlers turns them into
the JSON bodies the dashboard and the mobile app display:

    {"message": "<texto para el usuario>", "error": "<detalle del backend>"}
"""

from typing import Optional

from rest_framework import status

class ServiceError(Exception):
    """Base error raised by service classes."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = 'Error inesperado'

    def __init__(self, message: Optional[str] = None, error: Optional[str] = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {'message': self.message}
        if self.error:
            body['error'] = self.error
        return body


class InvalidRequest(ServiceError):
    """Missing or invalid input (400)."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'Solicitud inválida'


class NotFound(ServiceError):
    """Requested row does not exist (404)."""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = 'Recurso no encontrado'


class Conflict(ServiceError):
    """Row already exists, e.g. duplicate email (400, as the dashboard expects)."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = 'El recurso ya existe'


class AuthenticationError(ServiceError):
    """Bad credentials or rejected profile (401)."""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = 'Credenciales inválidas'


class Forbidden(ServiceError):
    """Authenticated but not allowed: wrong role or inactive account (403)."""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = 'No tienes permisos para esta acción'


class BackendError(ServiceError):
    """
    Error returned by the hosted backend.

    Keeps the PostgREST fields (code, hint, details) for logging and
    for the admin registration response.
    """
    default_message = 'Error del servidor de datos'

    def __init__(
        self,
        message: Optional[str] = None,
        error: Optional[str] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        details: Optional[str] = None,
    ):
        super().__init__(message, error)
        self.code = code
        self.hint = hint
        self.details = details

    @property
    def is_permission_error(self) -> bool:
        return self.code == 'PGRST301' or 'permission' in (self.error or '').lower()

    def to_dict(self) -> dict:
        body = super().to_dict()
        for key in ('code', 'hint', 'details'):
            value = getattr(self, key)
            if value:
                body[key] = value
        return body


class BackendUnavailable(BackendError):
    """Supabase is not configured or cannot be reached (503)."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = 'Supabase no está disponible'
