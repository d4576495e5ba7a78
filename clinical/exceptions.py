"""
API errors raised by the clinical services and the DRF exception handler
that turns every failure into the ``{'ok': False, 'error': {...}}`` envelope.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

SEVERITY_ERROR = 'ERROR'
SEVERITY_WARNING = 'WARNING'


class ClinicalError(APIException):
    """Base class: a message, a severity marker and the offending field."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'clinical_error'
    default_detail = 'Request could not be processed.'

    def __init__(self, message=None, *, field=None, severity=SEVERITY_ERROR):
        super().__init__(detail=message or self.default_detail, code=self.default_code)
        self.field = field
        self.severity = severity

    @property
    def message(self) -> str:
        return str(self.detail)


class MissingField(ClinicalError):
    default_code = 'missing_field'
    default_detail = 'A required field is missing.'


class InvalidField(ClinicalError):
    default_code = 'invalid_field'
    default_detail = 'A field has an invalid value.'


class NotFound(ClinicalError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = 'not_found'
    default_detail = 'Not found.'


class Conflict(ClinicalError):
    status_code = status.HTTP_409_CONFLICT
    default_code = 'conflict'
    default_detail = 'Identifiers do not match.'


class PersistenceFailure(ClinicalError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = 'persistence_failure'
    default_detail = 'The change was not stored.'


def api_exception_handler(exc, context):
    if isinstance(exc, ClinicalError):
        logger.warning('%s [%s] %s', type(exc).__name__, exc.status_code, exc.message)
        return Response(
            {'ok': False, 'error': {
                'code': exc.default_code,
                'message': exc.message,
                'severity': exc.severity,
                'field': exc.field,
            }},
            status=exc.status_code,
        )
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled error in %s', context.get('view'))
        return Response(
            {'ok': False, 'error': {'code': 'server_error', 'message': str(exc), 'severity': SEVERITY_ERROR}},
            status=500,
        )
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = str(resp.data)
    return Response(
        {'ok': False, 'error': {'code': 'api_error', 'message': detail, 'severity': SEVERITY_ERROR}},
        status=resp.status_code,
    )
