"""DRF exception handler.

Renders every error as ``{"success": false, "code", "message", "details"}``.
Domain errors map to their declared HTTP status, DRF errors keep theirs.
"""

from __future__ import annotations

import logging

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)


def _error_body(code: str, message: str, details=None) -> dict:
    return {
        'success': False,
        'code': code,
        'message': message,
        'details': details or {},
    }


def api_exception_handler(exc, context):
    view = context.get('view')

    if isinstance(exc, DomainError):
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "Domain error in %s: %s (%s)",
            view.__class__.__name__ if view else 'unknown view',
            exc.message,
            exc.code,
        )
        return Response(exc.to_dict(), status=exc.status_code)

    response = drf_exception_handler(exc, context)
    if response is None:
        logger.error("Unhandled exception in %s", view.__class__.__name__ if view else 'unknown view', exc_info=exc)
        return Response(
            _error_body('internal_error', 'Internal server error'),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, DRFValidationError):
        response.data = _error_body('validation_error', 'Invalid input', exc.detail)
    elif isinstance(exc, Http404):
        response.data = _error_body('not_found', 'Not found')
    elif isinstance(exc, APIException):
        codes = exc.get_codes()
        code = codes if isinstance(codes, str) else exc.default_code
        response.data = _error_body(code, str(exc.detail))
    return response
