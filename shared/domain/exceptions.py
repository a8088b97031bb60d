"""
Domain Exceptions

Business-focused errors raised by domain and application code. They carry a
stable machine-readable code and an HTTP status so the API layer can render
them without knowing about individual use cases.
"""

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base exception for all domain-specific errors."""

    status_code = 500
    default_code = 'domain_error'

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'success': False,
            'code': self.code,
            'message': self.message,
            'details': self.details,
        }


class ValidationError(DomainError):
    """Malformed or missing input."""

    status_code = 400
    default_code = 'validation_error'


class InvalidInputError(ValidationError):
    """Pricing input out of range (quantity, duration, caps)."""

    default_code = 'invalid_input'


class InvalidCouponError(ValidationError):
    """Coupon missing, inactive or expired."""

    default_code = 'coupon_invalid'


class NotFoundError(DomainError):
    """Venue, sub-resource or booking does not exist."""

    status_code = 404
    default_code = 'not_found'


class ConflictError(DomainError):
    """Requested resource is already claimed for the requested window."""

    status_code = 409
    default_code = 'resource_unavailable'


class AuthorizationError(DomainError):
    """Actor is not allowed to perform the operation."""

    status_code = 403
    default_code = 'forbidden'


class InvalidTransitionError(DomainError):
    """Booking state machine violation."""

    status_code = 400
    default_code = 'invalid_transition'


class AlreadyCancelledError(InvalidTransitionError):
    """Cancelling a booking that is already cancelled."""

    default_code = 'already_cancelled'


class ExternalServiceError(DomainError):
    """Object storage, notification or lookup provider failed."""

    status_code = 502
    default_code = 'external_service_error'
