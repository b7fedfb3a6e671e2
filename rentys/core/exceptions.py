"""
Domain Errors
Every service failure is one of these; the HTTP layer maps the ``code`` tag
and ``status_code`` to a response body.
"""
from fastapi import status


class RentysError(Exception):
    """Base class for tagged domain errors"""

    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request failed"

    def __init__(self, detail: str = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.code, "detail": self.detail}


class NotAuthenticated(RentysError):
    code = "not_authenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required"


class ProfileNotFound(RentysError):
    code = "profile_not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "No profile linked to this account"


class ValidationError(RentysError):
    """Bad or missing field, or a foreign key that does not resolve"""

    code = "validation_error"
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_detail = "Invalid input"


class NotFound(RentysError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class Forbidden(RentysError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not allowed"


class InvalidTransition(RentysError):
    """Decision on a request that is no longer pending"""

    code = "invalid_transition"
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Request has already been decided"


class BackendUnavailable(RentysError):
    code = "backend_unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Backend temporarily unavailable"


__all__ = [
    "RentysError",
    "NotAuthenticated",
    "ProfileNotFound",
    "ValidationError",
    "NotFound",
    "Forbidden",
    "InvalidTransition",
    "BackendUnavailable",
]
