"""
Shared error handling for the Follow Service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ServiceException(Exception):
    """Base exception for Follow Service errors."""

    status_code = 400

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500

    def to_response(self) -> ErrorResponse:
        """Convert to error response.

        Server-side failures are reported with a generic message; the
        original message and details are only meant for the logs.
        """
        if self.is_server_error:
            return ErrorResponse(
                request_id=request_id_var.get(),
                code=self.code,
                message="Internal server error",
            )
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details,
        )


class AuthenticationError(ServiceException):
    """Authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class ValidationError(ServiceException):
    """Validation-related errors."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None,
                 code: str = "VALIDATION_ERROR"):
        super().__init__(code, message, details)


class ConflictError(ServiceException):
    """Requested state already exists."""

    status_code = 409

    def __init__(self, message: str = "Conflict", details: Optional[Dict[str, Any]] = None,
                 code: str = "CONFLICT"):
        super().__init__(code, message, details)


class ExternalServiceError(ServiceException):
    """External service errors."""

    status_code = 503

    def __init__(self, service: str, message: str = "External service error",
                 details: Optional[Dict[str, Any]] = None, code: str = "EXTERNAL_SERVICE_ERROR"):
        self.service = service
        super().__init__(code, f"{service}: {message}", details)
