"""
Shared error handling for the Admin Service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field
from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = False
    trace_id: Optional[str] = None
    code: str
    error: str
    details: Dict[str, Any] = Field(default_factory=dict)


def current_trace_id() -> Optional[str]:
    """Hex trace id of the active span, if one is recording."""
    current_span = trace.get_current_span()
    if current_span and current_span.is_recording():
        span_context = current_span.get_span_context()
        if span_context.trace_id != 0:
            return f"{span_context.trace_id:032x}"
    return None


class AdminServiceException(Exception):
    """Base exception for Admin Service errors."""

    status_code: int = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None,
                 status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            trace_id=current_trace_id(),
            code=self.code,
            error=self.message,
            details=self.details
        )


class ConfigurationError(AdminServiceException):
    """Required setting missing or invalid at startup."""

    status_code = 500

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class AuthenticationError(AdminServiceException):
    """Authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class AuthorizationError(AdminServiceException):
    """Authorization-related errors."""

    status_code = 403

    def __init__(self, message: str = "Authorization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHORIZATION_ERROR", message, details)


class ValidationError(AdminServiceException):
    """Validation-related errors."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(AdminServiceException):
    """Requested resource does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class MissingCredentialError(AdminServiceException):
    """An operation that requires a bearer token was called without one."""

    status_code = 401

    def __init__(self, message: str = "Authorization token is required", details: Optional[Dict[str, Any]] = None):
        super().__init__("MISSING_CREDENTIAL", message, details)


class RemoteInvocationError(AdminServiceException):
    """Non-2xx response or transport fault from a downstream service."""

    def __init__(self, service: str, path: str, method: str,
                 status_code: Optional[int] = None, error_text: str = "",
                 details: Optional[Dict[str, Any]] = None):
        self.service = service
        self.path = path
        self.method = method
        self.upstream_status = status_code
        self.error_text = error_text
        if status_code is not None:
            message = f"HTTP {status_code}: {error_text}"
        else:
            message = f"{service} unreachable: {error_text}"
        super().__init__(
            "REMOTE_INVOCATION_ERROR",
            message,
            details={"service": service, "path": path, "method": method, **(details or {})},
            status_code=status_code if status_code is not None else 500,
        )


class EventPublishError(AdminServiceException):
    """An event the caller requires to be delivered could not be published."""

    status_code = 500

    def __init__(self, topic: str, reason: str, details: Optional[Dict[str, Any]] = None):
        self.topic = topic
        self.reason = reason
        super().__init__(
            "EVENT_PUBLISH_ERROR",
            f"Failed to publish {topic}: {reason}",
            details={"topic": topic, **(details or {})},
        )
