"""
Shared error handling for the Kong Adapter.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class AdapterException(Exception):
    """Base exception for the Kong Adapter."""

    http_status = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class TransportError(AdapterException):
    """A remote call returned a status other than the expected one, or failed outright."""

    http_status = 502

    def __init__(self, service: str, url: str, status: Optional[int], message: str,
                 details: Optional[Dict[str, Any]] = None):
        self.service = service
        self.url = url
        self.status = status
        merged = {"service": service, "url": url, "status": status}
        merged.update(details or {})
        super().__init__("TRANSPORT_ERROR", f"{service}: {message}", merged)


class PayloadError(AdapterException):
    """A remote response body does not have the expected shape."""

    http_status = 502

    def __init__(self, service: str, url: str, message: str = "Malformed payload",
                 details: Optional[Dict[str, Any]] = None):
        merged = {"service": service, "url": url}
        merged.update(details or {})
        super().__init__("PAYLOAD_ERROR", f"{service}: {message}", merged)


class ValidationError(AdapterException):
    """Portal data violates an invariant of the synthesized configuration."""

    http_status = 422

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(ValidationError):
    """A referenced portal entity does not exist."""

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = "NOT_FOUND"
