"""
Custom exceptions for OPR Digital
Provides structured error handling across all domains
"""
from typing import Any, Dict, Optional


class OPRError(Exception):
    """Base exception for all OPR Digital errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(OPRError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: Optional[str] = None, **details):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field": field, **details} if field else details,
            status_code=400,
        )


class ValidationGap(ValidationError):
    """Raised when a required field or input is missing"""

    def __init__(self, message: str, field: Optional[str] = None, **details):
        super().__init__(message, field=field, **details)
        self.error_code = "VALIDATION_GAP"


class NotFoundError(OPRError):
    """Raised when a resource is not found"""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            message=f"{resource} not found: {identifier}",
            error_code="NOT_FOUND",
            details={"resource": resource, "identifier": str(identifier)},
            status_code=404,
        )


class ExternalAPIError(OPRError):
    """Raised when an external API call fails"""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **details,
    ):
        super().__init__(
            message=f"{provider} API error: {message}",
            error_code="EXTERNAL_API_ERROR",
            details={
                "provider": provider,
                "api_status_code": status_code,
                "response_body": response_body,
                **details,
            },
            status_code=status_code or 502,  # Use provided status_code or default to Bad Gateway
        )


class TransportFailure(ExternalAPIError):
    """Raised when the remote sync gateway throws, times out or reports failure"""

    def __init__(
        self,
        message: str,
        provider: str = "sync_gateway",
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **details,
    ):
        super().__init__(
            provider=provider,
            message=message,
            status_code=status_code,
            response_body=response_body,
            **details,
        )
        self.error_code = "TRANSPORT_FAILURE"
        # Upstream failures are always reported as Bad Gateway to our callers
        self.status_code = 502


class ConfigurationError(OPRError):
    """Raised when configuration is invalid or missing"""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            details={"setting": setting} if setting else {},
            status_code=500,
        )


class DatabaseError(OPRError):
    """Raised when database operations fail"""

    def __init__(self, message: str, operation: Optional[str] = None, **details):
        super().__init__(
            message=message,
            error_code="DATABASE_ERROR",
            details={"operation": operation, **details} if operation else details,
            status_code=500,
        )


class StorageFailure(DatabaseError):
    """Raised when the record store cannot read or write"""

    def __init__(self, message: str, operation: Optional[str] = None, **details):
        super().__init__(message, operation=operation, **details)
        self.error_code = "STORAGE_FAILURE"


class RenderFailure(OPRError):
    """Raised when snapshot capture or document packing fails"""

    def __init__(self, message: str, phase: Optional[str] = None, **details):
        super().__init__(
            message=message,
            error_code="RENDER_FAILURE",
            details={"phase": phase, **details} if phase else details,
            status_code=500,
        )


class HandoffFailure(OPRError):
    """Raised when the host cannot accept a rendered document (file save, clipboard)"""

    def __init__(self, message: str, target: Optional[str] = None, **details):
        super().__init__(
            message=message,
            error_code="HANDOFF_FAILURE",
            details={"target": target, **details} if target else details,
            status_code=500,
        )


class InvalidTransitionError(OPRError):
    """Raised when a lifecycle action is requested from the wrong view"""

    def __init__(self, action: str, current_view: str, expected: Optional[str] = None):
        message = f"Cannot {action} while in {current_view}"
        if expected:
            message += f" (requires {expected})"
        super().__init__(
            message=message,
            error_code="INVALID_TRANSITION",
            details={"action": action, "current_view": current_view, "expected": expected},
            status_code=409,
        )


class OperationInProgressError(OPRError):
    """Raised when a distribution operation is already running for a record"""

    def __init__(self, record_id: str, channel: Optional[str] = None):
        super().__init__(
            message=f"A distribution operation is already in progress for report {record_id}",
            error_code="BUSY",
            details={"record_id": record_id, "channel": channel},
            status_code=409,
        )
