"""Exception hierarchy for the MultiSafepay adapter.

All adapter exceptions inherit from MultiSafepayError and carry:
- error_code: Machine-readable error code (e.g., "VALIDATION_ERROR")
- http_status: Appropriate HTTP status code for API responses
- message: Human-readable error message
- details: Optional additional context dictionary

The orchestrators never let RemoteFailure escape; it is raised inside the
gateway client and turned into a failed GatewayResult there.
"""
from __future__ import annotations

from typing import Any, Optional


class MultiSafepayError(Exception):
    """Base exception for all adapter errors."""

    error_code: str = "MULTISAFEPAY_ERROR"
    http_status: int = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class InvalidArgument(MultiSafepayError):
    """Caller supplied input that breaks the call contract."""

    error_code = "VALIDATION_ERROR"
    http_status = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)


class RemoteFailure(MultiSafepayError):
    """The MultiSafepay API call failed (transport, HTTP status or body)."""

    error_code = "REMOTE_FAILURE"
    http_status = 502

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        psp_error_code: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        if psp_error_code is not None:
            details["psp_error_code"] = psp_error_code
        super().__init__(message, details=details)
        self.status_code = status_code
        self.psp_error_code = psp_error_code


class ConfigurationError(RemoteFailure):
    """MultiSafepay rejected the credentials (missing, unset or wrong API key)."""

    error_code = "CONFIGURATION_ERROR"
    http_status = 500


class PreconditionUnavailable(MultiSafepayError):
    """No inbound request context exists to reconcile against."""

    error_code = "PRECONDITION_UNAVAILABLE"
    http_status = 400


class InvariantViolation(MultiSafepayError):
    """A collaborator returned data that should never occur."""

    error_code = "INVARIANT_VIOLATION"
    http_status = 500
