"""Error types and classification for device and validation failures."""

from enum import Enum
from typing import Literal

import httpx
from pydantic import BaseModel


class ErrorCategory(Enum):
    """Categories of errors surfaced to the operator."""

    GRAMMAR = "grammar"
    SCHEMA_FIELD = "schema_field"
    SCHEMA_CROSS_FIELD = "schema_cross_field"
    TRANSPORT_TIMEOUT = "transport_timeout"
    TRANSPORT_NETWORK = "transport_network"
    TRANSPORT_REJECTED = "transport_rejected"
    TRANSPORT_INVALID_RESPONSE = "transport_invalid_response"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Transport errors
    ERR_DEVICE_TIMEOUT = "ERR_DEVICE_TIMEOUT"
    ERR_DEVICE_UNREACHABLE = "ERR_DEVICE_UNREACHABLE"
    ERR_DEVICE_REJECTED = "ERR_DEVICE_REJECTED"
    ERR_DEVICE_BAD_RESPONSE = "ERR_DEVICE_BAD_RESPONSE"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity
    category: ErrorCategory = ErrorCategory.UNKNOWN


class DeviceError(Exception):
    """Base error for failed round-trips to the sampler device."""


class DeviceRequestError(DeviceError):
    """The request failed in transport or the device answered with a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DeviceResponseError(DeviceError):
    """The device answered, but the payload did not have the expected shape."""


_ERROR_PATTERNS: dict[Literal["timeout", "network"], dict[str, list[str] | set[str]]] = {
    "timeout": {
        "phrases": ["timed out", "timeout"],
        "exception_types": {"TimeoutError", "TimeoutException", "ConnectTimeout", "ReadTimeout", "WriteTimeout"},
    },
    "network": {
        "phrases": [
            "connection",
            "network",
            "unreachable",
            "name or service not known",
        ],
        "exception_types": {"ConnectionError", "ConnectError", "NetworkError", "RemoteProtocolError"},
    },
}


def _match_error_pattern(
    *,
    error_str: str,
    exception_type: str,
    pattern_type: Literal["timeout", "network"],
) -> bool:
    """Return True if the error matches the configured pattern type."""
    patterns = _ERROR_PATTERNS[pattern_type]
    return any(phrase in error_str for phrase in patterns["phrases"]) or exception_type in patterns["exception_types"]


def _root_cause(exception: BaseException) -> BaseException:
    """Follow the explicit ``raise ... from`` chain to the original exception."""
    while exception.__cause__ is not None:
        exception = exception.__cause__
    return exception


def classify_transport_error(exception: Exception) -> ErrorResponse:  # noqa: PLR0911
    """Classify a failed device round-trip and return a structured response.

    Args:
        exception: The exception raised while talking to the device

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, DeviceResponseError):
        return ErrorResponse(
            code=ErrorCode.ERR_DEVICE_BAD_RESPONSE,
            message="The sampler sent a response that could not be understood.",
            suggestion="Check that the sampler firmware matches this console version.",
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.TRANSPORT_INVALID_RESPONSE,
        )

    status_code = getattr(exception, "status_code", None)
    if isinstance(exception, httpx.HTTPStatusError):
        status_code = exception.response.status_code
    if status_code is not None:
        return ErrorResponse(
            code=ErrorCode.ERR_DEVICE_REJECTED,
            message=f"The sampler rejected the request (HTTP {status_code}).",
            suggestion="Refresh the task list and try again.",
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.TRANSPORT_REJECTED,
        )

    cause = _root_cause(exception)
    error_str = str(cause).lower()
    exception_type = type(cause).__name__

    if isinstance(cause, httpx.TimeoutException) or _match_error_pattern(
        error_str=error_str, exception_type=exception_type, pattern_type="timeout"
    ):
        return ErrorResponse(
            code=ErrorCode.ERR_DEVICE_TIMEOUT,
            message="The sampler did not answer in time.",
            suggestion="Check that the sampler is powered on and try again.",
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.TRANSPORT_TIMEOUT,
        )

    if isinstance(cause, httpx.TransportError) or _match_error_pattern(
        error_str=error_str, exception_type=exception_type, pattern_type="network"
    ):
        return ErrorResponse(
            code=ErrorCode.ERR_DEVICE_UNREACHABLE,
            message="The sampler could not be reached.",
            suggestion="Check that you are connected to the sampler's network.",
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.TRANSPORT_NETWORK,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Please try again. If the problem persists, restart the sampler.",
        severity=ErrorSeverity.MEDIUM,
    )
