"""Error types and classification for scheduling runs."""

from enum import Enum

from pydantic import BaseModel

from bayit.core.db_client import DatabaseError, DuplicateRecordError


class BayitError(Exception):
    """Base class for domain errors raised by bayit."""


class RecurrenceConfigError(BayitError, ValueError):
    """A template carries a recurrence configuration that cannot be expanded."""

    def __init__(self, message: str, *, template_id: str | None = None) -> None:
        super().__init__(message)
        self.template_id = template_id


class GenerationFetchError(BayitError):
    """Templates or existing instances could not be loaded for a household."""

    def __init__(self, message: str, *, household_id: str) -> None:
        super().__init__(message)
        self.household_id = household_id


class ErrorCategory(Enum):
    """Categories of errors that can occur during a scheduling run."""

    FETCH_FAILED = "fetch_failed"
    INSERT_FAILED = "insert_failed"
    DUPLICATE_INSTANCE = "duplicate_instance"
    INVALID_RECURRENCE = "invalid_recurrence"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    ERR_FETCH_FAILED = "ERR_FETCH_FAILED"
    ERR_INSERT_FAILED = "ERR_INSERT_FAILED"
    ERR_DUPLICATE_INSTANCE = "ERR_DUPLICATE_INSTANCE"
    ERR_INVALID_RECURRENCE = "ERR_INVALID_RECURRENCE"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error description handed back to the caller for logging/alerting."""

    code: str
    category: ErrorCategory
    message: str
    severity: ErrorSeverity


def classify_generation_error(exception: Exception) -> ErrorResponse:
    """Classify an exception raised while generating task instances.

    Args:
        exception: The exception raised during generation

    Returns:
        ErrorResponse with code, category, message and severity
    """
    if isinstance(exception, GenerationFetchError):
        return ErrorResponse(
            code=ErrorCode.ERR_FETCH_FAILED,
            category=ErrorCategory.FETCH_FAILED,
            message=str(exception),
            severity=ErrorSeverity.HIGH,
        )

    if isinstance(exception, RecurrenceConfigError):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_RECURRENCE,
            category=ErrorCategory.INVALID_RECURRENCE,
            message=str(exception),
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, DuplicateRecordError):
        return ErrorResponse(
            code=ErrorCode.ERR_DUPLICATE_INSTANCE,
            category=ErrorCategory.DUPLICATE_INSTANCE,
            message=str(exception),
            severity=ErrorSeverity.LOW,
        )

    if isinstance(exception, DatabaseError):
        return ErrorResponse(
            code=ErrorCode.ERR_INSERT_FAILED,
            category=ErrorCategory.INSERT_FAILED,
            message=str(exception),
            severity=ErrorSeverity.MEDIUM,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        category=ErrorCategory.UNKNOWN,
        message=str(exception),
        severity=ErrorSeverity.MEDIUM,
    )
