"""Custom exceptions for the coliving reporting package.

This module provides a hierarchy of exception classes for consistent error
handling across report generation. All exceptions inherit from
ColivingReportsError, making it easy to catch all package-specific errors.

Example:
    try:
        report = generator.generate_financial_report("user1", start, end)
    except RecordFetchError as e:
        if e.recoverable:
            # The store may be temporarily unavailable
            report = generator.generate_financial_report("user1", start, end)
        else:
            raise
    except ColivingReportsError as e:
        logger.error("report_failed", error=str(e))
"""

from typing import Any, Optional


class ColivingReportsError(Exception):
    """Base exception for all reporting errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise ColivingReportsError("Something went wrong", details={"code": 500})
        ColivingReportsError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize ColivingReportsError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error is potentially recoverable through
                retry. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class RecordFetchError(ColivingReportsError):
    """Error raised when the record store cannot return records.

    Report generation fetches everything up front, so a fetch failure
    aborts the whole report; no partial result is ever returned.

    Attributes:
        key: The store key that was being read.
        operation: The store operation attempted ("get" or "lrange").

    Example:
        >>> raise RecordFetchError(
        ...     "Failed to load payments",
        ...     key="user:user1:payments",
        ...     operation="lrange",
        ... )
        RecordFetchError: Failed to load payments
    """

    def __init__(
        self,
        message: str,
        *,
        key: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize RecordFetchError.

        Args:
            message: Human-readable error description.
            key: The store key being read.
            operation: The store operation that failed.
            details: Optional dictionary with additional context.
            recoverable: Whether the fetch can be retried. Defaults to True
                since store outages are usually transient.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.key = key
        self.operation = operation

        if key:
            self.details["key"] = key
        if operation:
            self.details["operation"] = operation


class ValidationError(ColivingReportsError):
    """Error raised when report parameters are invalid.

    Raised for caller input such as an unparsable report window, an end date
    before the start date, or an unknown granularity or export format. Bad
    fields inside stored records never raise; they are coerced instead.

    Attributes:
        field: The parameter that failed validation.
        value: The invalid value.
        constraint: The validation constraint that was violated.

    Example:
        >>> raise ValidationError(
        ...     "Unknown granularity",
        ...     field="granularity",
        ...     value="hourly",
        ...     constraint="Must be one of: daily, weekly, monthly",
        ... )
        ValidationError: Unknown granularity
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error description.
            field: The name of the parameter that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by the caller.
                Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class ConfigurationError(ColivingReportsError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


class ExportError(ColivingReportsError):
    """Error raised when a report cannot be rendered to an export format.

    Attributes:
        export_format: The requested output format.
        report_type: The kind of report being exported.
    """

    def __init__(
        self,
        message: str,
        *,
        export_format: Optional[str] = None,
        report_type: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.export_format = export_format
        self.report_type = report_type

        if export_format:
            self.details["export_format"] = export_format
        if report_type:
            self.details["report_type"] = report_type


__all__ = [
    "ColivingReportsError",
    "RecordFetchError",
    "ValidationError",
    "ConfigurationError",
    "ExportError",
]
