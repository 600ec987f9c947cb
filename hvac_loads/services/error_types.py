"""
Custom Error Types for HVAC Load Calculation System

Provides categorized exceptions to distinguish between critical errors
that should stop processing and non-critical errors that can be logged
but shouldn't prevent calculations from completing.
"""

import logging
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


class HVACCalculationError(Exception):
    """Base exception for all HVAC calculation errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class CriticalError(HVACCalculationError):
    """
    Critical errors that should stop processing.

    Examples:
    - Input cannot be coerced to the load model at all
    - Engine configuration is invalid
    """
    pass


class NonCriticalError(HVACCalculationError):
    """
    Non-critical errors that can be logged but shouldn't stop processing.

    Examples:
    - Optional upstream fields missing and defaulted
    - Warning conditions in a sizing check
    """
    pass


class DataQualityError(NonCriticalError):
    """
    Data quality issues that should be logged but not stop processing.

    Examples:
    - Missing optional fields
    - Unusual but valid values
    """
    pass


class ConfigurationError(CriticalError):
    """
    Configuration errors that prevent proper operation.

    Examples:
    - Non-positive supply-air temperature difference
    - Cooling ceiling below the cooling floor
    """
    pass


class ValidationError(CriticalError):
    """
    Input validation errors raised at the data-construction boundary.

    Examples:
    - Negative surface area or U-value
    - Non-finite numbers
    """

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        if field is not None:
            details.setdefault('field', field)
        super().__init__(message, details)
        self.field = field


class MissingFieldError(ValidationError):
    """
    A required field is absent and cannot be defaulted.

    Examples:
    - ManualJInput without a surfaces array
    - Design conditions without outdoor design temperatures
    """

    def __init__(self, field: str, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message or f"Required field '{field}' is missing", field=field, details=details)


def from_pydantic_error(error: Exception, prefix: Optional[str] = None) -> ValidationError:
    """
    Translate a pydantic ValidationError into the project's ValidationError.

    The first reported problem names the field; every problem is kept in details.

    Args:
        error: pydantic.ValidationError instance
        prefix: Optional path prefix (e.g. 'surfaces') for nested models

    Returns:
        ValidationError identifying the offending field
    """
    problems = []
    for item in error.errors():
        loc = ".".join(str(part) for part in item.get('loc', ()))
        if prefix:
            loc = f"{prefix}.{loc}" if loc else prefix
        problems.append({'field': loc, 'message': item.get('msg', ''), 'input': item.get('input')})

    if not problems:
        return ValidationError(str(error), field=prefix)

    first = problems[0]
    message = f"Invalid value for '{first['field']}': {first['message']}"
    return ValidationError(message, field=first['field'], details={'errors': problems})


def log_error_with_context(error: HVACCalculationError, context: Dict[str, Any]):
    """
    Log error with additional context information.

    Args:
        error: Error to log
        context: Additional context (stage, room, etc.)
    """
    log_data = {
        'error_type': type(error).__name__,
        'error_message': error.message,
        'details': error.details,
        'context': context
    }

    if isinstance(error, CriticalError):
        logger.error(f"CRITICAL ERROR: {error.message}", extra=log_data)
    else:
        logger.warning(f"Non-critical error: {error.message}", extra=log_data)
