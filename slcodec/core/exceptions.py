"""
Custom exceptions for the slcodec package.

Codec operations report problems through ReturnCode objects. The exceptions
below cover the places where raising is the natural seam: converting
parameter text into typed values, and callers that prefer to turn a failed
ReturnCode into an exception.
"""

from typing import Optional, Any, List


class SlcodecException(Exception):
    """Base exception for all slcodec errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        """
        Initialize slcodec exception.

        Args:
            message: Error message
            details: Optional additional details
        """
        super().__init__(message)
        self.message = message
        self.details = details


class ParameterError(SlcodecException):
    """Raised when a parameter value cannot be converted to its entry type."""

    def __init__(self, name: str, value: str, reason: str):
        message = f"Invalid value '{value}' for parameter '{name}': {reason}"
        super().__init__(message, details={'name': name, 'value': value, 'reason': reason})


class ReturnCodeError(SlcodecException):
    """Raised by ReturnCode.raise_for_errors() when errors are present."""

    def __init__(self, errors: List[str], warnings: Optional[List[str]] = None):
        message = "Operation failed: " + ", ".join(errors)
        super().__init__(message, details={'errors': list(errors), 'warnings': list(warnings or [])})
        self.errors = list(errors)
