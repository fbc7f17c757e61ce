"""
Spiegel Wizard Exceptions

Custom exception types for step loading, navigation and rendering, each with
a remediation suggestion for the user.
"""

from typing import Optional


class SpiegelError(Exception):
    """Base exception for all Spiegel errors."""

    def __init__(
        self,
        message: str,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        """Initialize the error.

        Args:
            message: Human-readable error message
            remediation: Suggested fix for the user
            details: Technical details for debugging
        """
        super().__init__(message)
        self.message = message
        self.remediation = remediation
        self.details = details

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.remediation:
            parts.append(f"To fix: {self.remediation}")
        return "\n".join(parts)


class NotFoundError(SpiegelError):
    """A manifest, descriptor or template file is missing."""

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.location = location
        if not remediation and location:
            remediation = f"Check that {location} exists, or run 'spiegel doctor'"
        super().__init__(message, remediation, details)


class ParseError(SpiegelError):
    """A manifest or descriptor is not valid JSON or has the wrong shape."""

    def __init__(
        self,
        message: str,
        location: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.location = location
        if not remediation and location:
            remediation = f"Fix the JSON in {location}"
        super().__init__(message, remediation, details)


class OutOfRangeError(SpiegelError):
    """Cursor navigation past either end of the step list."""

    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        length: Optional[int] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.index = index
        self.length = length
        if not details and index is not None and length is not None:
            details = f"index {index} is outside [0, {length})"
        super().__init__(message, remediation, details)


class UnknownStepError(SpiegelError):
    """A step name that is not part of the step list."""

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.step = step
        if not remediation and step:
            remediation = f"Add '{step}' to the steps manifest or run 'spiegel steps' to list known steps"
        super().__init__(message, remediation, details)


class NoMoreStepsError(SpiegelError):
    """Attempt to move past the final step."""

    def __init__(
        self,
        message: str = "No more steps remaining.",
        step: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.step = step
        if not details and step:
            details = f"'{step}' is the last step"
        super().__init__(message, remediation, details)


class ResourceNotFoundError(SpiegelError):
    """A view, style or script resource could not be resolved."""

    def __init__(
        self,
        message: str,
        resource: Optional[str] = None,
        step: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.resource = resource
        self.step = step
        if not remediation and resource:
            if step:
                remediation = f"Check that '{resource}' exists in the '{step}' step directory"
            else:
                remediation = f"Check that '{resource}' exists in the steps directory"
        super().__init__(message, remediation, details)


class ConfigError(SpiegelError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.config_key = config_key
        if not remediation and config_key:
            remediation = f"Check your configuration for '{config_key}' in spiegel.yaml or the environment"
        super().__init__(message, remediation, details)


class ValidationError(SpiegelError):
    """Input validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        expected_format: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.field = field
        self.expected_format = expected_format
        if not remediation and field and expected_format:
            remediation = f"The {field} should be in format: {expected_format}"
        super().__init__(message, remediation, details)


class SetupError(SpiegelError):
    """Errors while scaffolding a steps directory."""

    def __init__(
        self,
        message: str,
        step: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.step = step
        if not remediation and step:
            remediation = f"Remove the existing '{step}' directory or pick another name"
        super().__init__(message, remediation, details)


# Error code mapping for CLI exit codes
ERROR_CODES = {
    NotFoundError: 10,
    ParseError: 11,
    OutOfRangeError: 12,
    UnknownStepError: 13,
    NoMoreStepsError: 14,
    ResourceNotFoundError: 15,
    ConfigError: 16,
    ValidationError: 17,
    SetupError: 18,
    SpiegelError: 1,
}


def get_error_code(error: Exception) -> int:
    """Get the exit code for an error type."""
    for error_type, code in ERROR_CODES.items():
        if isinstance(error, error_type):
            return code
    return 1
