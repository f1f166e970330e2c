"""
Console Exceptions

Errors raised inside the console core. Transport failures are reported by
``MediCoreAPIError`` in the client layer; stores and the session controller
convert both kinds into state plus a notice, so these rarely escape a public
method.
"""

from typing import Any


class ConsoleException(Exception):
    """
    Base exception for console-core errors.

    Provides a standardized code/message/details triple for notices and logs.
    """

    def __init__(self, message: str, code: str | None = None, details: dict[str, Any] | None = None):
        """
        Initialize console exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code (e.g., "INVALID_OPERATION")
            details: Additional context about the error
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__.upper()
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class InvalidOperationException(ConsoleException):
    """Raised when an operation is not allowed in the current state or mode."""

    def __init__(self, operation: str, current_state: str, message: str | None = None):
        self.operation = operation
        self.current_state = current_state
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(
            msg,
            "INVALID_OPERATION",
            {"operation": operation, "current_state": current_state},
        )


class ConfigurationException(ConsoleException):
    """Raised when the console is wired with an unusable configuration."""

    def __init__(self, setting: str, message: str | None = None):
        self.setting = setting
        super().__init__(
            message or f"Invalid configuration for {setting}",
            "CONFIGURATION_ERROR",
            {"setting": setting},
        )
