"""
Custom exceptions for the Swim Analyzer.

The analytics core never raises for missing or insufficient data; it
degrades to sentinel values instead. These exceptions belong to the outer
surface (loading session files, configuration) and carry:
- A descriptive message
- An error code
- Optional details for debugging
"""

from typing import Any, Dict, Optional
from enum import Enum


class ErrorCode(str, Enum):
    """Error codes for consistent error reporting."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Session data errors
    SESSION_FILE_NOT_FOUND = "SESSION_FILE_NOT_FOUND"
    SESSION_FILE_INVALID = "SESSION_FILE_INVALID"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"

    # Analysis markers
    NO_TARGET_SESSION = "NO_TARGET_SESSION"


class SwimAnalyzerError(Exception):
    """
    Base exception for all Swim Analyzer errors.

    Attributes:
        message: Human-readable error message
        code: Error code from ErrorCode enum
        details: Optional dictionary with additional error details
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured output."""
        result: Dict[str, Any] = {
            "error": {
                "code": self.code.value,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"


class SessionDataError(SwimAnalyzerError):
    """Raised when a session file cannot be read or decoded."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SESSION_FILE_INVALID,
        path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        error_details = details or {}
        if path:
            error_details["path"] = path
        super().__init__(message=message, code=code, details=error_details)


class SessionNotFoundError(SwimAnalyzerError):
    """Raised when a requested session id is not in the collection."""

    def __init__(self, session_id: str) -> None:
        super().__init__(
            message=f"Session not found: {session_id}",
            code=ErrorCode.SESSION_NOT_FOUND,
            details={"session_id": session_id},
        )


class ConfigurationError(SwimAnalyzerError):
    """Raised when settings cannot be loaded."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(
            message=message,
            code=ErrorCode.CONFIGURATION_ERROR,
            details=details,
        )
