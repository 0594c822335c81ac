"""
Command error taxonomy.

Every failure a command can surface to the user is a CommandError. The CLI
prints its message and exits non-zero; nothing here is retried.
"""

from __future__ import annotations

from typing import Any, Optional


class CommandError(Exception):
    """Base class for all user-visible command failures."""

    def __init__(self, message: str, code: int = 1):
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationError(CommandError):
    """Raised when command options are missing or malformed."""
    pass


class AuthError(CommandError):
    """Raised when no session is available or a token cannot be obtained."""
    pass


class TransportError(CommandError):
    """Raised on network failures, non-2xx responses and unparsable bodies."""

    def __init__(self, message: str, status_code: Optional[int] = None, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class RemoteError(CommandError):
    """Raised when a ProcessQuery response carries a non-null ErrorInfo."""

    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        correlation_id: str = "",
        error_type_name: str = "",
        error_value: Any = None,
    ):
        # error_code is the server's ErrorCode; .code stays the exit status
        self.error_code = error_code
        self.correlation_id = correlation_id
        self.error_type_name = error_type_name
        self.error_value = error_value
        super().__init__(message)

    def diagnostics(self) -> dict:
        return {
            "message": self.message,
            "error_code": self.error_code,
            "error_type_name": self.error_type_name,
            "correlation_id": self.correlation_id,
        }
