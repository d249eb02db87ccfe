"""
retouch error types.
"""

from typing import Any, Optional


class RetouchError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details


class ConfigurationError(RetouchError):
    """No usable credential. Blocks dispatch, never the session."""

    def __init__(self, message: str, code: str = "configuration_error"):
        super().__init__(code, message)


class ValidationError(RetouchError):
    """Missing prompt or image. Fatal to the attempted turn only."""

    def __init__(self, message: str, code: str = "validation_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class AuthError(RetouchError):
    def __init__(self, message: str, code: str = "auth_error"):
        super().__init__(code, message)


class SessionError(RetouchError):
    def __init__(self, message: str, code: str = "session_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class SessionNotFoundError(SessionError):
    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}", code="session_not_found",
                         details={"id": session_id})


class StorageError(RetouchError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("storage_error", message, details)
