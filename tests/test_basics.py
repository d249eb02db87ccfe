"""Basic unit tests for the retouch package."""

from retouch import (
    AsyncRetouch,
    SessionOrchestrator,
    RetouchError,
    AuthError,
    ConfigurationError,
    SessionError,
    SessionNotFoundError,
    StorageError,
    ValidationError,
    __version__,
)
from retouch.backends import Backend


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert AsyncRetouch is not None
    assert SessionOrchestrator is not None


def test_error_hierarchy():
    for cls in (AuthError, ConfigurationError, SessionError, StorageError, ValidationError):
        assert issubclass(cls, RetouchError)
    assert issubclass(SessionNotFoundError, SessionError)


def test_error_attributes():
    err = RetouchError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    missing = SessionNotFoundError("abc")
    assert missing.code == "session_not_found"
    assert missing.details == {"id": "abc"}

    bad = ValidationError("no prompt", details={"field": "promptText"})
    assert bad.code == "validation_error"
    assert bad.details == {"field": "promptText"}


def test_backend_ids():
    assert Backend.QWEN_EDIT == "qwen-edit"
    assert Backend.SEEDEDIT == "seededit"
    assert Backend.KONTEXT_PRO == "kontext-pro"
