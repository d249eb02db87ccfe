"""
retouch — iterative image editing sessions.

Keeps a capped history of turns and image versions per session, persists it,
and sends edit requests to interchangeable generation backends.
"""

from retouch.client import AsyncRetouch
from retouch.auth import CredentialResolver, ExplicitValue, NoCredential, UseServerDefault, resolve_credential
from retouch.backends import Backend, resolve_backend
from retouch.config import RetouchConfig
from retouch.dispatcher import GenerationDispatcher
from retouch.orchestrator import SessionOrchestrator
from retouch.sessions import SessionStore
from retouch.errors import (
    RetouchError,
    AuthError,
    ConfigurationError,
    SessionError,
    SessionNotFoundError,
    StorageError,
    ValidationError,
)

__version__ = "0.1.0"
__all__ = [
    "AsyncRetouch",
    "CredentialResolver",
    "ExplicitValue",
    "NoCredential",
    "UseServerDefault",
    "resolve_credential",
    "Backend",
    "resolve_backend",
    "RetouchConfig",
    "GenerationDispatcher",
    "SessionOrchestrator",
    "SessionStore",
    "RetouchError",
    "AuthError",
    "ConfigurationError",
    "SessionError",
    "SessionNotFoundError",
    "StorageError",
    "ValidationError",
]
