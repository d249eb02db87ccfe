"""
Credential resolution.

Precedence: a non-empty user override wins, then the server default (when the
server reports one), otherwise nothing. The server default is never known to
the caller; it is resolved out of band at the dispatch boundary.
"""

from typing import Optional, Union

from pydantic import BaseModel

from retouch.config import RetouchConfig
from retouch.errors import ConfigurationError

NO_CREDENTIAL_MESSAGE = "No API key configured. Set one with `retouch settings set-key`."


class ExplicitValue(BaseModel):
    value: str

    def secret(self) -> Optional[str]:
        return self.value


class UseServerDefault(BaseModel):
    def secret(self) -> Optional[str]:
        # Nothing crosses the dispatch boundary; the boundary fills it in.
        return None


class NoCredential(BaseModel):
    def secret(self) -> Optional[str]:
        raise ConfigurationError(NO_CREDENTIAL_MESSAGE)


Credential = Union[ExplicitValue, UseServerDefault, NoCredential]


def resolve_credential(override: Optional[str], server_default_available: bool) -> Credential:
    if override and override.strip():
        return ExplicitValue(value=override.strip())
    if server_default_available:
        return UseServerDefault()
    return NoCredential()


def describe(credential: Credential) -> str:
    if isinstance(credential, ExplicitValue):
        return f"user key (...{credential.value[-4:]})" if len(credential.value) > 8 else "user key"
    if isinstance(credential, UseServerDefault):
        return "server default key"
    return "no key"


class CredentialResolver:
    def __init__(self, config: RetouchConfig, server_default_available: bool = False):
        self._config = config
        self.server_default_available = server_default_available

    def resolve(self) -> Credential:
        return resolve_credential(self._config.fal_key, self.server_default_available)

    def describe(self) -> str:
        return describe(self.resolve())

    def require(self) -> Credential:
        """Resolve, raising ConfigurationError when there is nothing to use."""
        credential = self.resolve()
        if isinstance(credential, NoCredential):
            raise ConfigurationError(NO_CREDENTIAL_MESSAGE)
        return credential
