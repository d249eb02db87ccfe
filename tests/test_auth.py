import pytest

from retouch.auth import (
    CredentialResolver,
    ExplicitValue,
    NoCredential,
    UseServerDefault,
    describe,
    resolve_credential,
)
from retouch.config import RetouchConfig
from retouch.errors import ConfigurationError


def test_explicit_override_wins():
    assert resolve_credential("k1", True) == ExplicitValue(value="k1")
    assert resolve_credential("k1", False) == ExplicitValue(value="k1")


def test_empty_override_falls_back_to_server_default():
    assert isinstance(resolve_credential("", True), UseServerDefault)
    assert isinstance(resolve_credential("   ", True), UseServerDefault)
    assert isinstance(resolve_credential(None, True), UseServerDefault)


def test_nothing_available():
    assert isinstance(resolve_credential("", False), NoCredential)


def test_server_default_never_yields_a_value():
    assert UseServerDefault().secret() is None
    assert ExplicitValue(value="k1").secret() == "k1"
    with pytest.raises(ConfigurationError):
        NoCredential().secret()


def test_describe_does_not_leak_the_key():
    text = describe(ExplicitValue(value="fal-secret-123456"))
    assert "fal-secret" not in text
    assert describe(UseServerDefault()) == "server default key"
    assert describe(NoCredential()) == "no key"


def test_resolver_reads_config():
    config = RetouchConfig(fal_key="")
    resolver = CredentialResolver(config, server_default_available=False)
    assert isinstance(resolver.resolve(), NoCredential)
    with pytest.raises(ConfigurationError):
        resolver.require()

    resolver.server_default_available = True
    assert isinstance(resolver.require(), UseServerDefault)

    config.fal_key = "k2"
    assert resolver.require() == ExplicitValue(value="k2")


def test_resolver_describes_current_credential():
    config = RetouchConfig(fal_key="")
    resolver = CredentialResolver(config, server_default_available=True)
    assert resolver.describe() == "server default key"
    config.fal_key = "fal-secret-123456"
    assert resolver.describe() == "user key (...3456)"
