"""Test fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
import structlog

from ldaplogin.config import LDAPConnectorConfig
from ldaplogin.factory import Factory

from .support.config import configure
from .support.ldap import MockLDAP, patch_ldap


@pytest.fixture(autouse=True)
def environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear environment overrides and reset logging after each test."""
    for setting in (
        "CONFIG_PATH",
        "LOG_LEVEL",
        "LOG_PROFILE",
        "STATIC_BIND_PASSWORD",
    ):
        monkeypatch.delenv(f"LDAPLOGIN_{setting}", raising=False)
    yield
    logging.getLogger("ldaplogin").handlers = []
    structlog.reset_defaults()


@pytest.fixture
def config() -> LDAPConnectorConfig:
    """Return the default test configuration."""
    return configure("base")


@pytest.fixture
def factory(config: LDAPConnectorConfig) -> Factory:
    """Return a component factory for the default configuration."""
    return Factory(config)


@pytest.fixture
def mock_ldap() -> Iterator[MockLDAP]:
    """Replace the bonsai LDAP API with a mock class."""
    yield from patch_ldap()
