"""
Shared pytest fixtures for the relay test suite.

This module provides fixtures that are automatically available to all test files:
- A manually advanced clock for code expiry
- A recording fake chat platform
- A relay wired to both
- A FastAPI TestClient bound to that relay

The TestClient is created without entering its context manager, so the app
lifespan (Discord session, sweeper) never runs during API tests.
"""

import pytest
from fastapi.testclient import TestClient

from mc_relay.api.server import create_app
from mc_relay.core.codes import VerificationCodeStore
from mc_relay.core.permissions import ChannelPolicy
from mc_relay.core.relay import Relay
from tests.fakes import FakeClock, FakePlatform

RELAY_ENV_VARS = (
    "RELAY_HOST",
    "RELAY_PORT",
    "PORT",
    "DISCORD_BOT_TOKEN",
    "BOT_TOKEN",
    "DISCORD_GUILD_ID",
    "DISCORD_CATEGORY_ID",
    "DISCORD_ADMIN_ROLE_ID",
    "RELAY_CODE_TTL_SECONDS",
    "RELAY_CODE_LENGTH",
    "RELAY_SWEEP_INTERVAL_SECONDS",
    "RELAY_LOG_LEVEL",
    "RELAY_LOG_FORMAT",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every relay-related environment variable for the test."""
    for name in RELAY_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def code_store(clock: FakeClock) -> VerificationCodeStore:
    return VerificationCodeStore(ttl_seconds=300, code_length=6, clock=clock)


@pytest.fixture
def relay(fake_platform: FakePlatform, code_store: VerificationCodeStore) -> Relay:
    """A relay with no category or admin role configured."""
    return Relay(fake_platform, codes=code_store)


@pytest.fixture
def admin_relay(fake_platform: FakePlatform, code_store: VerificationCodeStore) -> Relay:
    """A relay with a channel category and an admin role configured."""
    return Relay(
        fake_platform,
        codes=code_store,
        policy=ChannelPolicy(category_id=4242, admin_role_id=777),
    )


@pytest.fixture
def test_client(relay: Relay) -> TestClient:
    """
    Create a FastAPI TestClient for API endpoint testing.

    Example:
        def test_root(test_client):
            response = test_client.get("/")
            assert response.status_code == 200
    """
    return TestClient(create_app(relay))
