"""Pytest configuration and shared fixtures for the Relay Proxy API tests."""

import logging

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from relay_proxy.config import Settings, get_settings
from relay_proxy.main import create_app
from relay_proxy.upstream import UpstreamClient

from fakes import BASE_URL, FakeUpstream


# Disable logging for cleaner test output
logging.getLogger("httpx").setLevel(logging.WARNING)


@pytest.fixture
def test_settings() -> Settings:
    """Override settings for testing."""
    return Settings(
        upstream_base_url=BASE_URL,
        upstream_page_size=2,
        default_first=3,
        max_first=10,
        max_expand_depth=3,
        log_level="ERROR"
    )


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def upstream_client(fake_upstream: FakeUpstream) -> UpstreamClient:
    """Upstream client wired to the in-memory upstream."""
    return UpstreamClient(BASE_URL, transport=httpx.MockTransport(fake_upstream.handler))


@pytest.fixture
def app(upstream_client: UpstreamClient, test_settings: Settings) -> FastAPI:
    """Create FastAPI application instance for testing."""
    app = create_app(upstream_client=upstream_client)
    app.dependency_overrides[get_settings] = lambda: test_settings
    return app


@pytest.fixture
def test_client(app: FastAPI) -> TestClient:
    """Create test client for API testing."""
    return TestClient(app)


# Pytest markers for test categorization
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (fast, in-memory upstream)")
    config.addinivalue_line("markers", "integration: End-to-end flows through the HTTP surface")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
