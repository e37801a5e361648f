"""
Shared fixtures for the Tiny-Monitor test suite.
"""

import os

import pytest

from tinymonitor.config import Config, ServerConfig, UpstreamConfig
from tinymonitor.errors import FetchError

from tests.helpers.pages import UPSTREAM_URL, StubFetcher, build_status_page


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Tests through the ASGI application")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep TINYMON_* variables from the host out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("TINYMON_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def status_page() -> bytes:
    return build_status_page().encode("utf-8")


@pytest.fixture
def config() -> Config:
    return Config(
        upstream=UpstreamConfig(url=UPSTREAM_URL),
        server=ServerConfig(host="127.0.0.1", port=0),
    )


@pytest.fixture
def stub_fetcher(status_page: bytes) -> StubFetcher:
    return StubFetcher(body=status_page)


@pytest.fixture
def failing_fetcher() -> StubFetcher:
    return StubFetcher(error=FetchError("upstream timed out", url=UPSTREAM_URL))
