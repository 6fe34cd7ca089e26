"""Shared pytest fixtures for confluence-mcp-server tests."""

import json
from unittest.mock import MagicMock, Mock

import pytest

from confluence_mcp_server.config import Config

BASE_URL = "https://wiki.example.com"


def pytest_addoption(parser):
    """Add custom CLI options for test filtering."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run tests that require a live Confluence instance",
    )


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "live: mark test as requiring a live Confluence instance"
    )


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is passed."""
    if config.getoption("--run-live"):
        return
    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def mock_config():
    """Create a Config instance for testing (Basic auth, testing space set)."""
    return Config(
        confluence_url=BASE_URL,
        username="bot@example.com",
        api_token="secret-token",
        testing_space_key="SANDBOX",
    )


@pytest.fixture
def mock_confluence_client(mock_config):
    """Create a mock ConfluenceClient instance for testing."""
    from confluence_mcp_server.core.client import ConfluenceClient

    client = MagicMock(spec=ConfluenceClient)
    client.config = mock_config
    client.base_url = BASE_URL
    return client


@pytest.fixture
def make_response():
    """Factory fixture for creating requests.Response mocks."""

    def _create_response(status_code=200, payload=None, text=None):
        response = Mock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 300
        if payload is not None:
            body = json.dumps(payload)
        else:
            body = text or ""
        response.text = body
        response.content = body.encode()
        response.json.return_value = payload
        return response

    return _create_response
