"""
Shared test fixtures and configuration for pytest.
This file is automatically discovered by pytest.
"""

import pytest
from unittest.mock import patch

from scm_providers.config import Settings
from scm_providers.providers import ProviderConfig, PlatformType

from tests.utils import FakeSession


@pytest.fixture
def fake_session():
    """Replace the requests session used by providers with a FakeSession."""
    session = FakeSession()
    with patch('scm_providers.providers.http.requests.Session', return_value=session):
        yield session


@pytest.fixture
def slow_session():
    """FakeSession that takes a little while per request, for concurrency tests."""
    session = FakeSession(delay=0.05)
    with patch('scm_providers.providers.http.requests.Session', return_value=session):
        yield session


@pytest.fixture
def azure_config():
    """Azure Repos configuration with a token."""
    return ProviderConfig(
        platform=PlatformType.AZUREREPOS,
        endpoint="https://dev.azure.com",
        server="https://dev.azure.com",
        auth_token="azure_token",
    )


@pytest.fixture
def github_config():
    """GitHub configuration with a token."""
    return ProviderConfig(platform="github", auth_token="gh_token")


@pytest.fixture
def temp_config_file(tmp_path):
    """Create a temporary config file for testing."""
    config_content = """
app:
  debug: true
  log_level: "DEBUG"

http:
  timeout: 45

providers:
  work:
    platform: gitlab
    server: "https://git.example.com"
    token: "work_token"
  github:
    token: "file_token"
"""
    config_file = tmp_path / "scm.yaml"
    config_file.write_text(config_content)
    return config_file


@pytest.fixture
def mock_settings():
    """Create a default Settings object for testing."""
    return Settings()


# Pytest configuration hooks
def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
