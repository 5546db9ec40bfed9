"""Pytest configuration and shared fixtures."""

import json
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from mail_fetcher.lib.config import FetchConfig, IMAPConfig, OAuthConfig  # noqa: E402


ENV_OVERRIDES = (
    "MAIL_FETCHER_CLIENT_ID",
    "MAIL_FETCHER_CLIENT_SECRET",
    "MAIL_FETCHER_USER_EMAIL",
    "MAIL_FETCHER_OUTPUT_FILE",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep developer environment variables out of config loading."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_config_data(tmp_path):
    """Flat config file contents, as written by users."""
    return {
        "client_id": "1234567890-abc.apps.googleusercontent.com",
        "client_secret": "GOCSPX-test-secret",
        "auth_url": "https://accounts.example.com/o/oauth2/auth",
        "token_url": "https://oauth2.example.com/token",
        "redirect_url": "http://localhost:8080/",
        "imap_server": "imap.example.com",
        "imap_port": 993,
        "user_email": "owner@example.com",
        "days_to_fetch": 7,
        "output_file": str(tmp_path / "emails.txt"),
    }


@pytest.fixture
def config_file(tmp_path, sample_config_data):
    """Config file on disk."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps(sample_config_data), encoding="utf-8")
    return path


@pytest.fixture
def fetch_config(sample_config_data) -> FetchConfig:
    """Validated run configuration."""
    config = FetchConfig.from_dict(sample_config_data)
    config.validate()
    return config


@pytest.fixture
def oauth_config(fetch_config) -> OAuthConfig:
    return fetch_config.oauth


@pytest.fixture
def imap_config(fetch_config) -> IMAPConfig:
    return fetch_config.imap


@pytest.fixture
def mock_imap_client():
    """IMAPClient stand-in serving three messages with UIDs 101-103."""
    bodies = {101: b"A", 102: b"B", 103: b"C"}

    client = Mock()
    client.sasl_login.return_value = b"Success"
    client.select_folder.return_value = {
        b"EXISTS": 42,
        b"RECENT": 0,
        b"UIDVALIDITY": 1700000000,
    }
    client.search.return_value = [101, 102, 103]
    client.fetch.side_effect = lambda ids, items: {
        ids[0]: {b"SEQ": ids[0] - 100, b"RFC822": bodies[ids[0]]}
    }
    client.logout.return_value = b"Logging out"
    client.bodies = bodies
    return client


@pytest.fixture
def client_factory(mock_imap_client):
    """Factory returning the mocked client, recording constructor arguments."""
    return Mock(return_value=mock_imap_client)


# Configure pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (mocked IMAP and OAuth endpoints)"
    )
