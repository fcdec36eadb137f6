"""
Shared pytest configuration and fixtures for the test suite.

This module provides common fixtures, test markers, and configuration
for all test categories.
"""

import json
import logging
from unittest.mock import MagicMock

import pytest

SETTINGS_ENV_VARS = (
    "LOG_LEVEL",
    "DRIVE_FOLDER_ID",
    "DRIVE_QUERY",
    "GOOGLE_CLIENT_SECRET_JSON",
    "GOOGLE_CLIENT_SECRET_PATH",
    "GOOGLE_TOKEN_DIR",
    "GOOGLE_TOKEN_ENCRYPTION_KEY",
    "GOOGLE_OAUTH_SCOPES",
    "OAUTH_LOCAL_PORT",
    "OAUTH_OPEN_BROWSER",
    "DRIVE_PAGE_SIZE",
    "DRIVE_DOWNLOAD_DIRNAME",
    "WORKSPACE",
)


@pytest.fixture(scope="function", autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep the real environment and home token cache out of every test."""
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GOOGLE_TOKEN_DIR", str(tmp_path / "credentials"))
    monkeypatch.chdir(tmp_path)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, isolated)"
    )
    config.addinivalue_line(
        "markers", "google: marks tests that interact with Google APIs"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "/unit/" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "google" in str(item.fspath):
            item.add_marker(pytest.mark.google)


@pytest.fixture
def client_secret_config():
    """Client secret as downloaded from the Google API console."""
    return {
        "installed": {
            "client_id": "test_client_id",
            "client_secret": "test_client_secret",
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost"],
        }
    }


@pytest.fixture
def client_secret_json(client_secret_config):
    return json.dumps(client_secret_config)


@pytest.fixture
def authorized_user_info():
    """Token cache contents for a previously authorized user."""
    return {
        "token": "access_token",
        "refresh_token": "refresh_token",
        "token_uri": "https://oauth2.googleapis.com/token",
        "client_id": "test_client_id",
        "client_secret": "test_client_secret",
        "scopes": ["https://www.googleapis.com/auth/drive"],
    }


@pytest.fixture
def drive_file_payloads():
    """File resources as returned by files.list."""
    return [
        {
            "id": "file-1",
            "name": "report.csv",
            "modifiedTime": "2024-05-01T10:00:00.000Z",
            "parents": ["folder-1"],
        },
        {
            "id": "file-2",
            "name": "artifact.zip",
            "modifiedTime": "2024-05-02T12:30:00.000Z",
            "parents": ["folder-1"],
        },
    ]


@pytest.fixture
def mock_drive_service():
    """Mock Google Drive service returning a single empty page."""
    mock_service = MagicMock()
    mock_service.files().list().execute.return_value = {"files": []}
    mock_service.files().list_next.return_value = None
    return mock_service


@pytest.fixture(autouse=True)
def reset_build_listener():
    """Undo console handlers installed on the build listener by the CLI."""
    yield
    listener = logging.getLogger("drive_downloader.build")
    for handler in list(listener.handlers):
        listener.removeHandler(handler)
    listener.setLevel(logging.NOTSET)
    listener.propagate = True
