"""Shared fixtures for api_client tests."""

import pytest

from api_client import ApiClientConfig, reset_settings
from tests.api_client.helpers import Recorder, make_http


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from API_CLIENT_* variables in the environment."""
    for name in (
        "API_CLIENT_API_TOKEN",
        "API_CLIENT_USERNAME",
        "API_CLIENT_PASSWORD",
        "API_CLIENT_AUTH_HEADER_NAME",
        "API_CLIENT_AUTH_HEADER_VALUE",
        "API_CLIENT_BASE_URL",
        "API_CLIENT_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def config():
    return ApiClientConfig(_env_file=None)


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def http(recorder):
    return make_http(recorder)
