"""Pytest fixtures for table-manager tests."""

import pytest
from moto import mock_aws

from table_manager import TableManagerConfig

from .fixtures.configs import make_config
from .fixtures.stores import FakeTableStore


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mock AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    # Unset AWS_ENDPOINT_URL to ensure moto intercepts requests
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)


@pytest.fixture
def mock_dynamodb(aws_credentials):
    """Mock DynamoDB for tests."""
    with mock_aws():
        yield


@pytest.fixture
def config() -> TableManagerConfig:
    """Weekly table config starting at window 2500."""
    return make_config()


@pytest.fixture
def store() -> FakeTableStore:
    """Empty in-memory table store."""
    return FakeTableStore()
