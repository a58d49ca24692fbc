"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from helpers import make_result
from models import RepositoryResource, RepositorySpec


@pytest.fixture
def sample_attributes():
    """Declared attributes for the fastqc example."""
    return {
        "tool_shed": "toolshed.example.org",
        "owner": "devteam",
        "name": "fastqc",
        "changeset_revision": "",
    }


@pytest.fixture
def sample_spec(sample_attributes):
    return RepositorySpec.from_attributes(sample_attributes)


@pytest.fixture
def sample_resource(sample_spec):
    return RepositoryResource(spec=sample_spec)


@pytest.fixture
def mock_client():
    """Registry client with install/get/uninstall mocked."""
    client = MagicMock()
    client.name = "galaxy"
    client.install = AsyncMock(return_value=[make_result()])
    client.get = AsyncMock(return_value=make_result())
    client.uninstall = AsyncMock(return_value=None)
    return client
