"""Shared fixtures for the argonode test suite."""

from unittest import mock

import pytest

from argonode.core.models import RuntimeConfig
from helpers import FakeHTTPManager


@pytest.fixture
def config(tmp_path) -> RuntimeConfig:
    return RuntimeConfig(file_path=str(tmp_path))


@pytest.fixture
def http_manager() -> FakeHTTPManager:
    return FakeHTTPManager()


@pytest.fixture
def popen():
    """Patch process creation in the supervisor; yields the Popen mock."""
    with mock.patch("argonode.proxy.supervisor.subprocess.Popen") as patched:
        patched.return_value.poll.return_value = None
        yield patched
